"""Layout rendering with matplotlib.

Draws rows, terminals, fixed cells and movable cells of a circuit, with
optional labels, net star-wires and movement lines from the reference
positions. The output format follows the file extension, so a ".ps"
output gives PostScript.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.patches as patches
from matplotlib.collections import LineCollection, PatchCollection
import numpy as np

from ..core.circuit import Circuit
from ..metrics.wirelength import cell_wirelength_impact, pin_positions

logger = logging.getLogger(__name__)

COLOR_MODES = ("kind", "wirelength")


@dataclass
class RenderConfig:
    """Layout drawing options."""
    output: str = "standardcell.ps"
    draw_rows: bool = True
    draw_nets: bool = False
    draw_labels: bool = False
    draw_movement: bool = True
    color_by: str = "kind"
    border: float = 40.0
    dpi: int = 150

    def __post_init__(self):
        if self.color_by not in COLOR_MODES:
            raise ValueError(f"Unknown color mode {self.color_by}; expected one of {COLOR_MODES}")


def _rectangles(cells, shrink: float = 0.0):
    return [
        patches.Rectangle(
            (c.x + shrink, c.y + shrink),
            max(c.width - 2 * shrink, 0.0),
            max(c.height - 2 * shrink, 0.0)
        )
        for c in cells
    ]


def draw_layout(circuit: Circuit, ax: plt.Axes, config: Optional[RenderConfig] = None) -> None:
    """Draw a circuit onto existing axes."""
    config = config or RenderConfig()
    placed = [c for c in circuit.cells if c.is_placed]

    if config.draw_rows and circuit.rows:
        rows = [
            patches.Rectangle((r.x_min, r.y), r.width, r.height)
            for r in circuit.rows
        ]
        ax.add_collection(PatchCollection(
            rows, facecolor="none", edgecolor="lightgray", linewidth=0.3
        ))

    terminals = [c for c in placed if c.is_terminal]
    if terminals:
        pads = [
            patches.Rectangle((c.x - 1.0, c.y - 1.0), c.width + 2.0, c.height + 2.0)
            for c in terminals
        ]
        ax.add_collection(PatchCollection(
            pads, facecolor="none", edgecolor=(1.0, 0.3, 0.3), linewidth=0.5
        ))

    fixed = [c for c in placed if not c.is_movable and not c.is_terminal]
    if fixed:
        ax.add_collection(PatchCollection(
            _rectangles(fixed), facecolor=(0.6, 0.6, 0.6), edgecolor="black", linewidth=0.3
        ))

    movable = [c for c in placed if c.is_movable]
    if movable:
        if config.color_by == "wirelength":
            impact = cell_wirelength_impact(circuit)[[c.index for c in movable]]
            span = impact.max() - impact.min()
            scaled = (impact - impact.min()) / span if span > 0 else np.zeros_like(impact)
            facecolors = [(v, 0.0, 1.0 - v) for v in scaled]
            ax.add_collection(PatchCollection(
                _rectangles(movable), facecolor=facecolors, edgecolor="none"
            ))
        else:
            ax.add_collection(PatchCollection(
                _rectangles(movable, shrink=0.25), facecolor="none",
                edgecolor=(0.1, 0.1, 0.8), linewidth=0.3
            ))

    if config.draw_nets and circuit.nets:
        positions = pin_positions(circuit)
        segments = []
        for net in circuit.nets:
            points = positions[net.pins]
            points = points[~np.isnan(points).any(axis=1)]
            if len(points) < 2:
                continue
            center = points.mean(axis=0)
            segments.extend([(tuple(center), tuple(p)) for p in points])
        ax.add_collection(LineCollection(segments, colors=(0.2, 0.6, 0.2), linewidths=0.2))

    if config.draw_movement and circuit.refpos is not None:
        segments = [
            ((c.x, c.y), ref)
            for c, ref in zip(circuit.cells, circuit.refpos)
            if c.is_placed and ref[0] is not None and ref[1] is not None
            and (c.x, c.y) != ref
        ]
        if segments:
            ax.add_collection(LineCollection(segments, colors="red", linewidths=0.3))

    if config.draw_labels:
        for c in movable:
            ax.text(c.x + 1.0, c.y + 1.0, c.name, fontsize=3, color=(0.1, 0.1, 0.0))

    bounds = circuit.core()
    for c in placed:
        bounds.expand(c.bbox())
    if not bounds.is_empty():
        ax.set_xlim(bounds.llx - config.border, bounds.urx + config.border)
        ax.set_ylim(bounds.lly - config.border, bounds.ury + config.border)
    ax.set_aspect("equal")
    ax.set_title(circuit.name)


def render_layout(
    circuit: Circuit,
    output: Optional[Union[str, Path]] = None,
    config: Optional[RenderConfig] = None
) -> Path:
    """Render a circuit to a file.

    Args:
        circuit: Circuit to draw (read only)
        output: Output path; defaults to config.output
        config: Drawing options

    Returns:
        Path of the written file
    """
    config = config or RenderConfig()
    output = Path(output or config.output)

    fig, ax = plt.subplots(figsize=(10, 10))
    try:
        draw_layout(circuit, ax, config)
        fig.savefig(output, dpi=config.dpi, bbox_inches="tight")
    finally:
        plt.close(fig)
    logger.info(f"Saved layout to {output}")
    return output
