"""Half-perimeter wirelength (HPWL) metrics."""

from typing import Iterable, Optional
import logging

import numpy as np

from ..core.circuit import Circuit, Net
from ..core.marklist import MarkList

logger = logging.getLogger(__name__)


def pin_positions(circuit: Circuit) -> np.ndarray:
    """Absolute position of every pin as a (P, 2) array.

    Pins on unplaced cells are NaN.
    """
    if not circuit.pins:
        return np.zeros((0, 2))
    cell_pos = circuit.positions_array()
    cells = np.fromiter((p.cell for p in circuit.pins), dtype=np.int64, count=len(circuit.pins))
    offsets = np.array([(p.dx, p.dy) for p in circuit.pins], dtype=float)
    return cell_pos[cells] + offsets


def net_hpwl(circuit: Circuit, net: Net) -> float:
    """HPWL of one net; pins on unplaced cells are ignored."""
    locations = [circuit.pin_location(circuit.pins[p]) for p in net.pins]
    locations = [loc for loc in locations if loc is not None]
    if len(locations) < 2:
        return 0.0
    xs, ys = zip(*locations)
    return (max(xs) - min(xs)) + (max(ys) - min(ys))


def net_hpwl_array(circuit: Circuit) -> np.ndarray:
    """HPWL of every net, indexed by net index."""
    result = np.zeros(len(circuit.nets))
    nets = [n for n in circuit.nets if n.degree > 0]
    if not nets:
        return result

    positions = pin_positions(circuit)
    order = np.concatenate([np.asarray(n.pins, dtype=np.int64) for n in nets])
    starts = np.cumsum([0] + [n.degree for n in nets[:-1]])
    ordered = positions[order]

    with np.errstate(invalid="ignore"):
        upper = np.fmax.reduceat(ordered, starts, axis=0)
        lower = np.fmin.reduceat(ordered, starts, axis=0)
    spans = np.nan_to_num(upper - lower, nan=0.0).sum(axis=1)
    result[[n.index for n in nets]] = spans
    return result


def total_hpwl(circuit: Circuit, weighted: bool = False) -> float:
    """Total HPWL of a circuit, optionally scaled by net weights."""
    spans = net_hpwl_array(circuit)
    if weighted:
        weights = np.array([n.weight for n in circuit.nets], dtype=float)
        spans = spans * weights
    return float(spans.sum())


def cell_wirelength_impact(circuit: Circuit) -> np.ndarray:
    """Per-cell share of total HPWL, normalized by cell area.

    Each cell gets the HPWL of every net it touches, divided by the total
    HPWL and by its own area. Cells with zero area get zero.
    """
    spans = net_hpwl_array(circuit)
    total = spans.sum()
    impact = np.zeros(len(circuit.cells))
    if total <= 0:
        return impact
    for cell in circuit.cells:
        if cell.area > 0:
            touched = spans[[circuit.pins[p].net for p in cell.pins]].sum()
            impact[cell.index] = (touched / total) / cell.area
    return impact


class WirelengthCalculator:
    """Wirelength of the nets touched by a subset of cells.

    Each net is counted once no matter how many marked cells it touches.
    """

    def __init__(self, circuit: Circuit):
        self.circuit = circuit
        self.marked_nets = MarkList(len(circuit.nets))

    def add_cells(self, cells: Iterable[int]) -> None:
        for c in cells:
            for p in self.circuit.cells[c].pins:
                self.marked_nets.mark(self.circuit.pins[p].net)

    def clear(self) -> None:
        self.marked_nets.clear()

    def wl(self, weighted: bool = False) -> float:
        total = 0.0
        for n in self.marked_nets.list:
            net = self.circuit.nets[n]
            length = net_hpwl(self.circuit, net)
            total += length * net.weight if weighted else length
        return total


def log_wirelength(circuit: Circuit, label: Optional[str] = None) -> float:
    """Compute and log total HPWL."""
    wl = total_hpwl(circuit)
    prefix = f"{label}: " if label else ""
    logger.info(f"{prefix}Wire length {wl:.6g}")
    return wl
