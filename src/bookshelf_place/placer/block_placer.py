"""Greedy row-packing block placer.

Movable cells are sorted by a deterministic key and packed left to right
into rows taken in ascending y. Each cell origin is snapped up to the next
site boundary and pushed past any x-interval occupied by fixed cells.
When a cell does not fit in the remainder of the current row, packing
moves on to the next row and never returns to earlier ones.

This is a simple bin-packing heuristic. It produces a legal,
non-overlapping placement but makes no attempt to reduce wirelength.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from ..core.circuit import Cell, Circuit, Row
from ..core.placement import PlacedCell, Placement
from ..errors import PlacementOverflowError, PlacementVerificationError
from .legality import blocked_intervals, check_legality

logger = logging.getLogger(__name__)

SORT_ORDERS = ("area", "width", "name")


@dataclass
class PlacerConfig:
    """Configuration for the block placer."""
    order: str = "area"
    tolerance: float = 1e-6
    apply: bool = True
    record_movement: bool = True
    verify: bool = True

    def __post_init__(self):
        if self.order not in SORT_ORDERS:
            raise ValueError(f"Unknown placement order {self.order}; expected one of {SORT_ORDERS}")
        if self.tolerance < 0:
            raise ValueError("tolerance must be non-negative")


class BlockPlacer:
    """Packs movable cells into rows while fixed cells stay put."""

    def __init__(self, config: Optional[PlacerConfig] = None):
        self.config = config or PlacerConfig()

    def sort_key(self, cell: Cell):
        if self.config.order == "area":
            return (-cell.area, cell.name)
        if self.config.order == "width":
            return (-cell.width, cell.name)
        return (cell.name,)

    def place(self, circuit: Circuit) -> Placement:
        """Compute a placement for every movable cell.

        Args:
            circuit: Circuit with rows; non-movable cells keep their positions

        Returns:
            Placement of the movable cells

        Raises:
            PlacementOverflowError: A cell fits in none of the remaining rows
            PlacementVerificationError: The result failed the legality check
                (only when config.verify is set)
        """
        tol = self.config.tolerance
        rows = sorted(circuit.rows, key=lambda r: (r.y, r.x_min, r.index))
        movable = sorted(circuit.movable_cells(), key=self.sort_key)
        blocked = {row.index: blocked_intervals(circuit, row, tol) for row in rows}

        assignments: Dict[int, PlacedCell] = {}
        row_pos = 0
        cursor = rows[0].x_min if rows else 0.0

        for cell in movable:
            while True:
                if row_pos >= len(rows):
                    raise PlacementOverflowError(cell.name, self._overflow_reason(cell, rows))
                row = rows[row_pos]
                x = self._fit(row, cell, cursor, blocked[row.index])
                if x is not None:
                    assignments[cell.index] = PlacedCell(row=row.index, x=x)
                    cursor = x + cell.width
                    break
                row_pos += 1
                if row_pos < len(rows):
                    cursor = rows[row_pos].x_min

        placement = Placement(assignments=assignments)
        rows_used = len({pc.row for pc in assignments.values()})
        logger.info(
            f"Block placement: {len(assignments)} movable cells in {rows_used} of "
            f"{len(rows)} rows, {len(circuit.cells) - len(movable)} cells kept fixed"
        )

        if self.config.verify:
            violations = check_legality(circuit, placement, tol)
            if violations:
                raise PlacementVerificationError(violations)

        if self.config.apply:
            if self.config.record_movement:
                circuit.snapshot_positions()
            placement.apply(circuit)
        return placement

    def _fit(
        self,
        row: Row,
        cell: Cell,
        cursor: float,
        intervals: List[Tuple[float, float]]
    ) -> Optional[float]:
        """Leftmost legal site origin at or after cursor, or None."""
        tol = self.config.tolerance
        if cell.height > row.height + tol:
            return None
        x = row.snap(cursor, tol)
        for a, b in intervals:
            if b <= x + tol:
                continue
            if a >= x + cell.width - tol:
                break
            x = row.snap(b, tol)
        if x + cell.width > row.x_max + tol:
            return None
        return x

    def _overflow_reason(self, cell: Cell, rows: List[Row]) -> str:
        if not rows:
            return "circuit has no rows"
        tol = self.config.tolerance
        if all(cell.height > r.height + tol for r in rows):
            return f"height {cell.height} exceeds every row height"
        if all(cell.width > r.width + tol for r in rows):
            return f"width {cell.width} exceeds every row width"
        return f"no space left for width {cell.width} in the remaining rows"


def place_blocks(circuit: Circuit, config: Optional[PlacerConfig] = None) -> Placement:
    """Convenience function to run the block placer."""
    return BlockPlacer(config).place(circuit)
