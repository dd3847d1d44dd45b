"""Legality checks for row-based placements."""

from dataclasses import dataclass
from typing import List, Tuple

from ..core.circuit import Circuit, Row
from ..core.placement import Placement


@dataclass
class LegalityViolation:
    """Represents one legality violation."""
    violation_type: str  # overlap, out_of_row, misaligned, too_tall, fixed_overlap
    cell: str
    detail: str = ""

    def __repr__(self) -> str:
        return f"LegalityViolation({self.violation_type}, {self.cell}: {self.detail})"


def blocked_intervals(circuit: Circuit, row: Row, tolerance: float = 1e-6) -> List[Tuple[float, float]]:
    """X-intervals of a row covered by placed non-movable cells, merged and sorted."""
    intervals = []
    y_lo, y_hi = row.y, row.y + row.height
    for cell in circuit.cells:
        if cell.is_movable or not cell.is_placed:
            continue
        if cell.y >= y_hi - tolerance or cell.y + cell.height <= y_lo + tolerance:
            continue
        a, b = cell.x, cell.x + cell.width
        if b <= row.x_min + tolerance or a >= row.x_max - tolerance:
            continue
        intervals.append((a, b))

    merged: List[Tuple[float, float]] = []
    for a, b in sorted(intervals):
        if merged and a <= merged[-1][1] + tolerance:
            merged[-1] = (merged[-1][0], max(merged[-1][1], b))
        else:
            merged.append((a, b))
    return merged


def check_legality(
    circuit: Circuit,
    placement: Placement,
    tolerance: float = 1e-6
) -> List[LegalityViolation]:
    """Check a placement against its circuit's rows and fixed cells.

    Returns:
        List of violations; empty for a legal placement
    """
    violations = []
    by_row = {}

    for cell_index, placed in placement.assignments.items():
        cell = circuit.cells[cell_index]
        row = circuit.rows[placed.row]
        by_row.setdefault(placed.row, []).append((placed.x, cell))

        if placed.x < row.x_min - tolerance or placed.x + cell.width > row.x_max + tolerance:
            violations.append(LegalityViolation(
                "out_of_row", cell.name,
                f"[{placed.x}, {placed.x + cell.width}] outside [{row.x_min}, {row.x_max}]"
            ))
        if not row.is_aligned(placed.x, tolerance):
            violations.append(LegalityViolation(
                "misaligned", cell.name, f"x={placed.x} is not on a site of row {row.index}"
            ))
        if cell.height > row.height + tolerance:
            violations.append(LegalityViolation(
                "too_tall", cell.name, f"height {cell.height} exceeds row height {row.height}"
            ))

    for row_index, cells in by_row.items():
        cells.sort(key=lambda item: (item[0], item[1].index))
        max_end, max_cell = None, None
        for x, cell in cells:
            if max_end is not None and x < max_end - tolerance:
                violations.append(LegalityViolation(
                    "overlap", cell.name, f"overlaps {max_cell.name} in row {row_index}"
                ))
            if max_end is None or x + cell.width > max_end:
                max_end, max_cell = x + cell.width, cell

        for a, b in blocked_intervals(circuit, circuit.rows[row_index], tolerance):
            for x, cell in cells:
                if x < b - tolerance and a < x + cell.width - tolerance:
                    violations.append(LegalityViolation(
                        "fixed_overlap", cell.name, f"overlaps fixed area [{a}, {b}] in row {row_index}"
                    ))

    return violations


def is_legal(circuit: Circuit, placement: Placement, tolerance: float = 1e-6) -> bool:
    return not check_legality(circuit, placement, tolerance)
