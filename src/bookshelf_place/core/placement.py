"""Placement representation."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from .circuit import Circuit


@dataclass(frozen=True)
class PlacedCell:
    """Row assignment and x-origin of one placed cell."""
    row: int
    x: float


@dataclass(frozen=True)
class Placement:
    """Result of the block placer: cell index -> (row, x)."""
    assignments: Dict[int, PlacedCell] = field(default_factory=dict)

    def get(self, cell_index: int) -> PlacedCell:
        return self.assignments[cell_index]

    def cells_in_row(self, row_index: int) -> List[int]:
        """Cells assigned to a row, sorted by x."""
        cells = [c for c, pc in self.assignments.items() if pc.row == row_index]
        return sorted(cells, key=lambda c: self.assignments[c].x)

    def apply(self, circuit: Circuit) -> None:
        """Move the placed cells of a circuit to their assigned positions."""
        for cell_index, placed in self.assignments.items():
            row = circuit.rows[placed.row]
            circuit.set_position(cell_index, placed.x, row.y, "N")
            circuit.cells[cell_index].row = placed.row

    def by_name(self, circuit: Circuit) -> Dict[str, Tuple[int, float]]:
        return {
            circuit.cells[c].name: (pc.row, pc.x)
            for c, pc in self.assignments.items()
        }

    def __contains__(self, cell_index: int) -> bool:
        return cell_index in self.assignments

    def __iter__(self) -> Iterator[int]:
        return iter(self.assignments)

    def __len__(self) -> int:
        return len(self.assignments)

    def __repr__(self) -> str:
        return f"Placement({len(self.assignments)} cells)"
