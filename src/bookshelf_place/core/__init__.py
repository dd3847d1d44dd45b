"""Circuit data model: cells, pins, nets, rows and placements."""

from .circuit import Cell, CellKind, Circuit, Net, Pin, PinDirection, Row
from .geometry import BBox
from .marklist import MarkList
from .placement import PlacedCell, Placement

__all__ = [
    "BBox",
    "Cell",
    "CellKind",
    "Circuit",
    "MarkList",
    "Net",
    "Pin",
    "PinDirection",
    "PlacedCell",
    "Placement",
    "Row"
]
