"""Circuit representation: cells, pins, nets and placement rows.

Cells, nets and pins are identified by their index into the owning
Circuit's lists. Names are only used to resolve references while a design
is being read; after that every cross-reference is an integer handle.

Pin offsets are stored relative to the lower-left corner of the owning
cell. Bookshelf files give them relative to the cell center; the
conversion happens in Circuit.add_net (and back again in the writer).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import math

import numpy as np

from .geometry import BBox

logger = logging.getLogger(__name__)

ORIENTATIONS = ("N", "S", "E", "W", "FN", "FS", "FE", "FW")


class CellKind(Enum):
    """Placement status of a cell."""
    MOVABLE = "movable"
    FIXED = "fixed"
    TERMINAL = "terminal"


class PinDirection(Enum):
    """Signal direction of a pin."""
    INPUT = "I"
    OUTPUT = "O"
    BIDIRECTIONAL = "B"
    UNKNOWN = "?"

    @classmethod
    def from_token(cls, token: str) -> "PinDirection":
        """Map a Bookshelf direction letter to a PinDirection.

        Raises:
            ValueError: Unknown direction token
        """
        for member in cls:
            if member.value == token.upper():
                return member
        raise ValueError(f"unknown pin direction '{token}'")


@dataclass(frozen=True)
class Pin:
    """A connection point of a net on a cell."""
    index: int
    net: int
    cell: int
    dx: float
    dy: float
    direction: PinDirection = PinDirection.UNKNOWN

    def __repr__(self) -> str:
        return f"Pin({self.index}, net={self.net}, cell={self.cell}, {self.direction.value})"


@dataclass
class Net:
    """A net: ordered pins that must be electrically connected."""
    index: int
    name: str
    pins: List[int] = field(default_factory=list)
    weight: float = 1.0

    @property
    def degree(self) -> int:
        return len(self.pins)

    def __repr__(self) -> str:
        return f"Net({self.name!r}, degree={self.degree})"


@dataclass
class Cell:
    """A placeable circuit component.

    Dimensions are set once when the nodes file is read. Position fields
    are None until the cell has been placed (by the pl file or the block
    placer).
    """
    index: int
    name: str
    width: float
    height: float
    kind: CellKind = CellKind.MOVABLE
    x: Optional[float] = None
    y: Optional[float] = None
    orientation: str = "N"
    row: Optional[int] = None
    pins: List[int] = field(default_factory=list)
    weight: float = 1.0
    is_macro: bool = False

    def __post_init__(self):
        """Validate dimensions."""
        if not (self.width >= 0 and self.height >= 0):
            raise ValueError(f"Cell {self.name} must have non-negative dimensions")
        if self.orientation not in ORIENTATIONS:
            raise ValueError(f"Cell {self.name} has invalid orientation {self.orientation}")

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_movable(self) -> bool:
        return self.kind is CellKind.MOVABLE

    @property
    def is_terminal(self) -> bool:
        return self.kind is CellKind.TERMINAL

    @property
    def is_placed(self) -> bool:
        return self.x is not None and self.y is not None

    def bbox(self) -> BBox:
        """Bounding box at the current position (empty if unplaced)."""
        if not self.is_placed:
            return BBox()
        return BBox.from_corners(self.x, self.y, self.x + self.width, self.y + self.height)

    def __repr__(self) -> str:
        return f"Cell({self.name!r}, {self.width}x{self.height}, {self.kind.value})"


@dataclass(frozen=True)
class Row:
    """A horizontal placement track.

    Legal x-origins are x_min + k * site_spacing for integer k, and a cell
    must end no further right than x_max.
    """
    index: int
    y: float
    height: float
    site_width: float
    site_spacing: float
    x_min: float
    num_sites: int
    site_orient: str = "N"
    site_symmetry: str = "Y"

    def __post_init__(self):
        """Validate row geometry."""
        if self.height <= 0:
            raise ValueError(f"Row {self.index} must have positive height")
        if self.site_spacing <= 0:
            raise ValueError(f"Row {self.index} must have positive site spacing")
        if self.num_sites < 0:
            raise ValueError(f"Row {self.index} must have a non-negative site count")

    @property
    def x_max(self) -> float:
        return self.x_min + self.num_sites * self.site_spacing

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    def bbox(self) -> BBox:
        return BBox.from_corners(self.x_min, self.y, self.x_max, self.y + self.height)

    def snap(self, x: float, tolerance: float = 1e-6) -> float:
        """Smallest site boundary at or to the right of x."""
        if x <= self.x_min:
            return self.x_min
        steps = math.ceil((x - self.x_min) / self.site_spacing - tolerance)
        return self.x_min + steps * self.site_spacing

    def is_aligned(self, x: float, tolerance: float = 1e-6) -> bool:
        steps = (x - self.x_min) / self.site_spacing
        return abs(steps - round(steps)) <= tolerance

    def __repr__(self) -> str:
        return f"Row({self.index}, y={self.y}, x=[{self.x_min}, {self.x_max}])"


class Circuit:
    """Aggregate root for a Bookshelf design.

    Cells, nets and rows are kept in file order. cell_map and net_map give
    the index of a named cell or net.
    """

    def __init__(self, name: str = "bookshelf_circuit"):
        self.name = name
        self.cells: List[Cell] = []
        self.nets: List[Net] = []
        self.pins: List[Pin] = []
        self.rows: List[Row] = []
        self.cell_map: Dict[str, int] = {}
        self.net_map: Dict[str, int] = {}
        self.notes: List[str] = []
        self.refpos: Optional[List[Tuple[Optional[float], Optional[float]]]] = None

    # Construction

    def add_cell(
        self,
        name: str,
        width: float,
        height: float,
        kind: CellKind = CellKind.MOVABLE
    ) -> Cell:
        """Append a cell; names must be unique."""
        if name in self.cell_map:
            raise ValueError(f"Duplicate cell name {name}")
        cell = Cell(index=len(self.cells), name=name, width=width, height=height, kind=kind)
        self.cells.append(cell)
        self.cell_map[name] = cell.index
        return cell

    def add_net(
        self,
        name: str,
        pins: Sequence[Tuple[int, PinDirection, float, float]],
        weight: float = 1.0
    ) -> Net:
        """Append a net.

        Args:
            name: Unique net name
            pins: (cell index, direction, dx, dy) with offsets relative to
                the cell center, in net order
            weight: Net weight

        Returns:
            The new Net
        """
        if name in self.net_map:
            raise ValueError(f"Duplicate net name {name}")
        net = Net(index=len(self.nets), name=name, weight=weight)
        for cell_index, direction, dx, dy in pins:
            if not 0 <= cell_index < len(self.cells):
                raise ValueError(f"Net {name} references missing cell {cell_index}")
            cell = self.cells[cell_index]
            pin = Pin(
                index=len(self.pins),
                net=net.index,
                cell=cell_index,
                dx=dx + cell.width / 2.0,
                dy=dy + cell.height / 2.0,
                direction=direction
            )
            self.pins.append(pin)
            net.pins.append(pin.index)
            cell.pins.append(pin.index)
        self.nets.append(net)
        self.net_map[name] = net.index
        return net

    def add_row(
        self,
        y: float,
        height: float,
        site_width: float,
        site_spacing: float,
        x_min: float,
        num_sites: int,
        site_orient: str = "N",
        site_symmetry: str = "Y"
    ) -> Row:
        row = Row(
            index=len(self.rows),
            y=y,
            height=height,
            site_width=site_width,
            site_spacing=site_spacing,
            x_min=x_min,
            num_sites=num_sites,
            site_orient=site_orient,
            site_symmetry=site_symmetry
        )
        self.rows.append(row)
        return row

    def set_position(
        self,
        index: int,
        x: float,
        y: float,
        orientation: Optional[str] = None
    ) -> None:
        cell = self.cells[index]
        cell.x = x
        cell.y = y
        if orientation is not None:
            if orientation not in ORIENTATIONS:
                raise ValueError(f"Invalid orientation {orientation}")
            cell.orientation = orientation

    def set_cell_center(self, index: int, x: float, y: float) -> None:
        """Position a cell so that its center lies at (x, y)."""
        cell = self.cells[index]
        self.set_position(index, x - cell.width / 2.0, y - cell.height / 2.0)

    def snapshot_positions(self) -> None:
        """Remember current positions as reference positions.

        Taken before a large move (legalization, block placement) so the
        movement can be drawn afterwards.
        """
        self.refpos = [(c.x, c.y) for c in self.cells]

    def classify_macros(self) -> int:
        """Mark non-terminal cells taller than the row height as macros."""
        row_height = self.row_height
        count = 0
        for cell in self.cells:
            cell.is_macro = (not cell.is_terminal and row_height > 0
                             and cell.height > row_height)
            count += cell.is_macro
        return count

    # Lookup

    def cell_index(self, name: str) -> Optional[int]:
        return self.cell_map.get(name)

    def net_index(self, name: str) -> Optional[int]:
        return self.net_map.get(name)

    def get_cell(self, name: str) -> Cell:
        return self.cells[self.cell_map[name]]

    def get_net(self, name: str) -> Net:
        return self.nets[self.net_map[name]]

    def net_cells(self, net: Net) -> List[Cell]:
        return [self.cells[self.pins[p].cell] for p in net.pins]

    def pin_location(self, pin: Pin) -> Optional[Tuple[float, float]]:
        """Absolute pin position, or None if its cell is unplaced."""
        cell = self.cells[pin.cell]
        if not cell.is_placed:
            return None
        return (cell.x + pin.dx, cell.y + pin.dy)

    def movable_cells(self) -> List[Cell]:
        return [c for c in self.cells if c.is_movable]

    def fixed_cells(self) -> List[Cell]:
        """Cells that must not move (fixed and terminals)."""
        return [c for c in self.cells if not c.is_movable]

    def terminals(self) -> List[Cell]:
        return [c for c in self.cells if c.is_terminal]

    def positions_array(self) -> np.ndarray:
        """Lower-left cell positions as an (N, 2) array, NaN where unplaced."""
        pos = np.full((len(self.cells), 2), np.nan)
        for cell in self.cells:
            if cell.is_placed:
                pos[cell.index] = (cell.x, cell.y)
        return pos

    # Statistics

    @property
    def num_pins(self) -> int:
        return len(self.pins)

    @property
    def row_height(self) -> float:
        return self.rows[0].height if self.rows else 0.0

    @property
    def site_spacing(self) -> float:
        return self.rows[0].site_spacing if self.rows else 1.0

    def cell_area(self) -> float:
        """Total area of non-terminal cells."""
        return sum(c.area for c in self.cells if not c.is_terminal)

    def movable_area(self) -> float:
        return sum(c.area for c in self.cells if c.is_movable)

    def row_area(self) -> float:
        return sum(r.width * r.height for r in self.rows)

    def utilization(self) -> float:
        row_area = self.row_area()
        return self.cell_area() / row_area if row_area > 0 else 0.0

    def core(self) -> BBox:
        """Core region: union of rows, or a square sized from cell area."""
        result = BBox()
        if len(self.rows) > 1:
            for row in self.rows:
                result.expand(row.bbox())
        else:
            side = math.sqrt(self.cell_area()) * 1.10
            result.add_point(0.0, 0.0)
            result.add_point(side, side)
        return result

    def _core_utilization(self, core: BBox) -> float:
        area = core.area()
        return self.cell_area() / area if area > 0 else 0.0

    def mincore(self) -> BBox:
        """Core shrunk about its center to the area of the cells.

        Both sides are scaled by sqrt(utilization), so the box keeps the
        aspect ratio of the core.
        """
        core = self.core()
        scale = math.sqrt(self._core_utilization(core))
        dx, dy = core.dx() * scale, core.dy() * scale
        llx = core.llx + (core.dx() - dx) * 0.5
        lly = core.lly + (core.dy() - dy) * 0.5
        result = BBox.from_corners(llx, lly, llx + dx, lly + dy)
        logger.info(f"Minimum core: {core} --> {result}")
        return result

    def leftcore(self) -> BBox:
        """Left-aligned part of the core, full height, as wide as the cells need."""
        core = self.core()
        dx = core.dx() * self._core_utilization(core)
        result = BBox.from_corners(core.llx, core.lly, core.llx + dx, core.ury)
        logger.info(f"Left-aligned core: {core} --> {result}")
        return result

    def summary(self) -> Dict[str, float]:
        num_terminals = sum(1 for c in self.cells if c.is_terminal)
        num_macros = sum(1 for c in self.cells if c.is_macro)
        return {
            "cells": len(self.cells),
            "nets": len(self.nets),
            "pins": len(self.pins),
            "rows": len(self.rows),
            "terminals": num_terminals,
            "macros": num_macros,
            "standard_cells": len(self.cells) - num_terminals - num_macros,
            "cell_area": self.cell_area(),
            "row_area": self.row_area(),
            "utilization": self.utilization(),
            "row_height": self.row_height,
        }

    def validate(self) -> None:
        """Check cross-reference integrity.

        Raises:
            ValueError: A pin, cell or net reference does not resolve
        """
        on_cells = {(c.index, p) for c in self.cells for p in c.pins}
        on_nets = {(n.index, p) for n in self.nets for p in n.pins}
        if len(on_cells) != len(self.pins) or len(on_nets) != len(self.pins):
            raise ValueError("Pin lists on cells or nets do not match the pin table")
        for pin in self.pins:
            if not 0 <= pin.cell < len(self.cells):
                raise ValueError(f"Pin {pin.index} references missing cell {pin.cell}")
            if not 0 <= pin.net < len(self.nets):
                raise ValueError(f"Pin {pin.index} references missing net {pin.net}")
            if (pin.cell, pin.index) not in on_cells:
                raise ValueError(f"Pin {pin.index} not listed on cell {pin.cell}")
            if (pin.net, pin.index) not in on_nets:
                raise ValueError(f"Pin {pin.index} not listed on net {pin.net}")
        for name, index in self.cell_map.items():
            if self.cells[index].name != name:
                raise ValueError(f"Cell map entry {name} points at {self.cells[index].name}")
        for name, index in self.net_map.items():
            if self.nets[index].name != name:
                raise ValueError(f"Net map entry {name} points at {self.nets[index].name}")

    def __repr__(self) -> str:
        return (f"Circuit({self.name!r}, {len(self.cells)} cells, "
                f"{len(self.nets)} nets, {len(self.rows)} rows)")
