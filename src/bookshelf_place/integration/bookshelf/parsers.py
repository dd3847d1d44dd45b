"""Bookshelf format parsers: nodes, nets, pl, scl, wts.

All parsers share one contract (FormatParser.parse): they consume records
from the token reader and return a ParseResult holding the parsed entries
and the count declared in the file header (None for formats without one).
Parsers never touch a Circuit; the aux resolver merges their entries.

Every grammar violation raises FormatError with the file, line and reason.
Numbers are always read as floats, so coordinates and dimensions share one
numeric type throughout the model.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Container, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
import logging
import math

from ...core.circuit import ORIENTATIONS, PinDirection
from ...errors import FormatError
from .tokens import Record, read_records

logger = logging.getLogger(__name__)

TERMINAL_FLAGS = ("terminal", "terminal_ni")
FIXED_FLAGS = ("/FIXED", "/FIXED_NI")


@dataclass(frozen=True)
class NodeEntry:
    name: str
    width: float
    height: float
    terminal: bool
    line: int


@dataclass(frozen=True)
class PinEntry:
    cell: int
    direction: PinDirection
    dx: float
    dy: float
    line: int


@dataclass(frozen=True)
class NetEntry:
    name: str
    pins: Tuple[PinEntry, ...]
    line: int

    @property
    def degree(self) -> int:
        return len(self.pins)


@dataclass(frozen=True)
class PlEntry:
    cell: int
    x: float
    y: float
    orientation: Optional[str]
    fixed: bool
    line: int


@dataclass(frozen=True)
class RowEntry:
    y: float
    height: float
    site_width: float
    site_spacing: float
    x_min: float
    num_sites: int
    site_orient: str
    site_symmetry: str
    line: int


@dataclass(frozen=True)
class WeightEntry:
    name: str
    weight: float
    line: int


@dataclass
class ParseResult:
    """Entries parsed from one file.

    Attributes:
        entities: Parsed entries in file order
        declared_count: Entry count declared by the header (None if the
            format has no such header)
        declared: All header counts by keyword (e.g. {"NumPins": 12})
        source: File the entries came from
    """
    entities: List[Any]
    declared_count: Optional[int]
    declared: Dict[str, int] = field(default_factory=dict)
    source: str = "<input>"

    def __len__(self) -> int:
        return len(self.entities)


class _Cursor:
    """Record iterator with one-record lookahead."""

    def __init__(self, records: Iterable[Record]):
        self._it = iter(records)
        self._peeked: Optional[Record] = None
        self.last_line = 0

    def peek(self) -> Optional[Record]:
        if self._peeked is None:
            self._peeked = next(self._it, None)
        return self._peeked

    def next(self) -> Optional[Record]:
        record = self.peek()
        self._peeked = None
        if record is not None:
            self.last_line = record.line
        return record

    def __iter__(self) -> Iterator[Record]:
        while True:
            record = self.next()
            if record is None:
                return
            yield record


class FormatParser(ABC):
    """Shared contract of the five Bookshelf parsers.

    Subclasses set `kind` (the word after "UCLA" in the header, which is
    also the file extension) and implement `_parse_body`.
    """

    kind: str = ""
    count_keyword: Optional[str] = None

    def __init__(self, source: str = "<input>"):
        self.source = str(source)

    @property
    def extension(self) -> str:
        return "." + self.kind

    def parse(self, records: Iterable[Record]) -> ParseResult:
        """Parse a record stream.

        Raises:
            FormatError: Malformed header or records, count mismatch,
                duplicate or undefined names
        """
        cursor = _Cursor(records)
        self._parse_magic(cursor)
        result = self._parse_body(cursor)
        result.source = self.source
        logger.debug(f"Parsed {len(result.entities)} {self.kind} entries from {self.source}")
        return result

    def parse_file(self, path: Union[str, Path]) -> ParseResult:
        self.source = str(path)
        logger.info(f"Reading {self.kind} file {path}")
        return self.parse(read_records(path))

    @abstractmethod
    def _parse_body(self, cursor: _Cursor) -> ParseResult:
        ...

    # Helpers shared by all formats

    def _error(self, line: int, reason: str) -> FormatError:
        return FormatError(self.source, line, reason)

    def _parse_magic(self, cursor: _Cursor) -> None:
        record = cursor.next()
        if record is None:
            raise self._error(0, f"empty file, expected 'UCLA {self.kind} 1.0' header")
        if (len(record) != 3 or record[0].upper() != "UCLA"
                or record[1].lower() != self.kind):
            raise self._error(
                record.line,
                f"expected 'UCLA {self.kind} <version>' header, got '{' '.join(record.fields)}'"
            )

    def _number(self, record: Record, token: str, what: str) -> float:
        try:
            value = float(token)
        except ValueError:
            raise self._error(record.line, f"{what} '{token}' is not a number") from None
        if not math.isfinite(value):
            raise self._error(record.line, f"{what} '{token}' is not finite")
        return value

    def _dimension(self, record: Record, token: str, what: str) -> float:
        value = self._number(record, token, what)
        if value < 0:
            raise self._error(record.line, f"{what} {token} is negative")
        return value

    def _count(self, record: Record, token: str, what: str) -> int:
        try:
            value = int(token)
        except ValueError:
            raise self._error(record.line, f"{what} '{token}' is not an integer") from None
        if value < 0:
            raise self._error(record.line, f"{what} {value} is negative")
        return value

    def _key_values(self, record: Record) -> List[Tuple[str, str]]:
        """Split 'Key : value [Key : value ...]' into pairs."""
        fields = record.fields
        if len(fields) % 3 != 0:
            raise self._error(record.line, f"expected 'Key : value', got '{' '.join(fields)}'")
        pairs = []
        for i in range(0, len(fields), 3):
            if fields[i + 1] != ":":
                raise self._error(record.line, f"expected ':' after {fields[i]}")
            pairs.append((fields[i], fields[i + 2]))
        return pairs

    def _parse_counts(self, cursor: _Cursor, keywords: Tuple[str, ...]) -> Dict[str, int]:
        """Read header count lines (in any order) until a non-count record."""
        canonical = {k.lower(): k for k in keywords}
        declared: Dict[str, int] = {}
        while True:
            record = cursor.peek()
            if record is None or record.keyword() not in canonical:
                break
            cursor.next()
            for key, value in self._key_values(record):
                name = canonical.get(key.lower())
                if name is None:
                    raise self._error(record.line, f"unexpected header keyword {key}")
                if name in declared:
                    raise self._error(record.line, f"{name} declared twice")
                declared[name] = self._count(record, value, name)
        for name in keywords:
            if name not in declared:
                raise self._error(cursor.last_line, f"missing {name} header line")
        logger.info(f"{self.source}: " + ", ".join(f"{k} {v}" for k, v in declared.items()))
        return declared

    def _check_total(self, cursor: _Cursor, what: str, declared: int, actual: int) -> None:
        if declared != actual:
            raise self._error(
                cursor.last_line,
                f"{what} declares {declared} but the file contains {actual}"
            )


class NodesParser(FormatParser):
    """Parser for .nodes files: `name width height [terminal]` records."""

    kind = "nodes"
    count_keyword = "NumNodes"

    def _parse_body(self, cursor: _Cursor) -> ParseResult:
        declared = self._parse_counts(cursor, ("NumNodes", "NumTerminals"))
        num_nodes = declared["NumNodes"]
        nodes: List[NodeEntry] = []
        seen = set()
        num_terminals = 0

        for record in cursor:
            if len(nodes) == num_nodes:
                raise self._error(record.line, f"more node records than NumNodes ({num_nodes})")
            if len(record) not in (3, 4):
                raise self._error(record.line, "expected 'name width height [terminal]'")
            name = record[0]
            if name in seen:
                raise self._error(record.line, f"duplicate node name {name}")
            width = self._dimension(record, record[1], "width")
            height = self._dimension(record, record[2], "height")
            terminal = False
            if len(record) == 4:
                if record[3].lower() not in TERMINAL_FLAGS:
                    raise self._error(record.line, f"unknown node flag '{record[3]}'")
                terminal = True
                num_terminals += 1
            seen.add(name)
            nodes.append(NodeEntry(name, width, height, terminal, record.line))

        self._check_total(cursor, "NumNodes", num_nodes, len(nodes))
        self._check_total(cursor, "NumTerminals", declared["NumTerminals"], num_terminals)
        return ParseResult(nodes, num_nodes, declared)


class NetsParser(FormatParser):
    """Parser for .nets files.

    Each net opens with `NetDegree : k [name]` and is followed by exactly
    k pin lines `cellname direction [: dx dy]`. Cell names are resolved
    against the node universe given at construction.
    """

    kind = "nets"
    count_keyword = "NumNets"

    def __init__(self, cells: Mapping[str, int], source: str = "<input>"):
        super().__init__(source)
        self.cells = cells

    def _parse_body(self, cursor: _Cursor) -> ParseResult:
        declared = self._parse_counts(cursor, ("NumNets", "NumPins"))
        num_nets = declared["NumNets"]
        nets: List[NetEntry] = []
        seen = set()
        total_pins = 0

        while cursor.peek() is not None:
            record = cursor.next()
            if len(nets) == num_nets:
                raise self._error(record.line, f"more nets than NumNets ({num_nets})")
            degree, name = self._parse_degree(record)
            if name is not None:
                if name in seen:
                    raise self._error(record.line, f"duplicate net name {name}")
                seen.add(name)
            label = name if name is not None else f"#{len(nets)}"

            pins = []
            for _ in range(degree):
                pin_record = cursor.peek()
                if pin_record is None or pin_record.keyword() == "netdegree":
                    raise self._error(
                        cursor.last_line,
                        f"net {label} declares degree {degree} but has {len(pins)} pins"
                    )
                pins.append(self._parse_pin(cursor.next(), label))
            total_pins += degree
            nets.append(NetEntry(name, tuple(pins), record.line))

        self._check_total(cursor, "NumNets", num_nets, len(nets))
        self._check_total(cursor, "NumPins", declared["NumPins"], total_pins)
        return ParseResult(self._name_unnamed(nets, seen), num_nets, declared)

    def _parse_degree(self, record: Record) -> Tuple[int, Optional[str]]:
        fields = record.fields
        if record.keyword() != "netdegree" or len(fields) < 3 or fields[1] != ":":
            raise self._error(record.line, f"expected 'NetDegree : <k> <name>', got '{' '.join(fields)}'")
        degree = self._count(record, fields[2], "net degree")
        if degree < 1:
            raise self._error(record.line, "net degree must be at least 1")
        rest = fields[3:]
        if not rest:
            name = None
        elif len(rest) == 1:
            name = rest[0]
        elif len(rest) == 2 and rest[0].lower() == "net":
            name = rest[1]
        else:
            raise self._error(record.line, f"unexpected tokens after net degree: {' '.join(rest)}")
        return degree, name

    def _name_unnamed(self, nets: List[NetEntry], taken: set) -> List[NetEntry]:
        """Give nets without a name `_net<index>`, avoiding explicit names."""
        named = []
        for index, net in enumerate(nets):
            if net.name is None:
                name, n = f"_net{index}", 0
                while name in taken:
                    n += 1
                    name = f"_net{index}_{n}"
                taken.add(name)
                net = replace(net, name=name)
            named.append(net)
        return named

    def _parse_pin(self, record: Record, net_name: str) -> PinEntry:
        cell_name, rest = record[0], record.fields[1:]
        cell = self.cells.get(cell_name)
        if cell is None:
            raise self._error(record.line, f"net {net_name} references undefined cell {cell_name}")

        direction = PinDirection.UNKNOWN
        if rest and rest[0] != ":":
            try:
                direction = PinDirection.from_token(rest[0])
            except ValueError as e:
                raise self._error(record.line, str(e)) from None
            rest = rest[1:]
        if rest and rest[0] == ":":
            rest = rest[1:]
            if not rest:
                raise self._error(record.line, "missing pin offsets after ':'")

        dx = dy = 0.0
        if len(rest) == 2:
            dx = self._number(record, rest[0], "pin x-offset")
            dy = self._number(record, rest[1], "pin y-offset")
        elif rest:
            raise self._error(record.line, "expected 'cellname direction [: dx dy]'")
        return PinEntry(cell, direction, dx, dy, record.line)


class PlParser(FormatParser):
    """Parser for .pl files: `name x y [: orientation] [/FIXED]` records."""

    kind = "pl"

    def __init__(self, cells: Mapping[str, int], source: str = "<input>"):
        super().__init__(source)
        self.cells = cells

    def _parse_body(self, cursor: _Cursor) -> ParseResult:
        entries: List[PlEntry] = []
        seen = set()
        for record in cursor:
            if len(record) < 3:
                raise self._error(record.line, "expected 'name x y [: orientation] [/FIXED]'")
            name = record[0]
            cell = self.cells.get(name)
            if cell is None:
                raise self._error(record.line, f"placement for undefined cell {name}")
            if cell in seen:
                raise self._error(record.line, f"duplicate placement for cell {name}")
            seen.add(cell)
            x = self._number(record, record[1], "x coordinate")
            y = self._number(record, record[2], "y coordinate")

            rest = record.fields[3:]
            orientation = None
            if rest and rest[0] == ":":
                if len(rest) < 2 or rest[1].upper() not in ORIENTATIONS:
                    raise self._error(record.line, "missing or invalid orientation after ':'")
                orientation, rest = rest[1].upper(), rest[2:]
            elif rest and rest[0].upper() in ORIENTATIONS:
                orientation, rest = rest[0].upper(), rest[1:]

            fixed = False
            if rest and rest[0].upper() in FIXED_FLAGS:
                fixed, rest = True, rest[1:]
            if rest:
                raise self._error(record.line, f"unexpected tokens: {' '.join(rest)}")
            entries.append(PlEntry(cell, x, y, orientation, fixed, record.line))
        return ParseResult(entries, None)


class SclParser(FormatParser):
    """Parser for .scl files.

    Each row is a block:

        CoreRow Horizontal
          Coordinate : 0
          Height : 12
          Sitewidth : 1
          Sitespacing : 1
          Siteorient : N
          Sitesymmetry : Y
          SubrowOrigin : 0 NumSites : 100
        End

    Rows are returned in file order; a non-ascending order is only logged.
    """

    kind = "scl"
    count_keyword = "NumRows"

    NUMERIC_KEYS = ("coordinate", "height", "sitewidth", "sitespacing", "subroworigin", "numsites")
    TEXT_KEYS = ("siteorient", "siteorientation", "sitesymmetry")
    REQUIRED_KEYS = ("coordinate", "height", "sitewidth", "subroworigin", "numsites")

    def _parse_body(self, cursor: _Cursor) -> ParseResult:
        declared = self._parse_counts(cursor, ("NumRows",))
        num_rows = declared["NumRows"]
        rows: List[RowEntry] = []

        while cursor.peek() is not None:
            record = cursor.next()
            if len(rows) == num_rows:
                raise self._error(record.line, f"more rows than NumRows ({num_rows})")
            if record.keyword() != "corerow":
                raise self._error(record.line, f"expected 'CoreRow Horizontal', got '{' '.join(record.fields)}'")
            if len(record) > 1 and record[1].lower() != "horizontal":
                raise self._error(record.line, f"unsupported row direction {record[1]}")
            rows.append(self._parse_row(cursor, record))

        self._check_total(cursor, "NumRows", num_rows, len(rows))
        for prev, row in zip(rows, rows[1:]):
            if row.y < prev.y:
                logger.warning(
                    f"{self.source}:{row.line}: row at y={row.y} follows row at y={prev.y}; "
                    f"rows are not in ascending order"
                )
                break
        return ParseResult(rows, num_rows, declared)

    def _parse_row(self, cursor: _Cursor, start: Record) -> RowEntry:
        values: Dict[str, str] = {}
        while True:
            record = cursor.next()
            if record is None:
                raise self._error(cursor.last_line, f"row starting at line {start.line} has no End")
            if record.keyword() == "end":
                break
            for key, value in self._key_values(record):
                key = key.lower()
                if key not in self.NUMERIC_KEYS and key not in self.TEXT_KEYS:
                    raise self._error(record.line, f"unknown row keyword {key}")
                if key == "siteorientation":
                    key = "siteorient"
                if key in values:
                    raise self._error(record.line, f"row keyword {key} given twice")
                values[key] = value
                if key in self.NUMERIC_KEYS:
                    self._number(record, value, key)

        for key in self.REQUIRED_KEYS:
            if key not in values:
                raise self._error(start.line, f"row is missing {key}")

        num = {k: float(v) for k, v in values.items() if k in self.NUMERIC_KEYS}
        if num["height"] <= 0:
            raise self._error(start.line, "row height must be positive")
        if num["sitewidth"] <= 0:
            raise self._error(start.line, "row site width must be positive")
        site_spacing = num.get("sitespacing", num["sitewidth"])
        if site_spacing <= 0:
            raise self._error(start.line, "row site spacing must be positive")
        if num["numsites"] < 0 or not num["numsites"].is_integer():
            raise self._error(start.line, f"NumSites {values['numsites']} is not a non-negative integer")

        return RowEntry(
            y=num["coordinate"],
            height=num["height"],
            site_width=num["sitewidth"],
            site_spacing=site_spacing,
            x_min=num["subroworigin"],
            num_sites=int(num["numsites"]),
            site_orient=values.get("siteorient", "N"),
            site_symmetry=values.get("sitesymmetry", "Y"),
            line=start.line
        )


class WtsParser(FormatParser):
    """Parser for .wts files: `name weight` records.

    Weights may name cells or nets. When `names` is given, every name is
    checked against it.
    """

    kind = "wts"

    def __init__(self, names: Optional[Container[str]] = None, source: str = "<input>"):
        super().__init__(source)
        self.names = names

    def _parse_body(self, cursor: _Cursor) -> ParseResult:
        entries: List[WeightEntry] = []
        seen = set()
        for record in cursor:
            if len(record) != 2:
                raise self._error(record.line, "expected 'name weight'")
            name = record[0]
            if self.names is not None and name not in self.names:
                raise self._error(record.line, f"weight for undefined name {name}")
            if name in seen:
                raise self._error(record.line, f"duplicate weight for {name}")
            seen.add(name)
            weight = self._dimension(record, record[1], "weight")
            entries.append(WeightEntry(name, weight, record.line))
        return ParseResult(entries, None)


PARSERS = {
    parser.kind: parser
    for parser in (NodesParser, NetsParser, PlParser, SclParser, WtsParser)
}
