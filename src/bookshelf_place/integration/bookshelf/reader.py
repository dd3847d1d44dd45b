"""Bookshelf reader: aux manifest -> fully validated Circuit.

Reading happens in two phases. The nodes file is parsed first and defines
the universe of cell names. The nets, pl, scl and wts files are then
parsed against that universe (optionally in parallel), each producing its
own entry list. Finally all entries are merged into one Circuit by a
single writer, so no parser ever mutates shared state.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Container, Dict, Mapping, Optional, Union
import logging

from ...core.circuit import Circuit, CellKind
from ...errors import AuxFormatError, FormatError, MissingFileError
from .parsers import (
    PARSERS,
    NetsParser,
    NodesParser,
    ParseResult,
    PlParser,
    SclParser,
    WtsParser,
)
from .tokens import read_records

logger = logging.getLogger(__name__)

REQUIRED_KINDS = ("nodes", "nets")
MANIFEST_TAG = "RowBasedPlacement"


@dataclass
class AuxManifest:
    """Contents of an .aux file.

    Attributes:
        path: The aux file itself
        design: Design name (the token before ':', or the aux file stem
            when that token is the generic RowBasedPlacement tag)
        files: File kind ("nodes", "nets", ...) -> resolved path
    """
    path: Path
    design: str
    files: Dict[str, Path] = field(default_factory=dict)

    def get(self, kind: str) -> Optional[Path]:
        return self.files.get(kind)


class _NameUniverse:
    """Cell names plus net names, for validating weight entries."""

    def __init__(self, cells: Container[str], nets: Container[str]):
        self.cells = cells
        self.nets = nets

    def __contains__(self, name: object) -> bool:
        return name in self.cells or name in self.nets


def read_manifest(aux_path: Union[str, Path]) -> AuxManifest:
    """Parse an aux file.

    The files listed after ':' are routed by extension, so their order
    does not matter. Paths are resolved relative to the aux file.

    Raises:
        MissingFileError: The aux file does not exist
        AuxFormatError: Malformed line, unknown or repeated extension,
            or a required file kind is missing
    """
    aux_path = Path(aux_path)
    if not aux_path.is_file():
        raise MissingFileError(str(aux_path))

    records = list(read_records(aux_path))
    if not records:
        raise AuxFormatError(str(aux_path), "empty aux file")
    if len(records) > 1:
        raise AuxFormatError(str(aux_path), "expected a single manifest line", records[1].line)

    record = records[0]
    fields = record.fields
    if len(fields) < 3 or fields[1] != ":":
        raise AuxFormatError(
            str(aux_path),
            "expected '<DesignName> : <file> <file> ...'",
            record.line
        )

    design = aux_path.stem if fields[0] == MANIFEST_TAG else fields[0]
    manifest = AuxManifest(path=aux_path, design=design)
    for name in fields[2:]:
        kind = Path(name).suffix.lower().lstrip(".")
        if kind not in PARSERS:
            raise AuxFormatError(str(aux_path), f"unrecognized file extension in '{name}'", record.line)
        if kind in manifest.files:
            raise AuxFormatError(str(aux_path), f"more than one .{kind} file listed", record.line)
        manifest.files[kind] = aux_path.parent / name

    for kind in REQUIRED_KINDS:
        if kind not in manifest.files:
            raise AuxFormatError(str(aux_path), f"no .{kind} file listed", record.line)
    return manifest


class AuxResolver:
    """Reads a complete Bookshelf design.

    Args:
        parallel: Parse nets, pl and scl concurrently once nodes are read
        max_workers: Thread pool size for parallel parsing
    """

    def __init__(self, parallel: bool = False, max_workers: Optional[int] = None):
        self.parallel = parallel
        self.max_workers = max_workers

    def resolve(self, aux_path: Union[str, Path]) -> Circuit:
        """Read the design described by an aux file.

        Raises:
            AuxFormatError: Malformed aux file
            MissingFileError: A listed file does not exist
            FormatError: Any parser error, propagated unchanged
            BookshelfIOError, EncodingError: Unreadable files
        """
        manifest = read_manifest(aux_path)
        for path in manifest.files.values():
            if not path.is_file():
                raise MissingFileError(str(path), referenced_by=str(manifest.path))
        logger.info(f"Design {manifest.design}: " + ", ".join(
            f"{kind}={path.name}" for kind, path in manifest.files.items()))

        nodes = self.read_nodes(manifest.files["nodes"])
        universe = {entry.name: i for i, entry in enumerate(nodes.entities)}

        tasks = {
            "nets": lambda: self.read_nets(manifest.files["nets"], universe),
        }
        if "pl" in manifest.files:
            tasks["pl"] = lambda: self.read_pl(manifest.files["pl"], universe)
        if "scl" in manifest.files:
            tasks["scl"] = lambda: self.read_scl(manifest.files["scl"])

        if self.parallel:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = {kind: pool.submit(task) for kind, task in tasks.items()}
                results = {kind: future.result() for kind, future in futures.items()}
        else:
            results = {kind: task() for kind, task in tasks.items()}

        wts = None
        if "wts" in manifest.files:
            net_names = {entry.name for entry in results["nets"].entities}
            wts = self.read_wts(manifest.files["wts"], _NameUniverse(universe, net_names))

        circuit = build_circuit(
            manifest.design,
            nodes,
            results["nets"],
            pl=results.get("pl"),
            scl=results.get("scl"),
            wts=wts
        )
        circuit.notes.append(f"aux {manifest.path.name}")
        if "pl" in manifest.files:
            circuit.notes.append(f"pl {manifest.files['pl'].name}")

        summary = circuit.summary()
        logger.info(
            f"Circuit read: {summary['cells']} cells, {summary['terminals']} are terminals, "
            f"{summary['macros']} are macros, {summary['nets']} nets, {summary['rows']} rows"
        )
        logger.info(f"Row height: {summary['row_height']}")
        return circuit

    def read_nodes(self, path: Path) -> ParseResult:
        return NodesParser().parse_file(path)

    def read_nets(self, path: Path, cells: Mapping[str, int]) -> ParseResult:
        return NetsParser(cells).parse_file(path)

    def read_pl(self, path: Path, cells: Mapping[str, int]) -> ParseResult:
        return PlParser(cells).parse_file(path)

    def read_scl(self, path: Path) -> ParseResult:
        return SclParser().parse_file(path)

    def read_wts(self, path: Path, names: Optional[Container[str]] = None) -> ParseResult:
        return WtsParser(names).parse_file(path)


def build_circuit(
    design: str,
    nodes: ParseResult,
    nets: ParseResult,
    pl: Optional[ParseResult] = None,
    scl: Optional[ParseResult] = None,
    wts: Optional[ParseResult] = None
) -> Circuit:
    """Merge parsed entries into a new Circuit.

    Cell indices in net and pl entries refer to positions in the nodes
    entry list, which become the cell indices of the circuit.

    Raises:
        FormatError: A weight names neither a cell nor a net
    """
    circuit = Circuit(name=design)
    fixed = {entry.cell for entry in pl.entities if entry.fixed} if pl else set()

    for i, node in enumerate(nodes.entities):
        if node.terminal:
            kind = CellKind.TERMINAL
        elif i in fixed:
            kind = CellKind.FIXED
        else:
            kind = CellKind.MOVABLE
        circuit.add_cell(node.name, node.width, node.height, kind)

    for net in nets.entities:
        circuit.add_net(net.name, [(p.cell, p.direction, p.dx, p.dy) for p in net.pins])

    if pl is not None:
        for entry in pl.entities:
            circuit.set_position(entry.cell, entry.x, entry.y, entry.orientation)

    if scl is not None:
        for row in scl.entities:
            circuit.add_row(
                y=row.y,
                height=row.height,
                site_width=row.site_width,
                site_spacing=row.site_spacing,
                x_min=row.x_min,
                num_sites=row.num_sites,
                site_orient=row.site_orient,
                site_symmetry=row.site_symmetry
            )

    if wts is not None:
        for entry in wts.entities:
            net_index = circuit.net_index(entry.name)
            cell_index = circuit.cell_index(entry.name)
            if net_index is not None:
                circuit.nets[net_index].weight = entry.weight
            elif cell_index is not None:
                circuit.cells[cell_index].weight = entry.weight
            else:
                raise FormatError(wts.source, entry.line, f"weight for undefined name {entry.name}")

    circuit.classify_macros()
    circuit.validate()
    return circuit


def read_aux(aux_path: Union[str, Path], parallel: bool = False) -> Circuit:
    """Convenience function to read a design from its aux file."""
    return AuxResolver(parallel=parallel).resolve(aux_path)
