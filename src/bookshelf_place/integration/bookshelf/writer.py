"""Bookshelf writer: Circuit -> aux, nodes, nets, wts, pl, scl files.

Files written here read back through the aux resolver into a circuit
with the same cells, nets, pins, rows, weights and positions.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union
import logging

from ...core.circuit import Circuit, CellKind, PinDirection
from ...metrics.wirelength import total_hpwl
from .reader import MANIFEST_TAG

logger = logging.getLogger(__name__)

GENERATOR = "bookshelf_place"


def _fmt(value: float) -> str:
    """Shortest text for a number; integral values lose the '.0'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


class BookshelfWriter:
    """Writer for the Bookshelf file family."""

    def __init__(self, annotate: Optional[Sequence[str]] = None):
        self.annotate = list(annotate or [])

    def _header(self, kind: str) -> List[str]:
        lines = [f"UCLA {kind} 1.0", f"# Generated by {GENERATOR}"]
        lines.extend(f"# {note}" for note in self.annotate)
        lines.append("")
        return lines

    def write_nodes(self, circuit: Circuit, path: Union[str, Path]) -> None:
        lines = self._header("nodes")
        lines.append(f"NumNodes : {len(circuit.cells)}")
        lines.append(f"NumTerminals : {len(circuit.terminals())}")
        for cell in circuit.cells:
            flag = " terminal" if cell.kind is CellKind.TERMINAL else ""
            lines.append(f"  {cell.name}  {_fmt(cell.width)} {_fmt(cell.height)}{flag}")
        self._write(path, lines)

    def write_nets(self, circuit: Circuit, path: Union[str, Path]) -> None:
        """Write nets with center-relative pin offsets."""
        lines = self._header("nets")
        lines.append(f"NumNets : {len(circuit.nets)}")
        lines.append(f"NumPins : {circuit.num_pins}")
        for net in circuit.nets:
            lines.append(f"NetDegree : {net.degree}  {net.name}")
            for pin_index in net.pins:
                pin = circuit.pins[pin_index]
                cell = circuit.cells[pin.cell]
                dx = pin.dx - cell.width / 2.0
                dy = pin.dy - cell.height / 2.0
                direction = "" if pin.direction is PinDirection.UNKNOWN else f" {pin.direction.value}"
                lines.append(f"  {cell.name}{direction} : {_fmt(dx)} {_fmt(dy)}")
        self._write(path, lines)

    def write_pl(self, circuit: Circuit, path: Union[str, Path], fix_macros: bool = False) -> None:
        """Write placed cells; fixed cells (and macros if requested) get /FIXED."""
        lines = self._header("pl")
        lines.insert(2, f"# HPWL {_fmt(total_hpwl(circuit))}")
        for cell in circuit.cells:
            if not cell.is_placed:
                continue
            fixed = not cell.is_movable or (fix_macros and cell.is_macro)
            suffix = " /FIXED" if fixed else ""
            lines.append(f"{cell.name}  {_fmt(cell.x)} {_fmt(cell.y)} : {cell.orientation}{suffix}")
        self._write(path, lines)

    def write_scl(self, circuit: Circuit, path: Union[str, Path]) -> None:
        lines = self._header("scl")
        lines.append(f"NumRows : {len(circuit.rows)}")
        lines.append("")
        for row in circuit.rows:
            lines.extend([
                "CoreRow Horizontal",
                f"  Coordinate    :  {_fmt(row.y)}",
                f"  Height        :  {_fmt(row.height)}",
                f"  Sitewidth     :  {_fmt(row.site_width)}",
                f"  Sitespacing   :  {_fmt(row.site_spacing)}",
                f"  Siteorient    :  {row.site_orient}",
                f"  Sitesymmetry  :  {row.site_symmetry}",
                f"  SubrowOrigin  :  {_fmt(row.x_min)}  NumSites  :  {row.num_sites}",
                "End",
            ])
        self._write(path, lines)

    def write_wts(self, circuit: Circuit, path: Union[str, Path]) -> None:
        """Write every net weight and any cell weight other than 1."""
        lines = self._header("wts")
        for net in circuit.nets:
            lines.append(f"  {net.name}  {_fmt(net.weight)}")
        for cell in circuit.cells:
            if cell.weight != 1.0 and cell.name not in circuit.net_map:
                lines.append(f"  {cell.name}  {_fmt(cell.weight)}")
        self._write(path, lines)

    def write_aux(self, name: str, path: Union[str, Path]) -> None:
        files = " ".join(f"{name}.{kind}" for kind in ("nodes", "nets", "wts", "pl", "scl"))
        self._write(path, [f"{MANIFEST_TAG} : {files}"])

    def write_design(
        self,
        circuit: Circuit,
        directory: Union[str, Path],
        name: Optional[str] = None
    ) -> Path:
        """Write all six files into a directory.

        Returns:
            Path of the aux file
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        name = name or circuit.name
        self.write_nodes(circuit, directory / f"{name}.nodes")
        self.write_nets(circuit, directory / f"{name}.nets")
        self.write_wts(circuit, directory / f"{name}.wts")
        self.write_pl(circuit, directory / f"{name}.pl")
        self.write_scl(circuit, directory / f"{name}.scl")
        aux_path = directory / f"{name}.aux"
        self.write_aux(name, aux_path)
        logger.info(f"Wrote design {name} to {directory}")
        return aux_path

    def _write(self, path: Union[str, Path], lines: List[str]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines))
            f.write("\n")


def write_design(
    circuit: Circuit,
    directory: Union[str, Path],
    name: Optional[str] = None,
    annotate: Optional[Sequence[str]] = None
) -> Path:
    """Convenience function to write a complete design."""
    notes = list(circuit.notes) + list(annotate or [])
    return BookshelfWriter(notes).write_design(circuit, directory, name)
