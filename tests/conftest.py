"""Pytest fixtures for testing."""

import textwrap
from pathlib import Path
from typing import Dict

import pytest


SMALL_NODES = """\
UCLA nodes 1.0
# small test design
NumNodes : 5
NumTerminals : 1
  a  4 4
  b  3 4
  c  2 4
  f  2 4
  p  1 1 terminal
"""

SMALL_NETS = """\
UCLA nets 1.0
NumNets : 2
NumPins : 5
NetDegree : 3 n1
  a O : 0 0
  b I : 0.5 -1
  p I
NetDegree : 2 n2
  b O : 0 0
  c I : 0 0
"""

SMALL_PL = """\
UCLA pl 1.0
a 0 0 : N
b 0 0 : N
c 0 0 : N
f 3 0 : N /FIXED
p -2 5 : N /FIXED
"""

SMALL_SCL = """\
UCLA scl 1.0
NumRows : 2

CoreRow Horizontal
  Coordinate    :  0
  Height        :  4
  Sitewidth     :  1
  Sitespacing   :  1
  Siteorient    :  N
  Sitesymmetry  :  Y
  SubrowOrigin  :  0  NumSites  :  10
End
CoreRow Horizontal
  Coordinate    :  4
  Height        :  4
  Sitewidth     :  1
  Sitespacing   :  1
  Siteorient    :  N
  Sitesymmetry  :  Y
  SubrowOrigin  :  0  NumSites  :  10
End
"""

SMALL_WTS = """\
UCLA wts 1.0
n1 2
n2 1
"""

SMALL_AUX = "RowBasedPlacement : small.nodes small.nets small.wts small.pl small.scl\n"


def write_files(directory: Path, files: Dict[str, str]) -> None:
    """Write {file name: content} into a directory."""
    directory.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (directory / name).write_text(textwrap.dedent(content))


def small_files() -> Dict[str, str]:
    return {
        "small.aux": SMALL_AUX,
        "small.nodes": SMALL_NODES,
        "small.nets": SMALL_NETS,
        "small.pl": SMALL_PL,
        "small.scl": SMALL_SCL,
        "small.wts": SMALL_WTS,
    }


@pytest.fixture
def small_design(tmp_path):
    """Aux path of a 5-cell, 2-net, 2-row design."""
    write_files(tmp_path, small_files())
    return tmp_path / "small.aux"


@pytest.fixture
def small_circuit(small_design):
    """The small design, read."""
    from bookshelf_place.integration.bookshelf.reader import read_aux
    return read_aux(small_design)


@pytest.fixture
def design_factory(tmp_path):
    """Write a design with some files replaced; returns its aux path."""
    def factory(subdir: str = "design", **overrides) -> Path:
        files = small_files()
        for kind, content in overrides.items():
            name = "small.aux" if kind == "aux" else f"small.{kind}"
            if content is None:
                files.pop(name, None)
            else:
                files[name] = content
        write_files(tmp_path / subdir, files)
        return tmp_path / subdir / "small.aux"
    return factory


@pytest.fixture
def row_circuit():
    """Factory for circuits with given rows and movable cell widths."""
    from bookshelf_place.core.circuit import Circuit

    def factory(widths, num_rows=2, num_sites=10, height=4.0, spacing=1.0, x_min=0.0):
        circuit = Circuit(name="rows")
        for i in range(num_rows):
            circuit.add_row(
                y=i * height,
                height=height,
                site_width=spacing,
                site_spacing=spacing,
                x_min=x_min,
                num_sites=num_sites
            )
        for i, width in enumerate(widths):
            circuit.add_cell(f"c{i}", float(width), height)
        return circuit
    return factory
