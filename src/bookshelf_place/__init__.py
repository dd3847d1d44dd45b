"""Bookshelf placement benchmark reader and block placer.

Reads circuits in the GSRC Bookshelf format (an .aux manifest naming
.nodes, .nets, .pl, .scl and .wts files) into a Circuit, and packs the
movable cells into the rows defined by the .scl file.

Pipeline:
1. Resolve: aux manifest -> per-file parsers -> one validated Circuit
2. Place (optional): greedy row packing of movable cells
3. Emit: layout drawing and/or Bookshelf files
"""

__version__ = "0.1.0"

from .core.circuit import Circuit, Cell, CellKind, Net, Pin, PinDirection, Row
from .core.placement import Placement, PlacedCell
from .errors import (
    AuxFormatError,
    BookshelfError,
    BookshelfIOError,
    EncodingError,
    FormatError,
    MissingFileError,
    PlacementOverflowError,
    PlacementVerificationError,
)
from .integration.bookshelf.reader import AuxResolver, read_aux
from .integration.bookshelf.writer import write_design
from .placer.block_placer import BlockPlacer, PlacerConfig

__all__ = [
    "AuxFormatError",
    "AuxResolver",
    "BlockPlacer",
    "BookshelfError",
    "BookshelfIOError",
    "Cell",
    "CellKind",
    "Circuit",
    "EncodingError",
    "FormatError",
    "MissingFileError",
    "Net",
    "Pin",
    "PinDirection",
    "PlacedCell",
    "Placement",
    "PlacementOverflowError",
    "PlacementVerificationError",
    "PlacerConfig",
    "Row",
    "read_aux",
    "write_design"
]


def run_placer(aux_path: str, output_path: str = None, **kwargs):
    """High-level API: read a design, block-place it, optionally write it.

    Args:
        aux_path: Path to the design's .aux file
        output_path: Directory to write the placed design into
        **kwargs: Placer configuration options

    Returns:
        (circuit, placement)
    """
    config = PlacerConfig(**kwargs)
    circuit = read_aux(aux_path)
    placement = BlockPlacer(config).place(circuit)
    if output_path:
        write_design(circuit, output_path)
    return circuit, placement
