"""Bookshelf file family: aux, nodes, nets, pl, scl, wts.

Reading goes through AuxResolver (or read_aux); writing through
BookshelfWriter (or write_design).
"""

from .parsers import (
    FormatParser,
    NetsParser,
    NodesParser,
    ParseResult,
    PlParser,
    SclParser,
    WtsParser,
)
from .reader import AuxManifest, AuxResolver, build_circuit, read_aux, read_manifest
from .tokens import Record, read_records, records_from_string
from .writer import BookshelfWriter, write_design

__all__ = [
    "AuxManifest",
    "AuxResolver",
    "BookshelfWriter",
    "FormatParser",
    "NetsParser",
    "NodesParser",
    "ParseResult",
    "PlParser",
    "Record",
    "SclParser",
    "WtsParser",
    "build_circuit",
    "read_aux",
    "read_manifest",
    "read_records",
    "records_from_string",
    "write_design"
]
