"""Placer module: greedy row packing and legality checks."""

from .block_placer import BlockPlacer, PlacerConfig, place_blocks
from .legality import LegalityViolation, check_legality, is_legal

__all__ = [
    "BlockPlacer",
    "PlacerConfig",
    "place_blocks",
    "LegalityViolation",
    "check_legality",
    "is_legal"
]
