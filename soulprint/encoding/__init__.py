"""Encoding module: fixed-layout vectors and compact hex codes."""

from .vector import (
    VECTOR_SIZE,
    BLOCKS,
    PersonalityVector,
    VectorEncoder,
    slot
)
from .hex_code import (
    ARCHETYPES,
    Archetype,
    HexDimensions,
    circular_distance,
    project,
    compress,
    expand,
    archetype_for_hue,
    triage_similarity,
    match_type,
    describe
)

__all__ = [
    "VECTOR_SIZE",
    "BLOCKS",
    "PersonalityVector",
    "VectorEncoder",
    "slot",
    "ARCHETYPES",
    "Archetype",
    "HexDimensions",
    "circular_distance",
    "project",
    "compress",
    "expand",
    "archetype_for_hue",
    "triage_similarity",
    "match_type",
    "describe"
]
