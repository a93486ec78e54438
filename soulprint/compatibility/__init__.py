"""Compatibility module: four-method pairwise scoring."""

from .schema import CompatibilityResult, METHODS
from .engine import (
    CompatibilityEngine,
    CompatibilityConfig,
    block_similarity,
    create_engine_from_config
)

__all__ = [
    "CompatibilityResult",
    "METHODS",
    "CompatibilityEngine",
    "CompatibilityConfig",
    "block_similarity",
    "create_engine_from_config"
]
