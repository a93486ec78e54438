"""Signal fusion module for combining evidence sources."""

from .signal_fusion import (
    FusionStrategy,
    SignalSource,
    FusionResult,
    FusionConfig,
    SignalFusion,
    select_strategy,
    fuse_sources,
    create_fusion_from_config
)

__all__ = [
    "FusionStrategy",
    "SignalSource",
    "FusionResult",
    "FusionConfig",
    "SignalFusion",
    "select_strategy",
    "fuse_sources",
    "create_fusion_from_config"
]
