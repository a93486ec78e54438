"""
Multi-source signal fusion.

This module combines axis scores for the same dimension family coming from
independent evidence sources (e.g. lexical keyword hits and conversational
context cues) into one set of scores with a single confidence.

All strategies share one fusion routine and differ only in how each source's
raw weight is computed:

    weighted_average:  w = base_weight * confidence
    confidence_based:  w = confidence
    dynamic:           w = base_weight * confidence * consistency
    consensus:         w = consistency

where consistency is 1 - mean |source score - cross-source mean| over the
axes the source reports. Weights are normalized before use; an axis no
source reports defaults to 0.5.

Strategy selection in "auto" mode:
- 2+ sources and mean confidence > 0.6: dynamic
- 2+ sources and mean confidence > 0.4: confidence_based
- 2+ sources otherwise: consensus
- a single source: weighted_average
"""

import logging
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Dict, Any, List

import numpy as np

logger = logging.getLogger(__name__)


class FusionStrategy(Enum):
    """How per-source weights are derived."""
    WEIGHTED_AVERAGE = "weighted_average"
    CONFIDENCE_BASED = "confidence_based"
    DYNAMIC = "dynamic"
    CONSENSUS = "consensus"


@dataclass
class SignalSource:
    """
    Axis scores produced by one evidence source.

    Attributes:
        name: Source name, used to look up its base weight
        scores: Mapping of axis name to score in [0, 1]
        confidence: Source confidence in [0, 1]
    """
    name: str
    scores: Dict[str, float]
    confidence: float


@dataclass
class FusionResult:
    """Fused scores together with the weights that produced them."""
    scores: Dict[str, float]
    confidence: float
    strategy: FusionStrategy
    weights: Dict[str, float]
    consistency: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scores": dict(self.scores),
            "confidence": float(self.confidence),
            "strategy": self.strategy.value,
            "weights": dict(self.weights),
            "consistency": float(self.consistency)
        }


@dataclass
class FusionConfig:
    """
    Configuration for signal fusion.

    Attributes:
        mode: "auto" or one of the FusionStrategy values
        source_weights: Base weight per source name (unknown sources get 1.0)
    """
    mode: str = "auto"
    source_weights: Dict[str, float] = field(
        default_factory=lambda: {"lexical": 0.7, "context": 0.3}
    )

    def validate(self) -> None:
        """Validate configuration values."""
        valid_modes = ["auto"] + [s.value for s in FusionStrategy]
        if self.mode not in valid_modes:
            raise ValueError(f"Unknown fusion mode: {self.mode}")
        for name, weight in self.source_weights.items():
            if weight < 0:
                raise ValueError(f"Source weight for {name} must be non-negative, got {weight}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FusionConfig":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FusionConfig":
        """Create from main config dictionary."""
        fusion_config = config.get("fusion", {})
        defaults = cls()
        return cls(
            mode=fusion_config.get("mode", defaults.mode),
            source_weights=fusion_config.get("source_weights", defaults.source_weights)
        )


def select_strategy(sources: List[SignalSource]) -> FusionStrategy:
    """
    Pick a fusion strategy from the number and confidence of sources.

    Args:
        sources: Available evidence sources

    Returns:
        Selected FusionStrategy
    """
    if len(sources) < 2:
        return FusionStrategy.WEIGHTED_AVERAGE

    mean_confidence = float(np.mean([s.confidence for s in sources]))
    if mean_confidence > 0.6:
        return FusionStrategy.DYNAMIC
    if mean_confidence > 0.4:
        return FusionStrategy.CONFIDENCE_BASED
    return FusionStrategy.CONSENSUS


def source_consistency(source: SignalSource, sources: List[SignalSource]) -> float:
    """
    Agreement of one source with the unweighted cross-source mean.

    Args:
        source: Source to rate
        sources: All sources taking part in the fusion

    Returns:
        Consistency in [0, 1]; 1.0 when the source reports no axes
    """
    deviations = []
    for axis, value in source.scores.items():
        peers = [s.scores[axis] for s in sources if axis in s.scores]
        deviations.append(abs(value - float(np.mean(peers))))

    if not deviations:
        return 1.0
    return float(np.clip(1.0 - np.mean(deviations), 0.0, 1.0))


def fuse_sources(
    sources: List[SignalSource],
    strategy: FusionStrategy,
    source_weights: Dict[str, float]
) -> FusionResult:
    """
    Fuse axis scores from several sources with the given strategy.

    Args:
        sources: Evidence sources to combine
        strategy: How raw per-source weights are derived
        source_weights: Base weight per source name

    Returns:
        FusionResult with fused scores and normalized weights
    """
    if not sources:
        return FusionResult(
            scores={}, confidence=0.0, strategy=strategy, weights={}, consistency=1.0
        )

    consistency = {s.name: source_consistency(s, sources) for s in sources}

    raw = {}
    for s in sources:
        base = source_weights.get(s.name, 1.0)
        if strategy == FusionStrategy.WEIGHTED_AVERAGE:
            raw[s.name] = base * s.confidence
        elif strategy == FusionStrategy.CONFIDENCE_BASED:
            raw[s.name] = s.confidence
        elif strategy == FusionStrategy.DYNAMIC:
            raw[s.name] = base * s.confidence * consistency[s.name]
        elif strategy == FusionStrategy.CONSENSUS:
            raw[s.name] = consistency[s.name]
        else:
            raise ValueError(f"Unknown fusion strategy: {strategy}")

    total = sum(raw.values())
    if total > 0:
        weights = {name: w / total for name, w in raw.items()}
    else:
        weights = {s.name: 1.0 / len(sources) for s in sources}

    axes = []
    for s in sources:
        for axis in s.scores:
            if axis not in axes:
                axes.append(axis)

    fused = {}
    for axis in axes:
        reporting = [s for s in sources if axis in s.scores]
        axis_total = sum(weights[s.name] for s in reporting)
        if axis_total > 0:
            fused[axis] = sum(weights[s.name] * s.scores[axis] for s in reporting) / axis_total
        else:
            fused[axis] = 0.5

    confidence = sum(weights[s.name] * s.confidence for s in sources)
    overall_consistency = float(np.mean(list(consistency.values())))

    return FusionResult(
        scores={k: float(np.clip(v, 0.0, 1.0)) for k, v in fused.items()},
        confidence=float(np.clip(confidence, 0.0, 1.0)),
        strategy=strategy,
        weights=weights,
        consistency=overall_consistency
    )


class SignalFusion:
    """
    Fuses per-family scores from independent evidence sources.

    Attributes:
        config: FusionConfig with fusion parameters
    """

    def __init__(self, config: FusionConfig):
        """
        Initialize the fusion combiner.

        Args:
            config: FusionConfig instance
        """
        self.config = config
        self.config.validate()
        logger.info(f"Initialized SignalFusion with mode={config.mode}")

    def fuse(self, sources: List[SignalSource]) -> FusionResult:
        """
        Combine sources using the configured (or automatically chosen) strategy.

        Args:
            sources: Evidence sources to combine

        Returns:
            FusionResult
        """
        if self.config.mode == "auto":
            strategy = select_strategy(sources)
        else:
            strategy = FusionStrategy(self.config.mode)

        result = fuse_sources(sources, strategy, self.config.source_weights)
        logger.debug(
            f"Fused {len(sources)} sources with {strategy.value}: "
            f"confidence={result.confidence:.3f}"
        )
        return result


def create_fusion_from_config(config: Dict[str, Any]) -> SignalFusion:
    """
    Factory function to create SignalFusion from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured SignalFusion instance
    """
    return SignalFusion(FusionConfig.from_config(config))
