"""
Profile accumulation.

Folds per-utterance extraction results into a long-lived profile using
exponential smoothing:

    score' = score * (1 - alpha) + new * alpha          (alpha = 0.3)

A family observed for the first time takes the extracted scores directly and
is seeded with confidence alpha * extraction_confidence. Every update of a
family then grows its confidence additively:

    confidence' = min(1, confidence + min(1, message_count / 100) * 0.1)

so confidence never decreases and only saturates after many messages.
Families without evidence in an utterance are left untouched.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional

import numpy as np

from ..extraction import DIMENSION_FAMILIES, INTEREST_TAGS, ExtractionResult
from .schema import UserProfile, utc_now

logger = logging.getLogger(__name__)


@dataclass
class AccumulatorConfig:
    """
    Configuration for profile accumulation.

    Attributes:
        smoothing_alpha: Weight of the new observation
        confidence_growth: Maximum confidence added per update
        confidence_saturation_messages: Message count at which growth is full
    """
    smoothing_alpha: float = 0.3
    confidence_growth: float = 0.1
    confidence_saturation_messages: int = 100

    def validate(self) -> None:
        """Validate configuration values."""
        if not 0 < self.smoothing_alpha <= 1:
            raise ValueError(f"smoothing_alpha must be in (0, 1], got {self.smoothing_alpha}")
        if not 0 <= self.confidence_growth <= 1:
            raise ValueError(f"confidence_growth must be in [0, 1], got {self.confidence_growth}")
        if self.confidence_saturation_messages <= 0:
            raise ValueError(
                f"confidence_saturation_messages must be positive, "
                f"got {self.confidence_saturation_messages}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "AccumulatorConfig":
        """Create from main config dictionary."""
        section = config.get("accumulator", {})
        defaults = cls()
        return cls(
            smoothing_alpha=section.get("smoothing_alpha", defaults.smoothing_alpha),
            confidence_growth=section.get("confidence_growth", defaults.confidence_growth),
            confidence_saturation_messages=section.get(
                "confidence_saturation_messages", defaults.confidence_saturation_messages
            )
        )


@dataclass
class Insight:
    """Human-readable observation about a profile."""
    category: str
    text: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "text": self.text, "confidence": float(self.confidence)}


def normalize_attachment(scores: Dict[str, float]) -> Dict[str, float]:
    """Rescale attachment scores to sum to 1; all-zero scores are returned as-is."""
    total = sum(scores.values())
    if total <= 0:
        return dict(scores)
    return {axis: value / total for axis, value in scores.items()}


class ProfileAccumulator:
    """
    Applies extraction results to user profiles.

    Attributes:
        config: AccumulatorConfig with smoothing parameters
    """

    def __init__(self, config: Optional[AccumulatorConfig] = None):
        self.config = config or AccumulatorConfig()
        self.config.validate()

    def update(self, profile: UserProfile, extraction: ExtractionResult) -> UserProfile:
        """
        Fold one extraction into a profile.

        The input profile is not modified.

        Args:
            profile: Current profile
            extraction: Extraction result of the latest utterance

        Returns:
            Updated copy of the profile
        """
        alpha = self.config.smoothing_alpha
        updated = profile.copy()
        updated.message_count += 1

        growth = min(1.0, updated.message_count / self.config.confidence_saturation_messages)
        growth *= self.config.confidence_growth

        for family, signal in extraction.families.items():
            if family not in DIMENSION_FAMILIES or not signal.has_signal:
                continue

            existing = updated.dimensions.get(family)
            if existing is None:
                scores = {axis: signal.scores.get(axis, 0.0) for axis in DIMENSION_FAMILIES[family]}
                confidence = alpha * signal.confidence
            else:
                scores = {}
                for axis in DIMENSION_FAMILIES[family]:
                    new = signal.scores.get(axis, existing.get(axis, 0.0))
                    old = existing.get(axis, new)
                    scores[axis] = old * (1 - alpha) + new * alpha
                confidence = updated.family_confidence(family)

            scores = {axis: float(np.clip(v, 0.0, 1.0)) for axis, v in scores.items()}
            if family == "attachment":
                scores = normalize_attachment(scores)

            updated.dimensions[family] = scores
            updated.confidence[family] = float(min(1.0, confidence + growth))

        if extraction.interests:
            seen = set(updated.interests) | set(extraction.interests)
            updated.interests = [tag for tag in INTEREST_TAGS if tag in seen]

        updated.last_updated = utc_now()
        logger.debug(
            f"Updated profile {updated.user_id}: messages={updated.message_count}, "
            f"confidence={updated.overall_confidence():.3f}"
        )
        return updated

    def generate_insights(self, profile: UserProfile) -> List[Insight]:
        """
        Derive readable observations from sufficiently confident families.

        Args:
            profile: Profile to describe

        Returns:
            List of Insight instances (possibly empty)
        """
        insights = []

        big_five_conf = profile.family_confidence("big_five")
        if "big_five" in profile.dimensions and big_five_conf > 0.5:
            if profile.get("big_five", "extraversion") > 0.7:
                insights.append(Insight(
                    "personality",
                    "Highly extraverted: gains energy from social interactions",
                    big_five_conf
                ))
            if profile.get("big_five", "neuroticism") > 0.6:
                insights.append(Insight(
                    "emotional",
                    "May experience emotional stress more intensely than others",
                    big_five_conf
                ))

        attachment_conf = profile.family_confidence("attachment")
        attachment = profile.dimensions.get("attachment", {})
        if attachment and attachment_conf > 0.4 and sum(attachment.values()) > 0:
            primary = max(DIMENSION_FAMILIES["attachment"], key=lambda a: attachment.get(a, 0.0))
            insights.append(Insight(
                "attachment",
                f"Primary attachment style appears to be {primary}",
                attachment_conf
            ))

        communication_conf = profile.family_confidence("communication")
        if "communication" in profile.dimensions and communication_conf > 0.5:
            if profile.get("communication", "directness") > 0.7:
                insights.append(Insight(
                    "communication",
                    "Prefers direct, straightforward communication",
                    communication_conf
                ))
            if profile.get("communication", "active_listening") > 0.6:
                insights.append(Insight(
                    "communication",
                    "Strong active listening skills",
                    communication_conf
                ))

        return insights


def create_accumulator_from_config(config: Dict[str, Any]) -> ProfileAccumulator:
    """
    Factory function to create a ProfileAccumulator from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured ProfileAccumulator instance
    """
    return ProfileAccumulator(AccumulatorConfig.from_config(config))
