"""
Compatibility scoring between two personality vectors.

Four independent methods are combined into one score:

    overall = 0.30 * cosine + 0.30 * dimensional
            + 0.25 * harmony + 0.15 * complementary

Methods:
- cosine:        cosine similarity of the full vectors (0 on zero norm)
- dimensional:   per-block similarity 1 - mean |a - b| over axes where either
                 side exceeds the active threshold (0.5 when no axis is
                 active), combined with fixed block importance weights
- harmony:       attraction^1.2 / (1 + repulsion^1.5), normalized by the
                 largest attainable attraction
- complementary: opposite extremes on selected traits score 0.8, near-equal
                 values 0.6; averaged over the traits that matched either
                 rule (0.5 when none did)

Weights and harmony exponents are configurable; the weights must sum to 1.
A missing vector yields a neutral, low-confidence result instead of an error.
"""

import logging
from dataclasses import dataclass, asdict, field
from typing import Dict, Any, List, Optional, Tuple

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from ..encoding import BLOCKS, PersonalityVector, slot
from .schema import CompatibilityResult, METHODS

logger = logging.getLogger(__name__)

BLOCK_WEIGHTS: Dict[str, float] = {
    "big_five": 3.0,
    "attachment": 2.5,
    "love_languages": 2.0,
    "communication": 2.5,
    "values": 3.5,
    "lifestyle": 1.5,
    "relationship": 2.5,
    "interests": 1.0,
}

ATTRACTION_WEIGHTS: Dict[str, float] = {
    "personality_match": 0.30,
    "values_alignment": 0.25,
    "communication_sync": 0.20,
    "lifestyle_match": 0.15,
    "healthy_differences": 0.10,
}

REPULSION_WEIGHTS: Dict[str, float] = {
    "major_conflicts": 0.5,
    "communication_barriers": 0.3,
    "lifestyle_conflicts": 0.2,
    "attachment_trap": 0.3,
}

# Differences above 0.7 on these slots count as major conflicts
CRITICAL_SLOTS: List[Tuple[str, str]] = [
    ("values", "family"),
    ("values", "career"),
    ("values", "spirituality"),
    ("relationship", "commitment"),
]

COMPLEMENTARY_TRAITS: List[Tuple[str, Tuple[str, str]]] = [
    ("stability_adventure", ("big_five", "openness")),
    ("structure_flexibility", ("big_five", "conscientiousness")),
    ("introvert_extrovert", ("big_five", "extraversion")),
    ("planning_spontaneity", ("mbti_axes", "judging")),
]

NEUTRAL_CONFIDENCE = 0.1


@dataclass
class CompatibilityConfig:
    """
    Configuration for compatibility scoring.

    Attributes:
        method_weights: Weight of each method in the overall score
        attraction_exponent: Exponent applied to attraction in harmony
        repulsion_exponent: Exponent applied to repulsion in harmony
        active_threshold: Minimum value for an axis to count as active
        alignment_threshold: Block similarity above which a block is an alignment
        difference_threshold: Block similarity below which a block is a difference
    """
    method_weights: Dict[str, float] = field(default_factory=lambda: {
        "cosine": 0.30,
        "dimensional": 0.30,
        "harmony": 0.25,
        "complementary": 0.15,
    })
    attraction_exponent: float = 1.2
    repulsion_exponent: float = 1.5
    active_threshold: float = 0.1
    alignment_threshold: float = 0.8
    difference_threshold: float = 0.3

    def validate(self) -> None:
        """Validate configuration values."""
        if sorted(self.method_weights) != sorted(METHODS):
            raise ValueError(f"method_weights must cover exactly {METHODS}, got {list(self.method_weights)}")
        if any(w < 0 for w in self.method_weights.values()):
            raise ValueError(f"method_weights must be non-negative, got {self.method_weights}")
        total = sum(self.method_weights.values())
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"method_weights must sum to 1, got {total}")
        if self.attraction_exponent <= 0 or self.repulsion_exponent <= 0:
            raise ValueError("Harmony exponents must be positive")
        if not 0 <= self.difference_threshold < self.alignment_threshold <= 1:
            raise ValueError(
                f"Need 0 <= difference_threshold < alignment_threshold <= 1, got "
                f"{self.difference_threshold} / {self.alignment_threshold}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "CompatibilityConfig":
        """Create from main config dictionary."""
        section = config.get("compatibility", {})
        harmony = section.get("harmony", {})
        defaults = cls()
        return cls(
            method_weights=section.get("method_weights", defaults.method_weights),
            attraction_exponent=harmony.get("attraction_exponent", defaults.attraction_exponent),
            repulsion_exponent=harmony.get("repulsion_exponent", defaults.repulsion_exponent),
            active_threshold=section.get("active_threshold", defaults.active_threshold),
            alignment_threshold=section.get("alignment_threshold", defaults.alignment_threshold),
            difference_threshold=section.get("difference_threshold", defaults.difference_threshold)
        )


def block_similarity(a: np.ndarray, b: np.ndarray, active_threshold: float = 0.1) -> float:
    """
    Similarity of two vector blocks over their active axes.

    Args:
        a: Block values of the first vector
        b: Block values of the second vector
        active_threshold: Axes where neither side exceeds this are ignored

    Returns:
        1 - mean absolute difference over active axes, or 0.5 if none are active
    """
    active = (a > active_threshold) | (b > active_threshold)
    if not active.any():
        return 0.5
    return float(1.0 - np.mean(np.abs(a[active] - b[active])))


class CompatibilityEngine:
    """
    Scores pairs of personality vectors.

    Attributes:
        config: CompatibilityConfig with weights and thresholds
    """

    def __init__(self, config: Optional[CompatibilityConfig] = None):
        self.config = config or CompatibilityConfig()
        self.config.validate()
        logger.info(f"Initialized CompatibilityEngine with weights={self.config.method_weights}")

    def score(
        self,
        vector_a: Optional[PersonalityVector],
        vector_b: Optional[PersonalityVector]
    ) -> CompatibilityResult:
        """
        Score two vectors.

        Args:
            vector_a: First vector (None if the user has no profile)
            vector_b: Second vector (None if the user has no profile)

        Returns:
            CompatibilityResult; a neutral default when either vector is missing
        """
        if vector_a is None or vector_b is None:
            return self.neutral_result()

        cosine = self.cosine(vector_a, vector_b)
        dimensional, block_scores, alignments, differences = self.dimensional(vector_a, vector_b)
        harmony, forces = self.harmony(vector_a, vector_b)
        complementary, matched = self.complementary(vector_a, vector_b)

        methods = {
            "cosine": cosine,
            "dimensional": dimensional,
            "harmony": harmony,
            "complementary": complementary,
        }
        overall = sum(self.config.method_weights[name] * value for name, value in methods.items())

        evidence = [f"cosine similarity {cosine:.2f}"]
        evidence.extend(f"strong alignment in {name}" for name in alignments)
        evidence.extend(f"notable difference in {name}" for name in differences)
        evidence.append(
            f"attraction {forces['attraction']:.2f} against repulsion {forces['repulsion']:.2f}"
        )
        evidence.extend(f"complementary {name}" for name, value in matched.items() if value >= 0.8)

        return CompatibilityResult(
            overall=float(np.clip(overall, 0.0, 1.0)),
            confidence=float(min(vector_a.confidence, vector_b.confidence)),
            methods=methods,
            block_scores=block_scores,
            alignments=alignments,
            differences=differences,
            forces=forces,
            evidence=evidence
        )

    def neutral_result(self) -> CompatibilityResult:
        """Default result used when a profile is missing."""
        return CompatibilityResult(
            overall=0.5,
            confidence=NEUTRAL_CONFIDENCE,
            methods={name: 0.5 for name in METHODS},
            evidence=["insufficient data: at least one profile is missing"],
            insufficient_data=True
        )

    def cosine(self, a: PersonalityVector, b: PersonalityVector) -> float:
        """Cosine similarity of the full vectors; 0 when either has zero norm."""
        if not a.values.any() or not b.values.any():
            return 0.0
        value = cosine_similarity(a.values.reshape(1, -1), b.values.reshape(1, -1))[0, 0]
        return float(np.clip(value, 0.0, 1.0))

    def dimensional(
        self,
        a: PersonalityVector,
        b: PersonalityVector
    ) -> Tuple[float, Dict[str, float], List[str], List[str]]:
        """
        Weighted per-block similarity.

        Returns:
            Tuple of (score, block_scores, alignments, differences)
        """
        block_scores = {
            name: block_similarity(a.block(name), b.block(name), self.config.active_threshold)
            for name in BLOCK_WEIGHTS
        }

        total_weight = sum(BLOCK_WEIGHTS.values())
        score = sum(BLOCK_WEIGHTS[name] * s for name, s in block_scores.items()) / total_weight

        alignments = sorted(
            (name for name, s in block_scores.items() if s > self.config.alignment_threshold),
            key=lambda name: block_scores[name],
            reverse=True
        )
        differences = sorted(
            (name for name, s in block_scores.items() if s < self.config.difference_threshold),
            key=lambda name: block_scores[name]
        )
        return float(score), block_scores, alignments, differences

    def harmony(self, a: PersonalityVector, b: PersonalityVector) -> Tuple[float, Dict[str, float]]:
        """
        Attraction/repulsion balance.

        Returns:
            Tuple of (normalized harmony, forces dictionary)
        """
        t = self.config.active_threshold

        def sim(name: str) -> float:
            return block_similarity(a.block(name), b.block(name), t)

        big_five_diff = np.abs(a.block("big_five") - b.block("big_five"))
        healthy = np.where(
            (big_five_diff >= 0.2) & (big_five_diff <= 0.5),
            big_five_diff * 2,
            np.where(big_five_diff > 0.5, -(big_five_diff - 0.5), 0.0)
        )

        attraction_factors = {
            "personality_match": sim("big_five"),
            "values_alignment": sim("values"),
            "communication_sync": sim("communication"),
            "lifestyle_match": sim("lifestyle"),
            "healthy_differences": float(np.clip(np.mean(healthy), 0.0, 1.0)),
        }

        def diff(family: str, axis: str) -> float:
            index = slot(family, axis)
            return abs(a[index] - b[index])

        conflict_total = sum(d for d in (diff(f, x) for f, x in CRITICAL_SLOTS) if d > 0.7)
        barriers = 0.0
        if diff("communication", "directness") > 0.6:
            barriers += 0.5
        if diff("communication", "emotional_expression") > 0.7:
            barriers += 0.3

        anxious, avoidant = slot("attachment", "anxious"), slot("attachment", "avoidant")
        repulsion_factors = {
            "major_conflicts": min(1.0, conflict_total / len(CRITICAL_SLOTS)),
            "communication_barriers": barriers,
            "lifestyle_conflicts": 1.0 - attraction_factors["lifestyle_match"],
            "attachment_trap": max(a[anxious] * b[avoidant], a[avoidant] * b[anxious]),
        }

        attraction = sum(ATTRACTION_WEIGHTS[k] * v for k, v in attraction_factors.items())
        repulsion = sum(REPULSION_WEIGHTS[k] * v for k, v in repulsion_factors.items())

        raw = attraction ** self.config.attraction_exponent / (
            1.0 + repulsion ** self.config.repulsion_exponent
        )
        ceiling = sum(ATTRACTION_WEIGHTS.values()) ** self.config.attraction_exponent
        harmony = float(np.clip(raw / ceiling, 0.0, 1.0))

        forces = {"attraction": float(attraction), "repulsion": float(repulsion)}
        forces.update({k: float(v) for k, v in attraction_factors.items()})
        forces.update({k: float(v) for k, v in repulsion_factors.items()})
        return harmony, forces

    def complementary(self, a: PersonalityVector, b: PersonalityVector) -> Tuple[float, Dict[str, float]]:
        """
        Reward opposite extremes and near-equal values on selected traits.

        Returns:
            Tuple of (score, per-trait contribution for the traits that matched)
        """
        matched = {}
        for name, (family, axis) in COMPLEMENTARY_TRAITS:
            index = slot(family, axis)
            x, y = a[index], b[index]
            if (x > 0.7 and y < 0.3) or (x < 0.3 and y > 0.7):
                matched[name] = 0.8
            elif abs(x - y) < 0.2:
                matched[name] = 0.6

        if not matched:
            return 0.5, matched
        return float(np.mean(list(matched.values()))), matched


def create_engine_from_config(config: Dict[str, Any]) -> CompatibilityEngine:
    """
    Factory function to create a CompatibilityEngine from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured CompatibilityEngine instance
    """
    return CompatibilityEngine(CompatibilityConfig.from_config(config))
