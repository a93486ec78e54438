"""
Cohort diagnostics for the compatibility engine.

There is no ground truth for compatibility, so evaluation looks at how the
engine behaves on a set of profiles:
1. Score distribution across all pairs
2. Self-dominance: every vector should score at least as well against
   itself as against the empty (all-zero) vector
3. Monotonicity: the combined score should rise with cosine similarity
4. Profile statistics (count, messages, confidence)

None of this says anything about real-world relationship outcomes.
"""

import json
import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Any, Optional

import numpy as np
import pandas as pd
from scipy.stats import spearmanr

from ..compatibility import CompatibilityEngine, METHODS
from ..encoding import PersonalityVector
from ..profiles import UserProfile

logger = logging.getLogger(__name__)


@dataclass
class ScoreDistributionStats:
    """Statistics about score distribution."""
    count: int
    mean: float
    std: float
    min: float
    max: float
    quantiles: Dict[str, float]  # e.g., {"p10": 0.2, "p50": 0.5, "p90": 0.8}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": int(self.count),
            "mean": float(self.mean),
            "std": float(self.std),
            "min": float(self.min),
            "max": float(self.max),
            "quantiles": {k: float(v) for k, v in self.quantiles.items()}
        }


@dataclass
class MonotonicityCheck:
    """Results of monotonicity sanity check."""
    correlation_with_similarity: float
    is_monotonic: bool
    n_violations: int
    violation_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correlation_with_similarity": float(self.correlation_with_similarity),
            "is_monotonic": bool(self.is_monotonic),
            "n_violations": int(self.n_violations),
            "violation_rate": float(self.violation_rate)
        }


@dataclass
class SelfSimilarityCheck:
    """Share of vectors whose self-score dominates their score against zero."""
    n_vectors: int
    n_dominant: int
    min_margin: float

    @property
    def dominance_rate(self) -> float:
        return self.n_dominant / self.n_vectors if self.n_vectors else 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_vectors": int(self.n_vectors),
            "n_dominant": int(self.n_dominant),
            "dominance_rate": float(self.dominance_rate),
            "min_margin": float(self.min_margin)
        }


@dataclass
class ProfileStats:
    """Aggregate statistics over stored profiles."""
    profile_count: int
    total_messages: int
    average_confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile_count": int(self.profile_count),
            "total_messages": int(self.total_messages),
            "average_confidence": float(self.average_confidence)
        }


@dataclass
class EvaluationReport:
    """
    Diagnostic report for one cohort of profiles.

    Documents engine behavior WITHOUT claiming predictive validity.
    """
    cohort_name: str
    distribution_stats: Optional[ScoreDistributionStats] = None
    monotonicity_check: Optional[MonotonicityCheck] = None
    self_similarity_check: Optional[SelfSimilarityCheck] = None
    profile_stats: Optional[ProfileStats] = None
    method_means: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = {"cohort_name": self.cohort_name, "method_means": dict(self.method_means)}
        if self.distribution_stats:
            result["distribution_stats"] = self.distribution_stats.to_dict()
        if self.monotonicity_check:
            result["monotonicity_check"] = self.monotonicity_check.to_dict()
        if self.self_similarity_check:
            result["self_similarity_check"] = self.self_similarity_check.to_dict()
        if self.profile_stats:
            result["profile_stats"] = self.profile_stats.to_dict()
        return result

    def save(self, filepath: str) -> None:
        """Save report to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved evaluation report to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the report."""
        lines = [f"Evaluation Report: {self.cohort_name}", "=" * 50]

        if self.profile_stats:
            lines.extend([
                "",
                "Profiles:",
                f"  Count: {self.profile_stats.profile_count}",
                f"  Messages: {self.profile_stats.total_messages}",
                f"  Average confidence: {self.profile_stats.average_confidence:.4f}",
            ])

        if self.distribution_stats:
            lines.extend([
                "",
                f"Overall Score Distribution ({self.distribution_stats.count} pairs):",
                f"  Mean: {self.distribution_stats.mean:.4f}",
                f"  Std:  {self.distribution_stats.std:.4f}",
                f"  Min:  {self.distribution_stats.min:.4f}",
                f"  Max:  {self.distribution_stats.max:.4f}",
            ])
            for q_name, q_value in self.distribution_stats.quantiles.items():
                lines.append(f"  {q_name}: {q_value:.4f}")

        if self.method_means:
            lines.extend(["", "Method Means:"])
            for name, value in self.method_means.items():
                lines.append(f"  {name}: {value:.4f}")

        if self.monotonicity_check:
            lines.extend([
                "",
                "Monotonicity Check (overall vs cosine):",
                f"  Spearman correlation: {self.monotonicity_check.correlation_with_similarity:.4f}",
                f"  Is monotonic: {self.monotonicity_check.is_monotonic}",
                f"  Violation rate: {self.monotonicity_check.violation_rate:.2%}",
            ])

        if self.self_similarity_check:
            lines.extend([
                "",
                "Self-Similarity Check:",
                f"  Dominance rate: {self.self_similarity_check.dominance_rate:.2%}",
                f"  Minimum margin: {self.self_similarity_check.min_margin:.4f}",
            ])

        return "\n".join(lines)


def compute_score_distribution_stats(
    scores: np.ndarray,
    quantiles: List[float] = [0.1, 0.25, 0.5, 0.75, 0.9]
) -> ScoreDistributionStats:
    """
    Compute distribution statistics for scores.

    Args:
        scores: Array of compatibility scores (may be empty)
        quantiles: Quantile values to compute (default: p10, p25, p50, p75, p90)

    Returns:
        ScoreDistributionStats instance
    """
    scores = np.asarray(scores, dtype=float)
    if scores.size == 0:
        return ScoreDistributionStats(
            count=0, mean=0.0, std=0.0, min=0.0, max=0.0,
            quantiles={f"p{int(q * 100)}": 0.0 for q in quantiles}
        )

    quantile_dict = {
        f"p{int(q * 100)}": float(np.percentile(scores, q * 100))
        for q in quantiles
    }

    return ScoreDistributionStats(
        count=int(scores.size),
        mean=float(np.mean(scores)),
        std=float(np.std(scores)),
        min=float(np.min(scores)),
        max=float(np.max(scores)),
        quantiles=quantile_dict
    )


def score_cohort(engine: CompatibilityEngine, vectors: List[PersonalityVector]) -> pd.DataFrame:
    """
    Score every unordered pair of vectors.

    Args:
        engine: Compatibility engine
        vectors: Vectors of the cohort

    Returns:
        DataFrame with one row per pair: user_a, user_b, overall, confidence
        and one column per method
    """
    rows = []
    for i, j in combinations(range(len(vectors)), 2):
        a, b = vectors[i], vectors[j]
        result = engine.score(a, b)
        row = {
            "user_a": a.user_id if a.user_id is not None else str(i),
            "user_b": b.user_id if b.user_id is not None else str(j),
            "overall": result.overall,
            "confidence": result.confidence,
        }
        row.update({name: result.methods[name] for name in METHODS})
        rows.append(row)

    columns = ["user_a", "user_b", "overall", "confidence"] + METHODS
    return pd.DataFrame(rows, columns=columns)


def sanity_check_monotonicity(
    predicted_scores: np.ndarray,
    similarity_scores: np.ndarray,
    threshold: float = 0.5
) -> MonotonicityCheck:
    """
    Check if combined scores are monotonic with a reference similarity.

    Higher similarity should generally lead to higher compatibility scores.
    This is a sanity check, not a validation of predictive accuracy.

    Args:
        predicted_scores: Combined compatibility scores
        similarity_scores: Reference similarity (e.g. cosine) for the same pairs
        threshold: Correlation threshold for "is_monotonic" flag

    Returns:
        MonotonicityCheck instance
    """
    predicted_scores = np.asarray(predicted_scores, dtype=float)
    similarity_scores = np.asarray(similarity_scores, dtype=float)

    if predicted_scores.size < 3:
        logger.warning("Need at least 3 pairs for a monotonicity check")
        return MonotonicityCheck(0.0, False, 0, 0.0)

    correlation, _ = spearmanr(similarity_scores, predicted_scores)
    if np.isnan(correlation):
        correlation = 0.0

    # Limit comparisons on large cohorts
    sim = similarity_scores[:1000]
    pred = predicted_scores[:1000]
    sim_diff = sim[None, :] - sim[:, None]
    pred_diff = pred[None, :] - pred[:, None]
    upper = np.triu_indices(len(sim), k=1)
    n_comparisons = len(upper[0])
    n_violations = int(np.sum((sim_diff * pred_diff)[upper] < 0))

    return MonotonicityCheck(
        correlation_with_similarity=float(correlation),
        is_monotonic=bool(correlation >= threshold),
        n_violations=n_violations,
        violation_rate=n_violations / n_comparisons if n_comparisons > 0 else 0.0
    )


def sanity_check_self_similarity(
    engine: CompatibilityEngine,
    vectors: List[PersonalityVector]
) -> SelfSimilarityCheck:
    """
    Verify score(v, v) >= score(v, zeros) for every vector.

    Args:
        engine: Compatibility engine
        vectors: Vectors to check

    Returns:
        SelfSimilarityCheck instance
    """
    n_dominant = 0
    margins = []
    for v in vectors:
        zero = PersonalityVector.zeros()
        zero.confidence = v.confidence
        margin = engine.score(v, v).overall - engine.score(v, zero).overall
        margins.append(margin)
        if margin >= 0:
            n_dominant += 1

    return SelfSimilarityCheck(
        n_vectors=len(vectors),
        n_dominant=n_dominant,
        min_margin=float(min(margins)) if margins else 0.0
    )


def summarize_profiles(profiles: List[UserProfile]) -> ProfileStats:
    """
    Aggregate statistics over profiles.

    Args:
        profiles: Profiles to summarize

    Returns:
        ProfileStats instance
    """
    if not profiles:
        return ProfileStats(profile_count=0, total_messages=0, average_confidence=0.0)

    return ProfileStats(
        profile_count=len(profiles),
        total_messages=sum(p.message_count for p in profiles),
        average_confidence=float(np.mean([p.overall_confidence() for p in profiles]))
    )


def create_evaluation_report(
    engine: CompatibilityEngine,
    vectors: List[PersonalityVector],
    profiles: Optional[List[UserProfile]] = None,
    cohort_name: str = "cohort",
    quantiles: List[float] = [0.1, 0.25, 0.5, 0.75, 0.9]
) -> EvaluationReport:
    """
    Create a complete evaluation report.

    Args:
        engine: Compatibility engine
        vectors: Vectors of the cohort
        profiles: Source profiles (for profile statistics)
        cohort_name: Name used in the report
        quantiles: Quantiles to compute

    Returns:
        EvaluationReport instance
    """
    pairs = score_cohort(engine, vectors)
    logger.info(f"Scored {len(pairs)} pairs for cohort '{cohort_name}'")

    monotonicity = None
    if len(pairs) >= 3:
        monotonicity = sanity_check_monotonicity(
            pairs["overall"].to_numpy(), pairs["cosine"].to_numpy()
        )

    return EvaluationReport(
        cohort_name=cohort_name,
        distribution_stats=compute_score_distribution_stats(pairs["overall"].to_numpy(), quantiles),
        monotonicity_check=monotonicity,
        self_similarity_check=sanity_check_self_similarity(engine, vectors),
        profile_stats=summarize_profiles(profiles) if profiles is not None else None,
        method_means={name: float(pairs[name].mean()) for name in METHODS} if len(pairs) else {}
    )
