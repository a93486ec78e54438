"""Evaluation module for cohort-level engine diagnostics."""

from .metrics import (
    ScoreDistributionStats,
    MonotonicityCheck,
    SelfSimilarityCheck,
    ProfileStats,
    EvaluationReport,
    compute_score_distribution_stats,
    score_cohort,
    sanity_check_monotonicity,
    sanity_check_self_similarity,
    summarize_profiles,
    create_evaluation_report
)

__all__ = [
    "ScoreDistributionStats",
    "MonotonicityCheck",
    "SelfSimilarityCheck",
    "ProfileStats",
    "EvaluationReport",
    "compute_score_distribution_stats",
    "score_cohort",
    "sanity_check_monotonicity",
    "sanity_check_self_similarity",
    "summarize_profiles",
    "create_evaluation_report"
]
