"""Tests for cohort diagnostics."""

import json

import numpy as np
import pytest

from soulprint.compatibility import METHODS
from soulprint.evaluation import (
    EvaluationReport,
    compute_score_distribution_stats,
    create_evaluation_report,
    sanity_check_monotonicity,
    sanity_check_self_similarity,
    score_cohort,
    summarize_profiles
)


class TestScoreDistribution:
    """Distribution statistics."""

    def test_basic_stats(self):
        stats = compute_score_distribution_stats(np.array([0.2, 0.4, 0.6, 0.8]))

        assert stats.count == 4
        assert stats.mean == pytest.approx(0.5)
        assert stats.min == pytest.approx(0.2)
        assert stats.max == pytest.approx(0.8)
        assert set(stats.quantiles) == {"p10", "p25", "p50", "p75", "p90"}
        assert stats.quantiles["p50"] == pytest.approx(0.5)

    def test_empty_scores(self):
        """An empty cohort yields zeroed statistics instead of NaNs."""
        stats = compute_score_distribution_stats(np.array([]))
        assert stats.count == 0
        assert stats.mean == 0.0


class TestCohortScoring:
    """Pairwise cohort scoring."""

    def test_one_row_per_pair(self, engine, encoder, sample_profiles):
        """Every unordered pair is scored once."""
        vectors = [encoder.encode(p) for p in sample_profiles]
        pairs = score_cohort(engine, vectors)

        n = len(vectors)
        assert len(pairs) == n * (n - 1) // 2
        assert list(pairs.columns) == ["user_a", "user_b", "overall", "confidence"] + METHODS
        assert pairs["overall"].between(0, 1).all()
        assert set(pairs["user_a"]) <= {p.user_id for p in sample_profiles}

    def test_empty_cohort(self, engine):
        pairs = score_cohort(engine, [])
        assert pairs.empty
        assert "overall" in pairs.columns

    def test_self_similarity(self, engine, encoder, sample_profiles):
        """Every sample profile prefers itself to the empty profile."""
        vectors = [encoder.encode(p) for p in sample_profiles]
        check = sanity_check_self_similarity(engine, vectors)

        assert check.n_vectors == len(vectors)
        assert check.dominance_rate == 1.0
        assert check.min_margin >= 0.0


class TestMonotonicity:
    """Score against reference similarity."""

    def test_monotonic_scores(self):
        similarity = np.array([0.1, 0.3, 0.5, 0.7, 0.9])
        check = sanity_check_monotonicity(similarity * 0.5 + 0.2, similarity)

        assert check.correlation_with_similarity == pytest.approx(1.0)
        assert check.is_monotonic
        assert check.n_violations == 0

    def test_reversed_scores(self):
        similarity = np.array([0.1, 0.3, 0.5, 0.7])
        check = sanity_check_monotonicity(1 - similarity, similarity)

        assert not check.is_monotonic
        assert check.violation_rate == pytest.approx(1.0)

    def test_too_few_pairs(self):
        check = sanity_check_monotonicity(np.array([0.5, 0.6]), np.array([0.1, 0.2]))
        assert not check.is_monotonic
        assert check.n_violations == 0

    def test_constant_scores(self):
        """Constant inputs give zero correlation rather than NaN."""
        check = sanity_check_monotonicity(np.full(4, 0.5), np.array([0.1, 0.2, 0.3, 0.4]))
        assert check.correlation_with_similarity == 0.0


class TestEvaluationReport:
    """Full report creation."""

    @pytest.fixture
    def report(self, engine, encoder, sample_profiles):
        vectors = [encoder.encode(p) for p in sample_profiles]
        return create_evaluation_report(engine, vectors, sample_profiles, cohort_name="sample")

    def test_report_sections(self, report, sample_profiles):
        assert report.distribution_stats.count == 6
        assert report.monotonicity_check is not None
        assert report.profile_stats.profile_count == len(sample_profiles)
        assert set(report.method_means) == set(METHODS)

    def test_summary(self, report):
        summary = report.summary()
        assert "Evaluation Report: sample" in summary
        assert "Self-Similarity Check" in summary

    def test_save(self, report, tmp_path):
        """Reports are saved as JSON."""
        path = tmp_path / "report.json"
        report.save(str(path))

        with open(path) as f:
            data = json.load(f)
        assert data["cohort_name"] == "sample"
        assert data["self_similarity_check"]["dominance_rate"] == 1.0

    def test_minimal_report(self):
        """Optional sections are omitted from the dictionary."""
        assert EvaluationReport(cohort_name="empty").to_dict() == {
            "cohort_name": "empty", "method_means": {}
        }


class TestProfileStats:

    def test_summarize(self, sample_profiles):
        stats = summarize_profiles(sample_profiles)
        assert stats.profile_count == 4
        assert stats.total_messages == 40
        assert 0.0 < stats.average_confidence <= 1.0

    def test_empty(self):
        assert summarize_profiles([]).profile_count == 0
