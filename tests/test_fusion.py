"""Tests for multi-source signal fusion."""

import pytest

from soulprint.fusion import (
    FusionConfig,
    FusionStrategy,
    SignalFusion,
    SignalSource,
    fuse_sources,
    select_strategy
)

WEIGHTS = {"lexical": 0.7, "context": 0.3}


class TestStrategySelection:
    """Automatic strategy choice."""

    def test_single_source_uses_weighted_average(self):
        """One source always falls back to a weighted average."""
        sources = [SignalSource("lexical", {"empathy": 0.9}, 0.9)]
        assert select_strategy(sources) == FusionStrategy.WEIGHTED_AVERAGE

    @pytest.mark.parametrize("confidences,expected", [
        ((0.8, 0.7), FusionStrategy.DYNAMIC),
        ((0.5, 0.5), FusionStrategy.CONFIDENCE_BASED),
        ((0.3, 0.2), FusionStrategy.CONSENSUS),
    ])
    def test_selection_by_mean_confidence(self, confidences, expected):
        """Higher mean confidence selects more trusting strategies."""
        sources = [
            SignalSource("lexical", {"empathy": 0.5}, confidences[0]),
            SignalSource("context", {"empathy": 0.5}, confidences[1]),
        ]
        assert select_strategy(sources) == expected


class TestFuseSources:
    """The shared fusion routine."""

    def test_no_sources(self):
        """Fusing nothing yields empty scores and zero confidence."""
        result = fuse_sources([], FusionStrategy.WEIGHTED_AVERAGE, WEIGHTS)
        assert result.scores == {}
        assert result.confidence == 0.0

    def test_weighted_average_uses_base_weights(self):
        """Equal confidences leave the base source weights in charge."""
        sources = [
            SignalSource("lexical", {"empathy": 1.0}, 0.5),
            SignalSource("context", {"empathy": 0.0}, 0.5),
        ]
        result = fuse_sources(sources, FusionStrategy.WEIGHTED_AVERAGE, WEIGHTS)

        assert result.weights["lexical"] == pytest.approx(0.7)
        assert result.scores["empathy"] == pytest.approx(0.7)

    def test_confidence_based_ignores_base_weights(self):
        """Confidence-based weighting treats equally confident sources equally."""
        sources = [
            SignalSource("lexical", {"empathy": 1.0}, 0.5),
            SignalSource("context", {"empathy": 0.0}, 0.5),
        ]
        result = fuse_sources(sources, FusionStrategy.CONFIDENCE_BASED, WEIGHTS)
        assert result.scores["empathy"] == pytest.approx(0.5)

    def test_consensus_favours_agreeing_sources(self):
        """An outlier source gets less weight than sources near the mean."""
        sources = [
            SignalSource("a", {"empathy": 0.6, "social_skills": 0.6}, 0.3),
            SignalSource("b", {"empathy": 0.6, "social_skills": 0.6}, 0.3),
            SignalSource("c", {"empathy": 0.0, "social_skills": 0.0}, 0.3),
        ]
        result = fuse_sources(sources, FusionStrategy.CONSENSUS, {})

        assert result.weights["c"] < result.weights["a"]
        assert result.scores["empathy"] > 0.4

    def test_axis_reported_by_one_source(self):
        """An axis only one source reports takes that source's score."""
        sources = [
            SignalSource("lexical", {"empathy": 0.8}, 0.6),
            SignalSource("context", {"social_skills": 0.2}, 0.4),
        ]
        result = fuse_sources(sources, FusionStrategy.WEIGHTED_AVERAGE, WEIGHTS)

        assert result.scores["empathy"] == pytest.approx(0.8)
        assert result.scores["social_skills"] == pytest.approx(0.2)

    def test_weights_normalized(self):
        """Source weights always sum to one."""
        sources = [
            SignalSource("lexical", {"empathy": 0.9}, 0.7),
            SignalSource("context", {"empathy": 0.3}, 0.9),
        ]
        for strategy in FusionStrategy:
            result = fuse_sources(sources, strategy, WEIGHTS)
            assert sum(result.weights.values()) == pytest.approx(1.0)
            assert 0.0 <= result.confidence <= 1.0

    def test_zero_weights_fall_back_to_uniform(self):
        """Sources with zero confidence share the weight evenly."""
        sources = [
            SignalSource("lexical", {"empathy": 1.0}, 0.0),
            SignalSource("context", {"empathy": 0.0}, 0.0),
        ]
        result = fuse_sources(sources, FusionStrategy.WEIGHTED_AVERAGE, WEIGHTS)
        assert result.weights == {"lexical": 0.5, "context": 0.5}


class TestSignalFusion:
    """Configured fusion."""

    def test_fixed_mode_overrides_selection(self):
        """A configured strategy is used regardless of confidence."""
        fusion = SignalFusion(FusionConfig(mode="consensus"))
        sources = [
            SignalSource("lexical", {"empathy": 0.9}, 0.9),
            SignalSource("context", {"empathy": 0.8}, 0.9),
        ]
        assert fusion.fuse(sources).strategy == FusionStrategy.CONSENSUS

    def test_invalid_mode_rejected(self):
        """Unknown modes fail validation."""
        with pytest.raises(ValueError):
            SignalFusion(FusionConfig(mode="majority_vote"))

    def test_negative_weight_rejected(self):
        """Negative source weights fail validation."""
        with pytest.raises(ValueError):
            SignalFusion(FusionConfig(source_weights={"lexical": -1.0}))

    def test_config_round_trip(self):
        """A config survives to_dict and from_dict."""
        config = FusionConfig(mode="dynamic", source_weights={"lexical": 0.5, "context": 0.5})
        assert FusionConfig.from_dict(config.to_dict()) == config

    def test_from_config_defaults(self):
        """Missing sections fall back to defaults."""
        config = FusionConfig.from_config({})
        assert config.mode == "auto"
        assert config.source_weights == WEIGHTS
