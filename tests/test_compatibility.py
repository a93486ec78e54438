"""Tests for the compatibility engine."""

import numpy as np
import pytest

from soulprint.compatibility import (
    METHODS,
    CompatibilityConfig,
    CompatibilityEngine,
    block_similarity,
    create_engine_from_config
)
from soulprint.encoding import VECTOR_SIZE, PersonalityVector, slot

from conftest import build_profile


def vector_with(confidence: float = 0.5, **slots) -> PersonalityVector:
    """Vector with the given "family__axis" slots set."""
    values = np.zeros(VECTOR_SIZE)
    for key, value in slots.items():
        family, axis = key.split("__")
        values[slot(family, axis)] = value
    return PersonalityVector(values, confidence=confidence)


class TestCompatibilityEngine:
    """Four-method scoring."""

    def test_scores_bounded(self, engine, encoder, sample_profiles):
        """Overall and method scores lie in [0, 1] for every pair."""
        vectors = [encoder.encode(p) for p in sample_profiles]
        for a in vectors:
            for b in vectors:
                result = engine.score(a, b)
                assert 0.0 <= result.overall <= 1.0
                assert set(result.methods) == set(METHODS)
                assert all(0.0 <= v <= 1.0 for v in result.methods.values())

    def test_symmetric(self, engine, encoder, sample_profiles):
        """Scoring is symmetric in its arguments."""
        a, b = (encoder.encode(p) for p in sample_profiles[:2])
        assert engine.score(a, b).overall == pytest.approx(engine.score(b, a).overall)

    def test_self_beats_empty_partner(self, engine, encoder, sample_profiles):
        """A profile matches itself better than it matches an empty profile."""
        empty = PersonalityVector.zeros()
        for profile in sample_profiles:
            vector = encoder.encode(profile)
            assert engine.score(vector, vector).overall >= engine.score(vector, empty).overall

    def test_self_cosine_is_one(self, engine, encoder, sample_profiles):
        vector = encoder.encode(sample_profiles[0])
        assert engine.score(vector, vector).methods["cosine"] == pytest.approx(1.0)

    def test_zero_vector_cosine(self, engine, encoder, sample_profiles):
        """Cosine against a zero vector is 0 rather than an error."""
        vector = encoder.encode(sample_profiles[0])
        assert engine.score(vector, PersonalityVector.zeros()).methods["cosine"] == 0.0

    def test_secure_versus_anxious_attachment(self, engine, encoder):
        """Opposing attachment styles show up as a notable difference."""
        rest = 0.2 / 3
        secure = build_profile("a", attachment={
            "secure": 0.8, "anxious": rest, "avoidant": rest, "disorganized": rest
        })
        anxious = build_profile("b", attachment={
            "secure": rest, "anxious": 0.8, "avoidant": rest, "disorganized": rest
        })

        result = engine.score(encoder.encode(secure), encoder.encode(anxious))

        assert result.block("attachment") < 0.4
        assert "attachment" in result.differences
        assert any("attachment" in note for note in result.evidence)

    def test_missing_vector_is_neutral(self, engine, encoder, sample_profiles):
        """A missing side yields a neutral, low-confidence result."""
        vector = encoder.encode(sample_profiles[0])
        for result in (engine.score(vector, None), engine.score(None, vector), engine.score(None, None)):
            assert result.overall == pytest.approx(0.5)
            assert result.confidence <= 0.3
            assert result.insufficient_data

    def test_confidence_is_minimum(self, engine):
        """Result confidence is the lesser input confidence."""
        a = vector_with(confidence=0.9, big_five__openness=0.5)
        b = vector_with(confidence=0.3, big_five__openness=0.6)
        assert engine.score(a, b).confidence == pytest.approx(0.3)

    def test_alignments_sorted(self, engine, encoder, sample_profiles):
        """Alignments are listed best first."""
        vector = encoder.encode(sample_profiles[0])
        result = engine.score(vector, vector)
        scores = [result.block(name) for name in result.alignments]
        assert scores == sorted(scores, reverse=True)
        assert "big_five" in result.alignments

    def test_complementary_opposites(self, engine):
        """Opposite extremes on a trait count as complementary."""
        a = vector_with(big_five__extraversion=0.9)
        b = vector_with(big_five__extraversion=0.1)
        score, matched = engine.complementary(a, b)

        assert matched["introvert_extrovert"] == 0.8
        assert score > 0.6

    def test_complementary_without_matches(self, engine):
        """Moderate differences on every trait give the neutral score."""
        a = vector_with(big_five__openness=0.5, big_five__conscientiousness=0.5,
                        big_five__extraversion=0.5, mbti_axes__judging=0.5)
        b = vector_with(big_five__openness=0.8, big_five__conscientiousness=0.8,
                        big_five__extraversion=0.8, mbti_axes__judging=0.8)
        score, matched = engine.complementary(a, b)

        assert matched == {}
        assert score == 0.5

    def test_attachment_trap_repulsion(self, engine):
        """An anxious-avoidant pairing adds repulsion."""
        a = vector_with(attachment__anxious=0.9)
        b = vector_with(attachment__avoidant=0.9)
        calm = vector_with(attachment__secure=0.9)

        _, trap_forces = engine.harmony(a, b)
        _, calm_forces = engine.harmony(calm, calm)
        assert trap_forces["attachment_trap"] == pytest.approx(0.81)
        assert trap_forces["repulsion"] > calm_forces["repulsion"]

    def test_custom_weights(self, encoder, sample_profiles):
        """With all weight on cosine the overall score equals cosine."""
        config = CompatibilityConfig(method_weights={
            "cosine": 1.0, "dimensional": 0.0, "harmony": 0.0, "complementary": 0.0
        })
        engine = CompatibilityEngine(config)
        a, b = (encoder.encode(p) for p in sample_profiles[:2])
        result = engine.score(a, b)
        assert result.overall == pytest.approx(result.methods["cosine"])

    def test_result_serializes(self, engine, encoder, sample_profiles):
        """Results convert to plain dictionaries and text."""
        a, b = (encoder.encode(p) for p in sample_profiles[:2])
        result = engine.score(a, b)

        data = result.to_dict()
        assert data["overall"] == pytest.approx(result.overall)
        assert "Overall compatibility" in result.summary()


class TestCompatibilityConfig:
    """Configuration validation."""

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError):
            CompatibilityEngine(CompatibilityConfig(method_weights={
                "cosine": 0.5, "dimensional": 0.5, "harmony": 0.5, "complementary": 0.5
            }))

    def test_weights_must_cover_methods(self):
        with pytest.raises(ValueError):
            CompatibilityEngine(CompatibilityConfig(method_weights={"cosine": 1.0}))

    def test_exponents_positive(self):
        with pytest.raises(ValueError):
            CompatibilityEngine(CompatibilityConfig(repulsion_exponent=0.0))

    def test_from_config(self):
        """Harmony exponents come from the nested harmony section."""
        engine = create_engine_from_config({
            "compatibility": {"harmony": {"attraction_exponent": 1.0}}
        })
        assert engine.config.attraction_exponent == 1.0
        assert engine.config.repulsion_exponent == 1.5


class TestBlockSimilarity:
    """Per-block similarity helper."""

    def test_inactive_block_is_neutral(self):
        assert block_similarity(np.zeros(4), np.zeros(4)) == 0.5

    def test_only_active_axes_count(self):
        a = np.array([0.9, 0.0, 0.05])
        b = np.array([0.7, 0.0, 0.0])
        assert block_similarity(a, b) == pytest.approx(0.8)
