"""Tests for profile accumulation and the profile record layout."""

import pytest

from soulprint.extraction import DIMENSION_FAMILIES
from soulprint.profiles import (
    AccumulatorConfig,
    ProfileAccumulator,
    UserProfile,
    normalize_attachment
)

from conftest import build_extraction, build_profile


class TestProfileAccumulator:
    """Exponential smoothing of extraction results into profiles."""

    def test_first_observation_copies_scores(self, accumulator):
        """A newly observed family takes the extracted scores directly."""
        profile = UserProfile(user_id="alice")
        extraction = build_extraction({"big_five": {"extraversion": 0.6}}, confidence=0.5)

        updated = accumulator.update(profile, extraction)

        assert updated.message_count == 1
        assert updated.get("big_five", "extraversion") == pytest.approx(0.6)
        # alpha * extraction confidence plus growth at one message
        assert updated.family_confidence("big_five") == pytest.approx(0.3 * 0.5 + 0.001)

    def test_smoothing(self, accumulator):
        """Later observations move scores by alpha toward the new value."""
        profile = UserProfile(user_id="alice")
        profile = accumulator.update(profile, build_extraction({"big_five": {"openness": 0.2}}))
        profile = accumulator.update(profile, build_extraction({"big_five": {"openness": 1.0}}))

        assert profile.get("big_five", "openness") == pytest.approx(0.2 * 0.7 + 1.0 * 0.3)

    def test_order_sensitive(self, accumulator):
        """The same observations in a different order give a different profile."""
        low = build_extraction({"big_five": {"openness": 0.2}})
        high = build_extraction({"big_five": {"openness": 0.8}})

        forward = accumulator.update(accumulator.update(UserProfile("a"), low), high)
        backward = accumulator.update(accumulator.update(UserProfile("a"), high), low)

        assert forward.get("big_five", "openness") == pytest.approx(0.38)
        assert backward.get("big_five", "openness") == pytest.approx(0.62)

    def test_confidence_never_decreases(self, accumulator):
        """Confidence is non-decreasing, including across messages without signal."""
        profile = UserProfile(user_id="alice")
        observations = [
            build_extraction({"big_five": {"openness": 0.9}}, confidence=0.8),
            build_extraction(),
            build_extraction({"big_five": {"openness": 0.1}}, confidence=0.2),
        ] * 10

        previous = 0.0
        for extraction in observations:
            profile = accumulator.update(profile, extraction)
            current = profile.family_confidence("big_five")
            assert current >= previous
            assert current <= 1.0
            previous = current

    def test_no_signal_leaves_dimensions_untouched(self, accumulator):
        """A message without evidence only bumps the message count."""
        profile = build_profile("alice", big_five={"openness": 0.7})
        updated = accumulator.update(profile, build_extraction())

        assert updated.message_count == profile.message_count + 1
        assert updated.dimensions == profile.dimensions
        assert updated.confidence == profile.confidence

    def test_attachment_sums_to_one(self, accumulator):
        """Attachment scores stay a distribution after every update."""
        profile = UserProfile(user_id="alice")
        for scores in [
            {"secure": 0.8, "anxious": 0.2},
            {"anxious": 0.5, "avoidant": 0.5},
            {"disorganized": 1.0},
        ]:
            profile = accumulator.update(profile, build_extraction({"attachment": scores}))
            assert sum(profile.dimensions["attachment"].values()) == pytest.approx(1.0)

    def test_scores_stay_in_bounds(self, accumulator):
        """Every stored score lies in [0, 1]."""
        profile = UserProfile(user_id="alice")
        for _ in range(5):
            extraction = build_extraction(
                {family: {axis: 1.0 for axis in axes} for family, axes in DIMENSION_FAMILIES.items()},
                confidence=0.8
            )
            profile = accumulator.update(profile, extraction)

        for axes in profile.dimensions.values():
            assert all(0.0 <= v <= 1.0 for v in axes.values())

    def test_input_not_mutated(self, accumulator):
        """Updating returns a new profile and leaves the input intact."""
        profile = build_profile("alice", big_five={"openness": 0.7})
        before = profile.to_record()
        accumulator.update(profile, build_extraction({"big_five": {"openness": 0.1}}))
        assert profile.to_record() == before

    def test_interests_union_in_canonical_order(self, accumulator):
        """Interests accumulate without duplicates in a stable order."""
        profile = UserProfile(user_id="alice")
        profile = accumulator.update(profile, build_extraction(interests=["nature"]))
        profile = accumulator.update(profile, build_extraction(interests=["travel", "nature"]))
        assert profile.interests == ["travel", "nature"]

    def test_social_sentence_accumulates_extraversion(self, accumulator, extractor):
        """Repeating a social sentence settles on high extraversion."""
        profile = UserProfile(user_id="alice")
        for _ in range(3):
            profile = accumulator.update(
                profile, extractor.extract("I love parties and meeting new people!")
            )

        assert profile.get("big_five", "extraversion") > 0.5
        assert profile.message_count == 3

    def test_invalid_alpha_rejected(self):
        """Alpha must lie in (0, 1]."""
        with pytest.raises(ValueError):
            ProfileAccumulator(AccumulatorConfig(smoothing_alpha=0.0))

    def test_from_config(self):
        """Accumulator settings are read from the accumulator section."""
        config = AccumulatorConfig.from_config({"accumulator": {"smoothing_alpha": 0.5}})
        assert config.smoothing_alpha == 0.5
        assert config.confidence_growth == 0.1


class TestInsights:
    """Readable observations from confident profiles."""

    def test_extraversion_insight(self, accumulator):
        """A confident, highly extraverted profile yields a personality insight."""
        profile = build_profile("alice", confidence=0.6, big_five={"extraversion": 0.8})
        categories = [i.category for i in accumulator.generate_insights(profile)]
        assert "personality" in categories

    def test_low_confidence_yields_nothing(self, accumulator):
        """Low-confidence families produce no insights."""
        profile = build_profile(
            "alice", confidence=0.2,
            big_five={"extraversion": 0.9, "neuroticism": 0.9},
            communication={"directness": 0.9}
        )
        assert accumulator.generate_insights(profile) == []

    def test_primary_attachment_style(self, accumulator):
        """The dominant attachment style is named."""
        profile = build_profile(
            "alice", confidence=0.5,
            attachment={"secure": 0.1, "anxious": 0.2, "avoidant": 0.6, "disorganized": 0.1}
        )
        texts = [i.text for i in accumulator.generate_insights(profile)]
        assert any("avoidant" in t for t in texts)


class TestProfileRecord:
    """Persisted record layout."""

    def test_record_layout(self):
        """Records use the stable storage field names."""
        profile = build_profile("alice", confidence=0.4, big_five={"openness": 0.7})
        record = profile.to_record()

        assert set(record) == {"userId", "messageCount", "dimensions", "interests",
                               "createdAt", "lastUpdated"}
        assert record["dimensions"]["big_five"]["confidence"] == pytest.approx(0.4)
        assert record["dimensions"]["big_five"]["openness"] == pytest.approx(0.7)

    def test_round_trip(self):
        """A profile survives conversion to and from its record."""
        profile = build_profile(
            "alice", big_five={"openness": 0.7},
            attachment={"secure": 1.0}, interests=["music"]
        )
        restored = UserProfile.from_record(profile.to_record())

        assert restored.dimensions == profile.dimensions
        assert restored.confidence == profile.confidence
        assert restored.interests == profile.interests
        assert restored.created_at == profile.created_at

    def test_record_without_user_id(self):
        """The store key fills in a missing userId."""
        restored = UserProfile.from_record({"messageCount": 2}, user_id="bob")
        assert restored.user_id == "bob"
        assert restored.message_count == 2

    def test_overall_confidence_counts_missing_families(self):
        """Unobserved families pull overall confidence down."""
        profile = build_profile("alice", confidence=0.6, big_five={"openness": 0.5})
        assert profile.overall_confidence() == pytest.approx(0.6 / len(DIMENSION_FAMILIES))


class TestNormalizeAttachment:
    """Attachment normalization helper."""

    def test_normalizes(self):
        assert normalize_attachment({"secure": 2.0, "anxious": 2.0}) == {"secure": 0.5, "anxious": 0.5}

    def test_all_zero_unchanged(self):
        assert normalize_attachment({"secure": 0.0}) == {"secure": 0.0}
