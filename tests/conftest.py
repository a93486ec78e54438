"""Shared fixtures for the soulprint test suite."""

from typing import Dict, Optional

import pytest

from soulprint.compatibility import CompatibilityEngine
from soulprint.encoding import VectorEncoder
from soulprint.extraction import DIMENSION_FAMILIES, ExtractionResult, FamilySignal, SignalExtractor
from soulprint.profiles import InMemoryProfileStore, ProfileAccumulator, UserProfile
from soulprint.service import PersonalityService


def build_extraction(
    families: Optional[Dict[str, Dict[str, float]]] = None,
    confidence: float = 0.5,
    hits: int = 2,
    interests=None
) -> ExtractionResult:
    """Extraction with the given family scores; other families carry no signal."""
    families = families or {}
    signals = {}
    for family, axes in DIMENSION_FAMILIES.items():
        if family in families:
            scores = {axis: families[family].get(axis, 0.0) for axis in axes}
            signals[family] = FamilySignal(scores=scores, confidence=confidence, hits=hits)
        else:
            signals[family] = FamilySignal(scores={axis: 0.0 for axis in axes}, confidence=0.1, hits=0)
    return ExtractionResult(families=signals, interests=list(interests or []))


def build_profile(
    user_id: str = "user",
    confidence: float = 0.6,
    message_count: int = 10,
    interests=None,
    **families: Dict[str, float]
) -> UserProfile:
    """Profile with the given families, each at the same confidence."""
    dimensions = {}
    for family, axes in families.items():
        dimensions[family] = {axis: axes.get(axis, 0.0) for axis in DIMENSION_FAMILIES[family]}
    return UserProfile(
        user_id=user_id,
        message_count=message_count,
        dimensions=dimensions,
        confidence={family: confidence for family in dimensions},
        interests=list(interests or [])
    )


@pytest.fixture
def extractor():
    return SignalExtractor()


@pytest.fixture
def accumulator():
    return ProfileAccumulator()


@pytest.fixture
def encoder():
    return VectorEncoder()


@pytest.fixture
def engine():
    return CompatibilityEngine()


@pytest.fixture
def store():
    return InMemoryProfileStore()


@pytest.fixture
def service(store):
    return PersonalityService(store)


@pytest.fixture
def sample_profiles():
    """A handful of varied profiles."""
    return [
        build_profile(
            "outgoing",
            big_five={"openness": 0.8, "extraversion": 0.9, "agreeableness": 0.6},
            attachment={"secure": 0.7, "anxious": 0.1, "avoidant": 0.1, "disorganized": 0.1},
            communication={"directness": 0.8, "emotional_expression": 0.7, "active_listening": 0.5},
            values={"adventure": 0.8, "career": 0.4},
            interests=["travel", "music"]
        ),
        build_profile(
            "reserved",
            big_five={"conscientiousness": 0.8, "extraversion": 0.2, "neuroticism": 0.4},
            attachment={"secure": 0.2, "anxious": 0.1, "avoidant": 0.6, "disorganized": 0.1},
            emotional_intelligence={"self_awareness": 0.7, "emotional_regulation": 0.6},
            values={"security": 0.7, "family": 0.6},
            interests=["reading"]
        ),
        build_profile(
            "seeker",
            big_five={"openness": 0.9, "agreeableness": 0.7},
            mbti_axes={"extraversion": 0.4, "sensing": 0.3, "thinking": 0.4, "judging": 0.3},
            values={"spirituality": 0.9, "helping": 0.7, "independence": 0.5},
            interests=["nature"]
        ),
        build_profile(
            "planner",
            big_five={"conscientiousness": 0.9, "extraversion": 0.5},
            mbti_axes={"extraversion": 0.5, "sensing": 0.8, "thinking": 0.8, "judging": 0.9},
            communication={"directness": 0.9, "active_listening": 0.3, "conflict_style": 0.7},
            values={"career": 0.9, "security": 0.6},
            interests=["technology", "fitness"]
        ),
    ]
