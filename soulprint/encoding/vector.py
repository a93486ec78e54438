"""
Fixed-layout personality vectors.

Each profile maps to a 256-slot vector of scores in [0, 1]. Every dimension
family owns a fixed index range; unused slots stay 0.

Layout:
    big_five                 0-4
    mbti_axes               10-13
    attachment              20-23
    love_languages          40-44   (reserved, no extractor populates it)
    communication           60-64
    emotional_intelligence  80-83
    values                 100-111  (8 values at 100-107)
    lifestyle              140-143  (projected from other families)
    relationship           180-183  (readiness, projected from other families)
    interests              220-231  (presence flags)
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Tuple

import numpy as np

from ..extraction import DIMENSION_FAMILIES, INTEREST_TAGS
from ..profiles import UserProfile

logger = logging.getLogger(__name__)

VECTOR_SIZE = 256

FAMILY_OFFSETS: Dict[str, int] = {
    "big_five": 0,
    "mbti_axes": 10,
    "attachment": 20,
    "communication": 60,
    "emotional_intelligence": 80,
    "values": 100,
}

LOVE_LANGUAGES = ["words_of_affirmation", "acts_of_service", "receiving_gifts",
                  "quality_time", "physical_touch"]
LIFESTYLE_AXES = ["social_level", "activity_level", "routine_preference", "ambition_level"]
READINESS_AXES = ["commitment", "emotional_availability", "communication_skills",
                  "self_awareness"]

LOVE_LANGUAGES_OFFSET = 40
LIFESTYLE_OFFSET = 140
READINESS_OFFSET = 180
INTERESTS_OFFSET = 220

# (start, end) index ranges, end exclusive
BLOCKS: Dict[str, Tuple[int, int]] = {
    "big_five": (0, 5),
    "mbti_axes": (10, 14),
    "attachment": (20, 24),
    "love_languages": (40, 45),
    "communication": (60, 65),
    "emotional_intelligence": (80, 84),
    "values": (100, 112),
    "lifestyle": (140, 144),
    "relationship": (180, 184),
    "interests": (220, 232),
}


def slot(family: str, axis: str) -> int:
    """
    Vector index of a family axis.

    Args:
        family: Dimension family or one of the derived blocks
        axis: Axis name within the family

    Returns:
        Index into the 256-slot vector
    """
    if family in FAMILY_OFFSETS:
        return FAMILY_OFFSETS[family] + DIMENSION_FAMILIES[family].index(axis)
    if family == "love_languages":
        return LOVE_LANGUAGES_OFFSET + LOVE_LANGUAGES.index(axis)
    if family == "lifestyle":
        return LIFESTYLE_OFFSET + LIFESTYLE_AXES.index(axis)
    if family == "relationship":
        return READINESS_OFFSET + READINESS_AXES.index(axis)
    if family == "interests":
        return INTERESTS_OFFSET + INTEREST_TAGS.index(axis)
    raise KeyError(f"Unknown vector family: {family}")


@dataclass
class PersonalityVector:
    """
    Numeric encoding of a profile.

    Attributes:
        values: Array of shape (256,) with entries in [0, 1]
        confidence: Overall confidence of the source profile
        user_id: Identifier of the source profile, if any
    """
    values: np.ndarray
    confidence: float = 0.0
    user_id: Optional[str] = None

    def __post_init__(self):
        self.values = np.clip(np.asarray(self.values, dtype=float), 0.0, 1.0)
        if self.values.shape != (VECTOR_SIZE,):
            raise ValueError(f"Vector must have shape ({VECTOR_SIZE},), got {self.values.shape}")

    def block(self, name: str) -> np.ndarray:
        start, end = BLOCKS[name]
        return self.values[start:end]

    def __getitem__(self, index: int) -> float:
        return float(self.values[index])

    @classmethod
    def zeros(cls, user_id: Optional[str] = None) -> "PersonalityVector":
        return cls(np.zeros(VECTOR_SIZE), confidence=0.0, user_id=user_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "confidence": float(self.confidence),
            "values": [float(v) for v in self.values]
        }


class VectorEncoder:
    """
    Projects a UserProfile onto the fixed 256-slot layout.

    Encoding is deterministic and never fails: unobserved families and
    axes encode as 0.
    """

    def encode(self, profile: UserProfile) -> PersonalityVector:
        """
        Encode a profile.

        Args:
            profile: Profile to encode

        Returns:
            PersonalityVector
        """
        values = np.zeros(VECTOR_SIZE)

        for family, offset in FAMILY_OFFSETS.items():
            for i, axis in enumerate(DIMENSION_FAMILIES[family]):
                values[offset + i] = profile.get(family, axis)

        for i, value in enumerate(self._lifestyle(profile)):
            values[LIFESTYLE_OFFSET + i] = value
        for i, value in enumerate(self._readiness(profile)):
            values[READINESS_OFFSET + i] = value

        for tag in profile.interests:
            if tag in INTEREST_TAGS:
                values[INTERESTS_OFFSET + INTEREST_TAGS.index(tag)] = 1.0

        return PersonalityVector(
            values=values,
            confidence=profile.overall_confidence(),
            user_id=profile.user_id
        )

    def encode_many(self, profiles: List[UserProfile]) -> np.ndarray:
        """Encode several profiles into an (N, 256) matrix."""
        if not profiles:
            return np.zeros((0, VECTOR_SIZE))
        return np.vstack([self.encode(p).values for p in profiles])

    @staticmethod
    def _lifestyle(profile: UserProfile) -> List[float]:
        """social level, activity level, routine preference, ambition level."""
        return [
            profile.get("big_five", "extraversion"),
            profile.get("values", "adventure"),
            (profile.get("big_five", "conscientiousness") + profile.get("values", "security")) / 2,
            profile.get("values", "career"),
        ]

    @staticmethod
    def _readiness(profile: UserProfile) -> List[float]:
        """commitment, emotional availability, communication skills, self-awareness."""
        return [
            (profile.get("attachment", "secure") + profile.get("values", "family")) / 2,
            (profile.get("emotional_intelligence", "empathy")
             + profile.get("communication", "emotional_expression")) / 2,
            (profile.get("communication", "active_listening")
             + profile.get("emotional_intelligence", "social_skills")) / 2,
            profile.get("emotional_intelligence", "self_awareness"),
        ]
