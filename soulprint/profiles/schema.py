"""
User profile schema.

A profile holds the smoothed scores of every dimension family observed for a
user, a per-family confidence, and the interests mentioned so far.

Persisted record layout (field names are the stable storage contract):

    {
        "userId": "...",
        "messageCount": 12,
        "dimensions": {"big_five": {"openness": 0.4, ..., "confidence": 0.3}, ...},
        "interests": ["travel", ...],
        "createdAt": "2026-01-01T00:00:00+00:00",
        "lastUpdated": "2026-01-02T00:00:00+00:00"
    }
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

import numpy as np

from ..extraction import DIMENSION_FAMILIES


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class UserProfile:
    """
    Long-lived personality profile of one user.

    Attributes:
        user_id: Opaque user identifier
        message_count: Number of utterances folded into the profile
        dimensions: Family name to axis name to smoothed score in [0, 1]
        confidence: Family name to confidence in [0, 1]
        interests: Interest tags mentioned so far
        created_at: ISO timestamp of profile creation
        last_updated: ISO timestamp of the last update
    """
    user_id: str
    message_count: int = 0
    dimensions: Dict[str, Dict[str, float]] = field(default_factory=dict)
    confidence: Dict[str, float] = field(default_factory=dict)
    interests: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)
    last_updated: str = field(default_factory=utc_now)

    def get(self, family: str, axis: str, default: float = 0.0) -> float:
        """Score of one axis, or default if the family/axis was never observed."""
        return float(self.dimensions.get(family, {}).get(axis, default))

    def family_confidence(self, family: str) -> float:
        return float(self.confidence.get(family, 0.0))

    def overall_confidence(self) -> float:
        """Mean family confidence, counting unobserved families as 0."""
        return float(np.mean([self.family_confidence(f) for f in DIMENSION_FAMILIES]))

    def copy(self) -> "UserProfile":
        return copy.deepcopy(self)

    def to_record(self) -> Dict[str, Any]:
        """Convert to the persisted record layout."""
        dimensions = {}
        for family, axes in self.dimensions.items():
            entry = {axis: float(value) for axis, value in axes.items()}
            entry["confidence"] = self.family_confidence(family)
            dimensions[family] = entry

        return {
            "userId": self.user_id,
            "messageCount": int(self.message_count),
            "dimensions": dimensions,
            "interests": list(self.interests),
            "createdAt": self.created_at,
            "lastUpdated": self.last_updated
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], user_id: Optional[str] = None) -> "UserProfile":
        """
        Create from a persisted record.

        Args:
            record: Record in the persisted layout
            user_id: Fallback identifier when the record lacks "userId"

        Returns:
            UserProfile instance
        """
        dimensions = {}
        confidence = {}
        for family, entry in record.get("dimensions", {}).items():
            entry = dict(entry)
            confidence[family] = float(entry.pop("confidence", 0.0))
            dimensions[family] = {axis: float(value) for axis, value in entry.items()}

        now = utc_now()
        return cls(
            user_id=record.get("userId", user_id),
            message_count=int(record.get("messageCount", 0)),
            dimensions=dimensions,
            confidence=confidence,
            interests=list(record.get("interests", [])),
            created_at=record.get("createdAt", now),
            last_updated=record.get("lastUpdated", now)
        )
