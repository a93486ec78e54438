"""
Dimension families and extraction result types.

The six families and their axis names are fixed; every later stage
(accumulation, vector encoding, compatibility) relies on this layout.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List

DIMENSION_FAMILIES: Dict[str, List[str]] = {
    "big_five": ["openness", "conscientiousness", "extraversion",
                 "agreeableness", "neuroticism"],
    "mbti_axes": ["extraversion", "sensing", "thinking", "judging"],
    "attachment": ["secure", "anxious", "avoidant", "disorganized"],
    "communication": ["directness", "emotional_expression", "active_listening",
                      "conflict_style", "response_time"],
    "emotional_intelligence": ["self_awareness", "empathy",
                               "emotional_regulation", "social_skills"],
    "values": ["family", "career", "adventure", "security", "creativity",
               "helping", "independence", "spirituality"],
}

INTEREST_TAGS: List[str] = [
    "travel", "music", "art", "sports", "technology", "reading",
    "cooking", "fitness", "nature", "photography", "dancing", "gaming",
]


@dataclass
class FamilySignal:
    """
    Scores for one dimension family extracted from a single utterance.

    Attributes:
        scores: Axis name to score in [0, 1]
        confidence: Confidence in [0, 1]
        hits: Evidence mass (keyword hits plus usable context cues)
    """
    scores: Dict[str, float]
    confidence: float
    hits: int = 0

    @property
    def has_signal(self) -> bool:
        """Whether any evidence backed this family."""
        return self.hits > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scores": dict(self.scores),
            "confidence": float(self.confidence),
            "hits": int(self.hits)
        }


@dataclass
class ExtractionResult:
    """
    Per-utterance personality signal.

    Attributes:
        families: Family name to FamilySignal (always all six families)
        interests: Interest tags mentioned in the utterance
        word_count: Number of words in the utterance
        fusion: Metadata of the emotional-intelligence source fusion, if any
    """
    families: Dict[str, FamilySignal]
    interests: List[str] = field(default_factory=list)
    word_count: int = 0
    fusion: Dict[str, Any] = field(default_factory=dict)

    def scores(self, family: str) -> Dict[str, float]:
        """Axis scores for a family (empty if unknown)."""
        signal = self.families.get(family)
        return dict(signal.scores) if signal else {}

    def confidence(self, family: str) -> float:
        signal = self.families.get(family)
        return signal.confidence if signal else 0.0

    @property
    def has_signal(self) -> bool:
        return any(s.has_signal for s in self.families.values()) or bool(self.interests)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "families": {name: s.to_dict() for name, s in self.families.items()},
            "interests": list(self.interests),
            "word_count": int(self.word_count),
            "fusion": dict(self.fusion)
        }
