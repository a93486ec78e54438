"""
Input and output types for relationship success prediction.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Tuple

from ..profiles import UserProfile

RELATIONSHIP_STAGES = [
    "initial_contact",
    "pre_relationship",
    "early_relationship",
    "developing_relationship",
    "committed_relationship",
]


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO string or datetime into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, str):
        # fromisoformat only accepts the Z suffix from Python 3.11
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class ConversationData:
    """Averages gathered from coached conversations between the pair."""
    engagement_level: float = 0.5
    emotional_depth: float = 0.5
    mutual_understanding: float = 0.5
    conflict_handling: float = 0.5
    session_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engagement_level": self.engagement_level,
            "emotional_depth": self.emotional_depth,
            "mutual_understanding": self.mutual_understanding,
            "conflict_handling": self.conflict_handling,
            "session_count": self.session_count
        }


@dataclass
class ProgressionData:
    """
    How far a relationship has progressed.

    Attributes:
        start_date: When the pair started talking
        relationship_stage: One of RELATIONSHIP_STAGES
        milestones_achieved: Number of milestones reached so far
        daily_messages: ISO date ("YYYY-MM-DD") to number of messages that day
        conversation: Optional conversation-quality averages
    """
    start_date: Optional[datetime] = None
    relationship_stage: Optional[str] = None
    milestones_achieved: int = 0
    daily_messages: Dict[str, int] = field(default_factory=dict)
    conversation: Optional[ConversationData] = None

    def __post_init__(self):
        self.start_date = parse_datetime(self.start_date)
        if isinstance(self.conversation, dict):
            self.conversation = ConversationData(**self.conversation)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProgressionData":
        """Create from dictionary."""
        return cls(
            start_date=data.get("start_date"),
            relationship_stage=data.get("relationship_stage"),
            milestones_achieved=int(data.get("milestones_achieved", 0)),
            daily_messages=dict(data.get("daily_messages", {})),
            conversation=data.get("conversation")
        )


@dataclass
class PersonalityFactors:
    """The two profiles a prediction is made for."""
    profile_a: UserProfile
    profile_b: UserProfile

    def pair(self, family: str, axis: str, default: float) -> Tuple[float, float]:
        """Axis values of both profiles, substituting default for unobserved families."""
        return (
            self.profile_a.get(family, axis, default),
            self.profile_b.get(family, axis, default)
        )

    def mean(self, family: str, axis: str, default: float) -> float:
        a, b = self.pair(family, axis, default)
        return (a + b) / 2

    @property
    def message_count(self) -> int:
        return self.profile_a.message_count + self.profile_b.message_count


@dataclass
class FactorScore:
    """One success-factor category and its sub-factors."""
    name: str
    subfactors: Dict[str, float]
    confidence: float

    @property
    def score(self) -> float:
        """Mean of the sub-factors (0.5 when there are none)."""
        if not self.subfactors:
            return 0.5
        return sum(self.subfactors.values()) / len(self.subfactors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": float(self.score),
            "confidence": float(self.confidence),
            "subfactors": {k: float(v) for k, v in self.subfactors.items()}
        }


@dataclass
class HorizonPrediction:
    """Success estimate for one time horizon."""
    horizon: str
    timeframe: str
    probability: float
    confidence: float
    strengths: List[Dict[str, Any]] = field(default_factory=list)
    challenges: List[Dict[str, Any]] = field(default_factory=list)
    key_factors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "horizon": self.horizon,
            "timeframe": self.timeframe,
            "probability": float(self.probability),
            "confidence": float(self.confidence),
            "strengths": self.strengths,
            "challenges": self.challenges,
            "key_factors": self.key_factors
        }


@dataclass
class RiskFactor:
    category: str
    severity: str
    description: str
    mitigation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "severity": self.severity,
            "description": self.description,
            "mitigation": self.mitigation
        }


@dataclass
class Recommendation:
    category: str
    priority: str
    kind: str
    title: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "priority": self.priority,
            "type": self.kind,
            "title": self.title,
            "description": self.description
        }


@dataclass
class SuccessPrediction:
    """
    Multi-horizon relationship success estimate.

    Attributes:
        horizons: "short_term", "medium_term" and "long_term" predictions
        overall_probability: 0.3 * short + 0.4 * medium + 0.3 * long
        confidence: Confidence given the available data
        trajectory: "improving", "declining" or "stable"
        category_scores: Every success-factor category with its sub-factors
        risk_factors: Detected risks, each with a mitigation
        critical_factors: Low-scoring categories that carry significant weight
        recommendations: Ordered by priority, high first
        insights: Short readable observations
        data_quality: Availability of each kind of input data
    """
    horizons: Dict[str, HorizonPrediction]
    overall_probability: float
    confidence: float
    trajectory: str
    category_scores: Dict[str, FactorScore]
    risk_factors: List[RiskFactor] = field(default_factory=list)
    critical_factors: List[Dict[str, Any]] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)
    data_quality: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "horizons": {k: v.to_dict() for k, v in self.horizons.items()},
            "overall_probability": float(self.overall_probability),
            "confidence": float(self.confidence),
            "trajectory": self.trajectory,
            "category_scores": {k: v.to_dict() for k, v in self.category_scores.items()},
            "risk_factors": [r.to_dict() for r in self.risk_factors],
            "critical_factors": self.critical_factors,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "insights": list(self.insights),
            "data_quality": {k: float(v) for k, v in self.data_quality.items()}
        }
