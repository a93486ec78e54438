"""
Relationship success prediction.

Scores seven factor categories from whatever data is available and combines
them with three fixed horizon weightings:

    category               short   medium  long
    compatibility          0.20    0.25    0.30
    relationship_progress  0.25    0.20    0.15
    personality_factors    0.15    0.20    0.25
    behavioral_patterns    0.15    0.15    0.20
    external_factors       0.10    0.15    0.05
    conversation_quality   0.15    0.05    0.00
    growth_potential       0.00    0.00    0.05

A category score is the mean of its sub-factors; sub-factors without data
fall back to documented priors (mostly 0.5). The overall probability is
0.3 * short + 0.4 * medium + 0.3 * long, and the trajectory compares the
three horizons.

Predictions are heuristic; nothing here is calibrated against outcomes.
"""

import logging
import math
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, List, Optional

import numpy as np

from ..compatibility import CompatibilityResult
from .schema import (
    ProgressionData,
    PersonalityFactors,
    FactorScore,
    HorizonPrediction,
    RiskFactor,
    Recommendation,
    SuccessPrediction,
    parse_datetime
)

logger = logging.getLogger(__name__)

CATEGORIES = [
    "compatibility",
    "relationship_progression",
    "personality_factors",
    "behavioral_patterns",
    "external_factors",
    "conversation_quality",
    "growth_potential",
]

HORIZONS: Dict[str, Dict[str, Any]] = {
    "short_term": {
        "timeframe": "1-3 months",
        "weights": {
            "compatibility": 0.20,
            "relationship_progression": 0.25,
            "personality_factors": 0.15,
            "behavioral_patterns": 0.15,
            "external_factors": 0.10,
            "conversation_quality": 0.15,
            "growth_potential": 0.00,
        },
    },
    "medium_term": {
        "timeframe": "3-12 months",
        "weights": {
            "compatibility": 0.25,
            "relationship_progression": 0.20,
            "personality_factors": 0.20,
            "behavioral_patterns": 0.15,
            "external_factors": 0.15,
            "conversation_quality": 0.05,
            "growth_potential": 0.00,
        },
    },
    "long_term": {
        "timeframe": "1+ years",
        "weights": {
            "compatibility": 0.30,
            "relationship_progression": 0.15,
            "personality_factors": 0.25,
            "behavioral_patterns": 0.20,
            "external_factors": 0.05,
            "conversation_quality": 0.00,
            "growth_potential": 0.05,
        },
    },
}

HORIZON_BLEND = {"short_term": 0.3, "medium_term": 0.4, "long_term": 0.3}

# General importance of each category, used to flag critical factors
CATEGORY_IMPORTANCE = {
    "compatibility": 0.25,
    "relationship_progression": 0.20,
    "personality_factors": 0.15,
    "behavioral_patterns": 0.15,
    "external_factors": 0.10,
    "conversation_quality": 0.10,
    "growth_potential": 0.05,
}

# Days spent in each stage at a typical pace
STAGE_PACE = {
    "initial_contact": (0, 7),
    "pre_relationship": (7, 30),
    "early_relationship": (30, 90),
    "developing_relationship": (90, 180),
    "committed_relationship": (180, math.inf),
}

STAGE_SCORES = {
    "initial_contact": 0.1,
    "pre_relationship": 0.3,
    "early_relationship": 0.5,
    "developing_relationship": 0.7,
    "committed_relationship": 0.9,
}

DAILY_MILESTONE_RATE = {
    "initial_contact": 0.1,
    "pre_relationship": 0.05,
    "early_relationship": 0.03,
    "developing_relationship": 0.02,
    "committed_relationship": 0.01,
}

CRITICAL_FACTOR_ADVICE = {
    "compatibility": "Focus on understanding and appreciating differences",
    "relationship_progression": "Invest more time in building connection and shared experiences",
    "personality_factors": "Work on individual growth and emotional regulation",
    "behavioral_patterns": "Develop better conflict resolution and communication skills",
    "external_factors": "Address lifestyle and life stage alignment issues",
    "conversation_quality": "Improve active listening and emotional expression",
    "growth_potential": "Increase openness to feedback and relationship investment",
}

STRENGTH_ADVICE = {
    "compatibility": "Use your natural compatibility to explore deeper connection",
    "relationship_progression": "Continue building on your strong foundation",
    "personality_factors": "Your emotional maturity is a great asset; keep growing",
    "behavioral_patterns": "Your positive patterns support relationship success",
    "external_factors": "Your aligned lifestyle supports relationship stability",
    "conversation_quality": "Your excellent communication creates deep connection",
    "growth_potential": "Your openness to growth strengthens your relationship",
}

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}


@dataclass
class PredictionConfig:
    """
    Priors used when external data is unavailable.

    Attributes:
        default_social_support: Assumed social support of the pair
        default_life_stage_alignment: Assumed life-stage alignment without profiles
    """
    default_social_support: float = 0.6
    default_life_stage_alignment: float = 0.7

    def validate(self) -> None:
        """Validate configuration values."""
        for name, value in asdict(self).items():
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be in [0, 1], got {value}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PredictionConfig":
        """Create from main config dictionary."""
        section = config.get("prediction", {})
        defaults = cls()
        return cls(
            default_social_support=section.get(
                "default_social_support", defaults.default_social_support
            ),
            default_life_stage_alignment=section.get(
                "default_life_stage_alignment", defaults.default_life_stage_alignment
            )
        )


def days_elapsed(start: Optional[datetime], now: datetime) -> float:
    if start is None:
        return 0.0
    return max(0.0, (now - start).total_seconds() / 86400)


def stage_progression_score(stage: Optional[str], elapsed_days: float) -> float:
    """Score how the time spent so far fits the current stage."""
    pace = STAGE_PACE.get(stage)
    if pace is None:
        return 0.5
    low, high = pace
    if elapsed_days < low:
        return 0.3
    if elapsed_days > high:
        return 0.7
    return 0.8


def communication_consistency(daily_messages: Dict[str, int], now: datetime) -> float:
    """Share of the last 30 days with at least one message (0.5 without data)."""
    if not daily_messages:
        return 0.5
    active = 0
    for i in range(30):
        day = (now - timedelta(days=i)).date().isoformat()
        if daily_messages.get(day, 0) > 0:
            active += 1
    return active / 30


class SuccessPredictor:
    """
    Predicts relationship success over three horizons.

    Attributes:
        config: PredictionConfig with data priors
    """

    def __init__(self, config: Optional[PredictionConfig] = None):
        self.config = config or PredictionConfig()
        self.config.validate()

    def predict(
        self,
        compatibility: Optional[CompatibilityResult] = None,
        progression: Optional[ProgressionData] = None,
        personality: Optional[PersonalityFactors] = None,
        now: Optional[datetime] = None
    ) -> SuccessPrediction:
        """
        Generate a success prediction.

        Args:
            compatibility: Compatibility result for the pair (ignored when it is
                an insufficient-data default)
            progression: Relationship progression data, if tracked
            personality: Both profiles, if available
            now: Reference time (defaults to the current UTC time)

        Returns:
            SuccessPrediction
        """
        now = parse_datetime(now) or datetime.now(timezone.utc)
        if compatibility is not None and compatibility.insufficient_data:
            compatibility = None

        categories = {
            "compatibility": self._compatibility_factors(compatibility),
            "relationship_progression": self._progression_factors(progression, now),
            "personality_factors": self._personality_factors(personality),
            "behavioral_patterns": self._behavioral_factors(compatibility, progression),
            "external_factors": self._external_factors(personality),
            "conversation_quality": self._conversation_factors(progression),
            "growth_potential": self._growth_factors(personality),
        }

        has_conversation = progression is not None and progression.conversation is not None
        # Neither profile available: prediction rests on priors alone
        insufficient = compatibility is None and personality is None
        avg_factor_confidence = float(np.mean([c.confidence for c in categories.values()]))

        horizon_confidence = 0.3
        if compatibility is not None:
            horizon_confidence += 0.2
        if progression is not None:
            horizon_confidence += 0.2
        if has_conversation:
            horizon_confidence += 0.1
        horizon_confidence = min(0.9, horizon_confidence + avg_factor_confidence * 0.2)
        if insufficient:
            horizon_confidence = min(0.3, horizon_confidence)

        horizons = {
            name: self._predict_horizon(name, horizon, categories, horizon_confidence)
            for name, horizon in HORIZONS.items()
        }

        short = horizons["short_term"].probability
        medium = horizons["medium_term"].probability
        long = horizons["long_term"].probability
        overall = sum(HORIZON_BLEND[name] * h.probability for name, h in horizons.items())

        if long > medium > short:
            trajectory = "improving"
        elif short > medium > long:
            trajectory = "declining"
        else:
            trajectory = "stable"

        confidence = 0.3
        if compatibility is not None:
            confidence += 0.2
        if progression is not None:
            confidence += 0.2
        if personality is not None:
            confidence += 0.15
        if has_conversation:
            confidence += 0.1
        confidence = min(0.9, confidence + avg_factor_confidence * 0.05)
        if insufficient:
            confidence = min(0.3, confidence)

        risks = self._identify_risks(categories, compatibility, progression, personality)
        prediction = SuccessPrediction(
            horizons=horizons,
            overall_probability=float(overall),
            confidence=float(confidence),
            trajectory=trajectory,
            category_scores=categories,
            risk_factors=risks,
            critical_factors=self._critical_factors(categories),
            recommendations=self._recommendations(categories, risks),
            insights=self._insights(categories, compatibility, progression, personality),
            data_quality=self._data_quality(compatibility, progression, personality, now)
        )
        logger.debug(
            f"Predicted success {prediction.overall_probability:.3f} "
            f"({trajectory}, confidence {confidence:.2f})"
        )
        return prediction

    def _predict_horizon(
        self,
        name: str,
        horizon: Dict[str, Any],
        categories: Dict[str, FactorScore],
        confidence: float
    ) -> HorizonPrediction:
        weights = {k: w for k, w in horizon["weights"].items() if w > 0}
        total_weight = sum(weights.values())
        probability = sum(categories[k].score * w for k, w in weights.items()) / total_weight

        strengths = []
        challenges = []
        key_factors = []
        for category, weight in weights.items():
            score = categories[category].score
            if score > 0.7:
                strengths.append({"factor": category, "score": score})
            elif score < 0.4:
                challenges.append({"factor": category, "score": score})
            key_factors.append({
                "name": category,
                "score": score,
                "weight": weight,
                "impact": score * weight,
            })
        key_factors.sort(key=lambda f: f["impact"], reverse=True)

        return HorizonPrediction(
            horizon=name,
            timeframe=horizon["timeframe"],
            probability=float(probability),
            confidence=float(confidence),
            strengths=strengths,
            challenges=challenges,
            key_factors=key_factors[:3]
        )

    def _compatibility_factors(self, compatibility: Optional[CompatibilityResult]) -> FactorScore:
        if compatibility is None:
            return FactorScore("compatibility", {
                "overall_compatibility": 0.5,
                "communication_compatibility": 0.5,
                "attachment_compatibility": 0.5,
                "values_compatibility": 0.5,
            }, confidence=0.3)

        return FactorScore("compatibility", {
            "overall_compatibility": compatibility.overall,
            "communication_compatibility": compatibility.block("communication"),
            "attachment_compatibility": compatibility.block("attachment"),
            "values_compatibility": compatibility.block("values"),
        }, confidence=max(0.3, compatibility.confidence))

    def _progression_factors(self, progression: Optional[ProgressionData], now: datetime) -> FactorScore:
        if progression is None:
            return FactorScore("relationship_progression", {
                "milestone_achievement_rate": 0.5,
                "relationship_stage_progression": 0.5,
                "communication_consistency": 0.5,
            }, confidence=0.3)

        elapsed = days_elapsed(progression.start_date, now)
        rate = DAILY_MILESTONE_RATE.get(progression.relationship_stage, 0.02)
        expected = math.ceil(elapsed * rate)
        achieved = progression.milestones_achieved
        milestone_rate = min(1.0, achieved / max(1, expected)) if achieved > 0 else 0.3

        return FactorScore("relationship_progression", {
            "milestone_achievement_rate": milestone_rate,
            "relationship_stage_progression": stage_progression_score(
                progression.relationship_stage, elapsed
            ),
            "communication_consistency": communication_consistency(progression.daily_messages, now),
        }, confidence=min(0.8, 0.4 + milestone_rate * 0.4))

    def _personality_factors(self, personality: Optional[PersonalityFactors]) -> FactorScore:
        if personality is None:
            return FactorScore("personality_factors", {
                "emotional_stability": 0.5,
                "attachment_security": 0.5,
                "communication_skills": 0.5,
                "openness_to_growth": 0.5,
            }, confidence=0.3)

        stability = 1.0 - personality.mean("big_five", "neuroticism", 0.5)
        return FactorScore("personality_factors", {
            "emotional_stability": stability,
            "attachment_security": personality.mean("attachment", "secure", 0.25),
            "communication_skills": personality.mean("communication", "active_listening", 0.5),
            "openness_to_growth": personality.mean("big_five", "openness", 0.5),
        }, confidence=min(0.8, 0.4 + stability * 0.4))

    def _behavioral_factors(
        self,
        compatibility: Optional[CompatibilityResult],
        progression: Optional[ProgressionData]
    ) -> FactorScore:
        commitment = 0.5
        if progression is not None:
            stage = STAGE_SCORES.get(progression.relationship_stage, 0.5)
            commitment = min(1.0, progression.milestones_achieved * 0.1 + stage * 0.6)

        if compatibility is None:
            return FactorScore("behavioral_patterns", {
                "conflict_resolution": 0.5,
                "emotional_regulation": 0.5,
                "support_giving": 0.5,
                "commitment_indicators": commitment,
            }, confidence=0.3)

        communication = compatibility.block("communication")
        attachment = compatibility.block("attachment")
        conflict_resolution = communication * 0.6 + attachment * 0.4
        return FactorScore("behavioral_patterns", {
            "conflict_resolution": conflict_resolution,
            "emotional_regulation": compatibility.block("relationship") * 0.7 + attachment * 0.3,
            "support_giving": compatibility.overall * 0.5 + compatibility.block("values") * 0.5,
            "commitment_indicators": commitment,
        }, confidence=min(0.7, 0.3 + conflict_resolution * 0.4))

    def _external_factors(self, personality: Optional[PersonalityFactors]) -> FactorScore:
        cfg = self.config
        if personality is None:
            return FactorScore("external_factors", {
                "life_stage_alignment": cfg.default_life_stage_alignment,
                "social_support": cfg.default_social_support,
                "lifestyle_compatibility": 0.5,
            }, confidence=0.2)

        lifestyle = float(np.mean([
            1.0 - abs(a - b)
            for a, b in (personality.pair("values", v, 0.5)
                         for v in ["adventure", "security", "independence", "family"])
        ]))
        career_a, career_b = personality.pair("values", "career", 0.5)
        family_a, family_b = personality.pair("values", "family", 0.5)
        life_stage = 1.0 - abs((career_a - family_a) - (career_b - family_b))

        return FactorScore("external_factors", {
            "life_stage_alignment": float(np.clip(life_stage, 0.0, 1.0)),
            "social_support": cfg.default_social_support,
            "lifestyle_compatibility": lifestyle,
        }, confidence=min(0.5, 0.2 + lifestyle * 0.3))

    def _conversation_factors(self, progression: Optional[ProgressionData]) -> FactorScore:
        conversation = progression.conversation if progression is not None else None
        if conversation is None:
            return FactorScore("conversation_quality", {
                "engagement_level": 0.5,
                "emotional_depth": 0.5,
                "mutual_understanding": 0.5,
                "conflict_handling": 0.5,
            }, confidence=0.2)

        return FactorScore("conversation_quality", {
            "engagement_level": conversation.engagement_level,
            "emotional_depth": conversation.emotional_depth,
            "mutual_understanding": conversation.mutual_understanding,
            "conflict_handling": conversation.conflict_handling,
        }, confidence=min(0.8, 0.3 + conversation.engagement_level * 0.5))

    def _growth_factors(self, personality: Optional[PersonalityFactors]) -> FactorScore:
        if personality is None:
            return FactorScore("growth_potential", {
                "adaptability": 0.5,
                "learning_from_feedback": 0.5,
                "relationship_investment": 0.5,
            }, confidence=0.3)

        open_a, open_b = personality.pair("big_five", "openness", 0.5)
        agree_a, agree_b = personality.pair("big_five", "agreeableness", 0.5)
        consc_a, consc_b = personality.pair("big_five", "conscientiousness", 0.5)

        return FactorScore("growth_potential", {
            "adaptability": ((open_a + open_b) * 0.6 + (agree_a + agree_b) * 0.4) / 2,
            "learning_from_feedback": ((consc_a + consc_b) * 0.5 + (open_a + open_b) * 0.5) / 2,
            "relationship_investment": (
                personality.mean("values", "family", 0.5) * 0.6
                + personality.mean("attachment", "secure", 0.25) * 0.4
            ),
        }, confidence=0.5)

    def _identify_risks(
        self,
        categories: Dict[str, FactorScore],
        compatibility: Optional[CompatibilityResult],
        progression: Optional[ProgressionData],
        personality: Optional[PersonalityFactors]
    ) -> List[RiskFactor]:
        risks = []

        compat = categories["compatibility"].subfactors
        if compatibility is not None and compat["attachment_compatibility"] < 0.4:
            risks.append(RiskFactor(
                "attachment", "high",
                "Attachment style mismatch may cause relationship instability",
                "Work on creating emotional safety and understanding each other's needs"
            ))
        if compatibility is not None and compat["communication_compatibility"] < 0.4:
            risks.append(RiskFactor(
                "communication", "high",
                "Communication differences may lead to misunderstandings",
                "Develop shared communication styles and active listening skills"
            ))

        progress = categories["relationship_progression"].subfactors
        if progression is not None and progress["milestone_achievement_rate"] < 0.3:
            risks.append(RiskFactor(
                "progression", "medium",
                "Slow relationship progression may indicate lack of commitment",
                "Have open discussions about relationship goals and expectations"
            ))

        stability = categories["personality_factors"].subfactors["emotional_stability"]
        if personality is not None and stability < 0.3:
            risks.append(RiskFactor(
                "emotional_stability", "high",
                "High emotional reactivity may create relationship stress",
                "Focus on emotional regulation and stress management techniques"
            ))

        return risks

    def _critical_factors(self, categories: Dict[str, FactorScore]) -> List[Dict[str, Any]]:
        critical = []
        for name, factor in categories.items():
            score = factor.score
            weight = CATEGORY_IMPORTANCE[name]
            if score < 0.3 and weight > 0.15:
                severity = "high"
            elif score < 0.5 and weight > 0.2:
                severity = "medium"
            else:
                continue
            critical.append({
                "factor": name,
                "score": score,
                "weight": weight,
                "severity": severity,
                "recommendation": CRITICAL_FACTOR_ADVICE[name],
            })
        critical.sort(key=lambda f: f["weight"] * (1 - f["score"]), reverse=True)
        return critical

    def _recommendations(
        self,
        categories: Dict[str, FactorScore],
        risks: List[RiskFactor]
    ) -> List[Recommendation]:
        recommendations = [
            Recommendation(
                risk.category, "high", "risk_mitigation",
                f"Address {risk.category} challenges", risk.mitigation
            )
            for risk in risks if risk.severity == "high"
        ]

        for name, factor in categories.items():
            if factor.score > 0.7:
                recommendations.append(Recommendation(
                    name, "medium", "strength_leverage",
                    f"Build on {name} strengths", STRENGTH_ADVICE[name]
                ))

        recommendations.append(Recommendation(
            "overall", "low", "general_improvement",
            "Continue investing in relationship growth",
            "Regular check-ins, shared experiences, and mutual support"
        ))

        recommendations.sort(key=lambda r: PRIORITY_ORDER[r.priority], reverse=True)
        return recommendations

    def _insights(
        self,
        categories: Dict[str, FactorScore],
        compatibility: Optional[CompatibilityResult],
        progression: Optional[ProgressionData],
        personality: Optional[PersonalityFactors]
    ) -> List[str]:
        insights = []
        if compatibility is not None:
            overall = compatibility.overall
            if overall > 0.8:
                insights.append("Excellent compatibility foundation for long-term success")
            elif overall < 0.4:
                insights.append("Compatibility challenges may require significant work")
        if progression is not None:
            if categories["relationship_progression"].subfactors["milestone_achievement_rate"] > 0.7:
                insights.append("Strong relationship progression indicates healthy development")
        if personality is not None:
            if categories["personality_factors"].subfactors["emotional_stability"] > 0.7:
                insights.append("High emotional stability supports relationship resilience")
        return insights

    def _data_quality(
        self,
        compatibility: Optional[CompatibilityResult],
        progression: Optional[ProgressionData],
        personality: Optional[PersonalityFactors],
        now: datetime
    ) -> Dict[str, float]:
        quality = {
            "personality_data": 0.0,
            "compatibility_data": 0.0,
            "relationship_data": 0.0,
            "conversation_data": 0.0,
        }
        if personality is not None:
            quality["personality_data"] = min(1.0, personality.message_count / 100)
        if compatibility is not None:
            quality["compatibility_data"] = min(1.0, compatibility.overall * 0.8 + 0.2)
        if progression is not None:
            quality["relationship_data"] = min(1.0, days_elapsed(progression.start_date, now) / 30)
            if progression.conversation is not None:
                quality["conversation_data"] = min(1.0, progression.conversation.session_count * 0.1)

        quality["overall"] = (
            quality["personality_data"] * 0.3
            + quality["compatibility_data"] * 0.3
            + quality["relationship_data"] * 0.3
            + quality["conversation_data"] * 0.1
        )
        return quality


def create_predictor_from_config(config: Dict[str, Any]) -> SuccessPredictor:
    """
    Factory function to create a SuccessPredictor from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured SuccessPredictor instance
    """
    return SuccessPredictor(PredictionConfig.from_config(config))
