"""
Lexical signal extraction.

Turns one utterance (plus optional interaction metadata) into scores for the
six dimension families. Scoring is deliberately shallow: keyword hits from a
packaged YAML lexicon, a few structural cues, and the reply latency.

Scoring rules:
    unipolar axis:  min(1, hits * weight + bonus_hits * bonus_weight
                          - penalty_hits * penalty_weight + extras)
    bipolar axis:   clamp(0.5 + 0.5 * scale * (positive_hits - negative_hits))
    confidence:     min(cap, base + per_hit * family_hits)

A family with no evidence reports every axis as 0 and the base confidence.
Each emoji counts as one unit of communication evidence.
Attachment scores are renormalized to sum to 1 whenever any is non-zero.

The emotional-intelligence family is fused from two sources: the lexical
scores and a context source derived from interaction type and latency.
"""

import functools
import logging
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

import numpy as np
import yaml

from ..fusion import SignalFusion, SignalSource, FusionConfig
from .schema import DIMENSION_FAMILIES, INTEREST_TAGS, FamilySignal, ExtractionResult

logger = logging.getLogger(__name__)

DEFAULT_LEXICON_PATH = Path(__file__).parent / "lexicon.yaml"

EMOJI_PATTERN = re.compile("[\U0001F300-\U0001FAFF\u2600-\u27BF]")

# Latency upper bounds (ms) and the response-time score they map to
RESPONSE_TIME_BANDS: List[Tuple[float, float]] = [
    (5_000, 0.9),
    (15_000, 0.7),
    (60_000, 0.5),
    (300_000, 0.3),
]
SLOW_RESPONSE_SCORE = 0.1

# Emotional-intelligence priors suggested by the kind of interaction
INTERACTION_CUES: Dict[str, Dict[str, float]] = {
    "support": {"empathy": 0.7, "social_skills": 0.6},
    "deep_conversation": {"self_awareness": 0.7, "empathy": 0.6},
    "conflict": {"emotional_regulation": 0.4, "empathy": 0.4},
    "casual": {"social_skills": 0.6},
    "distance": {"social_skills": 0.3},
}

# Attachment adjustments for interaction types
ATTACHMENT_CONTEXT_BOOST: Dict[str, Dict[str, float]] = {
    "conflict": {"anxious": 0.1, "disorganized": 0.1},
    "distance": {"avoidant": 0.1},
}


@dataclass
class ExtractionConfig:
    """
    Configuration for signal extraction.

    Attributes:
        single_message_confidence_cap: Upper bound on any family's confidence
        base_confidence: Confidence of a family with no evidence
        confidence_per_hit: Confidence added per unit of evidence
        long_message_words: Word count above which openness gets a bonus
    """
    single_message_confidence_cap: float = 0.8
    base_confidence: float = 0.1
    confidence_per_hit: float = 0.15
    long_message_words: int = 30

    def validate(self) -> None:
        """Validate configuration values."""
        if not 0 < self.single_message_confidence_cap <= 1:
            raise ValueError(
                f"single_message_confidence_cap must be in (0, 1], "
                f"got {self.single_message_confidence_cap}"
            )
        if not 0 <= self.base_confidence <= self.single_message_confidence_cap:
            raise ValueError(f"base_confidence out of range: {self.base_confidence}")
        if self.confidence_per_hit < 0:
            raise ValueError(f"confidence_per_hit must be non-negative, got {self.confidence_per_hit}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ExtractionConfig":
        """Create from main config dictionary."""
        section = config.get("extraction", {})
        defaults = cls()
        return cls(
            single_message_confidence_cap=section.get(
                "single_message_confidence_cap", defaults.single_message_confidence_cap
            ),
            base_confidence=section.get("base_confidence", defaults.base_confidence),
            confidence_per_hit=section.get("confidence_per_hit", defaults.confidence_per_hit),
            long_message_words=section.get("long_message_words", defaults.long_message_words)
        )


def load_lexicon(filepath: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the keyword lexicon.

    Args:
        filepath: Path to a lexicon YAML file (defaults to the packaged one)

    Returns:
        Lexicon dictionary with "families" and "interests" sections
    """
    path = Path(filepath) if filepath else DEFAULT_LEXICON_PATH
    with open(path, "r") as f:
        lexicon = yaml.safe_load(f)

    missing = [family for family in DIMENSION_FAMILIES
               if family not in lexicon.get("families", {})]
    if missing:
        raise ValueError(f"Lexicon {path} is missing families: {missing}")

    logger.debug(f"Loaded lexicon from {path}")
    return lexicon


@functools.lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> "re.Pattern":
    return re.compile(r"\b" + re.escape(keyword.lower()))


def count_keyword_hits(text: str, keywords: List[str]) -> int:
    """
    Count keyword occurrences in lower-cased text.

    Each keyword matches at the start of a word, so "meet" counts
    "meeting" but not "helmet".

    Args:
        text: Lower-cased utterance
        keywords: Keywords to look for

    Returns:
        Total number of matches across all keywords
    """
    return sum(len(_keyword_pattern(kw).findall(text)) for kw in keywords)


def response_time_score(latency_ms: float) -> float:
    """Map a reply latency in milliseconds to a response-time score."""
    for upper, score in RESPONSE_TIME_BANDS:
        if latency_ms < upper:
            return score
    return SLOW_RESPONSE_SCORE


class SignalExtractor:
    """
    Extracts per-family personality signals from single utterances.

    Attributes:
        config: ExtractionConfig with confidence parameters
        lexicon: Keyword lexicon
        fusion: SignalFusion used for the emotional-intelligence family
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        lexicon: Optional[Dict[str, Any]] = None,
        fusion: Optional[SignalFusion] = None
    ):
        self.config = config or ExtractionConfig()
        self.config.validate()
        self.lexicon = lexicon or load_lexicon()
        self.fusion = fusion or SignalFusion(FusionConfig())

    def extract(self, text: Optional[str], context: Optional[Dict[str, Any]] = None) -> ExtractionResult:
        """
        Extract personality signals from an utterance.

        Args:
            text: Utterance text (None and "" are treated as empty)
            context: Optional metadata with "response_latency_ms" and
                "interaction_type"

        Returns:
            ExtractionResult covering all six families
        """
        text = "" if text is None else str(text)
        context = context if isinstance(context, dict) else {}
        lowered = text.lower()
        word_count = len(text.split())

        families = {}
        for family in ["big_five", "mbti_axes", "values"]:
            scores, hits = self._score_family(family, lowered)
            families[family] = self._finish(family, scores, hits)

        families["big_five"] = self._apply_structure_cues(families["big_five"], text, word_count)
        families["attachment"] = self._extract_attachment(lowered, context)
        families["communication"] = self._extract_communication(text, lowered, context)

        ei_signal, fusion_meta = self._extract_emotional_intelligence(lowered, context)
        families["emotional_intelligence"] = ei_signal

        interests = [
            tag for tag in INTEREST_TAGS
            if count_keyword_hits(lowered, self.lexicon.get("interests", {}).get(tag, [])) > 0
        ]

        result = ExtractionResult(
            families=families,
            interests=interests,
            word_count=word_count,
            fusion=fusion_meta
        )
        logger.debug(
            f"Extracted {sum(s.hits for s in families.values())} hits "
            f"from {word_count} words"
        )
        return result

    def _score_family(self, family: str, lowered: str) -> Tuple[Dict[str, float], int]:
        """Score every lexicon axis of a family; returns (scores, evidence hits)."""
        family_lexicon = self.lexicon["families"][family]
        scores = {}
        total_hits = 0

        for axis in DIMENSION_FAMILIES[family]:
            entry = family_lexicon.get(axis)
            if entry is None:
                continue

            if "positive" in entry:
                pos = count_keyword_hits(lowered, entry["positive"])
                neg = count_keyword_hits(lowered, entry.get("negative", []))
                scale = entry.get("scale", 0.5)
                scores[axis] = 0.5 + 0.5 * scale * (pos - neg)
                total_hits += pos + neg
            else:
                hits = count_keyword_hits(lowered, entry.get("keywords", []))
                score = hits * entry.get("weight", 0.1)
                if "bonus" in entry:
                    bonus = count_keyword_hits(lowered, entry["bonus"]["keywords"])
                    score += bonus * entry["bonus"]["weight"]
                    hits += bonus
                if "penalty" in entry:
                    penalty = count_keyword_hits(lowered, entry["penalty"]["keywords"])
                    score -= penalty * entry["penalty"]["weight"]
                    hits += penalty
                scores[axis] = score
                total_hits += hits

        return scores, total_hits

    def _finish(self, family: str, scores: Dict[str, float], hits: int,
                confidence_floor: float = 0.0) -> FamilySignal:
        """Clamp scores and attach confidence; zero out families without evidence."""
        cfg = self.config
        if hits <= 0:
            return FamilySignal(
                scores={axis: 0.0 for axis in DIMENSION_FAMILIES[family]},
                confidence=cfg.base_confidence,
                hits=0
            )

        clamped = {
            axis: float(np.clip(scores.get(axis, 0.0), 0.0, 1.0))
            for axis in DIMENSION_FAMILIES[family]
        }
        confidence = min(
            cfg.single_message_confidence_cap,
            max(cfg.base_confidence + cfg.confidence_per_hit * hits, confidence_floor)
        )
        return FamilySignal(scores=clamped, confidence=confidence, hits=hits)

    def _apply_structure_cues(self, signal: FamilySignal, text: str, word_count: int) -> FamilySignal:
        """Long messages read as open, exclamations and questions as outgoing."""
        if not signal.has_signal:
            return signal

        scores = dict(signal.scores)
        if word_count > self.config.long_message_words:
            scores["openness"] = min(1.0, scores["openness"] + 0.2)
        punctuation = text.count("!") + text.count("?")
        scores["extraversion"] = min(1.0, scores["extraversion"] + min(0.3, 0.1 * punctuation))
        return FamilySignal(scores=scores, confidence=signal.confidence, hits=signal.hits)

    def _extract_attachment(self, lowered: str, context: Dict[str, Any]) -> FamilySignal:
        scores, hits = self._score_family("attachment", lowered)

        boost = ATTACHMENT_CONTEXT_BOOST.get(context.get("interaction_type"))
        if boost and hits > 0:
            for axis, amount in boost.items():
                scores[axis] = scores.get(axis, 0.0) + amount

        signal = self._finish("attachment", scores, hits)
        total = sum(signal.scores.values())
        if total > 0:
            signal.scores = {axis: value / total for axis, value in signal.scores.items()}
        return signal

    def _extract_communication(self, text: str, lowered: str, context: Dict[str, Any]) -> FamilySignal:
        scores, hits = self._score_family("communication", lowered)

        emoji = len(EMOJI_PATTERN.findall(text))
        scores["emotional_expression"] = scores.get("emotional_expression", 0.0) + 0.1 * emoji
        hits += emoji

        latency = context.get("response_latency_ms")
        if isinstance(latency, (int, float)) and latency >= 0:
            scores["response_time"] = response_time_score(latency)
            hits += 1
        else:
            scores["response_time"] = 0.5

        return self._finish("communication", scores, hits)

    def _extract_emotional_intelligence(
        self,
        lowered: str,
        context: Dict[str, Any]
    ) -> Tuple[FamilySignal, Dict[str, Any]]:
        """Fuse lexical EI scores with context cues when both are available."""
        lexical_scores, lexical_hits = self._score_family("emotional_intelligence", lowered)

        cue_scores = dict(INTERACTION_CUES.get(context.get("interaction_type"), {}))
        latency = context.get("response_latency_ms")
        if isinstance(latency, (int, float)) and latency >= 0:
            # Measured replies read as regulated; instant bursts as reactive
            cue_scores["emotional_regulation"] = 0.4 if latency < 5_000 else 0.7

        sources = []
        if lexical_hits > 0:
            lexical = self._finish("emotional_intelligence", lexical_scores, lexical_hits)
            sources.append(SignalSource("lexical", lexical.scores, lexical.confidence))
        if cue_scores:
            context_confidence = 0.4 + (0.1 if "emotional_regulation" in cue_scores else 0.0)
            sources.append(SignalSource("context", cue_scores, context_confidence))

        if not sources:
            return self._finish("emotional_intelligence", {}, 0), {}

        fused = self.fusion.fuse(sources)
        scores = {
            axis: fused.scores.get(axis, 0.5)
            for axis in DIMENSION_FAMILIES["emotional_intelligence"]
        }
        hits = lexical_hits + (1 if cue_scores else 0)

        signal = self._finish("emotional_intelligence", scores, hits, confidence_floor=fused.confidence)
        return signal, fused.to_dict()


def create_extractor_from_config(config: Dict[str, Any]) -> SignalExtractor:
    """
    Factory function to create a SignalExtractor from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured SignalExtractor instance
    """
    return SignalExtractor(
        config=ExtractionConfig.from_config(config),
        fusion=SignalFusion(FusionConfig.from_config(config))
    )
