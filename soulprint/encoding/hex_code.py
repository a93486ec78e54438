"""
Compact three-channel personality codes.

A personality vector is projected onto three scalars and written as an
uppercase "#HHMMSS" code:

    HH  hue         circular position among 8 archetypes (0-360 degrees)
    MM  manifested  outward expression, 0-255
    SS  soul        inner orientation, 0-255

The hue is the circular mean of the archetype angles weighted by each
archetype's signal, so the dominant archetype pulls the hue towards itself.
The code is lossy with respect to the full vector; only the three channels
round-trip:

    expand(compress(v)) == project(v)

Codes are meant for display and for cheap pre-filtering of candidates
(triage_similarity); full scoring always goes through the compatibility
engine.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Any, List, Tuple

import numpy as np

from .vector import PersonalityVector, slot

logger = logging.getLogger(__name__)

HEX_PATTERN = re.compile(r"^#([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})$")


@dataclass(frozen=True)
class Archetype:
    """Named position on the hue circle and the vector slots that signal it."""
    angle: float
    title: str
    traits: Tuple[str, str]
    signals: Tuple[Tuple[str, str], ...]


ARCHETYPES: List[Archetype] = [
    Archetype(0, "The Analyst", ("Cognitive", "Intellectual"),
              (("mbti_axes", "thinking"), ("big_five", "conscientiousness"))),
    Archetype(45, "The Innovator", ("Inventive", "Analytical"),
              (("big_five", "openness"), ("values", "independence"))),
    Archetype(90, "The Creator", ("Action", "Creative"),
              (("values", "creativity"), ("big_five", "extraversion"))),
    Archetype(135, "The Harmonizer", ("Empathetic", "Collaborative"),
              (("big_five", "agreeableness"), ("emotional_intelligence", "empathy"))),
    Archetype(180, "The Connector", ("Relational", "Emotional"),
              (("communication", "emotional_expression"), ("values", "family"))),
    Archetype(225, "The Alchemist", ("Insightful", "Transformative"),
              (("emotional_intelligence", "self_awareness"),
               ("emotional_intelligence", "emotional_regulation"))),
    Archetype(270, "The Seeker", ("Purpose", "Growth"),
              (("values", "adventure"), ("values", "career"))),
    Archetype(315, "The Mystic", ("Contemplative", "Visionary"),
              (("values", "spirituality"), ("big_five", "openness"))),
]

MANIFESTED_SLOTS = [
    ("big_five", "extraversion"),
    ("big_five", "conscientiousness"),
    ("emotional_intelligence", "social_skills"),
    ("communication", "directness"),
    ("communication", "emotional_expression"),
]

SOUL_SLOTS = [
    ("emotional_intelligence", "self_awareness"),
    ("emotional_intelligence", "empathy"),
    ("values", "spirituality"),
    ("values", "helping"),
    ("attachment", "secure"),
]

# Lower bounds of triage similarity for each match type, best first
MATCH_TYPES: List[Tuple[float, str]] = [
    (0.9, "soulmate"),
    (0.8, "high_compatibility"),
    (0.7, "good_match"),
    (0.6, "complementary"),
    (0.5, "growth_oriented"),
    (0.4, "exploratory"),
]


@dataclass(frozen=True)
class HexDimensions:
    """The three scalars carried by a code."""
    hue: float
    manifested: int
    soul: int

    def to_dict(self) -> Dict[str, Any]:
        return {"hue": float(self.hue), "manifested": int(self.manifested), "soul": int(self.soul)}


def circular_distance(hue_a: float, hue_b: float) -> float:
    """Shortest angular distance between two hues, in [0, 180]."""
    d = abs(hue_a - hue_b) % 360
    return min(d, 360 - d)


def hue_to_channel(hue: float) -> int:
    return int(round((hue % 360) / 360 * 255))


def channel_to_hue(channel: int) -> float:
    return channel / 255 * 360


def _mean_slots(vector: PersonalityVector, slots: List[Tuple[str, str]]) -> float:
    return float(np.mean([vector[slot(family, axis)] for family, axis in slots]))


def archetype_signals(vector: PersonalityVector) -> List[float]:
    """Signal strength of each archetype, in ARCHETYPES order."""
    return [_mean_slots(vector, list(a.signals)) for a in ARCHETYPES]


def vector_hue(vector: PersonalityVector) -> float:
    """
    Hue of a vector as the signal-weighted circular mean of archetype angles.

    Falls back to the dominant archetype when the weighted angles cancel out,
    and to 0 for a vector with no archetype signal at all.
    """
    signals = archetype_signals(vector)
    x = sum(s * math.cos(math.radians(a.angle)) for s, a in zip(signals, ARCHETYPES))
    y = sum(s * math.sin(math.radians(a.angle)) for s, a in zip(signals, ARCHETYPES))

    if math.hypot(x, y) < 1e-9:
        if max(signals) <= 0:
            return 0.0
        return float(ARCHETYPES[int(np.argmax(signals))].angle)

    return math.degrees(math.atan2(y, x)) % 360


def _channels(vector: PersonalityVector) -> Tuple[int, int, int]:
    hue = hue_to_channel(vector_hue(vector))
    manifested = int(round(np.clip(_mean_slots(vector, MANIFESTED_SLOTS), 0, 1) * 255))
    soul = int(round(np.clip(_mean_slots(vector, SOUL_SLOTS), 0, 1) * 255))
    return hue, manifested, soul


def project(vector: PersonalityVector) -> HexDimensions:
    """
    The quantized three-channel projection a code is built from.

    Args:
        vector: Personality vector

    Returns:
        HexDimensions (hue snapped to the 8-bit channel grid)
    """
    hue, manifested, soul = _channels(vector)
    return HexDimensions(hue=channel_to_hue(hue), manifested=manifested, soul=soul)


def compress(vector: PersonalityVector) -> str:
    """
    Encode a vector as an uppercase "#HHMMSS" code.

    Args:
        vector: Personality vector

    Returns:
        Hex code string
    """
    hue, manifested, soul = _channels(vector)
    return f"#{hue:02X}{manifested:02X}{soul:02X}"


def expand(code: str) -> HexDimensions:
    """
    Decode a "#HHMMSS" code back to its three scalars.

    Args:
        code: Hex code (case-insensitive)

    Returns:
        HexDimensions

    Raises:
        ValueError: If the code is not of the form #HHMMSS
    """
    match = HEX_PATTERN.match(code or "")
    if not match:
        raise ValueError(f"Invalid personality code: {code!r}")
    h, m, s = (int(group, 16) for group in match.groups())
    return HexDimensions(hue=channel_to_hue(h), manifested=m, soul=s)


def archetype_for_hue(hue: float) -> Archetype:
    """Archetype closest to a hue on the circle."""
    return min(ARCHETYPES, key=lambda a: circular_distance(hue, a.angle))


def triage_similarity(code_a: str, code_b: str) -> float:
    """
    Cheap similarity of two codes for candidate pre-filtering.

    similarity = 1 - (0.4 * hue_distance / 180
                      + 0.3 * |manifested_a - manifested_b| / 255
                      + 0.3 * |soul_a - soul_b| / 255)

    Args:
        code_a: First code
        code_b: Second code

    Returns:
        Similarity in [0, 1]
    """
    a = expand(code_a)
    b = expand(code_b)
    distance = (
        0.4 * circular_distance(a.hue, b.hue) / 180
        + 0.3 * abs(a.manifested - b.manifested) / 255
        + 0.3 * abs(a.soul - b.soul) / 255
    )
    return float(np.clip(1.0 - distance, 0.0, 1.0))


def match_type(similarity: float) -> str:
    """Label a triage similarity."""
    for threshold, label in MATCH_TYPES:
        if similarity >= threshold:
            return label
    return "incompatible"


def describe(code: str) -> Dict[str, Any]:
    """
    Readable breakdown of a code for presentation.

    Args:
        code: Hex code

    Returns:
        Dictionary with the channels and the nearest archetype
    """
    dims = expand(code)
    archetype = archetype_for_hue(dims.hue)
    return {
        "code": code.upper(),
        **dims.to_dict(),
        "archetype": archetype.title,
        "traits": list(archetype.traits),
    }
