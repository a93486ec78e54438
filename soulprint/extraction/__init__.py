"""Signal extraction module: utterance text to per-family scores."""

from .schema import DIMENSION_FAMILIES, INTEREST_TAGS, FamilySignal, ExtractionResult
from .extractor import (
    SignalExtractor,
    ExtractionConfig,
    load_lexicon,
    count_keyword_hits,
    response_time_score,
    create_extractor_from_config
)

__all__ = [
    "DIMENSION_FAMILIES",
    "INTEREST_TAGS",
    "FamilySignal",
    "ExtractionResult",
    "SignalExtractor",
    "ExtractionConfig",
    "load_lexicon",
    "count_keyword_hits",
    "response_time_score",
    "create_extractor_from_config"
]
