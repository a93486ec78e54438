"""
Service facade tying extraction, accumulation, encoding and scoring together.

The service is constructed explicitly with a ProfileStore and a config
dictionary; there are no module-level instances. Every profile update is
written through to the store before the call returns, and updates for the
same user are serialized with a per-user lock while different users
proceed in parallel.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional

from .compatibility import CompatibilityEngine, CompatibilityResult, create_engine_from_config
from .encoding import PersonalityVector, VectorEncoder, compress, describe, match_type, triage_similarity
from .evaluation import ProfileStats, summarize_profiles
from .extraction import ExtractionResult, SignalExtractor, create_extractor_from_config
from .prediction import (
    PersonalityFactors,
    ProgressionData,
    SuccessPrediction,
    SuccessPredictor,
    create_predictor_from_config
)
from .profiles import (
    Insight,
    ProfileAccumulator,
    ProfileStore,
    UserProfile,
    create_accumulator_from_config,
    create_store_from_config
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    """Result of folding one message into a user's profile."""
    profile: UserProfile
    extraction: ExtractionResult
    insights: List[Insight] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.to_record(),
            "extraction": self.extraction.to_dict(),
            "insights": [i.to_dict() for i in self.insights]
        }


class PersonalityService:
    """
    Entry point for message analysis, compatibility and success prediction.

    Attributes:
        store: Persistence backend for profile records
        extractor: SignalExtractor
        accumulator: ProfileAccumulator
        encoder: VectorEncoder
        engine: CompatibilityEngine
        predictor: SuccessPredictor
    """

    def __init__(
        self,
        store: ProfileStore,
        config: Optional[Dict[str, Any]] = None,
        extractor: Optional[SignalExtractor] = None,
        accumulator: Optional[ProfileAccumulator] = None,
        engine: Optional[CompatibilityEngine] = None,
        predictor: Optional[SuccessPredictor] = None
    ):
        config = config or {}
        self.store = store
        self.extractor = extractor or create_extractor_from_config(config)
        self.accumulator = accumulator or create_accumulator_from_config(config)
        self.encoder = VectorEncoder()
        self.engine = engine or create_engine_from_config(config)
        self.predictor = predictor or create_predictor_from_config(config)

        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """
        Load a profile from the store.

        Raises:
            ProfileStoreError: If the store cannot be read
        """
        record = self.store.get(user_id)
        if record is None:
            return None
        return UserProfile.from_record(record, user_id=user_id)

    def delete_profile(self, user_id: str) -> None:
        with self._user_lock(user_id):
            self.store.delete(user_id)
        logger.info(f"Deleted profile {user_id}")

    def analyze_message(
        self,
        user_id: str,
        text: Optional[str],
        context: Optional[Dict[str, Any]] = None
    ) -> AnalysisOutcome:
        """
        Extract signals from a message and fold them into the user's profile.

        Args:
            user_id: User who wrote the message
            text: Message text
            context: Optional metadata ("response_latency_ms", "interaction_type")

        Returns:
            AnalysisOutcome with the persisted profile

        Raises:
            ProfileStoreError: If the profile cannot be loaded or saved
        """
        extraction = self.extractor.extract(text, context)

        with self._user_lock(user_id):
            profile = self.get_profile(user_id) or UserProfile(user_id=user_id)
            updated = self.accumulator.update(profile, extraction)
            self.store.set(user_id, updated.to_record())

        logger.info(
            f"Analyzed message for {user_id}: messages={updated.message_count}, "
            f"confidence={updated.overall_confidence():.3f}"
        )
        return AnalysisOutcome(
            profile=updated,
            extraction=extraction,
            insights=self.accumulator.generate_insights(updated)
        )

    def get_vector(self, user_id: str) -> Optional[PersonalityVector]:
        profile = self.get_profile(user_id)
        return self.encoder.encode(profile) if profile is not None else None

    def get_hex_code(self, user_id: str) -> Optional[str]:
        """The user's "#HHMMSS" code, or None without a profile."""
        vector = self.get_vector(user_id)
        return compress(vector) if vector is not None else None

    def calculate_compatibility(self, user_a: str, user_b: str) -> CompatibilityResult:
        """
        Score two users.

        A user without a stored profile yields a neutral, low-confidence result.

        Raises:
            ProfileStoreError: If a profile cannot be loaded
        """
        result = self.engine.score(self.get_vector(user_a), self.get_vector(user_b))
        logger.info(
            f"Compatibility {user_a} / {user_b}: {result.overall:.3f} "
            f"(confidence {result.confidence:.2f})"
        )
        return result

    def generate_success_prediction(
        self,
        user_a: str,
        user_b: str,
        progression: Optional[ProgressionData] = None,
        now: Optional[datetime] = None
    ) -> SuccessPrediction:
        """
        Predict relationship success for two users.

        Args:
            user_a: First user
            user_b: Second user
            progression: Relationship progression data, if tracked
            now: Reference time for elapsed-time calculations

        Returns:
            SuccessPrediction

        Raises:
            ProfileStoreError: If a profile cannot be loaded
        """
        profile_a = self.get_profile(user_a)
        profile_b = self.get_profile(user_b)

        vector_a = self.encoder.encode(profile_a) if profile_a is not None else None
        vector_b = self.encoder.encode(profile_b) if profile_b is not None else None
        compatibility = self.engine.score(vector_a, vector_b)

        personality = None
        if profile_a is not None and profile_b is not None:
            personality = PersonalityFactors(profile_a, profile_b)

        return self.predictor.predict(compatibility, progression, personality, now=now)

    def rank_candidates(
        self,
        user_id: str,
        candidate_ids: Optional[List[str]] = None,
        min_triage: float = 0.0,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Rank candidates for a user.

        Candidates are first filtered by the similarity of their codes, and
        only the survivors are scored by the compatibility engine.

        Args:
            user_id: User to find candidates for
            candidate_ids: Candidates to consider (defaults to every stored user)
            min_triage: Minimum code similarity to be scored
            limit: Maximum number of results

        Returns:
            List of dictionaries sorted by overall compatibility, best first
        """
        vector = self.get_vector(user_id)
        if vector is None:
            logger.warning(f"No profile for {user_id}; nothing to rank")
            return []

        code = compress(vector)
        if candidate_ids is None:
            candidate_ids = self.store.keys()

        ranked = []
        for candidate in candidate_ids:
            if candidate == user_id:
                continue
            other = self.get_vector(candidate)
            if other is None:
                continue
            other_code = compress(other)
            triage = triage_similarity(code, other_code)
            if triage < min_triage:
                continue
            result = self.engine.score(vector, other)
            ranked.append({
                "user_id": candidate,
                "code": other_code,
                "archetype": describe(other_code)["archetype"],
                "triage_similarity": triage,
                "match_type": match_type(triage),
                "compatibility": result,
            })

        ranked.sort(key=lambda r: r["compatibility"].overall, reverse=True)
        logger.info(f"Ranked {len(ranked)} of {len(candidate_ids)} candidates for {user_id}")
        return ranked[:limit] if limit is not None else ranked

    def get_stats(self) -> ProfileStats:
        """Profile count, total messages and average confidence over the store."""
        profiles = [p for p in (self.get_profile(k) for k in self.store.keys()) if p is not None]
        return summarize_profiles(profiles)


def create_service_from_config(config: Dict[str, Any]) -> PersonalityService:
    """
    Factory function to create a PersonalityService from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured PersonalityService backed by the configured store
    """
    return PersonalityService(create_store_from_config(config), config)
