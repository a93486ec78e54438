"""
Profile persistence.

Stores hold opaque profile records keyed by user id. Two backends are
provided: an in-process dictionary and a directory of JSON files (one per
user, written atomically through a temporary sibling and os.replace).

Storage failures surface as ProfileStoreError; callers decide whether to
retry or carry on with in-memory state.
"""

import copy
import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Any, List, Optional
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)


class ProfileStoreError(Exception):
    """Raised when a profile record cannot be read, written or deleted."""


class ProfileStore(ABC):
    """Key-value storage for profile records."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the record for key, or None if absent."""

    @abstractmethod
    def set(self, key: str, record: Dict[str, Any]) -> None:
        """Create or replace the record for key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the record for key; missing keys are ignored."""

    @abstractmethod
    def keys(self) -> List[str]:
        """All stored keys."""


class InMemoryProfileStore(ProfileStore):
    """Thread-safe dictionary store. Records are copied on the way in and out."""

    def __init__(self):
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._records.get(key)
            return copy.deepcopy(record) if record is not None else None

    def set(self, key: str, record: Dict[str, Any]) -> None:
        with self._lock:
            self._records[key] = copy.deepcopy(record)

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._records)


class JsonFileProfileStore(ProfileStore):
    """
    One JSON file per user under a directory.

    Attributes:
        directory: Directory holding the record files
    """

    SUFFIX = ".json"

    def __init__(self, directory: str):
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProfileStoreError(f"Cannot create profile directory {directory}: {e}") from e
        logger.info(f"Using JSON profile store at {self.directory}")

    def _path(self, key: str) -> Path:
        return self.directory / (quote(key, safe="") + self.SUFFIX)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise ProfileStoreError(f"Failed to read profile {key!r} from {path}: {e}") from e

    def set(self, key: str, record: Dict[str, Any]) -> None:
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            tmp.unlink(missing_ok=True)
            raise ProfileStoreError(f"Failed to write profile {key!r} to {path}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise ProfileStoreError(f"Failed to delete profile {key!r}: {e}") from e

    def keys(self) -> List[str]:
        return sorted(
            unquote(p.name[:-len(self.SUFFIX)])
            for p in self.directory.glob(f"*{self.SUFFIX}")
        )


def create_store_from_config(config: Dict[str, Any]) -> ProfileStore:
    """
    Factory function to create a ProfileStore from config.

    Args:
        config: Main configuration dictionary

    Returns:
        InMemoryProfileStore or JsonFileProfileStore
    """
    section = config.get("persistence", {})
    backend = section.get("backend", "memory")

    if backend == "memory":
        return InMemoryProfileStore()
    if backend == "json":
        return JsonFileProfileStore(section.get("path", "profiles"))
    raise ValueError(f"Unknown persistence backend: {backend}")
