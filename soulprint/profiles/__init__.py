"""Profile module: schema, accumulation and persistence."""

from .schema import UserProfile, utc_now
from .accumulator import (
    ProfileAccumulator,
    AccumulatorConfig,
    Insight,
    normalize_attachment,
    create_accumulator_from_config
)
from .store import (
    ProfileStore,
    ProfileStoreError,
    InMemoryProfileStore,
    JsonFileProfileStore,
    create_store_from_config
)

__all__ = [
    "UserProfile",
    "utc_now",
    "ProfileAccumulator",
    "AccumulatorConfig",
    "Insight",
    "normalize_attachment",
    "create_accumulator_from_config",
    "ProfileStore",
    "ProfileStoreError",
    "InMemoryProfileStore",
    "JsonFileProfileStore",
    "create_store_from_config"
]
