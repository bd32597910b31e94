"""Shared models for project records, the published feed and storage."""

from .project import (
    DEFAULT_TITLE,
    ProjectRecord,
)

from .feed import (
    Feature,
    FeatureProperties,
    PointGeometry,
    ProjectFeed,
)

from .store import (
    FEED_CACHE_KEY,
    PROJECT_KEY_PREFIX,
    KeyPage,
    MemoryRecordStore,
    RecordStore,
    RedisRecordStore,
    create_store,
    iter_keys,
    project_key,
)

__all__ = [
    # Records
    "DEFAULT_TITLE",
    "ProjectRecord",
    # Feed
    "Feature",
    "FeatureProperties",
    "PointGeometry",
    "ProjectFeed",
    # Storage
    "FEED_CACHE_KEY",
    "PROJECT_KEY_PREFIX",
    "KeyPage",
    "MemoryRecordStore",
    "RecordStore",
    "RedisRecordStore",
    "create_store",
    "iter_keys",
    "project_key",
]
