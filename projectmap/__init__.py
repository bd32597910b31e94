"""projectmap - webhook-fed project map publishing.

This package provides:

- projectmap.ingest: Webhook verification, normalization and persistence
- projectmap.feed: The cached GeoJSON feed and its regeneration
- projectmap.models: Records, feed models and the key/value store
- projectmap.common: HMAC, privacy jitter and logging utilities
"""

__version__ = "1.0.0"

from . import common
from . import models
from . import ingest
from . import feed

__all__ = [
    "common",
    "models",
    "ingest",
    "feed",
]
