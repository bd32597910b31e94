"""Published feed: materialized cache entry and its regeneration."""

from .cache import FeedCache
from .regenerator import FeedRegenerator, build_feed, regenerate_in_background

__all__ = [
    "FeedCache",
    "FeedRegenerator",
    "build_feed",
    "regenerate_in_background",
]
