"""The published feed as a materialized view over the record store.

One derived, read-optimized entry under ``FEED_CACHE_KEY``. It is replaced
wholesale by each regeneration and read verbatim by the feed endpoint.
"""

import logging

from ..models import FEED_CACHE_KEY, ProjectFeed, RecordStore

logger = logging.getLogger(__name__)


class FeedCache:
    """Read/replace access to the cached feed entry."""

    def __init__(self, store: RecordStore, key: str = FEED_CACHE_KEY) -> None:
        self.store = store
        self.key = key

    async def read(self) -> bytes:
        """Cached feed bytes; an empty FeatureCollection before the first regeneration."""
        cached = await self.store.get(self.key)
        if cached is None:
            return ProjectFeed.empty().to_json().encode("utf-8")
        return cached.encode("utf-8")

    async def replace(self, feed: ProjectFeed) -> None:
        await self.store.put(self.key, feed.to_json())
        logger.info(f"Feed cache replaced with {len(feed.features)} features")
