"""Rebuild the published feed from every stored project record.

Concurrent regenerations are allowed. Each one reads a full listing and
writes a full replacement, so the most recently *completed* run wins; a run
that started earlier can briefly overwrite a fresher feed until the next
regeneration. The feed is eventually consistent with the records.
"""

import logging
from typing import Dict, Iterable, Optional

from pydantic import ValidationError

from ..models import PROJECT_KEY_PREFIX, Feature, ProjectFeed, ProjectRecord, RecordStore, iter_keys
from .cache import FeedCache

logger = logging.getLogger(__name__)


def build_feed(records: Iterable[ProjectRecord]) -> ProjectFeed:
    """Keep published, geolocated records, sorted by id for stable output."""
    mappable = sorted((r for r in records if r.is_mappable), key=lambda r: r.id)
    return ProjectFeed(features=[Feature.from_record(r) for r in mappable])


def parse_record(raw: str) -> Optional[ProjectRecord]:
    try:
        return ProjectRecord.model_validate_json(raw)
    except ValidationError:
        return None


class FeedRegenerator:
    """Scans ``project:*`` keys and replaces the cached feed."""

    def __init__(self, store: RecordStore, cache: Optional[FeedCache] = None,
                 page_size: Optional[int] = None) -> None:
        self.store = store
        self.cache = cache or FeedCache(store)
        self.page_size = page_size

    async def load_records(self) -> Dict[str, ProjectRecord]:
        records: Dict[str, ProjectRecord] = {}
        skipped = 0

        async for key in iter_keys(self.store, PROJECT_KEY_PREFIX, limit=self.page_size):
            # SCAN may return a key more than once
            if key in records:
                continue
            raw = await self.store.get(key)
            if raw is None:
                continue
            record = parse_record(raw)
            if record is None:
                logger.warning(f"Skipping unparsable record at {key}")
                skipped += 1
                continue
            records[key] = record

        if skipped:
            logger.warning(f"Skipped {skipped} corrupt record(s) during regeneration")
        return records

    async def regenerate(self) -> None:
        records = await self.load_records()
        feed = build_feed(records.values())
        await self.cache.replace(feed)
        logger.info(f"Regenerated feed: {len(feed.features)} of {len(records)} records published")


async def regenerate_in_background(regenerator: FeedRegenerator) -> None:
    """Fire-and-forget wrapper: failures are logged, never raised to the request."""
    try:
        await regenerator.regenerate()
    except Exception as e:
        logger.error(f"Background feed regeneration failed: {e}", exc_info=True)
