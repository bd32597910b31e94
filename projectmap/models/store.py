"""Key/value persistence for project records and the cached feed.

Two backends share the ``RecordStore`` interface:

- ``RedisRecordStore`` for deployments (``redis.asyncio``; listings use SCAN)
- ``MemoryRecordStore`` for tests and local development

Writes replace whole values. Nothing spans keys: the cached feed is always
rebuilt from the records, never patched.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..exceptions import StorageError

logger = logging.getLogger(__name__)

PROJECT_KEY_PREFIX = "project:"
FEED_CACHE_KEY = "__geojson__"

# Upper bound on keys returned by one listing call
MAX_PAGE_SIZE = 1000


def project_key(project_id: str) -> str:
    return f"{PROJECT_KEY_PREFIX}{project_id}"


@dataclass
class KeyPage:
    """One page of a prefix listing; ``cursor`` is None once the listing is exhausted."""
    keys: List[str] = field(default_factory=list)
    cursor: Optional[str] = None


class RecordStore(ABC):
    """Abstract key/value store."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value verbatim, or None when absent."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Replace the value stored under ``key``."""

    @abstractmethod
    async def list_keys(self, prefix: str, cursor: Optional[str] = None,
                        limit: Optional[int] = None) -> KeyPage:
        """Return one page of keys starting with ``prefix``."""

    async def close(self) -> None:
        pass


async def iter_keys(store: RecordStore, prefix: str, limit: Optional[int] = None) -> AsyncIterator[str]:
    """Yield every key under ``prefix``, following the cursor page by page."""
    cursor: Optional[str] = None
    while True:
        page = await store.list_keys(prefix, cursor=cursor, limit=limit)
        for key in page.keys:
            yield key
        cursor = page.cursor
        if cursor is None:
            break


class RedisRecordStore(RecordStore):
    """Redis-backed record store."""

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None) -> None:
        """Initialize the store; the connection is opened lazily on first command."""
        self.redis_url = redis_url
        self.redis = client or redis.from_url(self.redis_url, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            logger.error(f"Failed to read key {key}: {e}")
            raise StorageError(f"Failed to read {key}") from e

    async def put(self, key: str, value: str) -> None:
        try:
            await self.redis.set(key, value)
        except RedisError as e:
            logger.error(f"Failed to write key {key}: {e}")
            raise StorageError(f"Failed to write {key}") from e

    async def list_keys(self, prefix: str, cursor: Optional[str] = None,
                        limit: Optional[int] = None) -> KeyPage:
        count = min(limit or MAX_PAGE_SIZE, MAX_PAGE_SIZE)
        try:
            next_cursor, keys = await self.redis.scan(
                cursor=int(cursor or 0),
                match=f"{prefix}*",
                count=count,
            )
        except RedisError as e:
            logger.error(f"Failed to list keys under {prefix}: {e}")
            raise StorageError(f"Failed to list {prefix}") from e

        # SCAN signals completion with cursor 0
        return KeyPage(
            keys=list(keys),
            cursor=str(next_cursor) if int(next_cursor) != 0 else None,
        )

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self.redis.aclose()


class MemoryRecordStore(RecordStore):
    """In-process store with the same paging contract as Redis."""

    def __init__(self, page_size: int = MAX_PAGE_SIZE) -> None:
        self.page_size = page_size
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def list_keys(self, prefix: str, cursor: Optional[str] = None,
                        limit: Optional[int] = None) -> KeyPage:
        count = min(limit or self.page_size, self.page_size)
        matching = sorted(k for k in self._data if k.startswith(prefix))
        start = int(cursor or 0)
        end = start + count
        return KeyPage(
            keys=matching[start:end],
            cursor=str(end) if end < len(matching) else None,
        )


def create_store(backend: str, redis_url: str = "redis://localhost:6379") -> RecordStore:
    """Build the configured store backend."""
    if backend == "memory":
        logger.info("Using in-memory record store")
        return MemoryRecordStore()
    logger.info(f"Using Redis record store at {redis_url}")
    return RedisRecordStore(redis_url)
