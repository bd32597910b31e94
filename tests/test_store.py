"""Tests for the record store backends."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from projectmap.exceptions import StorageError
from projectmap.models import (
    MemoryRecordStore,
    RedisRecordStore,
    create_store,
    iter_keys,
    project_key,
)


async def _collect(store, prefix, limit=None):
    return [key async for key in iter_keys(store, prefix, limit=limit)]


def test_project_key_namespace():
    assert project_key("42") == "project:42"


def test_memory_get_put_replaces_whole_value():
    store = MemoryRecordStore()

    async def run():
        assert await store.get("project:1") is None
        await store.put("project:1", '{"a": 1}')
        await store.put("project:1", '{"b": 2}')
        return await store.get("project:1")

    assert asyncio.run(run()) == '{"b": 2}'


def test_memory_listing_paginates_across_pages():
    store = MemoryRecordStore(page_size=3)

    async def run():
        for i in range(10):
            await store.put(project_key(f"{i:02d}"), "{}")
        await store.put("__geojson__", "{}")
        first = await store.list_keys("project:")
        keys = await _collect(store, "project:")
        return first, keys

    first, keys = asyncio.run(run())
    assert len(first.keys) == 3
    assert first.cursor is not None
    assert keys == [project_key(f"{i:02d}") for i in range(10)]


def test_memory_listing_limit_is_capped_by_page_size():
    store = MemoryRecordStore(page_size=2)

    async def run():
        for i in range(5):
            await store.put(project_key(str(i)), "{}")
        return await store.list_keys("project:", limit=50)

    assert len(asyncio.run(run()).keys) == 2


def test_memory_listing_empty_prefix():
    assert asyncio.run(_collect(MemoryRecordStore(), "project:")) == []


def test_redis_listing_follows_scan_cursor():
    client = AsyncMock()
    client.scan.side_effect = [
        (17, ["project:1", "project:2"]),
        (0, ["project:3"]),
    ]
    store = RedisRecordStore("redis://unused", client=client)

    keys = asyncio.run(_collect(store, "project:", limit=2))

    assert keys == ["project:1", "project:2", "project:3"]
    first_call, second_call = client.scan.call_args_list
    assert first_call.kwargs == {"cursor": 0, "match": "project:*", "count": 2}
    assert second_call.kwargs["cursor"] == 17


def test_redis_get_put_delegate_to_client():
    client = AsyncMock()
    client.get.return_value = '{"id": "1"}'
    store = RedisRecordStore("redis://unused", client=client)

    async def run():
        await store.put("project:1", '{"id": "1"}')
        return await store.get("project:1")

    assert asyncio.run(run()) == '{"id": "1"}'
    client.set.assert_awaited_once_with("project:1", '{"id": "1"}')


@pytest.mark.parametrize("method,args", [
    ("get", ("project:1",)),
    ("put", ("project:1", "{}")),
    ("list_keys", ("project:",)),
])
def test_redis_errors_surface_as_storage_error(method, args):
    client = AsyncMock()
    client.get.side_effect = RedisConnectionError("down")
    client.set.side_effect = RedisConnectionError("down")
    client.scan.side_effect = RedisConnectionError("down")
    store = RedisRecordStore("redis://unused", client=client)

    with pytest.raises(StorageError):
        asyncio.run(getattr(store, method)(*args))


def test_create_store_backends():
    assert isinstance(create_store("memory"), MemoryRecordStore)
    assert isinstance(create_store("redis", "redis://localhost:6379"), RedisRecordStore)
