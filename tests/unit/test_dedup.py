import asyncio

import pytest
from fakeredis.aioredis import FakeRedis

from food_backend.payments.dedup import (
    KEY_PREFIX,
    MemoryProcessedStore,
    RedisProcessedStore,
    build_processed_store,
)


def test_memory_store_claims_once():
    store = MemoryProcessedStore(ttl_seconds=60)

    async def scenario():
        return [await store.claim("cs_1"), await store.claim("cs_1"), await store.claim("cs_2")]

    assert asyncio.run(scenario()) == [True, False, True]


def test_memory_store_forgets_after_ttl():
    ticks = iter([100.0, 105.0, 111.0])
    store = MemoryProcessedStore(ttl_seconds=10, clock=lambda: next(ticks))

    async def scenario():
        return [await store.claim("cs_1"), await store.claim("cs_1"), await store.claim("cs_1")]

    assert asyncio.run(scenario()) == [True, False, True]


def test_memory_store_release_allows_new_claim():
    store = MemoryProcessedStore(ttl_seconds=60)

    async def scenario():
        first = await store.claim("cs_1")
        await store.release("cs_1")
        await store.release("cs_inconnu")
        return first, await store.claim("cs_1")

    assert asyncio.run(scenario()) == (True, True)


def test_redis_store_uses_set_nx_with_ttl():
    async def scenario():
        client = FakeRedis(decode_responses=True)
        store = RedisProcessedStore(client, ttl_seconds=120)
        claims = [await store.claim("cs_1"), await store.claim("cs_1")]
        ttl = await client.ttl(f"{KEY_PREFIX}cs_1")
        await store.release("cs_1")
        claims.append(await store.claim("cs_1"))
        return claims, ttl

    claims, ttl = asyncio.run(scenario())
    assert claims == [True, False, True]
    assert 0 < ttl <= 120


def test_build_processed_store_defaults_to_memory():
    assert isinstance(build_processed_store("", 60), MemoryProcessedStore)


@pytest.mark.parametrize("url", ["redis://localhost:6379/0", "rediss://cache.internal:6380/2"])
def test_build_processed_store_with_redis_url(url):
    store = build_processed_store(url, 60)
    assert isinstance(store, RedisProcessedStore)
    assert store.ttl_seconds == 60
