"""
Integration tests against a real Redis server.

Start one with ``docker-compose -f kvs_redis/docker/docker-compose.redis.yml up -d``;
the tests are skipped when nothing listens on KVS_REDIS_HOST:KVS_REDIS_PORT.
"""

import socket

import pytest
import pytest_asyncio

from kvs_redis.config import settings
from kvs_redis.store import Store

from .utilities.support import assert_within, random_string


def redis_available() -> bool:
    try:
        with socket.create_connection((settings.REDIS_HOST, settings.REDIS_PORT), timeout=1):
            return True
    except OSError:
        return False


pytestmark = pytest.mark.skipif(not redis_available(), reason="Redis server not reachable")


@pytest_asyncio.fixture
async def real_store():
    store = await Store.create()
    try:
        yield store
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_load_and_ttl_round_trip(real_store):
    bucket = real_store.create_bucket(f"it-{random_string()}", ttl=50, load=lambda name: {"name": name})
    try:
        assert await bucket.get("widget", "real") == {"name": "real"}
        assert await bucket.get("widget") == {"name": "real"}
        assert_within(await real_store.factory.client.ttl(bucket.fullkey("widget")), 50, 2)
    finally:
        await bucket.clear()


@pytest.mark.asyncio
async def test_clear_only_touches_own_bucket(real_store):
    mine = real_store.create_bucket(f"it-{random_string()}")
    other = real_store.create_bucket(f"it-{random_string()}")
    try:
        for i in range(3):
            await mine.set(str(i), i)
        await other.set("keep", True)
        assert await mine.clear() == 3
        assert await other.has("keep") == 1
    finally:
        await other.clear()
