"""
Shared pytest fixtures for the Redis adapter tests
"""

import fakeredis
import pytest
import pytest_asyncio
from circuitbreaker import STATE_CLOSED, CircuitBreakerMonitor

from kvs_redis.redis_adapter import initialize
from kvs_redis.store import Store


@pytest.fixture(autouse=True)
def reset_breaker():
    """
    ! The command breaker is process-wide; close it around every test
    """
    breaker = CircuitBreakerMonitor.get("kvs_redis")

    def close():
        breaker._state = STATE_CLOSED
        breaker._failure_count = 0

    close()
    yield breaker
    close()


@pytest.fixture
def fake_server():
    """
    ! Fresh in-memory server per test for isolation
    """
    return fakeredis.FakeServer()


@pytest_asyncio.fixture
async def redis_client(fake_server):
    """
    * Async fake Redis client, same shape as redis.asyncio.Redis
    * decode_responses=True like a typical application client
    """
    client = fakeredis.FakeAsyncRedis(server=fake_server, decode_responses=True)
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture
def sync_redis_client(fake_server):
    """
    * Synchronous fake client returning raw bytes
    """
    client = fakeredis.FakeRedis(server=fake_server)
    yield client
    client.close()


@pytest_asyncio.fixture(params=["async", "sync"])
async def any_redis_client(request, fake_server):
    """Run a test once per supported client flavour."""
    if request.param == "async":
        client = fakeredis.FakeAsyncRedis(server=fake_server, decode_responses=True)
        yield client
        await client.aclose()
    else:
        client = fakeredis.FakeRedis(server=fake_server)
        yield client
        client.close()


@pytest_asyncio.fixture
async def factory(any_redis_client):
    return await initialize(any_redis_client)


@pytest_asyncio.fixture
async def store(redis_client):
    return await Store.create(settings={"client": redis_client})
