"""
Redis storage adapter.

Values are packed to strings (JSON by default) and stored with SET/SETEX.
Buckets created with ``type`` set to ``hash``, ``map`` or ``object`` store
flat mappings as Redis hashes instead, without packing.
"""

import logging
from collections.abc import Mapping
from typing import Any

from kvs_redis.adapter import Adapter, AdapterFactory
from kvs_redis.client import (
    RedisOptions,
    call,
    close_client,
    create_client,
    decode,
    is_client,
    is_cluster,
    ping,
)
from kvs_redis.packer import DEFAULT_PACKER, Packer

logger = logging.getLogger(__name__)

HASH_TYPES = ("hash", "map", "object")
HASH_FIELD_TYPES = (str, bytes, int, float)
SCAN_COUNT = 1000


async def initialize(settings: Any = None, **overrides) -> "RedisFactory":
    """
    Build a :class:`RedisFactory`.

    ``settings`` is either a ready Redis client or a mapping / RedisOptions
    (``client``, ``host``, ``port``, ``database``/``db``, ``url``,
    ``packer``, ``client_factory`` plus any client constructor keyword).
    Missing connection values come from :mod:`kvs_redis.config`.
    """
    if is_client(settings):
        client = settings
        options = RedisOptions.from_settings(None, **overrides)
    else:
        options = RedisOptions.from_settings(settings, **overrides)
        client = options.client if options.client is not None else create_client(options)

    packer = options.packer or DEFAULT_PACKER

    if await ping(client):
        logger.info("Redis connection established")
    else:
        logger.warning("Redis not reachable yet, commands will connect on demand")

    return RedisFactory(client, packer)


class RedisFactory(AdapterFactory):
    def __init__(self, client, packer: Packer = DEFAULT_PACKER):
        super().__init__("redis")
        self.client = client
        self.packer = packer

    def create(self, options: Mapping[str, Any] | None = None) -> "RedisAdapter":
        return RedisAdapter(self.client, self.packer, options)

    async def close(self) -> None:
        await close_client(self.client)
        logger.info("Redis connections closed")


class RedisAdapter(Adapter):
    """
    Adapter over a single Redis client shared by every bucket of a store.

    Args:
        client: Sync or asyncio Redis client, standalone or cluster
        packer: Serializer for string values
        options: Bucket options; ``ttl`` (seconds) and ``type``
    """

    def __init__(self, client, packer: Packer = DEFAULT_PACKER, options: Mapping[str, Any] | None = None):
        super().__init__("redis")
        options = options or {}
        self.client = client
        self.packer = packer
        self.ttl: int | None = options.get("ttl")
        self.type: str | None = options.get("type")
        self.is_hash = self.type in HASH_TYPES

    async def get(self, key: str) -> Any | None:
        if self.is_hash:
            result = await call(self.client.hgetall, key)
            if not result:
                return None
            return {decode(k): decode(v) for k, v in result.items()}
        return self.packer.unpack(await call(self.client.get, key))

    async def set(self, key: str, value: Any) -> Any:
        if self.is_hash:
            if not isinstance(value, Mapping) or not value:
                raise ValueError(f"Hash bucket values must be non-empty mappings, got {value!r}")
            for field, item in value.items():
                # bool is an int subclass but the client refuses to encode it
                if isinstance(item, bool) or not isinstance(item, HASH_FIELD_TYPES):
                    raise ValueError(f"Hash field {field!r} must be str, bytes, int or float, got {item!r}")
            result = await call(self.client.hset, key, mapping=dict(value))
            if self.ttl:
                await call(self.client.expire, key, self.ttl)
            return result

        if self.ttl:
            return await call(self.client.setex, key, self.ttl, self.packer.pack(value))
        return await call(self.client.set, key, self.packer.pack(value))

    async def getset(self, key: str, value: Any) -> Any | None:
        if self.is_hash:
            old = await self.get(key)
            await self.set(key, value)
            return old

        result = await call(self.client.getset, key, self.packer.pack(value))
        # GETSET drops any expiry on the key
        if self.ttl:
            await call(self.client.expire, key, self.ttl)
        return self.packer.unpack(result)

    async def getdel(self, key: str) -> Any | None:
        old = await self.get(key)
        await self.delete(key)
        return old

    async def has(self, key: str) -> int:
        return await call(self.client.exists, key)

    async def delete(self, key: str) -> int:
        return await call(self.client.delete, key)

    async def keys(self, pattern: str = "*") -> list[str]:
        """
        Get all keys matching the pattern.

        Uses SCAN rather than KEYS; keys are de-duplicated since SCAN may
        return an entry more than once.
        """
        pattern = pattern or "*"
        found: dict[str, None] = {}
        if is_cluster(self.client):
            # SCAN cursors are per node; scan_iter walks every primary
            batch = self.client.scan_iter(match=pattern, count=SCAN_COUNT)
            if hasattr(batch, "__aiter__"):
                async for k in batch:
                    found[decode(k)] = None
            else:
                for k in batch:
                    found[decode(k)] = None
            return list(found)

        cursor = 0
        while True:
            cursor, batch = await call(self.client.scan, cursor=cursor, match=pattern, count=SCAN_COUNT)
            for k in batch:
                found[decode(k)] = None
            if not cursor:
                break
        return list(found)

    async def clear(self, pattern: str = "*") -> int:
        """
        Delete all keys matching the pattern, one at a time.

        Not atomic: keys written after the listing survive, and a failure
        part way leaves the remaining keys in place.
        """
        keys = await self.keys(pattern or "*")
        if not keys:
            return 0

        count = 0
        for key in keys:
            count += await self.delete(key)
        logger.debug(f"Cleared {count} keys matching {pattern!r}")
        return count

    async def close(self) -> None:
        await close_client(self.client)
