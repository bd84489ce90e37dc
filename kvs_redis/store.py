"""
Store and bucket layer on top of an adapter factory.

A bucket namespaces its keys (``<bucket>:<key>``), carries per-bucket
options such as the TTL, and can load missing values through a ``load``
callable. Concurrent misses for the same key share one load.
"""

import asyncio
import inspect
import logging
import re
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from kvs_redis.adapter import Adapter, AdapterFactory
from kvs_redis.redis_adapter import initialize

logger = logging.getLogger(__name__)

Loader = Callable[..., Any | Awaitable[Any]]

GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so ``text`` matches literally."""
    return GLOB_SPECIAL.sub(r"\\\1", text)


class Bucket:
    def __init__(self, name: str, adapter: Adapter, load: Loader | None = None):
        self.name = name
        self.adapter = adapter
        self.load = load
        self._inflight: dict[str, asyncio.Future] = {}

    def fullkey(self, key: str) -> str:
        return f"{self.name}:{key}"

    async def get(self, key: str, *args) -> Any:
        """
        Get a value, loading it on a miss.

        Args:
            key: Bucket-relative key
            *args: Passed to the bucket's ``load`` callable on a miss
        Returns:
            The stored or loaded value, or None
        """
        value = await self.adapter.get(self.fullkey(key))
        if value is not None or self.load is None:
            return value

        pending = self._inflight.get(key)
        if pending is not None:
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled():
                    raise
            return await self.get(key, *args)

        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await self._load(*args)
            if value is not None:
                await self.adapter.set(self.fullkey(key), value)
        except Exception as e:
            logger.error(f"Load failed for key {self.fullkey(key)}: {str(e)}")
            future.set_exception(e)
            # Mark retrieved so a load nobody else waited on is not reported
            future.exception()
            raise
        else:
            future.set_result(value)
            return value
        finally:
            # Loader cancelled: release the waiters so they retry
            if not future.done():
                future.cancel()
            self._inflight.pop(key, None)

    async def _load(self, *args) -> Any:
        result = self.load(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def set(self, key: str, value: Any) -> Any:
        return await self.adapter.set(self.fullkey(key), value)

    async def getset(self, key: str, value: Any) -> Any:
        return await self.adapter.getset(self.fullkey(key), value)

    async def getdel(self, key: str) -> Any:
        return await self.adapter.getdel(self.fullkey(key))

    async def has(self, key: str) -> int:
        return await self.adapter.has(self.fullkey(key))

    async def delete(self, key: str) -> int:
        return await self.adapter.delete(self.fullkey(key))

    def _glob(self, pattern: str) -> str:
        return f"{escape_glob(self.name)}:{pattern or '*'}"

    async def keys(self, pattern: str = "*") -> list[str]:
        prefix = self.fullkey("")
        found = await self.adapter.keys(self._glob(pattern))
        return [k[len(prefix):] for k in found]

    async def clear(self, pattern: str = "*") -> int:
        return await self.adapter.clear(self._glob(pattern))

    async def close(self) -> None:
        await self.adapter.close()


class Store:
    def __init__(self, factory: AdapterFactory):
        self.factory = factory

    @classmethod
    async def create(
        cls,
        initializer: Callable[..., Awaitable[AdapterFactory]] = initialize,
        settings: Any = None,
        **overrides,
    ) -> "Store":
        factory = await initializer(settings, **overrides)
        return cls(factory)

    def create_bucket(
        self,
        name: str | None = None,
        *,
        ttl: int | None = None,
        type: str | None = None,
        load: Loader | None = None,
    ) -> Bucket:
        name = name or uuid.uuid4().hex
        adapter = self.factory.create({"ttl": ttl, "type": type})
        return Bucket(name, adapter, load)

    async def close(self) -> None:
        await self.factory.close()
