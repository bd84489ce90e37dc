"""
Storage adapter contract.

A store talks to its backend only through these two types: a factory that
owns the connection and hands out adapters, and the adapters themselves
(one per bucket) that carry per-bucket options such as the TTL.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class Adapter(ABC):
    """Async key-value operations against a single backend."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> Any:
        """Store ``value`` under ``key``."""

    @abstractmethod
    async def getset(self, key: str, value: Any) -> Any | None:
        """Store ``value`` and return the previous value."""

    @abstractmethod
    async def getdel(self, key: str) -> Any | None:
        """Remove ``key`` and return the value it held."""

    @abstractmethod
    async def has(self, key: str) -> int:
        """Number of existing keys (0 or 1)."""

    @abstractmethod
    async def delete(self, key: str) -> int:
        """Remove ``key``. Returns the number of keys removed."""

    @abstractmethod
    async def keys(self, pattern: str = "*") -> list[str]:
        """All keys matching a glob-style ``pattern``."""

    @abstractmethod
    async def clear(self, pattern: str = "*") -> int:
        """Remove all keys matching ``pattern``. Returns the number removed."""

    @abstractmethod
    async def close(self) -> None:
        """Release the backend connection."""


class AdapterFactory(ABC):
    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def create(self, options: Mapping[str, Any] | None = None) -> Adapter:
        """Build an adapter configured with bucket ``options``."""

    @abstractmethod
    async def close(self) -> None:
        """Shut down the shared connection."""
