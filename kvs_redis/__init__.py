"""Redis storage adapter for key-value stores and caches."""

from kvs_redis.adapter import Adapter, AdapterFactory
from kvs_redis.client import RedisOptions
from kvs_redis.packer import DEFAULT_PACKER, JsonPacker, Packer
from kvs_redis.redis_adapter import RedisAdapter, RedisFactory, initialize
from kvs_redis.store import Bucket, Store

__all__ = [
    "Adapter",
    "AdapterFactory",
    "Bucket",
    "DEFAULT_PACKER",
    "JsonPacker",
    "Packer",
    "RedisAdapter",
    "RedisFactory",
    "RedisOptions",
    "Store",
    "initialize",
]
