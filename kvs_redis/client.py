"""
Redis client resolution and command execution.

Sync and asyncio clients are accepted, standalone or cluster.
Commands go through :func:`call`, which awaits the result only when the
client handed back an awaitable and trips a shared circuit breaker when
the server keeps failing.
"""

import logging
from collections.abc import Callable, Mapping
from inspect import isawaitable
from typing import Any

import redis
from circuitbreaker import circuit
from pydantic import BaseModel, ConfigDict, field_validator
from redis.asyncio import Redis, RedisCluster
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from kvs_redis.config import RedisConfig, settings as default_config
from kvs_redis.packer import Packer

logger = logging.getLogger(__name__)

CLUSTER_TYPES = (redis.RedisCluster, RedisCluster)
CLIENT_TYPES = (redis.Redis, Redis) + CLUSTER_TYPES


class RedisOptions(BaseModel):
    """
    Options accepted by ``initialize``.

    Unknown keys are kept and forwarded to the client constructor.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="allow")

    client: Any = None
    host: str | None = None
    port: int | None = None
    database: int | None = None
    db: int | None = None
    url: str | None = None
    packer: Any = None
    client_factory: Callable[..., Any] | None = None

    @field_validator("packer")
    @classmethod
    def _check_packer(cls, v):
        if v is not None and not isinstance(v, Packer):
            raise ValueError("packer must define pack() and unpack()")
        return v

    @classmethod
    def from_settings(cls, settings: "RedisOptions | Mapping | None", **overrides) -> "RedisOptions":
        # RedisOptions iterates as (field, value) pairs, extras included
        data = dict(settings or {})
        data.update(overrides)
        return cls.model_validate(data)

    @property
    def extra_kwargs(self) -> dict:
        return dict(self.model_extra or {})


def is_client(obj: Any) -> bool:
    """Anything that is not an options mapping is taken as a ready client."""
    if isinstance(obj, CLIENT_TYPES):
        return True
    return obj is not None and not isinstance(obj, (Mapping, RedisOptions))


def is_cluster(obj: Any) -> bool:
    return isinstance(obj, CLUSTER_TYPES)


def is_server_failure(thrown_type: type, thrown_value: BaseException) -> bool:
    """
    Only connection and timeout errors count against the breaker.

    DataError and ResponseError are rejections of a single bad command.
    """
    return issubclass(thrown_type, (ConnectionError, TimeoutError))


def decode(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode()
    return value


async def resolve(result: Any) -> Any:
    """Await ``result`` if the client returned a coroutine."""
    if isawaitable(result):
        return await result
    return result


@circuit(
    failure_threshold=default_config.REDIS_FAILURE_THRESHOLD,
    recovery_timeout=default_config.REDIS_RECOVERY_TIMEOUT,
    expected_exception=is_server_failure,
    name="kvs_redis",
)
async def call(command: Callable[..., Any], *args, **kwargs) -> Any:
    """Run a bound client command and return its (awaited) result."""
    try:
        return await resolve(command(*args, **kwargs))
    except RedisError as e:
        name = getattr(command, "__name__", repr(command))
        logger.error(f"Redis {name} failed for {args[:1]}: {str(e)}")
        raise


def create_client(options: RedisOptions, config: RedisConfig | None = None):
    """Build a client from ``options``, filling gaps from ``config``."""
    config = config or default_config
    factory = options.client_factory or Redis
    db = options.database or options.db or config.REDIS_DB
    kwargs = {**config.connection_kwargs(), **options.extra_kwargs}

    url = options.url or config.REDIS_URL
    if url:
        if db:
            kwargs["db"] = db
        logger.debug(f"Creating Redis client from url (db={db})")
        return factory.from_url(url, **kwargs)

    host = options.host or config.REDIS_HOST
    port = options.port or config.REDIS_PORT
    logger.debug(f"Creating Redis client for {host}:{port} (db={db})")
    return factory(host=host, port=port, db=db, **kwargs)


async def ping(client) -> bool:
    """Connectivity check. Failures are logged, never raised."""
    try:
        return bool(await resolve(client.ping()))
    except (RedisError, OSError) as e:
        logger.warning(f"Redis ping failed: {str(e)}")
        return False


async def close_client(client) -> None:
    closer = getattr(client, "aclose", None) or getattr(client, "close", None)
    if closer is None:
        return
    await resolve(closer())
