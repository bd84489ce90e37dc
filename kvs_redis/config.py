"""
Redis connection settings.

Values are read from the environment (prefix ``KVS_``) or a ``.env`` file
and act as defaults for :func:`kvs_redis.redis_adapter.initialize`.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 6379


class RedisConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="KVS_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    REDIS_HOST: str = DEFAULT_HOST
    REDIS_PORT: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    REDIS_DB: int = Field(default=0, ge=0)
    # Takes precedence over host/port when set
    REDIS_URL: str | None = None
    REDIS_USERNAME: str | None = None
    REDIS_PASSWORD: str | None = None
    REDIS_SSL: bool = False

    REDIS_SOCKET_TIMEOUT: float = 10.0
    REDIS_SOCKET_CONNECT_TIMEOUT: float = 5.0
    REDIS_MAX_CONNECTIONS: int = 50

    # Circuit breaker
    REDIS_FAILURE_THRESHOLD: int = 5
    REDIS_RECOVERY_TIMEOUT: int = 30

    def connection_kwargs(self) -> dict:
        """Keyword arguments shared by every client this package builds."""
        kwargs = {
            "username": self.REDIS_USERNAME,
            "password": self.REDIS_PASSWORD,
            "socket_timeout": self.REDIS_SOCKET_TIMEOUT,
            "socket_connect_timeout": self.REDIS_SOCKET_CONNECT_TIMEOUT,
            "max_connections": self.REDIS_MAX_CONNECTIONS,
        }
        if self.REDIS_SSL:
            kwargs["ssl"] = True
        return kwargs


settings = RedisConfig()
