"""Redis connection pool."""

from __future__ import annotations

from typing import Any

import redis

REDIS_HOST = "127.0.0.1"
REDIS_PORT = 6379
PASSWORD = "password"
MAX_CONNECTIONS = 30
HEALTH_CHECK_INTERVAL = 60

_pool: redis.ConnectionPool | None = None
_client: Any = None


def redis_pool() -> redis.ConnectionPool:
    """Return the shared connection pool, creating it on first use."""
    global _pool
    if _pool is None:
        _pool = redis.ConnectionPool(
            host=REDIS_HOST, port=REDIS_PORT, password=PASSWORD,
            max_connections=MAX_CONNECTIONS, health_check_interval=HEALTH_CHECK_INTERVAL,
        )
    return _pool


def redis_client() -> Any:
    """Return the client used for cache commands."""
    global _client
    if _client is None:
        _client = redis.Redis(connection_pool=redis_pool())
    return _client


def set_redis_client(client: Any) -> None:
    """Use ``client`` for cache commands; None restores the pooled client."""
    global _client
    _client = client