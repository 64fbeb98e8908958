"""Redis client helpers shared by the rate limiter and the contact cache."""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

REDIS_DISABLED_URL = "memory://"
DEFAULT_REDIS_MAX_CONNECTIONS = 20
DEFAULT_REDIS_CONNECT_TIMEOUT_SECONDS = 2.0
DEFAULT_REDIS_SOCKET_TIMEOUT_SECONDS = 2.0

_client = None


def get_redis_url() -> str | None:
    """Return REDIS_URL, or None when unset or explicitly disabled."""
    url = os.getenv("REDIS_URL")
    if not url or url.strip().lower() == REDIS_DISABLED_URL:
        return None
    return url.strip()


def get_redis_client():
    """Return a pooled client for REDIS_URL, or None when Redis is disabled."""
    url = get_redis_url()
    if not url:
        return None

    global _client
    if _client is None:
        import redis

        pool = redis.ConnectionPool.from_url(
            url,
            max_connections=DEFAULT_REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=DEFAULT_REDIS_CONNECT_TIMEOUT_SECONDS,
            socket_timeout=DEFAULT_REDIS_SOCKET_TIMEOUT_SECONDS,
            retry_on_timeout=True,
        )
        _client = redis.Redis(connection_pool=pool)
    return _client


def redis_available() -> bool:
    """Ping Redis once; any failure means callers fall back to memory."""
    client = get_redis_client()
    if client is None:
        return False
    try:
        client.ping()
    except Exception as e:
        logger.warning("Redis unavailable, using in-memory fallback: %s", e)
        return False
    return True
