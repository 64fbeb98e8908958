"""Read-through cache for materialized contact message views.

Entries are keyed by message id, live for a fixed TTL and are evicted
explicitly whenever the message or one of its files changes. A populate that
races a concurrent evict may briefly re-cache stale data; that is accepted.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

import redis

from contact_api.core.config import settings
from contact_api.core.redis_client import get_redis_client, redis_available
from contact_api.schemas.contact import ContactMessageRead

logger = logging.getLogger(__name__)

KEY_PREFIX = "contact_message_"


def contact_cache_key(contact_id: int) -> str:
    return f"{KEY_PREFIX}{contact_id}"


class ContactCache(Protocol):
    def get(self, key: str) -> ContactMessageRead | None: ...

    def set(self, key: str, value: ContactMessageRead, ttl_seconds: int) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryContactCache:
    """Process-local TTL cache, bounded to max_size entries."""

    def __init__(self, max_size: int | None = None, clock: Callable[[], float] = time.monotonic):
        self._max_size = max_size or settings.CACHE_MAX_SIZE
        self._clock = clock
        self._entries: dict[str, tuple[float, ContactMessageRead]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> ContactMessageRead | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: ContactMessageRead, ttl_seconds: int) -> None:
        with self._lock:
            self._entries.pop(key, None)
            if len(self._entries) >= self._max_size:
                self._make_room()
            self._entries[key] = (self._clock() + ttl_seconds, value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _make_room(self) -> None:
        now = self._clock()
        for key in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
            del self._entries[key]
        # dicts keep insertion order, so the first key is the oldest write
        while len(self._entries) >= self._max_size:
            del self._entries[next(iter(self._entries))]


class RedisContactCache:
    """
    Shared cache for multi-worker deployments (values stored as JSON).

    Redis failures degrade to a miss (get) or a no-op (set/remove); the
    store stays the source of truth.
    """

    def __init__(self, client):
        self._client = client

    def get(self, key: str) -> ContactMessageRead | None:
        try:
            raw = self._client.get(key)
        except redis.RedisError as e:
            logger.warning("Contact cache get failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        return ContactMessageRead.model_validate_json(raw)

    def set(self, key: str, value: ContactMessageRead, ttl_seconds: int) -> None:
        try:
            self._client.setex(key, ttl_seconds, value.model_dump_json())
        except redis.RedisError as e:
            logger.warning("Contact cache set failed for %s: %s", key, e)

    def remove(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as e:
            logger.warning("Contact cache remove failed for %s: %s", key, e)


def build_contact_cache() -> ContactCache:
    """Redis when configured and reachable, otherwise a process-local cache.

    Called once at application startup; the instance lives on app.state.
    """
    if redis_available():
        logger.info("Contact cache backed by Redis")
        return RedisContactCache(get_redis_client())
    return MemoryContactCache()
