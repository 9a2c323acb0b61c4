"""
In-memory storage backend for testing and development.

This backend stores counters in Python dictionaries and reproduces the Redis
semantics the limiter relies on: ``SET NX PX``, ``INCRBY``, ``PTTL`` sentinels
and lazy expiry.

WARNING: Not suitable for production!
- No persistence (data lost on restart)
- No distribution (single process only)

Use RedisBackend for production deployments.
"""

import asyncio
import time
from collections.abc import Callable

from redis.exceptions import ResponseError

from ratewindow.core.storage.base import TTL_MISSING, TTL_PERSISTENT, StorageBackend


class InMemoryBackend(StorageBackend):
    """
    In-memory implementation of StorageBackend.

    Every public operation yields to the event loop once, like a network
    round-trip would, and then runs its whole body without awaiting. That
    makes each operation atomic with respect to other coroutines while still
    letting concurrent callers interleave between operations.

    Args:
        clock: Returns the current time in seconds. Inject a fake clock in
            tests to move windows forward without sleeping.

    Example:
        >>> backend = InMemoryBackend()
        >>> await backend.incr_window("ARRL:view-42", 1, ttl_ms=1000)
        (1, 1000)
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

        # key -> stored string value
        self._data: dict[str, str] = {}

        # key -> expiry time in milliseconds on the clock's scale
        self._expiry: dict[str, int] = {}

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _cleanup_if_expired(self, key: str) -> None:
        expires_at = self._expiry.get(key)
        if expires_at is not None and self._now_ms() >= expires_at:
            self._data.pop(key, None)
            self._expiry.pop(key, None)

    def _pttl(self, key: str) -> int:
        if key not in self._data:
            return TTL_MISSING
        expires_at = self._expiry.get(key)
        if expires_at is None:
            return TTL_PERSISTENT
        return max(0, expires_at - self._now_ms())

    # =========================================================================
    # StorageBackend interface
    # =========================================================================

    async def incr_window(self, key: str, amount: int, ttl_ms: int) -> tuple[int, int]:
        await asyncio.sleep(0)
        self._cleanup_if_expired(key)

        if key not in self._data:
            self._data[key] = "0"
            self._expiry[key] = self._now_ms() + ttl_ms

        try:
            current = int(self._data[key])
        except ValueError:
            raise ResponseError("value is not an integer or out of range") from None

        new_value = current + amount
        self._data[key] = str(new_value)
        return new_value, self._pttl(key)

    async def get_with_ttl(self, key: str) -> tuple[str | None, int]:
        await asyncio.sleep(0)
        self._cleanup_if_expired(key)
        return self._data.get(key), self._pttl(key)

    async def pexpire(self, key: str, ttl_ms: int) -> bool:
        await asyncio.sleep(0)
        self._cleanup_if_expired(key)
        if key not in self._data:
            return False
        self._expiry[key] = self._now_ms() + ttl_ms
        return True

    # =========================================================================
    # Utility Methods (not part of interface, useful for testing)
    # =========================================================================

    def set(self, key: str, value: str, ttl_ms: int | None = None) -> None:
        """
        Store a raw value, like ``SET key value [PX ttl_ms]``.

        Without ``ttl_ms`` the key never expires, which lets tests reproduce
        counters left behind without an expiry.
        """
        self._data[key] = value
        if ttl_ms is None:
            self._expiry.pop(key, None)
        else:
            self._expiry[key] = self._now_ms() + ttl_ms

    def clear(self) -> None:
        """Clear all stored data."""
        self._data.clear()
        self._expiry.clear()

    def keys(self) -> list[str]:
        """Get all non-expired keys."""
        for key in list(self._data):
            self._cleanup_if_expired(key)
        return list(self._data)
