"""
Abstract base class for storage backends.

Separating storage from the limiter allows:
- Testing with the in-memory backend (no Redis needed)
- Running locally without external dependencies

Each method is one atomic unit from the perspective of the key it touches.
TTLs follow Redis conventions: milliseconds, ``-2`` for a missing key and
``-1`` for a key without expiry.
"""

from abc import ABC, abstractmethod

TTL_MISSING = -2
TTL_PERSISTENT = -1


class StorageBackend(ABC):
    """
    Abstract base class for fixed-window counter storage.

    Available implementations:
    - InMemoryBackend: For testing and development (single process)
    - RedisBackend: For production (distributed)
    """

    @abstractmethod
    async def incr_window(
        self,
        key: str,
        amount: int,
        ttl_ms: int,
    ) -> tuple[int, int]:
        """
        Atomically initialize, increment and inspect a counter.

        Equivalent to ``SET key 0 PX ttl_ms NX``, ``INCRBY key amount`` and
        ``PTTL key`` with no other writer interleaved.

        Args:
            key: The counter key.
            amount: Increment, applied with the store's integer arithmetic.
            ttl_ms: Expiry attached only if the key is created.

        Returns:
            ``(new_value, ttl_ms)`` as observed inside the atomic unit.
        """
        pass

    @abstractmethod
    async def get_with_ttl(self, key: str) -> tuple[str | bytes | None, int]:
        """
        Atomically read a key's raw value and remaining TTL.

        Returns:
            ``(raw_value, ttl_ms)``; ``raw_value`` is None if the key is absent.
        """
        pass

    @abstractmethod
    async def pexpire(self, key: str, ttl_ms: int) -> bool:
        """
        Set the expiry of an existing key.

        Returns:
            True if the key existed and the expiry was set.
        """
        pass
