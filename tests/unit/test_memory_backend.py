"""Unit tests for InMemoryBackend's Redis-compatible semantics."""

import pytest
from redis.exceptions import ResponseError

from ratewindow.core.storage.base import TTL_MISSING, TTL_PERSISTENT
from ratewindow.core.storage.memory import InMemoryBackend


class TestIncrWindow:

    @pytest.mark.asyncio
    async def test_creates_counter_with_expiry(self, backend: InMemoryBackend) -> None:
        assert await backend.incr_window("k", 1, 500) == (1, 500)

    @pytest.mark.asyncio
    async def test_existing_counter_keeps_expiry(self, backend: InMemoryBackend, clock) -> None:
        await backend.incr_window("k", 1, 500)
        clock.advance_ms(200)

        value, ttl = await backend.incr_window("k", 2, 9999)

        assert value == 3
        assert abs(ttl - 300) <= 1

    @pytest.mark.asyncio
    async def test_negative_amount(self, backend: InMemoryBackend) -> None:
        assert (await backend.incr_window("k", -2, 500))[0] == -2

    @pytest.mark.asyncio
    async def test_non_integer_value(self, backend: InMemoryBackend) -> None:
        backend.set("k", "abc")

        with pytest.raises(ResponseError):
            await backend.incr_window("k", 1, 500)

    @pytest.mark.asyncio
    async def test_expired_counter_starts_over(self, backend: InMemoryBackend, clock) -> None:
        await backend.incr_window("k", 5, 100)
        clock.advance_ms(101)

        assert await backend.incr_window("k", 1, 100) == (1, 100)


class TestGetWithTtl:

    @pytest.mark.asyncio
    async def test_missing(self, backend: InMemoryBackend) -> None:
        assert await backend.get_with_ttl("k") == (None, TTL_MISSING)

    @pytest.mark.asyncio
    async def test_persistent(self, backend: InMemoryBackend) -> None:
        backend.set("k", "3")

        assert await backend.get_with_ttl("k") == ("3", TTL_PERSISTENT)

    @pytest.mark.asyncio
    async def test_expired(self, backend: InMemoryBackend, clock) -> None:
        backend.set("k", "3", ttl_ms=100)
        clock.advance_ms(101)

        assert await backend.get_with_ttl("k") == (None, TTL_MISSING)
        assert backend.keys() == []


class TestPexpire:

    @pytest.mark.asyncio
    async def test_missing_key(self, backend: InMemoryBackend) -> None:
        assert await backend.pexpire("k", 100) is False
        assert backend.keys() == []

    @pytest.mark.asyncio
    async def test_rearms_existing_key(self, backend: InMemoryBackend) -> None:
        backend.set("k", "3")

        assert await backend.pexpire("k", 100) is True
        assert await backend.get_with_ttl("k") == ("3", 100)


def test_clear(backend: InMemoryBackend) -> None:
    backend.set("a", "1")
    backend.set("b", "2", ttl_ms=100)

    backend.clear()

    assert backend.keys() == []
