"""
Unit tests for RedisBackend.

The Redis client is mocked: these tests check which commands are queued in
each transaction and how replies are decoded.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError

from ratewindow.core.storage.redis import RedisBackend


def make_redis(replies=None):
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=replies)

    redis = MagicMock()
    redis.pipeline.return_value.__aenter__.return_value = pipe
    redis.pipeline.return_value.__aexit__.return_value = False
    return redis, pipe


@pytest.mark.asyncio
async def test_incr_window_runs_one_transaction() -> None:
    redis, pipe = make_redis([True, 1, 250])
    backend = RedisBackend(redis)

    value, ttl = await backend.incr_window("ARRL:view-42", 1, 250)

    assert (value, ttl) == (1, 250)
    redis.pipeline.assert_called_once_with(transaction=True)
    pipe.set.assert_called_once_with("ARRL:view-42", 0, px=250, nx=True)
    pipe.incrby.assert_called_once_with("ARRL:view-42", 1)
    pipe.pttl.assert_called_once_with("ARRL:view-42")
    pipe.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_incr_window_existing_key() -> None:
    # SET NX replies None when the key already exists
    redis, _ = make_redis([None, 4, 120])
    backend = RedisBackend(redis)

    assert await backend.incr_window("ARRL:view-42", 1, 250) == (4, 120)


@pytest.mark.asyncio
async def test_get_with_ttl_runs_one_transaction() -> None:
    redis, pipe = make_redis(["3", 180])
    backend = RedisBackend(redis)

    raw, ttl = await backend.get_with_ttl("ARRL:view-42")

    assert (raw, ttl) == ("3", 180)
    redis.pipeline.assert_called_once_with(transaction=True)
    pipe.get.assert_called_once_with("ARRL:view-42")
    pipe.pttl.assert_called_once_with("ARRL:view-42")


@pytest.mark.asyncio
async def test_get_with_ttl_missing_key() -> None:
    redis, _ = make_redis([None, -2])
    backend = RedisBackend(redis)

    assert await backend.get_with_ttl("ARRL:nothing") == (None, -2)


@pytest.mark.asyncio
async def test_pexpire() -> None:
    redis = MagicMock()
    redis.pexpire = AsyncMock(return_value=1)
    backend = RedisBackend(redis)

    assert await backend.pexpire("ARRL:view-42", 250) is True
    redis.pexpire.assert_awaited_once_with("ARRL:view-42", 250)


@pytest.mark.asyncio
async def test_eval_script_passes_keys_and_args() -> None:
    redis = MagicMock()
    redis.eval = AsyncMock(return_value=[1, 250, 0])
    backend = RedisBackend(redis)

    result = await backend.eval_script("return 1", keys=["ARRL:a"], args=[250, 1])

    assert result == [1, 250, 0]
    redis.eval.assert_awaited_once_with("return 1", 1, "ARRL:a", 250, 1)


@pytest.mark.asyncio
async def test_transaction_failure_propagates() -> None:
    redis, pipe = make_redis()
    pipe.execute.side_effect = ConnectionError("store unreachable")
    backend = RedisBackend(redis)

    with pytest.raises(ConnectionError):
        await backend.incr_window("ARRL:view-42", 1, 250)
