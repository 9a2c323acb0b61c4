from redis.asyncio import Redis

from ratewindow.core.storage.base import StorageBackend


class RedisBackend(StorageBackend):
    """
    Redis implementation of StorageBackend.

    Multi-command units run inside ``MULTI/EXEC`` so no other client's
    command on the same key is interleaved. Errors raised by redis-py are
    left to propagate.
    """

    def __init__(self, redis: Redis):
        self._redis = redis

    async def incr_window(self, key: str, amount: int, ttl_ms: int) -> tuple[int, int]:
        async with self._redis.pipeline(transaction=True) as pipe:
            # NX: only the first caller of a window creates the counter and its expiry
            pipe.set(key, 0, px=ttl_ms, nx=True)
            pipe.incrby(key, amount)
            pipe.pttl(key)
            _, value, ttl = await pipe.execute()
        return int(value), int(ttl)

    async def get_with_ttl(self, key: str) -> tuple[str | bytes | None, int]:
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.get(key)
            pipe.pttl(key)
            value, ttl = await pipe.execute()
        return value, int(ttl)

    async def pexpire(self, key: str, ttl_ms: int) -> bool:
        return bool(await self._redis.pexpire(key, ttl_ms))

    # Helper for atomic Lua execution
    async def eval_script(self, script: str, keys: list[str], args: list[str | int | float]):
        return await self._redis.eval(script, len(keys), *keys, *args)
