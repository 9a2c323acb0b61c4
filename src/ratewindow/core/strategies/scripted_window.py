import structlog

from ratewindow.core.keys import KEY_PREFIX
from ratewindow.core.storage.redis import RedisBackend
from ratewindow.core.strategies.base import IncrementResult, RateLimitSpec
from ratewindow.core.strategies.fixed_window import FixedWindowStrategy

logger = structlog.get_logger()


class ScriptedFixedWindowStrategy(FixedWindowStrategy):
    """
    Fixed window counter evaluated as one Lua script.

    Same contract as FixedWindowStrategy, but the TTL correction runs inside
    the script, so no reader can observe a stale TTL between the increment
    and the re-arm. Status queries are shared with the parent class.
    """

    # LUA SCRIPT LOGIC:
    # 1. If key is missing: create it at 0 with the window as expiry.
    # 2. Increment by the weight.
    # 3. Read the remaining TTL.
    # 4. If TTL is missing or longer than the window: re-arm it.
    _LUA_SCRIPT = """
    local key = KEYS[1]
    local window = tonumber(ARGV[1])
    local weight = ARGV[2]

    redis.call('SET', key, 0, 'PX', window, 'NX')
    local value = redis.call('INCRBY', key, weight)
    local ttl = redis.call('PTTL', key)

    local corrected = 0
    if ttl < 0 or ttl > window then
        redis.call('PEXPIRE', key, window)
        corrected = ttl
        ttl = window
    end

    return {value, ttl, corrected}
    """

    def __init__(
        self,
        backend: RedisBackend,
        key_prefix: str = KEY_PREFIX,
        log_replies: bool = False,
    ):
        super().__init__(backend, key_prefix=key_prefix, log_replies=log_replies)

    async def increment(self, spec: RateLimitSpec, weight: int = 1) -> IncrementResult:
        key = self._key(spec.action_id)

        # Returns: [new_value, remaining_ttl_ms, stale_ttl_ms (0 if untouched)]
        result = await self.backend.eval_script(
            self._LUA_SCRIPT,
            keys=[key],
            args=[spec.window_ms, weight],
        )
        if self.log_replies:
            logger.debug("store_replies", key=key, eval=result)

        new_value = int(result[0])
        ttl = int(result[1])
        stale_ttl = int(result[2])

        if stale_ttl:
            logger.info(
                "window_ttl_corrected",
                key=key,
                observed_ttl_ms=stale_ttl,
                window_ms=spec.window_ms,
            )

        return IncrementResult(
            new_value=new_value,
            remaining_time_ms=ttl,
            is_over_limit=new_value > spec.limit,
        )
