import structlog

from ratewindow.core.keys import KEY_PREFIX, counter_key, parse_counter
from ratewindow.core.storage.base import StorageBackend
from ratewindow.core.strategies.base import (
    IncrementResult,
    RateLimitSpec,
    RateLimitStrategy,
    StatusResult,
)

logger = structlog.get_logger()


class FixedWindowStrategy(RateLimitStrategy):
    """
    Fixed window counter kept in a shared store.

    The window starts with the first increment and lasts ``window_ms``; the
    store's TTL is the only thing that ends it. Initialization, increment and
    TTL read happen in one store transaction, so concurrent callers never lose
    an update and only the first caller of a window sets its expiry.

    Example:
        >>> strategy = FixedWindowStrategy(RedisBackend(redis_client))
        >>> result = await strategy.increment(RateLimitSpec("view-42", 10, 180_000))
        >>> if result.is_over_limit:
        ...     deny()
    """

    def __init__(
        self,
        backend: StorageBackend,
        key_prefix: str = KEY_PREFIX,
        log_replies: bool = False,
    ):
        self.backend = backend
        self.key_prefix = key_prefix
        self.log_replies = log_replies

    def _key(self, action_id: str) -> str:
        return counter_key(action_id, self.key_prefix)

    async def increment(self, spec: RateLimitSpec, weight: int = 1) -> IncrementResult:
        key = self._key(spec.action_id)

        new_value, ttl = await self.backend.incr_window(key, weight, spec.window_ms)
        if self.log_replies:
            logger.debug("store_replies", key=key, incrby=new_value, pttl=ttl)

        # -1: counter has no expiry. > window: counter was created under a
        # longer window than the current policy.
        if ttl < 0 or ttl > spec.window_ms:
            # Not atomic with the transaction above. A concurrent caller may
            # re-arm the same key too, which sets the same expiry twice.
            await self.backend.pexpire(key, spec.window_ms)
            logger.info(
                "window_ttl_corrected",
                key=key,
                observed_ttl_ms=ttl,
                window_ms=spec.window_ms,
            )
            ttl = spec.window_ms

        return IncrementResult(
            new_value=new_value,
            remaining_time_ms=ttl,
            is_over_limit=new_value > spec.limit,
        )

    async def status(self, action_id: str) -> StatusResult:
        key = self._key(action_id)

        raw, ttl = await self.backend.get_with_ttl(key)
        if self.log_replies:
            logger.debug("store_replies", key=key, get=raw, pttl=ttl)

        current_value, malformed = parse_counter(raw)
        if malformed:
            logger.warning("counter_value_malformed", key=key, raw=raw)

        return StatusResult(
            current_value=current_value,
            remaining_time_ms=max(0, ttl),
        )
