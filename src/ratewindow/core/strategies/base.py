"""
Abstract base classes for fixed-window rate limiting.

This module defines the policy value, the two result shapes, and the contract
every limiter implementation follows. Limiters are stateless in-process: all
counter state lives in the shared store, so any number of processes can
share one counter per action.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitSpec:
    """
    Immutable description of a rate policy.

    Attributes:
        action_id: Identifies the thing being limited, e.g. ``"view-42"``.
        limit: Inclusive maximum count allowed within one window.
        window_ms: Window duration in milliseconds.

    Example:
        Maximum 10 views per user every 3 minutes:

        >>> RateLimitSpec(f"view-{user_id}", limit=10, window_ms=3 * 60 * 1000)
    """

    action_id: str
    limit: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")
        if self.window_ms < 1:
            raise ValueError(f"window_ms must be >= 1, got {self.window_ms}")


@dataclass(frozen=True)
class IncrementResult:
    """
    Outcome of one increment.

    Attributes:
        new_value: Counter value after this increment.
        remaining_time_ms: Milliseconds until the window resets.
        is_over_limit: True when ``new_value`` strictly exceeds the limit.
    """

    new_value: int
    remaining_time_ms: int
    is_over_limit: bool

    @property
    def is_allowed(self) -> bool:
        """Convenience property to check if the action should proceed."""
        return not self.is_over_limit


@dataclass(frozen=True)
class StatusResult:
    """
    Point-in-time snapshot of an action's counter.

    Attributes:
        current_value: Actions counted in the current window (0 if none).
        remaining_time_ms: Milliseconds until the window resets (0 if none).
    """

    current_value: int
    remaining_time_ms: int


class RateLimitStrategy(ABC):
    """
    Abstract base class for fixed-window limiters.

    Implementations must make the increment of a single action atomic in the
    store. No ordering is guaranteed between concurrent callers of the same
    action beyond what the store serializes.
    """

    @abstractmethod
    async def increment(
        self,
        spec: RateLimitSpec,
        weight: int = 1,
    ) -> IncrementResult:
        """
        Advance the counter for ``spec.action_id`` by ``weight``.

        Args:
            spec: The policy to apply.
            weight: How much this action costs. Defaults to 1.

        Returns:
            IncrementResult with the new value and over-limit decision.

        Raises:
            redis.exceptions.RedisError: Any store failure, unchanged.
        """
        pass

    @abstractmethod
    async def status(self, action_id: str) -> StatusResult:
        """
        Read the counter and remaining window without side effects.

        Args:
            action_id: The action to inspect.

        Returns:
            StatusResult, ``{0, 0}`` when no window is active.
        """
        pass
