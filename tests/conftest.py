import pytest

from ratewindow.core.storage.memory import InMemoryBackend
from ratewindow.core.strategies.fixed_window import FixedWindowStrategy


class FakeClock:
    """Manually advanced clock, in seconds like ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock: FakeClock) -> InMemoryBackend:
    """Create a fresh in-memory backend for each test."""
    return InMemoryBackend(clock=clock)


@pytest.fixture
def strategy(backend: InMemoryBackend) -> FixedWindowStrategy:
    """Create a fixed window strategy with the test backend."""
    return FixedWindowStrategy(backend)
