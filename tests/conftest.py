"""
Shared pytest fixtures and configuration for all tests.
"""
import os
from unittest.mock import MagicMock, AsyncMock

import pytest
from hypothesis import settings, Verbosity, Phase

from cache.memory import InMemoryCache
from session.config import SessionConfig
from session.handler import SessionHandler

# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
    print_blob=True,
)

# CI profile: more thorough, reproducible
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,
)

# Debug profile: minimal examples, no shrinking
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

DAY = 86_400


class FakeClock:
    """Controllable time source for caches and sessions."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock) -> InMemoryCache:
    """In-memory cache driven by the fake clock."""
    return InMemoryCache(clock=clock)


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(max_lifetime_seconds=30 * DAY, session_name="TestSession", app_root="/srv/app")


@pytest.fixture
def handler(memory_cache, session_config) -> SessionHandler:
    return SessionHandler(memory_cache, session_config)


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create a mock Redis client for unit tests."""
    mock = MagicMock()
    mock.get = AsyncMock(return_value=None)
    mock.setex = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.ttl = AsyncMock(return_value=-2)
    mock.ping = AsyncMock(return_value=True)
    mock.aclose = AsyncMock()
    return mock
