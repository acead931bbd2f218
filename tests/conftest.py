# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- A clean fakeredis client per test
- Valkey event/session repositories backed by fakeredis
- A controllable clock and an event factory
"""

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from sitepulse.core.models import DeviceType, PageViewEvent
from sitepulse.infrastructure.repositories.valkey import (
    ValkeyEventRepository,
    ValkeySessionRepository,
)
from sitepulse.utils.config import ApiSettings, Settings

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def now():
    """The fixed reference time used by clock and make_event."""
    return NOW


@pytest.fixture()
def clock():
    """A FakeClock fixed at 2024-06-15 12:00:00 UTC."""
    return FakeClock()


@pytest.fixture()
def settings():
    """Settings with an API read key configured."""
    return Settings(api=ApiSettings(read_key="test-key"))


@pytest.fixture()
def fake_redis():
    """A clean fakeredis instance for each test.

    Uses decode_responses=True to match the real Valkey client behavior.
    """
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def event_repo(fake_redis, settings):
    """A connected ValkeyEventRepository backed by fakeredis."""
    repo = ValkeyEventRepository(fake_redis, settings=settings, key_prefix="test")
    repo.connect()
    return repo


@pytest.fixture()
def session_repo(fake_redis, settings):
    """A connected ValkeySessionRepository backed by fakeredis."""
    repo = ValkeySessionRepository(fake_redis, settings=settings, key_prefix="test")
    repo.connect()
    return repo


@pytest.fixture()
def make_event():
    """Factory for PageViewEvent instances with sensible defaults."""
    counter = {"n": 0}

    def _make(
        page_path: str = "/",
        session_id: str = "session_a",
        created_at: datetime = NOW,
        **overrides,
    ) -> PageViewEvent:
        counter["n"] += 1
        fields = {
            "id": f"00000000-0000-0000-0000-{counter['n']:012d}",
            "page_path": page_path,
            "session_id": session_id,
            "created_at": created_at,
            "device_type": DeviceType.DESKTOP,
            "browser": "Chrome",
            "os": "Windows",
        }
        fields.update(overrides)
        return PageViewEvent(**fields)

    return _make
