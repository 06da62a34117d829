"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from shortlinks.core.config import Settings
from shortlinks.core.log_sink import LogSink
from shortlinks.core.registry import ShortcodeRegistry
from shortlinks.main import create_app


class FakeClock:
    """Controllable replacement for the registry clock."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
def sink():
    """Create a console-only log sink."""
    return LogSink(enable_api=False)


@pytest.fixture
def registry(clock, sink):
    """Create a fresh registry driven by the fake clock."""
    return ShortcodeRegistry(
        base_url="http://testserver",
        sink=sink,
        clock=clock,
    )


@pytest.fixture
def test_settings():
    """Settings for the test app."""
    return Settings(base_url="http://testserver", log_api_enabled=False)


@pytest.fixture
def client(test_settings, registry):
    """Create a test client around a fresh app and registry."""
    app = create_app(settings=test_settings, registry=registry)
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
