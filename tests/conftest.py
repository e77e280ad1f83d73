"""
Test Configuration
==================

Shared fakes and fixtures for the relay tests.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.realtime.confirmation_engine import ConfirmationEngine
from services.realtime.connection_manager import ConnectionManager
from services.realtime.frame_cache import FrameCache
from services.realtime.relay_context import RelayContext
from services.realtime.session_store import SessionStore
from utils.settings import RelaySettings

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Return T0 shifted by `seconds`."""
    return T0 + timedelta(seconds=seconds)


class ManualClock:
    """Clock the tests move by hand."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeWebSocket:
    """Collects whatever the relay sends to one client."""

    def __init__(self, fail: bool = False) -> None:
        self.sent = []
        self.fail = fail

    async def send_text(self, text: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(text))

    def events(self):
        return [message["type"] for message in self.sent]

    def of_type(self, event: str):
        return [message["data"] for message in self.sent if message["type"] == event]


class FakeNotifier:
    """Stands in for the Discord webhook notifier."""

    def __init__(self, result: bool = True, error: Exception = None) -> None:
        self.calls = []
        self.result = result
        self.error = error
        self.notifications_enabled = True

    def set_notifications_enabled(self, enabled: bool) -> None:
        self.notifications_enabled = enabled

    async def send_detection_alert(self, detection, frame_data=None) -> bool:
        self.calls.append((detection, frame_data))
        if self.error is not None:
            raise self.error
        return self.result

    async def aclose(self) -> None:
        return None


class FakeDetectionLog:
    """In-memory replacement for DetectionDAL."""

    def __init__(self) -> None:
        self.items = []

    async def add(self, detection) -> None:
        self.items.append(detection)

    async def list_recent(self, limit: int = 100):
        return list(reversed(self.items))[:limit]

    async def count(self) -> int:
        return len(self.items)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def relay(clock):
    """A relay context wired to fakes, with REQUIRED=3 and a 10s window."""
    return RelayContext(
        sessions=SessionStore(),
        engine=ConfirmationEngine(required_count=3, window_seconds=10.0, tracked_class="person"),
        frames=FrameCache(),
        connections=ConnectionManager(),
        notifier=FakeNotifier(),
        detections=FakeDetectionLog(),
        clock=clock,
    )


@pytest.fixture
def settings(tmp_path):
    return RelaySettings(
        database_dir=str(tmp_path / "db"),
        required_count=3,
        window_seconds=10.0,
        discord_webhook_url=None,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client
