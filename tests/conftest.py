"""Shared test fixtures for the Nudgy test suite."""

import pytest
import tempfile
import os
from datetime import datetime

# Add parent directory to path so we can import nudgy modules
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nudgy.db import init_db
from nudgy.db.session import dispose_db
from nudgy.models import PermissionStatus
from nudgy.notifications.backend import NotificationBackend, PermissionBackend
from nudgy.services import NotificationScheduler, ReminderService, ReminderStore


class FakeBackend(NotificationBackend):
    """Records every call in order."""

    def __init__(self, fail_on=None):
        self.calls = []
        self.scheduled = []
        self.channels = []
        self.fail_on = fail_on or set()

    async def schedule_notification(self, content, trigger):
        if "schedule" in self.fail_on:
            raise RuntimeError("backend unavailable")
        handle = f"handle-{len(self.scheduled)}"
        self.scheduled.append((content, trigger))
        self.calls.append(("schedule", content.body, trigger.fire_at))
        return handle

    async def cancel_all(self):
        if "cancel" in self.fail_on:
            raise RuntimeError("backend unavailable")
        self.calls.append(("cancel_all",))
        self.scheduled = []

    async def register_channel(self, channel):
        self.channels.append(channel)


class FakePermissionBackend(PermissionBackend):

    def __init__(self, status, requested=None):
        self.status = status
        self.requested = requested if requested is not None else status
        self.request_count = 0

    async def get_status(self):
        return self.status

    async def request_status(self):
        self.request_count += 1
        self.status = self.requested
        return self.status


class FixedClock:
    """Clock returning a settable instant on 2026-03-10."""

    def __init__(self, hour=10, minute=0):
        self.current = datetime(2026, 3, 10, hour, minute)

    def set(self, hour, minute=0):
        self.current = datetime(2026, 3, 10, hour, minute)

    def __call__(self):
        return self.current


@pytest.fixture
def test_db():
    """Create a temporary test database."""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    init_db(db_path)

    yield db_path

    dispose_db()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def clock():
    return FixedClock(hour=10)


@pytest.fixture
def store(test_db):
    return ReminderStore()


@pytest.fixture
def scheduler(backend, clock):
    return NotificationScheduler(backend, clock=clock)


@pytest.fixture
def service(store, scheduler):
    return ReminderService(store, scheduler)
