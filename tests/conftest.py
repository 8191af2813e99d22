"""Shared test fixtures.

Provides fresh in-memory stores, a controllable clock and an API client whose
application lifespan (and therefore the reminder scheduler) is running.
"""

import os
import time
from datetime import datetime, timedelta, timezone

# Keep the sweep out of the way unless a test asks for it
os.environ.setdefault("REMINDER_INTERVAL_SECONDS", "3600")

import pytest
from fastapi.testclient import TestClient

from src.todo_reminder.main import create_app
from src.todo_reminder.repositories import InMemoryTodoRepository, InMemoryUserRepository
from src.todo_reminder.service import TodoService
from src.todo_reminder.settings import Settings


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def wait_for(predicate, timeout=3.0, interval=0.01):
    """Poll predicate until it is truthy or timeout elapses. Returns the last result."""
    deadline = time.monotonic() + timeout
    result = predicate()
    while not result and time.monotonic() < deadline:
        time.sleep(interval)
        result = predicate()
    return result


def parse_wire_ts(value: str) -> datetime:
    """Parse an ISO8601 timestamp as serialized by the API (UTC may use 'Z')."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def todo_repo():
    return InMemoryTodoRepository()


@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def service(todo_repo, user_repo):
    return TodoService(todo_repo, user_repo)


@pytest.fixture
def user(service):
    return service.create_user("ada@example.com", "Ada")


@pytest.fixture
def client():
    app = create_app(Settings(reminder_interval_seconds=3600))
    with TestClient(app) as c:
        yield c
