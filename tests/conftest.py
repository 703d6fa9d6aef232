import os

# Point the app at a throwaway database before any tasky module builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from tasky.models.entities import Task
from tasky.storage.database import Base, engine


# 2025-01-06 is a Monday
MONDAY = date(2025, 1, 6)
NOW = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_task():
    """Factory for scheduler input; each call is created one minute after the previous one."""
    counter = {"n": 0}

    def _make(due_date=None, is_completed=False, created_at=None):
        counter["n"] += 1
        return Task(
            id=uuid4(),
            created_at=created_at or NOW - timedelta(days=30) + timedelta(minutes=counter["n"]),
            due_date=due_date,
            is_completed=is_completed,
        )

    return _make


@pytest.fixture
def three_tasks(make_task):
    """A and B due on Monday, C undated, created in that order."""
    a = make_task(due_date=MONDAY)
    b = make_task(due_date=MONDAY)
    c = make_task()
    return a, b, c


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate all tables so every test starts from an empty database."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
