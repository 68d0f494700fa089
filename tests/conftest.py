"""
Shared pytest fixtures for all tests.

Provides an in-memory database per test, a Redis double on the global
query cache, and factories for schedules and bookings.
"""

import os

# Must be set before app.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import fnmatch
from datetime import date, timedelta
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.cache import cache
from app.database import Base, SessionLocal, engine
from app.main import app
from app.models import Booking, BookingInstance, CapacitySchedule, PeriodTypeDefault, Side


# =============================================================================
# CACHE FIXTURES
# =============================================================================


class FakeRedis:
    """Dict-backed stand-in for the redis client calls the cache makes"""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    def scan_iter(self, match=None):
        for key in list(self.store):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    def ping(self):
        return True

    def info(self):
        return {"redis_version": "7.2.0", "used_memory_human": "1M", "connected_clients": 1}


@pytest.fixture(autouse=True)
def fake_redis():
    """Install a fresh Redis double on the global cache for each test"""
    fake = FakeRedis()
    cache.redis_client = fake
    yield fake
    cache.redis_client = None


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test and drop them afterwards.

    Repositories commit per call, so isolation comes from recreating the
    schema rather than rolling back.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def sides(db_session):
    """Seed the two facility sides; returns {key: id}"""
    power = Side(key="Power", name="Power side")
    base = Side(key="Base", name="Base side")
    db_session.add_all([power, base])
    db_session.commit()
    return {"Power": power.id, "Base": base.id}


# =============================================================================
# FACTORIES
# =============================================================================


@pytest.fixture
def make_default(db_session):
    def _make(period_type, side_id, capacity, platforms=None):
        default = PeriodTypeDefault(
            period_type=period_type, side_id=side_id, default_capacity=capacity, platforms=platforms
        )
        db_session.add(default)
        db_session.commit()
        return default

    return _make


@pytest.fixture
def make_schedule(db_session):
    def _make(side_id, **overrides):
        values = {
            "side_id": side_id,
            "day_of_week": 1,
            "start_time": "09:00",
            "end_time": "10:00",
            "capacity": 10,
            "period_type": "Performance",
            "recurrence_type": "weekly",
            "start_date": date(2024, 6, 3),
            "end_date": None,
            "excluded_dates": None,
            "platforms": None,
        }
        values.update(overrides)
        schedule = CapacitySchedule(**values)
        db_session.add(schedule)
        db_session.commit()
        return schedule

    return _make


@pytest.fixture
def make_booking(db_session):
    """Booking with one instance per start datetime; returns (booking id, instance ids)"""

    def _make(side_id, title="Team Training", recurrence_type="weekly", starts=()):
        booking = Booking(
            title=title,
            side_id=side_id,
            recurrence={"type": recurrence_type},
            color="#3366ff",
            created_by="coach@example.com",
        )
        db_session.add(booking)
        db_session.commit()

        instances = [
            BookingInstance(
                booking_id=booking.id,
                side_id=side_id,
                start=start,
                end=start + timedelta(hours=1),
                racks=[1, 2],
                areas=[],
            )
            for start in starts
        ]
        db_session.add_all(instances)
        db_session.commit()
        return booking.id, [instance.id for instance in instances]

    return _make
