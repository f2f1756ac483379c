import json
import os

# Engine in courtwatch.db.session is built at import time; keep it off Postgres.
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import courtwatch.models  # noqa: F401
from courtwatch.core.scrape_config import ScrapeConfig
from courtwatch.db.base import Base
from courtwatch.models import NotificationChannel, User, Venue, Watch
from courtwatch.services.notify import channels
from fakes import RecordingChannel

# Tuesday 2025-06-10, 10:00 in London (BST)
TUESDAY_MORNING = datetime(2025, 6, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def config():
    return ScrapeConfig(fetch_stagger_ms=0)


@pytest.fixture
def now():
    return TUESDAY_MORNING


@pytest.fixture
def venue(db):
    v = Venue(slug="v1", name="Venue One", platform="courtside", active=True)
    db.add(v)
    db.commit()
    db.refresh(v)
    return v


@pytest.fixture
def email_sender(monkeypatch):
    rec = RecordingChannel()
    monkeypatch.setitem(channels._channels, "email", rec)
    return rec


@pytest.fixture
def chat_sender(monkeypatch):
    rec = RecordingChannel()
    monkeypatch.setitem(channels._channels, "chat", rec)
    return rec


@pytest.fixture
def make_watch(db):
    """Create a user with one channel and one watch. Returns (user, channel, watch)."""
    counter = {"n": 0}

    def _make(
        day_times=None,
        *,
        venue_id=None,
        channel_type="email",
        destination=None,
        weekday_times=None,
        weekend_times=None,
        active=True,
    ):
        counter["n"] += 1
        user = User(email=f"user{counter['n']}@example.com")
        db.add(user)
        db.flush()
        channel = NotificationChannel(
            user_id=user.id,
            type=channel_type,
            destination=destination or user.email,
            active=True,
        )
        watch = Watch(
            user_id=user.id,
            venue_id=venue_id,
            day_times_json=json.dumps(day_times) if day_times is not None else None,
            weekday_times_json=json.dumps(weekday_times) if weekday_times is not None else None,
            weekend_times_json=json.dumps(weekend_times) if weekend_times is not None else None,
            active=active,
        )
        db.add_all([channel, watch])
        db.commit()
        return user, channel, watch

    return _make
