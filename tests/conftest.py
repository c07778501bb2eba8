from datetime import datetime

import pytest

from app.config import Settings
from fakes import FakeCalendar, FakeEmail, FakeTextGen, UTC


@pytest.fixture
def test_settings():
    return Settings(
        user_email="me@example.com",
        default_timezone="UTC",
        daily_reminder_time="09:00",
        meeting_reminder_minutes=15,
        scheduler_tick_secs=3600,
        dry_run=True,
    )


@pytest.fixture
def now():
    # Wednesday afternoon, nothing time-triggered fires
    return datetime(2026, 6, 3, 13, 37, 12, tzinfo=UTC)


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
def email():
    return FakeEmail()


@pytest.fixture
def text_gen():
    return FakeTextGen()
