import time
from datetime import datetime, timedelta

import pytest

from app.agent.scheduler import (
    DAILY_SUBJECT, DEFAULT_TICK_SECS, MEETING_SUBJECT, MONTHLY_SUBJECT, WEEKLY_SUBJECT,
    PeriodicScheduler, format_duration, format_start, parse_hhmm,
)
from app.errors import SchedulerStateError

from fakes import FakeCalendar, FakeEmail, MONDAY_FIRST_9AM, UTC, make_event


def make_scheduler(calendar=None, email=None, daily="09:00", clock=None, tick=3600):
    return PeriodicScheduler(
        calendar or FakeCalendar(), email or FakeEmail(), "me@example.com",
        daily_reminder_time=daily, reminder_minutes=15, tick_secs=tick, timezone=UTC, clock=clock,
    )


def test_all_periodic_checks_fire_together():
    email = FakeEmail()
    make_scheduler(email=email).run_pass(MONDAY_FIRST_9AM)
    assert email.subjects() == [DAILY_SUBJECT, WEEKLY_SUBJECT, MONTHLY_SUBJECT]
    assert all(m["to"] == "me@example.com" for m in email.sent)


def test_nothing_fires_one_minute_later():
    email = FakeEmail()
    make_scheduler(email=email).run_pass(MONDAY_FIRST_9AM + timedelta(minutes=1))
    assert email.sent == []


def test_weekly_only_on_monday():
    email = FakeEmail()
    sched = make_scheduler(email=email)
    sched.run_pass(datetime(2026, 6, 8, 9, 0, tzinfo=UTC))   # Monday the 8th
    sched.run_pass(datetime(2026, 6, 9, 9, 0, tzinfo=UTC))   # Tuesday
    assert email.subjects() == [DAILY_SUBJECT, WEEKLY_SUBJECT, DAILY_SUBJECT]


def test_monthly_only_on_first():
    email = FakeEmail()
    make_scheduler(email=email, daily="07:30").run_pass(datetime(2026, 7, 1, 9, 0, tzinfo=UTC))  # Wednesday
    assert email.subjects() == [MONTHLY_SUBJECT]


def test_daily_uses_configured_time():
    email = FakeEmail()
    sched = make_scheduler(email=email, daily="18:45")
    sched.run_pass(datetime(2026, 6, 3, 18, 45, 30, tzinfo=UTC))
    sched.run_pass(datetime(2026, 6, 3, 18, 46, tzinfo=UTC))
    assert email.subjects() == [DAILY_SUBJECT]


@pytest.mark.parametrize("bad", ["", "9", "25:00", "09:60", "nine:thirty"])
def test_invalid_daily_time_disables_daily(bad):
    email = FakeEmail()
    sched = make_scheduler(email=email, daily=bad)
    assert sched.daily_at is None
    sched.run_pass(datetime(2026, 6, 3, 9, 0, tzinfo=UTC))
    assert email.sent == []


def test_daily_digest_lists_only_todays_events():
    now = datetime(2026, 6, 3, 9, 0, tzinfo=UTC)
    calendar = FakeCalendar(events=[
        make_event("Standup", datetime(2026, 6, 3, 10, 0, tzinfo=UTC)),
        make_event("Late sync", datetime(2026, 6, 3, 23, 59, tzinfo=UTC)),
        make_event("Tomorrow thing", datetime(2026, 6, 4, 0, 0, tzinfo=UTC)),
    ])
    email = FakeEmail()
    make_scheduler(calendar=calendar, email=email).run_pass(now)
    body = email.sent[0]["body"]
    assert "Review pending emails" in body
    assert "• Standup at 10:00" in body
    assert "• Late sync at 23:59" in body
    assert "Tomorrow thing" not in body


def test_daily_digest_without_meetings():
    email = FakeEmail()
    make_scheduler(email=email).run_pass(datetime(2026, 6, 3, 9, 0, tzinfo=UTC))
    body = email.sent[0]["body"]
    assert "Today's Tasks:" in body
    assert "Today's Meetings:" not in body


def test_meeting_reminder_window():
    now = datetime(2026, 6, 3, 13, 0, tzinfo=UTC)
    calendar = FakeCalendar(events=[
        make_event("Soon", now + timedelta(minutes=10), minutes=60, attendees=["a@x.com", "b@y.com"]),
        make_event("Edge", now + timedelta(minutes=15)),
        make_event("Later", now + timedelta(minutes=16)),
        make_event("Now", now),
        make_event("Started", now - timedelta(minutes=5)),
    ])
    email = FakeEmail()
    make_scheduler(calendar=calendar, email=email).run_pass(now)
    assert email.subjects() == [MEETING_SUBJECT, MEETING_SUBJECT]
    first = email.sent[0]["body"]
    assert "Meeting: Soon" in first
    assert "Time: Wednesday, June 3, 2026 at 13:10" in first
    assert "Duration: 1 hour" in first
    assert "Attendees: a@x.com, b@y.com" in first
    assert "Meeting: Edge" in email.sent[1]["body"]
    assert "Attendees" not in email.sent[1]["body"]


def test_meeting_reminder_repeats_every_tick():
    now = datetime(2026, 6, 3, 13, 0, tzinfo=UTC)
    calendar = FakeCalendar(events=[make_event("Soon", now + timedelta(minutes=10))])
    email = FakeEmail()
    sched = make_scheduler(calendar=calendar, email=email)
    sched.run_pass(now)
    sched.run_pass(now + timedelta(minutes=1))
    assert email.subjects() == [MEETING_SUBJECT, MEETING_SUBJECT]


def test_calendar_failure_only_abandons_calendar_checks():
    email = FakeEmail()
    make_scheduler(calendar=FakeCalendar(fail=True), email=email).run_pass(MONDAY_FIRST_9AM)
    assert email.subjects() == [WEEKLY_SUBJECT, MONTHLY_SUBJECT]


def test_email_failure_never_escapes_pass():
    calendar = FakeCalendar(events=[make_event("Soon", MONDAY_FIRST_9AM + timedelta(minutes=5))])
    sched = make_scheduler(calendar=calendar, email=FakeEmail(fail=True))
    sched.run_pass(MONDAY_FIRST_9AM)
    # daily + upcoming each fetched the calendar despite earlier send failures
    assert calendar.fetches == 2


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_start_runs_a_pass_immediately_and_stop_ends_loop():
    calendar = FakeCalendar()
    sched = make_scheduler(calendar=calendar, clock=lambda: datetime(2026, 6, 3, 13, 0, tzinfo=UTC))
    assert not sched.running
    sched.start()
    assert sched.running
    assert _wait_for(lambda: calendar.fetches >= 1)
    sched.stop(timeout=2)
    assert not sched.running
    assert not sched._thread.is_alive()


def test_ticks_repeat_until_stopped():
    calendar = FakeCalendar()
    sched = make_scheduler(calendar=calendar, tick=0.01,
                           clock=lambda: datetime(2026, 6, 3, 13, 0, tzinfo=UTC))
    sched.start()
    assert _wait_for(lambda: calendar.fetches >= 3)
    sched.stop(timeout=2)
    seen = calendar.fetches
    time.sleep(0.05)
    assert calendar.fetches == seen


@pytest.mark.parametrize("tick", [0, -5])
def test_non_positive_tick_falls_back_to_default(tick):
    calendar = FakeCalendar()
    sched = make_scheduler(calendar=calendar, tick=tick,
                           clock=lambda: datetime(2026, 6, 3, 13, 0, tzinfo=UTC))
    assert sched.tick_secs == DEFAULT_TICK_SECS
    sched.start()
    assert _wait_for(lambda: calendar.fetches >= 1)
    time.sleep(0.1)
    sched.stop(timeout=2)
    assert calendar.fetches == 1


def test_state_misuse_raises():
    sched = make_scheduler(clock=lambda: datetime(2026, 6, 3, 13, 0, tzinfo=UTC))
    with pytest.raises(SchedulerStateError):
        sched.stop()
    sched.start()
    with pytest.raises(SchedulerStateError):
        sched.start()
    sched.stop(timeout=2)
    with pytest.raises(SchedulerStateError):
        sched.stop()
    with pytest.raises(SchedulerStateError):
        sched.start()


def test_helpers():
    assert parse_hhmm("09:00") == (9, 0)
    assert parse_hhmm(" 23:59 ") == (23, 59)
    assert parse_hhmm("24:00") is None
    assert format_duration(timedelta(minutes=30)) == "30 minutes"
    assert format_duration(timedelta(minutes=90)) == "1 hour 30 minutes"
    assert format_duration(timedelta(hours=2)) == "2 hours"
    assert format_duration(timedelta(0)) == "0 minutes"
    assert format_start(datetime(2026, 1, 2, 15, 4, tzinfo=UTC)) == "Friday, January 2, 2026 at 15:04"
