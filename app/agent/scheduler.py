"""
Background notification loop.

One evaluation pass runs immediately on start() and then once per tick until
stop(). Each pass runs four independent checks (daily digest, upcoming
meetings, weekly summary, monthly summary); a failing check is logged and
skipped for that tick only. Time triggers match the exact minute, so a tick
that misses the minute skips that notification.
"""
import logging
import threading
from datetime import datetime, timedelta, tzinfo
from typing import Callable, List, Optional, Tuple
from dateutil import tz
from app.domain.interfaces import CalendarProvider, EmailProvider
from app.domain.schemas import Event
from app.errors import CollaboratorError, SchedulerStateError

logger = logging.getLogger(__name__)

SUMMARY_HOUR, SUMMARY_MINUTE = 9, 0
MONDAY = 0
DEFAULT_TICK_SECS = 60
DEFAULT_REMINDER_MINUTES = 15

DAILY_SUBJECT = "Daily Summary - AI Assistant"
WEEKLY_SUBJECT = "Weekly Summary - AI Assistant"
MONTHLY_SUBJECT = "Monthly Summary - AI Assistant"
MEETING_SUBJECT = "Meeting Reminder - AI Assistant"

# TODO: pull standing tasks from a task store once one exists.
STANDING_TASKS = (
    "Review pending emails",
    "Check calendar for today's meetings",
    "Update project status",
    "Follow up on action items",
    "Prepare for tomorrow's meetings",
)

WEEKLY_BODY = (
    "Weekly Summary\n\n"
    "This week's accomplishments:\n"
    "• Completed project milestones\n"
    "• Scheduled team meetings\n"
    "• Responded to important emails\n\n"
    "Next week's priorities:\n"
    "• Review pending tasks\n"
    "• Plan upcoming meetings\n"
    "• Follow up on action items"
)

MONTHLY_BODY = (
    "Monthly Summary\n\n"
    "This month's key achievements:\n"
    "• Completed major project phases\n"
    "• Attended important meetings\n"
    "• Maintained communication with stakeholders\n\n"
    "Next month's focus areas:\n"
    "• Strategic planning\n"
    "• Team coordination\n"
    "• Performance review"
)

### ------------------------------ Helpers --------------------------------------- ###

def parse_hhmm(value: str) -> Optional[Tuple[int, int]]:
    """'HH:MM' → (hour, minute); None when malformed or out of range."""
    parts = (value or "").strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute

def format_duration(delta: timedelta) -> str:
    """timedelta → '1 hour 30 minutes' style text."""
    total = int(delta.total_seconds() // 60)
    hours, minutes = divmod(total, 60)
    parts = []
    if hours:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes or not hours:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    return " ".join(parts)

def format_start(dt: datetime) -> str:
    """e.g. 'Monday, January 2, 2026 at 15:04'."""
    return f"{dt:%A, %B} {dt.day}, {dt:%Y} at {dt:%H:%M}"

def at_summary_minute(now: datetime) -> bool:
    return now.hour == SUMMARY_HOUR and now.minute == SUMMARY_MINUTE

### ----------------------------- Scheduler -------------------------------------- ###

class PeriodicScheduler:
    """
    Two states: stopped (initial) and running.
    The cancellation token is single-use: a scheduler that was stopped cannot be restarted.
    """

    def __init__(
        self,
        calendar: CalendarProvider,
        email: EmailProvider,
        user_email: str,
        daily_reminder_time: str = "09:00",
        reminder_minutes: int = 15,
        tick_secs: float = 60,
        timezone: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.calendar = calendar
        self.email = email
        self.user_email = user_email
        self.reminder_window = timedelta(minutes=reminder_minutes if reminder_minutes > 0 else DEFAULT_REMINDER_MINUTES)
        self.tick_secs = tick_secs if tick_secs > 0 else DEFAULT_TICK_SECS
        self.tz = timezone or tz.UTC
        self._clock = clock or (lambda: datetime.now(self.tz))
        self.daily_at = parse_hhmm(daily_reminder_time)
        if self.daily_at is None:
            logger.warning("Invalid daily reminder time %r, daily reminder disabled", daily_reminder_time)

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise SchedulerStateError("scheduler was already started")
        logger.info("Starting scheduler (tick=%ss)", self.tick_secs)
        self._thread = threading.Thread(target=self._run, name="periodic-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        if not self.running:
            raise SchedulerStateError("scheduler is not running")
        logger.info("Stopping scheduler")
        self._stop.set()
        self._thread.join(timeout)

    def _run(self) -> None:
        self.run_pass()
        while not self._stop.wait(self.tick_secs):
            self.run_pass()
        logger.info("Scheduler stopped")

    ### --- evaluation pass --- ###

    def run_pass(self, now: Optional[datetime] = None) -> None:
        """Run all four checks once. Never raises."""
        now = now or self._clock()
        logger.debug("Checking scheduled tasks at %s", now.isoformat(timespec="minutes"))
        for check in (
            self.check_daily_reminder,
            self.check_upcoming_meetings,
            self.check_weekly_summary,
            self.check_monthly_summary,
        ):
            try:
                check(now)
            except CollaboratorError as e:
                logger.error("%s failed: %s", check.__name__, e)
            except Exception:
                logger.exception("%s failed unexpectedly", check.__name__)

    def should_send_daily_reminder(self, now: datetime) -> bool:
        return self.daily_at is not None and (now.hour, now.minute) == self.daily_at

    def check_daily_reminder(self, now: datetime) -> None:
        if not self.should_send_daily_reminder(now):
            return
        logger.info("Sending daily reminder")
        body = self.build_daily_digest(self.todays_events(now))
        self.email.send_email(self.user_email, DAILY_SUBJECT, body)

    def check_upcoming_meetings(self, now: datetime) -> None:
        for event in self.calendar.get_upcoming_events():
            until = event.start_time - now
            if timedelta(0) < until <= self.reminder_window:
                self.send_meeting_reminder(event)

    def check_weekly_summary(self, now: datetime) -> None:
        if now.weekday() == MONDAY and at_summary_minute(now):
            logger.info("Sending weekly summary")
            self.email.send_email(self.user_email, WEEKLY_SUBJECT, WEEKLY_BODY)

    def check_monthly_summary(self, now: datetime) -> None:
        if now.day == 1 and at_summary_minute(now):
            logger.info("Sending monthly summary")
            self.email.send_email(self.user_email, MONTHLY_SUBJECT, MONTHLY_BODY)

    ### --- message building --- ###

    def todays_events(self, now: datetime) -> List[Event]:
        """Upcoming events whose start falls in [midnight today, midnight tomorrow)."""
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        tomorrow = midnight + timedelta(days=1)
        return [e for e in self.calendar.get_upcoming_events() if midnight <= e.start_time < tomorrow]

    def build_daily_digest(self, events: List[Event]) -> str:
        lines = ["Good morning! Here's the daily summary:", ""]
        lines.append("Today's Tasks:")
        lines += [f"{i}. {t}" for i, t in enumerate(STANDING_TASKS, 1)]
        lines.append("")
        if events:
            lines.append("Today's Meetings:")
            lines += [f"• {e.title} at {e.start_time.astimezone(self.tz):%H:%M}" for e in events]
            lines.append("")
        lines.append("Have a productive day!")
        return "\n".join(lines)

    def send_meeting_reminder(self, event: Event) -> None:
        logger.info("Sending meeting reminder for %r", event.title)
        lines = [
            "Meeting Reminder",
            "",
            f"Meeting: {event.title}",
            f"Time: {format_start(event.start_time.astimezone(self.tz))}",
            f"Duration: {format_duration(event.duration)}",
        ]
        if event.attendees:
            lines.append(f"Attendees: {', '.join(event.attendees)}")
        lines += ["", "Please join on time!"]
        self.email.send_email(self.user_email, MEETING_SUBJECT, "\n".join(lines))
