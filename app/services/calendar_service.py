import logging
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional
from dateutil import parser as dtparse
from dateutil import tz
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from app.config import settings, Settings
from app.domain.schemas import Event
from app.errors import CalendarError
from app.services.google_auth import GoogleAuth

logger = logging.getLogger(__name__)

UPCOMING_DAYS = 7

class CalendarClient:
    def __init__(self, auth: GoogleAuth, config: Optional[Settings] = None):
        """
        Google Calendar API client wrapper.
        Inputs:
            auth: GoogleAuth instance used to retrieve valid credentials.
            config: Settings (calendar id, timezone, dry_run); module settings by default.
        """
        self._auth = auth
        self._cfg = config or settings
        self._tz = tz.gettz(self._cfg.default_timezone) or tz.UTC

    def _svc(self):
        """Build a Calendar API service object using authorized credentials."""
        return build("calendar", "v3", credentials=self._auth.creds())

    def schedule_meeting(self, attendees: List[str], start: datetime, duration_minutes: int, title: str) -> None:
        """
        Create an event on the configured calendar and invite attendees.
        Inputs:
            attendees: attendee email addresses.
            start: start time (naive values are taken in the default timezone).
            duration_minutes: meeting length.
            title: event summary.
        Raises:
            CalendarError if the API call fails.
        """
        if start.tzinfo is None:
            start = start.replace(tzinfo=self._tz)
        end = start + timedelta(minutes=duration_minutes)
        if self._cfg.dry_run:
            logger.info("[dry-run] schedule meeting %r with %s at %s for %d min",
                        title, attendees, start.isoformat(timespec="seconds"), duration_minutes)
            return

        body: Dict[str, Any] = {
            "summary": title,
            "start": {"dateTime": start.isoformat(timespec="seconds"), "timeZone": self._cfg.default_timezone},
            "end":   {"dateTime": end.isoformat(timespec="seconds"),   "timeZone": self._cfg.default_timezone},
            "reminders": {"useDefault": True},
        }
        if attendees: body["attendees"] = [{"email": a} for a in attendees]
        try:
            ev = self._svc().events().insert(calendarId=self._cfg.calendar_id, body=body, sendUpdates="all").execute()
        except HttpError as e:
            raise CalendarError(str(e)) from e
        logger.info("Scheduled meeting %r (id=%s)", title, ev.get("id"))

    def get_upcoming_events(self) -> List[Event]:
        """
        List single events starting within the next 7 days, ordered by start.
        Returns:
            list of Event with tz-aware start/end.
        Raises:
            CalendarError if the API call fails.
        """
        now = datetime.now(self._tz)
        if self._cfg.dry_run:
            return self._canned_events(now)

        try:
            resp = self._svc().events().list(
                calendarId=self._cfg.calendar_id,
                timeMin=now.isoformat(timespec="seconds"),
                timeMax=(now + timedelta(days=UPCOMING_DAYS)).isoformat(timespec="seconds"),
                singleEvents=True,
                orderBy="startTime",
            ).execute()
        except HttpError as e:
            raise CalendarError(str(e)) from e
        return [self._to_event(item) for item in resp.get("items", [])]

    def _parse_when(self, when: Dict[str, Any]) -> datetime:
        """Event start/end → aware datetime. All-day entries only carry a 'date'."""
        dt = dtparse.parse(when.get("dateTime") or when.get("date"))
        return dt if dt.tzinfo else dt.replace(tzinfo=self._tz)

    def _to_event(self, item: Dict[str, Any]) -> Event:
        return Event(
            title=item.get("summary", "(No title)"),
            start_time=self._parse_when(item.get("start", {})),
            end_time=self._parse_when(item.get("end", {})),
            attendees=[a["email"] for a in item.get("attendees", []) if a.get("email")],
        )

    @staticmethod
    def _canned_events(now: datetime) -> List[Event]:
        logger.info("[dry-run] returning canned upcoming events")
        return [
            Event(title="Team Standup", start_time=now + timedelta(hours=1),
                  end_time=now + timedelta(hours=1, minutes=30), attendees=["team@company.com"]),
            Event(title="Client Meeting", start_time=now + timedelta(hours=3),
                  end_time=now + timedelta(hours=4), attendees=["client@company.com"]),
        ]
