from datetime import datetime
from typing import List, Protocol, runtime_checkable
from app.domain.schemas import Event

# Narrow capability sets consumed by the router and the scheduler.
# Implementations raise app.errors.CollaboratorError subclasses on failure.

@runtime_checkable
class CalendarProvider(Protocol):
    def schedule_meeting(self, attendees: List[str], start: datetime, duration_minutes: int, title: str) -> None:
        ...

    def get_upcoming_events(self) -> List[Event]:
        ...

@runtime_checkable
class EmailProvider(Protocol):
    def send_email(self, to: str, subject: str, body: str) -> None:
        ...

@runtime_checkable
class TextGenerator(Protocol):
    def process_command(self, text: str) -> str:
        ...
