from datetime import datetime, timedelta
from enum import Enum
from typing import List
from pydantic import BaseModel, Field

class TaskType(str, Enum):
    """Closed set of classification results."""
    SCHEDULE = "schedule"
    EMAIL = "email"
    REMINDER = "reminder"
    GENERAL = "general"

class TaskRequest(BaseModel):
    """Structured request built from one natural-language task string."""
    type: TaskType
    title: str = ""
    attendees: List[str] = Field(default_factory=list)
    start_time: datetime                        # tz-aware
    duration_minutes: int = Field(default=30, gt=0)
    to: str = ""
    subject: str = ""
    body: str = ""

class Event(BaseModel):
    """One calendar entry as returned by the calendar provider."""
    title: str
    start_time: datetime
    end_time: datetime
    attendees: List[str] = Field(default_factory=list)

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

class TaskOutcome(BaseModel):
    """Result of processing one task: the structured request + advisory LLM reply."""
    request: TaskRequest
    advisory: str = ""

### --- HTTP payloads --- ###

class TaskIn(BaseModel):
    """Input to /schedule and /email."""
    task: str = ""

class TaskOut(BaseModel):
    """Response from /schedule and /email."""
    status: str = "success"
    message: str
    task: str
    type: TaskType
    request: TaskRequest
    advisory: str = ""

class CommandIn(BaseModel):
    """Input to /nlp."""
    command: str = ""

class CommandOut(BaseModel):
    """Response from /nlp."""
    status: str = "success"
    response: str
    command: str
