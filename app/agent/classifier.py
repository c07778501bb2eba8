import logging
from datetime import datetime, timedelta
from typing import Tuple
from app.agent import extractors
from app.domain.schemas import TaskRequest, TaskType

logger = logging.getLogger(__name__)

# Evaluated in order; the first rule whose keywords appear wins.
RULES: Tuple[Tuple[Tuple[str, ...], TaskType], ...] = (
    (("schedule", "meeting"), TaskType.SCHEDULE),
    (("email", "send"), TaskType.EMAIL),
    (("remind", "reminder"), TaskType.REMINDER),
)

def classify_type(task: str) -> TaskType:
    """Keyword-based task type; GENERAL when no rule matches."""
    lowered = (task or "").lower()
    for keywords, task_type in RULES:
        if any(k in lowered for k in keywords):
            return task_type
    return TaskType.GENERAL

def classify(task: str, now: datetime) -> TaskRequest:
    """
    Classify a task string and extract the fields its type needs.
    Inputs:
        task: raw task text.
        now: reference time for relative dates (tz-aware).
    Returns:
        TaskRequest; start_time defaults to now + 1h for types that carry no time.
    """
    task_type = classify_type(task)
    req = TaskRequest(type=task_type, start_time=now + timedelta(hours=1))

    if task_type is TaskType.SCHEDULE:
        req.attendees = extractors.extract_emails(task)
        req.start_time = extractors.extract_time(task, now)
        req.duration_minutes = extractors.extract_duration(task, req.duration_minutes)
        req.title = extractors.extract_title(task)
    elif task_type is TaskType.EMAIL:
        emails = extractors.extract_emails(task)
        req.to = emails[0] if emails else ""
        req.subject = extractors.extract_subject(task)
        req.body = extractors.extract_body(task)
    elif task_type is TaskType.REMINDER:
        req.title = extractors.extract_title(task)
        req.start_time = extractors.extract_time(task, now)
    else:
        req.title = task

    logger.debug("Classified %r as %s", task, task_type.value)
    return req
