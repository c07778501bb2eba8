import logging
from app.domain.interfaces import CalendarProvider, EmailProvider
from app.domain.schemas import TaskRequest, TaskType

logger = logging.getLogger(__name__)

### -------------------------- Defaults / templates --------------------------------- ###

DEFAULT_MEETING_TITLE = "Meeting scheduled by AI Assistant"
DEFAULT_EMAIL_SUBJECT = "Message from AI Assistant"
DEFAULT_EMAIL_BODY = "This is an automated message from the AI Assistant."
DEFAULT_REMINDER_TITLE = "Reminder from AI Assistant"
REMINDER_SUBJECT_TPL = "Reminder: {title}"
REMINDER_BODY_TPL = "This is a reminder for: {title}\nScheduled for: {when}"

class TaskRouter:
    """Runs exactly one downstream action for a classified TaskRequest."""

    def __init__(self, calendar: CalendarProvider, email: EmailProvider, user_email: str):
        self.calendar = calendar
        self.email = email
        self.user_email = user_email

    def dispatch(self, req: TaskRequest) -> None:
        """Route by type. Collaborator errors propagate unchanged."""
        if req.type is TaskType.SCHEDULE:
            self._schedule(req)
        elif req.type is TaskType.EMAIL:
            self._email(req)
        elif req.type is TaskType.REMINDER:
            self._reminder(req)
        else:
            logger.info("General task, nothing to dispatch: %r", req.title)

    def _schedule(self, req: TaskRequest) -> None:
        attendees = req.attendees or [self.user_email]
        title = req.title or DEFAULT_MEETING_TITLE
        logger.info("Handling schedule task: title=%r attendees=%s start=%s",
                    title, attendees, req.start_time.isoformat(timespec="minutes"))
        self.calendar.schedule_meeting(attendees, req.start_time, req.duration_minutes, title)

    def _email(self, req: TaskRequest) -> None:
        to = req.to or self.user_email
        subject = req.subject or DEFAULT_EMAIL_SUBJECT
        body = req.body or DEFAULT_EMAIL_BODY
        logger.info("Handling email task: to=%s subject=%r", to, subject)
        self.email.send_email(to, subject, body)

    def _reminder(self, req: TaskRequest) -> None:
        title = req.title or DEFAULT_REMINDER_TITLE
        logger.info("Handling reminder task: title=%r time=%s", title, req.start_time.isoformat(timespec="minutes"))
        self.email.send_email(
            self.user_email,
            REMINDER_SUBJECT_TPL.format(title=title),
            REMINDER_BODY_TPL.format(title=title, when=req.start_time.strftime("%Y-%m-%d %H:%M:%S")),
        )
