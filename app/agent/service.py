import logging
from datetime import datetime
from typing import Callable, Optional
from dateutil import tz
from app.agent.pipeline import build_pipeline
from app.agent.router import TaskRouter
from app.agent.scheduler import PeriodicScheduler
from app.config import Settings
from app.domain.interfaces import CalendarProvider, EmailProvider, TextGenerator
from app.domain.schemas import TaskOutcome
from app.llm.client import CommandInterpreter
from app.services.calendar_service import CalendarClient
from app.services.gmail_service import GmailClient
from app.services.google_auth import GoogleAuth, ALL_SCOPES

logger = logging.getLogger(__name__)

class AgentService:
    """
    Composition root: one task pipeline + one periodic scheduler sharing the
    same collaborators. Built once and handed to the request layer.
    """

    def __init__(
        self,
        config: Settings,
        calendar: CalendarProvider,
        email: EmailProvider,
        text_gen: TextGenerator,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.tz = tz.gettz(config.default_timezone) or tz.UTC
        self._clock = clock or (lambda: datetime.now(self.tz))
        self.text_gen = text_gen
        self.router = TaskRouter(calendar, email, config.user_email)
        self.pipeline = build_pipeline(text_gen, self.router)
        self.scheduler = PeriodicScheduler(
            calendar,
            email,
            config.user_email,
            daily_reminder_time=config.daily_reminder_time,
            reminder_minutes=config.meeting_reminder_minutes,
            tick_secs=config.scheduler_tick_secs,
            timezone=self.tz,
            clock=self._clock,
        )

    def start(self) -> None:
        logger.info("Starting agent service")
        self.scheduler.start()

    def stop(self) -> None:
        logger.info("Stopping agent service")
        self.scheduler.stop()

    def process_task(self, task: str) -> TaskOutcome:
        """
        Advise → classify → route one task string.
        Raises:
            CollaboratorError from the text-generation call (nothing else runs)
            or from the routed calendar/email call.
        """
        logger.info("Processing task: %r", task)
        try:
            out = self.pipeline.invoke({"task": task, "now": self._clock()})
        except Exception as e:
            logger.error("Task failed: %s", e)
            raise
        logger.info("Task handled as %s", out["request"].type.value)
        return TaskOutcome(request=out["request"], advisory=out.get("advisory", ""))

    def process_command(self, command: str) -> str:
        """Advisory text-generation reply only; no classification or routing."""
        return self.text_gen.process_command(command)

def build_agent(config: Settings) -> AgentService:
    """Wire the Google/Ollama provider clients into an AgentService."""
    auth = GoogleAuth(ALL_SCOPES, config)
    return AgentService(
        config,
        calendar=CalendarClient(auth, config),
        email=GmailClient(auth, config),
        text_gen=CommandInterpreter(config=config),
    )
