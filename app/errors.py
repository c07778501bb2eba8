class AgentError(Exception):
    """Base for every error raised by the agent."""


class CollaboratorError(AgentError):
    """
    An external provider (calendar, email, text generation) call failed.
    Inputs:
        detail: provider-supplied error text (HTTP status/body where available).
    """
    provider = "collaborator"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{self.provider} error: {detail}")


class CalendarError(CollaboratorError):
    provider = "calendar"


class EmailError(CollaboratorError):
    provider = "email"


class TextGenerationError(CollaboratorError):
    provider = "text-generation"


class SchedulerStateError(AgentError):
    """start()/stop() called in the wrong scheduler state."""
