import logging
from typing import Any, Optional
from llama_index.llms.ollama import Ollama
from app.config import settings, Settings
from app.errors import TextGenerationError

logger = logging.getLogger(__name__)

ASSISTANT_PROMPT = (
    "You are an AI executive assistant. Process this command and respond with a clear, "
    "actionable response: {command}\n\n"
    "Please respond in a helpful, professional manner. If the command involves scheduling, "
    "emailing, or task management, provide specific details about what actions should be taken."
)

def make_llm(config: Optional[Settings] = None):
    """
    Construct and return an Ollama LLM client instance.
    Uses model + parameters defined in settings.

    Returns:
        Ollama client configured with:
          - model / base_url: settings.llm_model, settings.llm_base_url
          - request_timeout: settings.llm_request_timeout
          - temperature: 0.2
          - additional_kwargs: keep_alive, num_predict
    """
    cfg = config or settings
    return Ollama(
        model=cfg.llm_model,
        base_url=cfg.llm_base_url,
        request_timeout=cfg.llm_request_timeout,
        temperature=0.2,
        additional_kwargs={
            "keep_alive": -1,
            "num_predict": 256,
        },
    )

def canned_reply(command: str) -> str:
    """Keyword-based stand-in reply used in dry-run mode."""
    t = command.lower()
    if "schedule" in t or "meeting" in t:
        return "I'll help schedule a meeting. Please provide the attendees, date, time, and meeting title."
    if "email" in t or "send" in t:
        return "I'll help send an email. Please provide the recipient, subject, and message content."
    if "remind" in t or "task" in t:
        return "I'll set a reminder. Please provide the task details and deadline."
    if "calendar" in t:
        return "I'll check the calendar. What specific information would you like to know about the schedule?"
    return f"I understand you want me to: {command}. How can I help with this?"

class CommandInterpreter:
    """Text-generation collaborator: advisory natural-language replies to task commands."""

    def __init__(self, llm: Any = None, config: Optional[Settings] = None):
        self._cfg = config or settings
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = make_llm(self._cfg)
        return self._llm

    def _complete(self, prompt: str) -> str:
        """Call LLM and return text. Supports .complete() or .predict()."""
        llm = self.llm
        return llm.complete(prompt).text if hasattr(llm, "complete") else llm.predict(prompt)

    def process_command(self, text: str) -> str:
        """
        Ask the model for an advisory reply to a task command.
        Raises:
            TextGenerationError on any model/transport failure or an empty reply.
        """
        if self._cfg.dry_run:
            return canned_reply(text)
        try:
            reply = self._complete(ASSISTANT_PROMPT.format(command=text))
        except Exception as e:
            raise TextGenerationError(str(e) or type(e).__name__) from e
        reply = (reply or "").strip()
        if not reply:
            raise TextGenerationError("empty response from model")
        logger.debug("LLM reply: %s", reply)
        return reply
