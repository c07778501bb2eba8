from dataclasses import dataclass
import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(key: str, default: int) -> int:
    """Read an int from env; unparseable values fall back to default."""
    try:
        return int(os.getenv(key, ""))
    except ValueError:
        return default


def _env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


# carries .env tokens, if dont exist uses fallbacks.
@dataclass(frozen=True)
class Settings:
    # google providers
    google_client_secret_path: str = os.getenv("GOOGLE_CLIENT_SECRET_PATH", "google_client_secret.json")
    google_token_path: str = os.getenv("GOOGLE_TOKEN_PATH", "token.json")
    gmail_from: str = os.getenv("GMAIL_FROM", "")
    calendar_id: str = os.getenv("CALENDAR_ID", "primary")

    # text generation
    llm_model: str = os.getenv("LLM_MODEL", "phi3:mini")
    llm_base_url: str = os.getenv("LLM_BASE_URL", "http://localhost:11434")
    llm_request_timeout: int = _env_int("LLM_REQUEST_TIMEOUT", 120)

    # notifications + scheduler
    user_email: str = os.getenv("USER_EMAIL", "")
    default_timezone: str = os.getenv("DEFAULT_TIMEZONE", "UTC")
    daily_reminder_time: str = os.getenv("DAILY_REMINDER_TIME", "09:00")
    meeting_reminder_minutes: int = _env_int("MEETING_REMINDER_MINUTES", 15)
    scheduler_tick_secs: int = _env_int("SCHEDULER_TICK_SECS", 60)

    # service
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    dry_run: bool = _env_bool("DRY_RUN")
    server_host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    server_port: int = _env_int("SERVER_PORT", 8080)

settings = Settings()
