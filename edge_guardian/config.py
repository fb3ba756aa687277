"""
Process-wide settings, read once from the environment (and .env).

The composition root builds a single Settings instance and hands it to the
pipeline and its collaborators; nothing below reads os.environ per request.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %r", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %r", name, raw, default)
        return default


@dataclass(frozen=True)
class SmtpSettings:
    host: str = ""
    port: int | None = None
    user: str = ""
    password: str = ""

    def is_configured(self) -> bool:
        return bool(self.host and self.port and self.user and self.password)


@dataclass(frozen=True)
class Settings:
    classifier_url: str = ""
    classifier_timeout_sec: float = 30.0
    openai_api_key: str = ""
    openai_model: str = DEFAULT_OPENAI_MODEL
    max_tool_rounds: int = 5
    location_temperature: float = 0.7
    google_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    smtp: SmtpSettings = field(default_factory=SmtpSettings)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            classifier_url=os.getenv("EDGE_IMPULSE_API_URL", "").strip(),
            classifier_timeout_sec=_env_float("CLASSIFIER_TIMEOUT_SEC", 30.0),
            openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
            openai_model=os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            max_tool_rounds=_env_int("ALERT_MAX_TOOL_ROUNDS", 5),
            location_temperature=_env_float("LOCATION_TEMPERATURE", 0.7),
            google_api_key=os.getenv("GOOGLE_API_KEY", "").strip(),
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            smtp=SmtpSettings(
                host=os.getenv("SMTP_HOST", "").strip(),
                port=_env_int("SMTP_PORT", None),
                user=os.getenv("SMTP_USER", "").strip(),
                password=os.getenv("SMTP_PASS", ""),
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
