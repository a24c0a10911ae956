"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclass for safety and clarity
- Single source of truth for all configurable values

EXTENSIBILITY:
- To switch profile store: change PROFILE_STORE_URI
- To switch LLM provider: point GROQ_API_URL at any OpenAI-compatible endpoint
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv

# Development convenience: values already in the environment win
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class DatabaseSettings:
    """Learner profile store settings."""

    uri: str = field(
        default_factory=lambda: os.getenv("PROFILE_STORE_URI", "sqlite:///absolute_learner.db")
    )
    timeout_seconds: int = field(default_factory=lambda: _env_int("PROFILE_STORE_TIMEOUT_SECONDS", 10))

    @property
    def path(self) -> Path:
        """Filesystem path behind a sqlite:/// URI (bare paths accepted)."""
        uri = self.uri
        if uri.startswith("sqlite:///"):
            uri = uri[len("sqlite:///"):]
        return Path(uri)


@dataclass(frozen=True)
class LLMSettings:
    """Groq (OpenAI-compatible) completion API settings."""

    api_key: str = field(default_factory=lambda: os.getenv("GROQ_API_KEY", ""))
    api_url: str = field(
        default_factory=lambda: os.getenv(
            "GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions"
        )
    )
    model: str = field(default_factory=lambda: os.getenv("GROQ_MODEL", "llama3-70b-8192"))

    timeout_seconds: int = field(default_factory=lambda: _env_int("LLM_TIMEOUT_SECONDS", 30))
    max_retries: int = field(default_factory=lambda: _env_int("HTTP_MAX_RETRIES", 2))


@dataclass(frozen=True)
class TwilioSettings:
    """Twilio WhatsApp delivery settings."""

    account_sid: str = field(default_factory=lambda: os.getenv("TWILIO_ACCOUNT_SID", ""))
    auth_token: str = field(default_factory=lambda: os.getenv("TWILIO_AUTH_TOKEN", ""))

    # Sender, e.g. "whatsapp:+14155238886"
    whatsapp_number: str = field(default_factory=lambda: os.getenv("TWILIO_WHATSAPP_NUMBER", ""))

    api_base_url: str = "https://api.twilio.com/2010-04-01"
    timeout_seconds: int = field(default_factory=lambda: _env_int("TWILIO_TIMEOUT_SECONDS", 15))
    max_retries: int = field(default_factory=lambda: _env_int("HTTP_MAX_RETRIES", 2))

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.whatsapp_number)


@dataclass(frozen=True)
class ServerSettings:
    """Webhook listener settings."""

    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 3000))


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from src.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.llm.model)
    """

    # Sub-settings groups
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    llm: LLMSettings = field(default_factory=LLMSettings)
    twilio: TwilioSettings = field(default_factory=TwilioSettings)
    server: ServerSettings = field(default_factory=ServerSettings)

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings/errors.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.llm.api_key:
            issues.append(
                "WARNING: GROQ_API_KEY not set. "
                "Free-form questions will get the fallback reply."
            )

        if not self.twilio.is_configured:
            issues.append(
                "WARNING: TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN / TWILIO_WHATSAPP_NUMBER "
                "not fully set. Replies will only be logged."
            )

        if self.twilio.whatsapp_number and not self.twilio.whatsapp_number.startswith("whatsapp:"):
            issues.append(
                "WARNING: TWILIO_WHATSAPP_NUMBER should look like 'whatsapp:+14155238886'."
            )

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
