"""
Service configuration.

Settings are read from environment variables (a local ``.env`` file is
loaded first) into a single dataclass instance.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """
    Application settings.

    Attributes:
        openai_api_key: API key for the OpenAI provider
        openai_model: Chat completion model used by every operation
        database_url: SQLAlchemy URL of the trip database
        jwt_secret: Secret used to verify Supabase access tokens
        jwt_audience: Expected ``aud`` claim of access tokens
        allowed_emails: Lower-cased allowlist; empty allows every user
        log_level: Root log level name
        log_json: Emit JSON log lines instead of the text format
        link_fetch_timeout: Seconds to wait when fetching a page for extraction
        cors_origins: Origins allowed by the CORS middleware
    """

    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-mini"
    database_url: str = "sqlite:///./holiday_planner.sqlite"
    jwt_secret: str = ""
    jwt_audience: str = "authenticated"
    allowed_emails: List[str] = field(default_factory=list)
    log_level: str = "INFO"
    log_json: bool = False
    link_fetch_timeout: float = 15.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        return cls(
            openai_api_key=os.environ.get("OPENAI_API_KEY", ""),
            openai_model=os.environ.get("OPENAI_MODEL", "gpt-4.1-mini"),
            database_url=os.environ.get(
                "DATABASE_URL", "sqlite:///./holiday_planner.sqlite"
            ),
            jwt_secret=os.environ.get("SUPABASE_JWT_SECRET", ""),
            jwt_audience=os.environ.get("JWT_AUDIENCE", "authenticated"),
            allowed_emails=[
                email.lower()
                for email in _split_csv(os.environ.get("ALLOWED_EMAILS", ""))
            ],
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_json=_as_bool(os.environ.get("LOG_JSON", "false")),
            link_fetch_timeout=float(os.environ.get("LINK_FETCH_TIMEOUT", "15")),
            cors_origins=_split_csv(os.environ.get("CORS_ORIGINS", "*")) or ["*"],
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings.from_env()
