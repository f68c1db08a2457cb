"""Application settings, read from the environment and an optional ``.env`` file."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import FALLBACK_REPLY


class Settings(BaseSettings):
    """Settings for the chat app.

    Every field can be set through an environment variable with the
    ``GEMINI_`` prefix, e.g. ``GEMINI_API_KEY`` or ``GEMINI_MODEL``.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_", env_file=".env", extra="ignore"
    )

    api_key: Optional[str] = None
    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    # Seconds. None waits forever.
    timeout: Optional[float] = 60.0
    fallback_reply: str = FALLBACK_REPLY

    log_level: str = "INFO"
    max_sessions: int = 1000

    # Dash server
    host: str = "127.0.0.1"
    port: int = 8050
    debug: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
