"""Environment-driven settings for the avatar studio service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    # Rates and timeouts only make sense above zero.
    return value if value > 0 else default


@dataclass
class Settings:
    """Knobs read once at process start.

    Credentials only ever come from the environment (or the .env files loaded
    by the package); nothing secret is compiled into the source.
    """

    supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
    supabase_anon_key: Optional[str] = os.getenv("SUPABASE_ANON_KEY")
    supabase_service_role_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    avatars_table: str = os.getenv("AVATARS_TABLE", "avatars")
    # Suggestion endpoint used by the studio; defaults to this service's own route.
    suggestions_url: str = os.getenv("SUGGESTIONS_URL", "http://localhost:8000/suggestions")
    suggestions_api_key: Optional[str] = os.getenv("SUGGESTIONS_API_KEY")
    suggestions_model: str = os.getenv("SUGGESTIONS_MODEL", "gpt-5-mini")
    suggestions_timeout: float = _env_float("SUGGESTIONS_TIMEOUT", 30.0)
    openai_api_key: Optional[str] = os.getenv("OPENAI_API_KEY")
    render_fps: float = _env_float("RENDER_FPS", 30.0)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance to avoid repeated environment reads."""

    return Settings()


settings = get_settings()
