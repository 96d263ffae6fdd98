"""Settings for the completion provider."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# Recommended models for creative generation, default first.
RECOMMENDED_MODELS = (
    "anthropic/claude-3-haiku",
    "openai/gpt-4-turbo",
    "anthropic/claude-3-sonnet",
    "openai/gpt-3.5-turbo",
)
DEFAULT_MODEL = RECOMMENDED_MODELS[0]


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str = OPENROUTER_BASE_URL
    app_url: str = "http://localhost"
    app_title: str = "Haiku Generator"
    timeout: float = 30.0
    temperature: float = 0.8
    max_tokens: int = 150

    @property
    def configured(self) -> bool:
        return bool(self.api_key.strip())

    def with_overrides(self, api_key: Optional[str] = None, model: Optional[str] = None) -> "Settings":
        """Return a copy with any non-empty override applied."""

        changes = {}
        if api_key:
            changes["api_key"] = api_key
        if model:
            changes["model"] = model
        return replace(self, **changes) if changes else self


def load_settings(env_file: Optional[Path | str] = None) -> Settings:
    """Read settings from ``env_file`` (or a ``.env`` nearby) and the environment."""

    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    timeout_text = os.getenv("HAIKU_ASSISTANT_TIMEOUT", "")
    try:
        timeout = float(timeout_text) if timeout_text else Settings.timeout
    except ValueError:
        LOGGER.warning("Ignoring invalid HAIKU_ASSISTANT_TIMEOUT=%r", timeout_text)
        timeout = Settings.timeout

    settings = Settings(
        api_key=os.getenv("OPENROUTER_API_KEY", "").strip(),
        model=os.getenv("HAIKU_ASSISTANT_MODEL", "").strip() or DEFAULT_MODEL,
        base_url=os.getenv("HAIKU_ASSISTANT_BASE_URL", "").strip() or OPENROUTER_BASE_URL,
        app_url=os.getenv("HAIKU_ASSISTANT_APP_URL", "").strip() or Settings.app_url,
        timeout=timeout,
    )
    if not settings.configured:
        LOGGER.debug("OPENROUTER_API_KEY is not set")
    return settings
