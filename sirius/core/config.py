"""
Configuration module - centralized settings for the entire application.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    To override in production, set environment variables:
        export GEMINI_API_KEY=your-key
        export DEVICE_ADDRESS=192.168.1.50
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",        # Load from .env file in project root
        env_file_encoding="utf-8",
        extra="ignore",         # Ignore extra env vars not defined here
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    # APP_NAME: Display name shown in API docs and logging
    APP_NAME: str = "Sirius Home Assistant"

    # DEBUG: Enable debug mode (more verbose logging)
    DEBUG: bool = False

    # LOG_LEVEL: Level for the "sirius" logger hierarchy
    LOG_LEVEL: str = "INFO"

    # CORS_ORIGINS: Origins allowed to call the API from a browser
    # - The voice and text front-ends are served from a different origin
    CORS_ORIGINS: List[str] = ["*"]

    # ---------------------------------------------------------------------------
    # AI/LLM PROVIDER SETTINGS
    # ---------------------------------------------------------------------------
    # LLM_PROVIDER: Which provider classifies utterances
    # - "gemini" (default), "openai" or "anthropic"
    LLM_PROVIDER: str = "gemini"

    GEMINI_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""

    # ---------------------------------------------------------------------------
    # AI MODEL CONFIGURATION
    # ---------------------------------------------------------------------------
    GEMINI_MODEL: str = "gemini-2.5-flash"
    OPENAI_MODEL: str = "gpt-4o-mini"
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"

    # AI Request timeout in seconds
    # - One attempt per utterance, no retries
    AI_REQUEST_TIMEOUT: float = 30.0

    # ---------------------------------------------------------------------------
    # DEVICE SETTINGS
    # ---------------------------------------------------------------------------
    # DEVICE_ADDRESS: Host (and optional port) of the home-automation board
    # - Loaded once at startup; can be changed at runtime via POST /api/device
    # - Held in server-process memory only, lost on restart unless set here
    DEVICE_ADDRESS: Optional[str] = None

    # Timeouts in seconds
    # - Action commands may take a while (motors), status probes should be quick
    DEVICE_COMMAND_TIMEOUT: float = 10.0
    DEVICE_PROBE_TIMEOUT: float = 5.0

    # ---------------------------------------------------------------------------
    # WAKE WORD SETTINGS
    # ---------------------------------------------------------------------------
    # WAKE_WORD: Name the assistant answers to
    WAKE_WORD: str = "sirius"

    # WAKE_WORD_VARIANTS: Extra spellings to accept. Common transcriptions
    # ("serious", "syrius", "cirius") are already within the distance budget
    # of "sirius"; longer variants widen it enough to catch "curious".
    WAKE_WORD_VARIANTS: List[str] = ["sirius"]

    # WAKE_WORD_THRESHOLD: Max edit distance as a fraction of the variant length
    WAKE_WORD_THRESHOLD: float = 0.3

    # WAKE_WORD_REQUIRED: Gate every entry point (text and voice) on the wake word
    WAKE_WORD_REQUIRED: bool = True


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from sirius.core.config import settings
settings = Settings()
