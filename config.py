# config.py
"""Configuration settings for the SL Score story-structure analyser.
Uses Pydantic BaseSettings for automatic environment variable loading.
"""

from __future__ import annotations

import structlog
from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = structlog.get_logger()


class SLScoreSettings(BaseSettings):
    """Full configuration for SL Score."""

    # API and Model Configuration
    GROQ_API_KEY: str = ""
    LLM_API_BASE: str = "https://api.groq.com/openai/v1"
    LLM_MODEL: str = "llama-3.3-70b-versatile"
    LLM_TEMPERATURE: float = 0.3
    LLM_MAX_TOKENS: int = 8000
    HTTPX_TIMEOUT: float = 300.0

    # Retry policy for a single LLM call (attempts = LLM_MAX_RETRIES + 1)
    LLM_MAX_RETRIES: int = 3
    RATE_LIMIT_BACKOFF_SECONDS: float = 30.0
    ERROR_BACKOFF_SECONDS: float = 5.0

    # Pipeline pacing
    CHUNK_DELAY_SECONDS: float = 5.0
    PHASE_DELAY_SECONDS: float = 60.0

    # Chunking
    CHUNK_GROUP_SIZE: int = 8
    MAX_CHUNK_CHARS: int = 15000
    CHUNK_PREVIEW_CHARS: int = 200

    # Hybrid mode
    HYBRID_MIN_RESPONSE_CHARS: int = 100

    # Output
    BASE_OUTPUT_DIR: str = "slscore_output"
    RESULTS_FILE: str = "results.json"

    # Logging & UI
    LOG_LEVEL_STR: str = Field("INFO", alias="SLSCORE_LOG_LEVEL")
    LOG_FORMAT: str = (
        "%(asctime)s - %(levelname)s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
    )
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_FILE: str | None = "slscore_run.log"
    ENABLE_RICH_PROGRESS: bool = True

    @model_validator(mode="after")
    def check_limits(self) -> SLScoreSettings:
        for name in (
            "LLM_MAX_TOKENS",
            "HTTPX_TIMEOUT",
            "CHUNK_GROUP_SIZE",
            "MAX_CHUNK_CHARS",
            "CHUNK_PREVIEW_CHARS",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in (
            "LLM_MAX_RETRIES",
            "RATE_LIMIT_BACKOFF_SECONDS",
            "ERROR_BACKOFF_SECONDS",
            "CHUNK_DELAY_SECONDS",
            "PHASE_DELAY_SECONDS",
            "HYBRID_MIN_RESPONSE_CHARS",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if not self.GROQ_API_KEY:
            logger.warning(
                "GROQ_API_KEY is not set; pipeline analysis will fail until it is configured."
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", populate_by_name=True, extra="ignore"
    )


settings = SLScoreSettings()
# Code should import the 'settings' object directly, e.g. 'from config import settings'
# and access attributes via 'settings.MY_SETTING'.
