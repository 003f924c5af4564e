"""Engine configuration loaded from environment variables."""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from bloomtrack.srs.time import resolve_timezone

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class EngineSettings(BaseModel):
    """Settings for the stage-transition engine."""

    timezone: str = "UTC"  # IANA name used to find calendar-day boundaries
    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            resolve_timezone(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value}")
        return level


@lru_cache()
def get_settings() -> EngineSettings:
    """Get cached engine settings from environment variables (and a .env file)."""
    load_dotenv()

    return EngineSettings(
        timezone=os.getenv("BLOOMTRACK_TIMEZONE", "UTC"),
        log_level=os.getenv("BLOOMTRACK_LOG_LEVEL", "INFO"),
    )


def configure_logging(settings: EngineSettings | None = None) -> None:
    """Apply the configured level to the package logger."""
    settings = settings or get_settings()
    logging.getLogger("bloomtrack").setLevel(settings.log_level)
