"""Settings for pacekit, read from ``PACEKIT_*`` environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pacekit.logging import LogLevel


class LoggingConfig(BaseModel):
    """File output for pacekit's log records."""

    log_file: Path | None = Field(
        default=None,
        description="Write records to this file as well as stderr",
    )
    rotation: str = Field(
        default="10 MB",
        description="Loguru rotation rule for the log file",
    )
    retention: str = Field(
        default="7 days",
        description="Loguru retention rule for rotated files",
    )
    serialize: bool = Field(
        default=False,
        description="Write the log file as JSON lines",
    )


class Settings(BaseSettings):
    """Library settings loaded from environment variables.

    Variables use the ``PACEKIT_`` prefix; nested fields use ``__``
    (e.g. ``PACEKIT_LOGGING__LOG_FILE=/tmp/pacekit.log``).
    """

    model_config = SettingsConfigDict(
        env_prefix="PACEKIT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: LogLevel = Field(
        default="INFO",
        description="Console level used by setup_logging_from_settings",
    )
    trace_state_changes: bool = Field(
        default=False,
        description="Log every controller state replacement at TRACE level",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """Cached settings; call ``get_settings.cache_clear()`` after changing the environment."""
    return Settings()
