"""Settings management for the code understanding engine.

This module provides centralized configuration using pydantic-settings and
the structlog setup shared by every component. All configuration is loaded
from environment variables with sensible defaults.
"""

import logging
from functools import lru_cache

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables.

    Attributes:
        app_name: Name of the application.
        app_version: Application version.
        log_level: Logging level.
        log_json: Render log events as JSON instead of console lines.
        strict_syntax: Treat a tree with syntax errors as a parse failure.
        cache_enabled: Attach a result cache to engines built from settings.
        cache_max_entries: Maximum number of cached reports.
    """

    model_config = SettingsConfigDict(
        env_prefix="CODESIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="codesight", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    strict_syntax: bool = Field(
        default=True,
        description="Reject source whose parse tree contains syntax errors",
    )

    cache_enabled: bool = Field(default=False, description="Enable result cache")
    cache_max_entries: int = Field(
        default=256,
        ge=1,
        le=100_000,
        description="Maximum number of cached analysis reports",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def configure_logging(level: str | None = None, json_format: bool | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Log level name. Defaults to the configured settings value.
        json_format: Render JSON lines. Defaults to the configured settings value.
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_format is None:
        json_format = settings.log_json

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=getattr(logging, level, logging.INFO))
