"""rulekit configuration management."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from rulekit.core.models import ValidationMode


class Settings(BaseSettings):
    """Defaults loaded from environment (RULEKIT_*) or .env."""

    model_config = SettingsConfigDict(
        env_prefix="RULEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Validation behavior
    mode: ValidationMode = ValidationMode.COLLECT_ALL
    message_template: str = "{field} failed {predicate}"
    required_message: str = "{field} is required"

    # Build validators against only the predicates their rules reference
    only_used_predicates: bool = True

    # Optional JSON rule file for validator_from_settings()
    rules_file: Path | None = None

    # Logging
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Attach a stream handler to the rulekit logger. For applications, not libraries."""
    settings = settings or get_settings()
    logger = logging.getLogger("rulekit")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(settings.log_format))
        logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
