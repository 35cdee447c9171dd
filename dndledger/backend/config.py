"""Configuration helpers for engine runtime."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class EngineSettings:
    database_url: str | None
    max_write_attempts: int
    log_level: str


def load_settings() -> EngineSettings:
    attempts_raw = os.getenv("DNDLEDGER_MAX_WRITE_ATTEMPTS", "3")
    return EngineSettings(
        database_url=os.getenv("DNDLEDGER_DATABASE_URL"),
        max_write_attempts=max(1, int(attempts_raw)),
        log_level=os.getenv("DNDLEDGER_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: EngineSettings) -> logging.Logger:
    """Apply the configured level to the package logger and return it."""
    logger = logging.getLogger("dndledger")
    logger.setLevel(settings.log_level)
    return logger
