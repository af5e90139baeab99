"""Logging configuration for Linfy."""

import json
import logging
import sys
from typing import Optional


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; the message is escaped, not interpolated."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the ``linfy`` logger; every ``linfy.*`` module logger propagates to it.

    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Also write to this file when given
        json_format: Emit JSON lines instead of plain text

    Returns:
        The configured ``linfy`` logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("linfy")
    logger.setLevel(numeric_level)
    # Calling twice (tests, CLI re-entry) must not duplicate output
    logger.handlers.clear()

    if json_format:
        formatter = JsonLineFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str = "linfy") -> logging.Logger:
    """Get a logger under the ``linfy`` namespace."""
    return logging.getLogger(name)
