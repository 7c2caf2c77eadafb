"""Process-wide logging configuration for the API and Celery workers."""

from __future__ import annotations

import logging
import logging.config
from typing import Optional

from app.config import get_settings

ROOT_LOGGER_NAME = "fanflow"


class LoggingConfig:
    """Configure logging once per process. Level comes from LOG_LEVEL."""

    _configured = False

    def __init__(self, level: Optional[str] = None) -> None:
        if LoggingConfig._configured:
            return
        level = (level or get_settings().log_level).upper()
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "default": {
                        "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "formatter": "default",
                    }
                },
                "loggers": {
                    ROOT_LOGGER_NAME: {
                        "handlers": ["console"],
                        "level": level,
                        "propagate": True,
                    },
                    "app": {"handlers": ["console"], "level": level, "propagate": True},
                },
            }
        )
        LoggingConfig._configured = True


def get_logger(name: str) -> logging.Logger:
    """Named logger under the service namespace."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
