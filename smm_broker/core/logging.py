"""Logging setup for the service process."""

from __future__ import annotations

import logging.config

from smm_broker.core.config import Settings


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.logging.level.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": settings.logging.format},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "smm_broker": {"level": level},
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
        }
    )
