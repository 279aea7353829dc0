"""
Structured logging configuration using structlog.

Events are snake_case names with keyword fields. Development gets a colored
console; every other environment gets one JSON object per line.
"""

import logging
import sys
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from pharmstock.config.settings import get_settings

# Libraries whose INFO output would drown ledger events
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag events with the service name, version and environment."""
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def render_ledger_values(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Prices, movement dates and enum members as plain strings."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, (Decimal, date)):
            event_dict[key] = str(value)
    return event_dict


def build_processors(environment: str) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_service,
        render_ledger_values,
    ]
    if environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return processors


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger from settings."""
    settings = get_settings()
    level = getattr(logging, settings.log_level)

    structlog.configure(
        processors=build_processors(settings.environment),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
