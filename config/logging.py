"""
Application logging configuration.

Structured logging through structlog: JSON lines in production, coloured
console output in development. Engine log events carry Decimal amounts, so
both renderers share a processor that turns Decimals into strings before
rendering.

Usage:
    from config.logging import configure_structlog, get_logging_config

    configure_structlog(debug=DEBUG)
    LOGGING = get_logging_config(debug=DEBUG)
"""

import sys
from decimal import Decimal
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

APP_LOGGERS = ("wealth", "wealth.services", "wealth.management")


def stringify_decimals(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    """Render Decimal values as plain strings; JSON has no decimal type."""

    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
    return event_dict


def _foreign_pre_chain() -> list[Any]:
    """Processors applied to records that come from plain stdlib loggers."""

    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_structlog(debug: bool = False) -> None:
    """
    Configure structlog for the application.

    Must be called early in settings initialization, before any logging occurs.

    Args:
        debug: If True, use pretty console output with colors.
               If False, use JSON output for log aggregation.
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        stringify_decimals,
    ]

    if debug:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,  # type: ignore
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logging_config(debug: bool = False, app_level: str | None = None) -> dict[str, Any]:
    """
    Return Django LOGGING configuration dict.

    Args:
        debug: If True, use console formatter with colors.
               If False, use JSON formatter for production.
        app_level: Level for the ``wealth`` loggers. Defaults to DEBUG when
            ``debug`` is set and INFO otherwise.

    Returns:
        Django LOGGING configuration dict. Production settings add a
        rotating file handler on top of it.
    """
    formatter = "console" if debug else "json"
    level = app_level or ("DEBUG" if debug else "INFO")

    loggers: dict[str, Any] = {
        name: {"handlers": ["console"], "level": level, "propagate": False} for name in APP_LOGGERS
    }
    loggers.update(
        {
            "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        }
    )

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": structlog.processors.JSONRenderer(),
                "foreign_pre_chain": _foreign_pre_chain(),
            },
            "console": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": structlog.dev.ConsoleRenderer(colors=True),
                "foreign_pre_chain": _foreign_pre_chain(),
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": sys.stdout,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "INFO",
        },
        "loggers": loggers,
    }
