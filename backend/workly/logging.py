"""
Structured logging configuration for the workly project.

Modules log through ``logging.getLogger(__name__)``; structlog's
``ProcessorFormatter`` renders those records as JSON in production and as
coloured console lines in development. ``settings.py`` calls
``configure_structlog()`` and assigns ``build_logging_config()`` to
``LOGGING`` so Django applies it at startup.
"""

from typing import Dict

import structlog

NOISY_LOGGERS = ("django.server", "django.request", "urllib3")

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def configure_structlog() -> None:
    """Route structlog loggers through stdlib so both share one formatter."""
    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_logging_config(dev_mode: bool = False, level: str = "INFO") -> Dict:
    """
    Build a ``dictConfig`` mapping for Django's ``LOGGING`` setting.

    Args:
        dev_mode: Human-readable console output instead of JSON.
        level: Root log level name.
    """
    renderer = (
        structlog.dev.ConsoleRenderer() if dev_mode
        else structlog.processors.JSONRenderer()
    )

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": SHARED_PROCESSORS,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
        "loggers": {
            name: {"level": "WARNING"} for name in NOISY_LOGGERS
        },
    }
