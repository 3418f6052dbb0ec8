"""Structured logging configuration for serialog's own diagnostics."""

from __future__ import annotations

import logging

import structlog

from serialog.config import LayoutSettings, get_settings


def _get_shared_processors() -> list[structlog.types.Processor]:
    """Common structlog processors."""

    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(
    level: str | None = None,
    *,
    serialized: bool = False,
    settings: LayoutSettings | None = None,
) -> None:
    """Configure structlog and standard logging.

    With ``serialized`` every record, structlog or stdlib, is written by a
    :class:`~serialog.handlers.SerializedFormatter` built from the settings;
    otherwise structlog renders plain JSON lines.
    """

    settings = settings or get_settings()
    level_name = (level or settings.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    if serialized:
        from serialog.handlers import SerializedFormatter
        from serialog.layout.serialized import SerializedLayout

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.StackInfoRenderer(),
                structlog.stdlib.render_to_log_kwargs,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        handler = logging.StreamHandler()
        handler.setFormatter(SerializedFormatter(layout=SerializedLayout.from_settings(settings)))
        logging.basicConfig(level=numeric_level, handlers=[handler])
        return

    structlog.configure(
        processors=[
            *_get_shared_processors(),
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=numeric_level, format="%(message)s")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return configured logger."""

    return structlog.get_logger(name)
