"""Adapters plugging a :class:`SerializedLayout` into stdlib logging and structlog."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

from serialog.events.models import LoggingEvent
from serialog.layout.conversions import ConversionSource
from serialog.layout.serialized import SerializedLayout


class SerializedFormatter(logging.Formatter):
    """``logging.Formatter`` writing each record as a JSON document.

    Usable from ``dictConfig``::

        "formatters": {
            "json": {
                "()": "serialog.handlers.SerializedFormatter",
                "arrangement": "DEFAULT!nxlog;Host=Name:hostname",
            },
        }
    """

    def __init__(
        self,
        arrangement: str | None = None,
        *,
        layout: SerializedLayout | None = None,
        conversions: ConversionSource | None = None,
        flatten: bool = False,
    ) -> None:
        super().__init__()
        if layout is None:
            layout = SerializedLayout(
                conversion_pattern=arrangement,
                conversions=conversions,
                flatten=flatten,
            )
        self.layout = layout
        self.layout.activate_options()

    def format(self, record: logging.LogRecord) -> str:
        return self.layout.format(LoggingEvent.from_record(record))


class SerializedRenderer:
    """Final structlog processor rendering the event dict as a JSON document."""

    def __init__(
        self,
        arrangement: str | None = None,
        *,
        layout: SerializedLayout | None = None,
        conversions: ConversionSource | None = None,
        flatten: bool = False,
    ) -> None:
        if layout is None:
            layout = SerializedLayout(
                conversion_pattern=arrangement,
                conversions=conversions,
                flatten=flatten,
            )
        self.layout = layout
        self.layout.activate_options()

    def __call__(self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> str:
        logger_name = getattr(logger, "name", None) or ""
        event = LoggingEvent.from_event_dict(logger_name, method_name, event_dict)
        return self.layout.format(event)


__all__ = ["SerializedFormatter", "SerializedRenderer"]
