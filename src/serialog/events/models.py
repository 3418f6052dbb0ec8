"""Read-only event model consumed by member getters.

The layout never touches host log records directly: stdlib ``LogRecord``s and
structlog event dicts are both adapted into a :class:`LoggingEvent` first.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Mapping

from serialog.events import context

START_TIME = datetime.now(UTC)

NDC_PROPERTY = "NDC"

# attributes every LogRecord carries; anything else arrived through ``extra=``
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

# event dict keys that fill standard fields instead of becoming properties
_EVENT_DICT_KEYS = frozenset(
    {
        "event",
        "level",
        "timestamp",
        "exc_info",
        "exception",
        "logger",
        "pathname",
        "filename",
        "lineno",
        "func_name",
        "module",
        "thread_name",
        "process",
        "process_name",
    }
)


@dataclass(slots=True)
class LocationInfo:
    """Call site of the logging statement."""

    file: str | None = None
    line: int | None = None
    function: str | None = None
    module: str | None = None
    class_name: str | None = None

    @property
    def full_info(self) -> str | None:
        if self.function is None and self.file is None:
            return None
        owner = self.class_name or self.module or "?"
        return f"{owner}.{self.function or '?'}({self.file or '?'}:{self.line or '?'})"


@dataclass(slots=True)
class LoggingEvent:
    """Snapshot of a single log call as seen by the layout."""

    rendered_message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    level: str = "INFO"
    logger_name: str = ""
    thread_name: str | None = None
    message_object: Any = None
    exception: BaseException | None = None
    exception_text: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    location: LocationInfo = field(default_factory=LocationInfo)
    process_id: int | None = None
    process_name: str | None = None
    identity: str | None = None
    user_name: str | None = None

    def lookup_property(self, name: str) -> Any:
        """Exact-name property lookup; None when absent."""

        return self.properties.get(name)

    def get_exception_string(self) -> str | None:
        if self.exception_text:
            return self.exception_text
        if self.exception is None:
            return None
        lines = traceback.format_exception(
            type(self.exception), self.exception, self.exception.__traceback__
        )
        return "".join(lines).rstrip("\n")

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> LoggingEvent:
        """Adapt a stdlib ``LogRecord``."""

        properties = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        _capture_context(properties)

        exception = None
        exception_text = record.exc_text
        if record.exc_info and record.exc_info[1] is not None:
            exception = record.exc_info[1]
            if not exception_text:
                exception_text = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")

        return cls(
            rendered_message=record.getMessage(),
            timestamp=datetime.fromtimestamp(record.created, tz=UTC),
            level=record.levelname,
            logger_name=record.name,
            thread_name=record.threadName,
            message_object=record.msg,
            exception=exception,
            exception_text=exception_text,
            properties=properties,
            location=LocationInfo(
                file=record.pathname,
                line=record.lineno,
                function=record.funcName,
                module=record.module,
            ),
            process_id=record.process,
            process_name=record.processName,
        )

    @classmethod
    def from_event_dict(
        cls,
        logger_name: str,
        method_name: str,
        event_dict: Mapping[str, Any],
    ) -> LoggingEvent:
        """Adapt a structlog event dict at the end of a processor chain."""

        properties = {
            key: value for key, value in event_dict.items() if key not in _EVENT_DICT_KEYS
        }
        _capture_context(properties)

        exception = None
        exc_info = event_dict.get("exc_info")
        if isinstance(exc_info, BaseException):
            exception = exc_info
        elif isinstance(exc_info, tuple) and len(exc_info) == 3:
            exception = exc_info[1]
        elif exc_info is True:
            exception = sys.exc_info()[1]

        message = event_dict.get("event")
        level = event_dict.get("level") or method_name
        line = event_dict.get("lineno")

        return cls(
            rendered_message="" if message is None else str(message),
            timestamp=_coerce_timestamp(event_dict.get("timestamp")),
            level=str(level).upper(),
            logger_name=str(event_dict.get("logger") or logger_name or ""),
            thread_name=event_dict.get("thread_name") or threading.current_thread().name,
            message_object=message,
            exception=exception,
            exception_text=event_dict.get("exception"),
            properties=properties,
            location=LocationInfo(
                file=event_dict.get("pathname") or event_dict.get("filename"),
                line=line if isinstance(line, int) else None,
                function=event_dict.get("func_name"),
                module=event_dict.get("module"),
            ),
            process_id=event_dict.get("process") or os.getpid(),
            process_name=event_dict.get("process_name"),
        )


def _capture_context(properties: dict[str, Any]) -> None:
    snapshot = context.current()
    if snapshot and NDC_PROPERTY not in properties:
        properties[NDC_PROPERTY] = snapshot


def _coerce_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return datetime.now(UTC)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)


__all__ = ["LocationInfo", "LoggingEvent", "NDC_PROPERTY", "START_TIME"]
