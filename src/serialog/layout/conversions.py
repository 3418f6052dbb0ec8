"""Named conversions: short aliases mapping to getters over a :class:`LoggingEvent`.

Built-in conversions grab the raw value (a ``datetime``, the exception object,
the property dict, ...) rather than its text so that the serializer decides
how the value is rendered.
"""

from __future__ import annotations

import functools
import getpass
import os
import socket
import sys
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import UTC
from pathlib import Path
from typing import Any, Union

import structlog

from serialog.events.models import NDC_PROPERTY, START_TIME, LoggingEvent

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Conversion:
    """A getter registered under a single alias."""

    name: str
    getter: Callable[..., Any]
    accepts_option: bool = False

    def __call__(self, event: LoggingEvent, option: str | None = None) -> Any:
        if self.accepts_option:
            return self.getter(event, option)
        return self.getter(event)

    def matches(self, name: str) -> bool:
        """Exact match, or case-insensitive for aliases longer than one character."""

        if self.name == name:
            return True
        return len(self.name) != 1 and self.name.casefold() == name.casefold()


ConversionSource = Union["ConversionRegistry", Mapping[str, Callable[..., Any]], Iterable[Conversion]]


class ConversionRegistry:
    """Ordered collection of conversions; earlier registrations win lookups."""

    def __init__(self, conversions: Iterable[Conversion] = ()) -> None:
        self._conversions: list[Conversion] = list(conversions)
        self._lock = threading.Lock()

    def __iter__(self) -> Iterator[Conversion]:
        return iter(list(self._conversions))

    def __len__(self) -> int:
        return len(self._conversions)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None

    def names(self) -> list[str]:
        return [conversion.name for conversion in self._conversions]

    def find(self, name: str | None) -> Conversion | None:
        if not name:
            return None
        for conversion in self._conversions:
            if conversion.matches(name):
                return conversion
        return None

    def register(
        self,
        getter: Callable[..., Any],
        *names: str,
        accepts_option: bool = False,
        replace: bool = False,
    ) -> None:
        """Register ``getter`` under each alias in ``names``.

        Without ``replace`` an alias that already exists keeps its earlier
        getter; with it the earlier entries of the same name are dropped.
        """

        if not names:
            raise ValueError("At least one conversion name is required")

        with self._lock:
            if replace:
                self._conversions = [c for c in self._conversions if c.name not in names]
            for name in names:
                self._conversions.append(Conversion(name, getter, accepts_option))

    def combine(self, other: ConversionSource | None) -> ConversionRegistry:
        """Return a new registry with this registry's entries first, then ``other``'s."""

        combined = ConversionRegistry(self._conversions)
        if other is None:
            return combined
        for conversion in _iter_conversions(other):
            if conversion not in combined._conversions:
                combined._conversions.append(conversion)
        return combined

    def copy(self) -> ConversionRegistry:
        return ConversionRegistry(self._conversions)


def _iter_conversions(source: ConversionSource) -> Iterator[Conversion]:
    if isinstance(source, Mapping):
        for name, getter in source.items():
            if isinstance(getter, Conversion):
                yield Conversion(name, getter.getter, getter.accepts_option)
            else:
                yield Conversion(name, getter)
        return
    for conversion in source:
        if not isinstance(conversion, Conversion):
            raise TypeError(f"Not a conversion: {conversion!r}")
        yield conversion


@functools.cache
def _host_name() -> str:
    return socket.gethostname()


@functools.cache
def _app_name() -> str:
    argv0 = sys.argv[0] if sys.argv else ""
    return Path(argv0).stem if argv0 else "python"


@functools.cache
def _user_name() -> str | None:
    try:
        return getpass.getuser()
    except (OSError, KeyError) as exc:
        logger.warning("user_name_unavailable", error=str(exc))
        return None


def _format_time(value: Any, option: str | None) -> Any:
    return value.strftime(option) if option else value.isoformat()


def _local_date(event: LoggingEvent, option: str | None = None) -> Any:
    return _format_time(event.timestamp.astimezone(), option)


def _utc_date(event: LoggingEvent, option: str | None = None) -> Any:
    return _format_time(event.timestamp.astimezone(UTC), option)


def _logger_name(event: LoggingEvent, option: str | None = None) -> str:
    # option is a precision: keep only the right-most N dotted components
    if option and option.strip().isdigit():
        precision = int(option)
        if precision > 0:
            return ".".join(event.logger_name.split(".")[-precision:])
    return event.logger_name


def _properties(event: LoggingEvent, option: str | None = None) -> Any:
    if option:
        return event.lookup_property(option)
    return dict(event.properties)


def _memory(event: LoggingEvent) -> int | None:
    if sys.platform == "win32":
        return None
    import resource

    # ru_maxrss is kilobytes on Linux, bytes on macOS
    usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    return usage if sys.platform == "darwin" else usage * 1024


def _relative_millis(event: LoggingEvent) -> float:
    return (event.timestamp - START_TIME).total_seconds() * 1000.0


def _make_builtins() -> ConversionRegistry:
    registry = ConversionRegistry()
    add = registry.register

    add(_utc_date, "utcdate", "utcDate", "UtcDate", accepts_option=True)
    add(_local_date, "date", "d", accepts_option=True)
    add(lambda e: e.level, "level", "p")
    add(_logger_name, "logger", "c", accepts_option=True)
    add(lambda e: e.thread_name, "thread", "t")
    add(lambda e: e.rendered_message, "message", "raw_event", "m")
    add(lambda e: e.message_object, "messageobject", "mo")
    add(lambda e: e.get_exception_string(), "exception", "e")
    add(lambda e: e.exception, "exceptionobject", "eo")
    add(lambda e: e.identity, "identity", "u")
    add(lambda e: e.user_name, "username", "w")
    add(_properties, "property", "properties", "mdc", "P", "X", accepts_option=True)
    add(lambda e: e.lookup_property(NDC_PROPERTY), "ndc", "x")
    add(lambda e: e.process_name or _app_name(), "appdomain", "a")
    add(lambda e: os.path.abspath(sys.argv[0]) if sys.argv and sys.argv[0] else None, "apppath")
    add(lambda e: _app_name(), "appname")
    add(lambda e: e.location.class_name or e.location.module, "type", "class", "C")
    add(lambda e: e.location.file, "file", "F")
    add(lambda e: e.location.full_info, "location", "l")
    add(lambda e: e.location.line, "line", "L")
    add(lambda e: e.location.function, "method", "M")
    add(_relative_millis, "timestamp", "r")
    add(lambda e: os.linesep, "newline", "n")
    add(lambda e: e.process_id or os.getpid(), "processid", "pid")
    add(lambda e: _host_name(), "hostname", "h")
    add(lambda e: " ".join(sys.orig_argv), "commandline")
    add(lambda e: _user_name(), "user")
    add(lambda e: os.environ.get("USERDOMAIN") or _host_name(), "domain")
    add(_memory, "memory")

    return registry


BUILTIN_CONVERSIONS = _make_builtins()


def default_registry(extra: ConversionSource | None = None) -> ConversionRegistry:
    """Built-in conversions followed by ``extra``."""

    return BUILTIN_CONVERSIONS.combine(extra)


__all__ = [
    "BUILTIN_CONVERSIONS",
    "Conversion",
    "ConversionRegistry",
    "ConversionSource",
    "default_registry",
]
