"""Stamps: computed values written into an event's properties before formatting.

A stamp works in three places:

* as a ``logging.Filter`` on a handler or logger (sets a record attribute,
  which :meth:`LoggingEvent.from_record` turns into a property);
* as a structlog processor (sets an event dict key);
* directly on a :class:`LoggingEvent` through :meth:`Stamp.stamp_event`.
"""

from __future__ import annotations

import logging
import os
import socket
import threading
import time
from collections.abc import MutableMapping
from enum import Enum
from typing import Any

from serialog.events.models import START_TIME, LoggingEvent


class AgeReference(Enum):
    EPOCH_1970 = 0
    SYSTEM_START = 1
    APPLICATION_START = 2
    NOW = 3


_sync_root = threading.Lock()
_sequence_id = 0

# seconds since the epoch; the system start is the monotonic clock's origin
_ref_sys_time = time.time() - time.monotonic()
_ref_app_time = START_TIME.timestamp()
_process_id = os.getpid()


def get_process_id() -> int:
    return _process_id


def get_sequence() -> int:
    """Next value of the process-wide sequence, starting at 1."""
    global _sequence_id
    with _sync_root:
        _sequence_id += 1
        return _sequence_id


def set_sequence(value: int) -> int:
    """Reset the sequence; returns the previous value."""
    global _sequence_id
    with _sync_root:
        previous, _sequence_id = _sequence_id, value
        return previous


def get_epoch_time(age_ref: AgeReference) -> float:
    if age_ref is AgeReference.NOW:
        return _ref_sys_time + time.monotonic()
    if age_ref is AgeReference.EPOCH_1970:
        return 0.0
    if age_ref is AgeReference.SYSTEM_START:
        return _ref_sys_time
    if age_ref is AgeReference.APPLICATION_START:
        return _ref_app_time
    raise ValueError(f"AgeReference not implemented: {age_ref!r}")


def adjust_time_value(value: float, multiplier: float = 0, round_value: bool = False) -> float:
    if multiplier not in (0, 1):
        value *= multiplier
    if round_value:
        value = float(round(value))
    return value


def get_time_stamp_value(
    time_from: AgeReference,
    time_to: AgeReference,
    multiplier: float = 0,
    round_value: bool = False,
) -> float:
    """Seconds from ``time_from`` to ``time_to``, scaled and optionally rounded."""

    return adjust_time_value(get_epoch_time(time_to) - get_epoch_time(time_from), multiplier, round_value)


class Stamp(logging.Filter):
    """Stamps ``"host;sys-start;app-start;uptime;pid;seq"`` under :attr:`property_name`."""

    def __init__(self, property_name: str = "stamp") -> None:
        # logging.Filter's own name filters by logger, keep it empty
        super().__init__()
        self.property_name = property_name

    def get_value(self) -> Any:
        t_sys = get_time_stamp_value(AgeReference.EPOCH_1970, AgeReference.SYSTEM_START)
        t_app = get_time_stamp_value(AgeReference.SYSTEM_START, AgeReference.APPLICATION_START)
        t_now = get_time_stamp_value(AgeReference.APPLICATION_START, AgeReference.NOW)
        return f"{socket.gethostname()};{t_sys};{t_app};{t_now};{get_process_id()};{get_sequence()}"

    def sanitized_value(self) -> Any:
        value = self.get_value()
        if value is None or isinstance(value, (str, bool, int, float)):
            return value
        return str(value)

    def stamp_event(self, event: LoggingEvent) -> None:
        event.properties[self.property_name] = self.sanitized_value()

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, self.property_name, self.sanitized_value())
        return True

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        event_dict[self.property_name] = self.sanitized_value()
        return event_dict


class TimeStamp(Stamp):
    """Seconds between two reference points, e.g. the epoch and now."""

    def __init__(
        self,
        property_name: str = "stamp",
        *,
        time_from: AgeReference = AgeReference.EPOCH_1970,
        time_to: AgeReference = AgeReference.NOW,
        multiplier: float = 0,
        round_value: bool = False,
    ) -> None:
        super().__init__(property_name)
        self.time_from = time_from
        self.time_to = time_to
        self.multiplier = multiplier
        self.round_value = round_value

    def get_value(self) -> Any:
        return get_time_stamp_value(self.time_from, self.time_to, self.multiplier, self.round_value)


class ValueStamp(Stamp):
    def __init__(self, property_name: str = "stamp", value: Any = None) -> None:
        super().__init__(property_name)
        self.value = value

    def get_value(self) -> Any:
        return self.value


__all__ = [
    "AgeReference",
    "Stamp",
    "TimeStamp",
    "ValueStamp",
    "adjust_time_value",
    "get_epoch_time",
    "get_process_id",
    "get_sequence",
    "get_time_stamp_value",
    "set_sequence",
]
