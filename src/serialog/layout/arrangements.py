"""Arrangements: rules editing the ordered list of members to be serialized.

The variant set is closed (:data:`Arrangement`); :func:`arrange` dispatches on
it. Every variant takes a string option through ``set_option`` so that it can
be configured from an arrangement spec (``Name!option``).
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

import structlog

from serialog.errors import ConfigurationError
from serialog.layout.context import ArrangeContext
from serialog.layout.members import Member

logger = structlog.get_logger(__name__)

DEFAULT_PRESET = "default"

_presets_lock = threading.Lock()

# canned member lists recognised by DEFAULT!<name>
PRESETS: dict[str, str] = {
    "default": (
        "date;"
        "level;"
        "appname;"
        "logger;"
        "thread;"
        "ndc|%ndc;"
        "message;"
        "exception;"
    ),
    "nxlog": (
        "EventTime:date;"
        "Severity:level;"
        "SourceName:appname;"
        "Logger;"
        "Thread;"
        "NDC|%ndc;"
        "Message;"
        "Exception;"
    ),
}


def register_preset(name: str, spec: str) -> None:
    """Add or replace a named preset. Not safe while events are being formatted."""

    with _presets_lock:
        PRESETS[name] = spec


def unregister_preset(name: str) -> str | None:
    with _presets_lock:
        return PRESETS.pop(name, None)


def preset_snapshot() -> dict[str, str]:
    with _presets_lock:
        return dict(PRESETS)


class ArrangementPlugin(Protocol):
    """Anything loaded by dotted name that knows how to arrange members."""

    def arrange(self, members: list[Member], context: ArrangeContext) -> None:
        ...


@dataclass(slots=True)
class NoArrangement:
    """Leaves the members untouched."""

    def set_option(self, value: str | None) -> None:
        pass


@dataclass(slots=True)
class OptionArrangement:
    """Parses its option into an arrangement each time it is applied."""

    option: str | None = None

    def set_option(self, value: str | None) -> None:
        self.option = value


@dataclass(slots=True)
class DefaultArrangement:
    """Applies one of the named presets, falling back when the name is unknown."""

    default: str | None = DEFAULT_PRESET
    config: dict[str, str] = field(default_factory=preset_snapshot)

    def __post_init__(self) -> None:
        if not self.default:
            self.default = DEFAULT_PRESET

    def set_option(self, value: str | None) -> None:
        self.default = value or DEFAULT_PRESET

    def resolve_spec(self) -> str | None:
        """Pick the arrangement spec for :attr:`default`.

        Requested preset, then the ``default`` preset, then the first one
        available. Returns None when there are no presets at all.
        """

        config = self.config
        requested = self.default or DEFAULT_PRESET

        if not config:
            logger.error("no_presets_available", requested=requested)
            return None

        spec = config.get(requested)
        if spec is None and requested != DEFAULT_PRESET:
            logger.warning("preset_not_found", requested=requested, fallback=DEFAULT_PRESET)
            spec = config.get(DEFAULT_PRESET)

        if spec is None:
            first = next(iter(config))
            logger.warning("preset_not_found", requested=DEFAULT_PRESET, fallback=first)
            spec = config[first]

        return spec


@dataclass(slots=True)
class RemovalArrangement:
    """Removes members whose name matches ``pattern``, or every member when unset."""

    pattern: str | None = None
    _regex: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.set_option(self.pattern)

    def set_option(self, value: str | None) -> None:
        self.pattern = value or None
        if self.pattern is None:
            self._regex = None
            return
        try:
            self._regex = re.compile(self.pattern)
        except re.error as exc:
            raise ConfigurationError(
                f"Invalid removal pattern '{self.pattern}': {exc}", spec=self.pattern
            ) from exc

    def matches(self, name: str) -> bool:
        return self._regex is None or self._regex.search(name) is not None


@dataclass(slots=True)
class MultipleArrangement:
    """Applies the option arrangement first, then each child in order."""

    arrangements: list[Arrangement] = field(default_factory=list)
    option: str | None = None

    def add(self, arrangement: Arrangement | None) -> None:
        if arrangement is not None:
            self.arrangements.append(arrangement)

    def set_option(self, value: str | None) -> None:
        self.option = value


@dataclass(slots=True)
class PluginArrangement:
    """Wraps a custom arrangement object loaded by its dotted name."""

    target: Any

    def set_option(self, value: str | None) -> None:
        setter = getattr(self.target, "set_option", None)
        if setter is not None:
            setter(value)


Arrangement = Union[
    NoArrangement,
    OptionArrangement,
    DefaultArrangement,
    RemovalArrangement,
    MultipleArrangement,
    Member,
    PluginArrangement,
]

ARRANGEMENT_TYPES: tuple[type, ...] = (
    NoArrangement,
    OptionArrangement,
    DefaultArrangement,
    RemovalArrangement,
    MultipleArrangement,
    Member,
    PluginArrangement,
)


def arrange(
    arrangement: Arrangement | None,
    members: list[Member],
    context: ArrangeContext | None = None,
) -> None:
    """Apply ``arrangement`` to ``members`` in place."""

    if arrangement is None:
        return

    if context is None:
        context = ArrangeContext()

    if isinstance(arrangement, Member):
        members.append(arrangement)
    elif isinstance(arrangement, RemovalArrangement):
        members[:] = [member for member in members if not arrangement.matches(member.name)]
    elif isinstance(arrangement, MultipleArrangement):
        arrange(_parse_option(arrangement.option, context), members, context)
        for child in list(arrangement.arrangements):
            arrange(child, members, context)
    elif isinstance(arrangement, DefaultArrangement):
        spec = arrangement.resolve_spec()
        if spec is not None:
            arrange(_parse_option(spec, context), members, context)
    elif isinstance(arrangement, OptionArrangement):
        arrange(_parse_option(arrangement.option, context), members, context)
    elif isinstance(arrangement, NoArrangement):
        return
    elif isinstance(arrangement, PluginArrangement):
        arrangement.target.arrange(members, context)
    else:
        raise TypeError(f"Not an arrangement: {arrangement!r}")


def _parse_option(option: str | None, context: ArrangeContext) -> Arrangement | None:
    from serialog.layout.parser import get_arrangement

    return get_arrangement(option, context)


__all__ = [
    "ARRANGEMENT_TYPES",
    "Arrangement",
    "ArrangementPlugin",
    "DEFAULT_PRESET",
    "DefaultArrangement",
    "MultipleArrangement",
    "NoArrangement",
    "OptionArrangement",
    "PRESETS",
    "PluginArrangement",
    "RemovalArrangement",
    "arrange",
    "preset_snapshot",
    "register_preset",
    "unregister_preset",
]
