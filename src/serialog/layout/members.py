"""Members: named output slots resolved once into a getter over events."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from serialog.errors import ValueResolutionError
from serialog.events.models import LoggingEvent
from serialog.layout.context import ArrangeContext
from serialog.layout.conversions import Conversion
from serialog.layout.templates import PatternTemplate

logger = structlog.get_logger(__name__)

Getter = Callable[[LoggingEvent], Any]


@dataclass(frozen=True, slots=True)
class ConversionCall:
    """A named conversion invoked with an option (``name%conv:option``)."""

    name: str
    option: str | None = None


@dataclass(eq=False)
class Member:
    """A named, resolvable output field.

    ``option`` is the configured value source: None (look the member name up
    as a conversion), a string (parsed as a nested arrangement spec, then
    tried as a conversion name, else kept as a literal), another member,
    an arrangement, a :class:`ConversionCall`, a :class:`PatternTemplate`
    or a plain callable taking the event.
    """

    name: str = ""
    option: Any = None
    source: Any = field(default=None, init=False, repr=False)
    _getter: Getter | None = field(default=None, init=False, repr=False)
    _literal: Any = field(default=None, init=False, repr=False)
    _resolved: bool = field(default=False, init=False, repr=False)
    _failed: bool = field(default=False, init=False, repr=False)
    _failed_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def resolved(self) -> bool:
        return self._resolved

    def set_option(self, value: Any) -> None:
        self.option = value
        self._resolved = False

    def resolve(self, context: ArrangeContext | None = None) -> Getter | None:
        """Work out the getter for this member; cached after the first call."""

        if self._resolved:
            return self._getter

        if context is None:
            context = ArrangeContext()

        option = self.option
        getter: Getter | None = None

        if option is None:
            option = context.conversions.find(self.name)
        else:
            if isinstance(option, str):
                self._literal = option
                from serialog.layout.parser import get_arrangement

                parsed = get_arrangement(option, context)
                if parsed is not None:
                    option = parsed

            if isinstance(option, str):
                option = context.conversions.find(option) or option

        if isinstance(option, Member):
            option.resolve(context)
            if not self.name:
                self.name = option.name
            getter = option.format
        elif isinstance(option, Conversion):
            getter = option
        elif isinstance(option, ConversionCall):
            getter = self._resolve_call(option, context)
        elif isinstance(option, PatternTemplate):
            getter = option.format
        elif _is_arrangement(option):
            layout = MemberLayout()
            layout.arrange(option, context)
            getter = layout.format
            option = layout
        elif callable(option):
            getter = option
        elif option is not None and not isinstance(option, str):
            self._literal = option

        self.source = option
        self._getter = getter
        self._resolved = True
        return getter

    def _resolve_call(self, call: ConversionCall, context: ArrangeContext) -> Getter | None:
        conversion = context.conversions.find(call.name)
        if conversion is None:
            logger.error("conversion_not_found", member=self.name, conversion=call.name)
            return None

        def getter(event: LoggingEvent) -> Any:
            return conversion(event, call.option)

        return getter

    def format(self, event: LoggingEvent) -> Any:
        """Get the member value for ``event``; None means "omit this member"."""

        getter = self._getter if self._resolved else self.resolve()

        if getter is not None:
            try:
                return getter(event)
            except Exception as exc:
                with self._failed_lock:
                    first = not self._failed
                    self._failed = True
                if first:
                    error = ValueResolutionError(self.name, exc)
                    logger.error("member_value_failed", member=self.name, error=str(error), exc_info=exc)
                return None

        value = event.lookup_property(self.name)
        if value is not None:
            return value
        if self._literal is not None:
            return self._literal
        return self.name

    __call__ = format


@dataclass
class MemberLayout:
    """Gathers arranged members into a mapping of name to raw value."""

    members: list[Member] = field(default_factory=list)

    def arrange(self, arrangement: Any, context: ArrangeContext | None = None) -> None:
        """Apply ``arrangement`` to :attr:`members` and resolve what it added."""

        from serialog.layout.arrangements import arrange

        if context is None:
            context = ArrangeContext()
        arrange(arrangement, self.members, context)
        self.resolve(context)

    def resolve(self, context: ArrangeContext | None = None) -> None:
        for member in self.members:
            member.resolve(context)

    def format(self, event: LoggingEvent) -> Any:
        if not self.members:
            return event.rendered_message

        if len(self.members) == 1 and self.members[0].name == "":
            return self.members[0].format(event)

        values: dict[str, Any] = {}
        for member in self.members:
            value = member.format(event)
            if value is not None:
                values[member.name] = value
        return values


def _is_arrangement(value: Any) -> bool:
    from serialog.layout.arrangements import ARRANGEMENT_TYPES

    return isinstance(value, ARRANGEMENT_TYPES)


__all__ = ["ConversionCall", "Getter", "Member", "MemberLayout"]
