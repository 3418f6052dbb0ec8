"""The serialized layout: arrange members once, then format events as JSON."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

import structlog

from serialog.events.models import LoggingEvent
from serialog.layout.arrangements import Arrangement, DefaultArrangement, MultipleArrangement
from serialog.layout.context import ArrangeContext
from serialog.layout.conversions import ConversionSource
from serialog.layout.members import Member, MemberLayout
from serialog.layout.parser import get_arrangement
from serialog.serializer.decorators import (
    DEFAULT_MAX_DEPTH,
    Decorator,
    FlatStandardTypesDecorator,
    StandardTypesDecorator,
)
from serialog.serializer.json import JsonSerializer

if TYPE_CHECKING:
    from serialog.config.settings import LayoutSettings

logger = structlog.get_logger(__name__)


class SerializedLayout:
    """Formats logging events as one JSON document each.

    Configure it with ``add_*`` calls and/or ``conversion_pattern`` (an
    arrangement spec), then call :meth:`activate_options`. Formatting before
    activation activates with the current configuration::

        layout = SerializedLayout(conversion_pattern="level;message")
        layout.activate_options()
        layout.format(event)  # {"level":"INFO","message":"hello"}
    """

    def __init__(
        self,
        *,
        conversion_pattern: str | None = None,
        conversions: ArrangeContext | ConversionSource | None = None,
        decorators: list[Decorator] | None = None,
        serializer: JsonSerializer | None = None,
        flatten: bool = False,
        save_type: bool | None = None,
        type_member_name: str = "@type",
        stringify: bool | None = False,
        string_member_name: str = "String",
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.conversion_pattern = conversion_pattern
        self.context = ArrangeContext.create(conversions)
        self.serializer = serializer if serializer is not None else JsonSerializer(max_depth=max_depth)
        self.flatten = flatten
        self.save_type = save_type
        self.type_member_name = type_member_name
        self.stringify = stringify
        self.string_member_name = string_member_name
        self.max_depth = max_depth

        self._arrangement = MultipleArrangement()
        self._decorators: list[Decorator] = list(decorators or [])
        self._lock = threading.Lock()
        self._fetcher = MemberLayout()
        self._active_decorators: tuple[Decorator, ...] = ()
        self._activated = False

    @classmethod
    def from_settings(cls, settings: LayoutSettings, **kwargs: Any) -> SerializedLayout:
        pattern = settings.arrangement
        if pattern is None:
            pattern = f"DEFAULT!{settings.default_preset}"
        return cls(
            conversion_pattern=pattern,
            flatten=settings.flatten,
            save_type=settings.save_type,
            type_member_name=settings.type_member_name,
            stringify=settings.stringify,
            string_member_name=settings.string_member_name,
            max_depth=settings.max_depth,
            **kwargs,
        )

    @property
    def members(self) -> list[Member]:
        return list(self._fetcher.members)

    @property
    def decorators(self) -> tuple[Decorator, ...]:
        return self._active_decorators

    def add_arrangement(self, arrangement: Arrangement | str | None) -> None:
        if isinstance(arrangement, str):
            arrangement = get_arrangement(arrangement, self.context)
        self._arrangement.add(arrangement)

    def add_member(self, value: str) -> None:
        """Add members from a spec such as ``"Host=Name:hostname"``."""

        self.add_arrangement(value)

    def add_default(self, value: str = "") -> None:
        self.add_arrangement("DEFAULT!" + value)

    def add_remove(self, value: str = "") -> None:
        self.add_arrangement("REMOVE!" + value)

    def add_decorator(self, decorator: Decorator) -> None:
        self._decorators.append(decorator)

    def activate_options(self) -> None:
        """Arrange and resolve the members; required after changing the configuration."""

        with self._lock:
            arrangement = MultipleArrangement()
            if self._arrangement.arrangements:
                arrangement.add(self._arrangement)
            arrangement.add(get_arrangement(self.conversion_pattern, self.context))

            if not arrangement.arrangements:
                arrangement.add(DefaultArrangement())

            fetcher = MemberLayout()
            fetcher.arrange(arrangement, self.context)

            decorators = tuple(self._decorators) or (self._standard_decorator(),)

            self._fetcher = fetcher
            self._active_decorators = decorators
            self._activated = True

        logger.debug(
            "layout_activated",
            members=[member.name for member in fetcher.members],
            flatten=self.flatten,
        )

    def _standard_decorator(self) -> StandardTypesDecorator:
        decorator_type = FlatStandardTypesDecorator if self.flatten else StandardTypesDecorator
        return decorator_type(
            save_type=self.save_type,
            type_member_name=self.type_member_name,
            stringify=self.stringify,
            string_member_name=self.string_member_name,
            max_depth=self.max_depth,
        )

    def format_value(self, event: LoggingEvent) -> Any:
        """The normalized value that :meth:`format` encodes."""

        if not self._activated:
            self.activate_options()

        value = self._fetcher.format(event)
        for decorator in self._active_decorators:
            value = decorator.decorate(value)
        return value

    def format(self, event: LoggingEvent) -> str:
        return self.serializer.serialize(self.format_value(event))


__all__ = ["SerializedLayout"]
