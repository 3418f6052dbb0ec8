"""Tiny pattern engine backing ``name|template`` members.

``%conv`` and ``%conv{option}`` are rendered through the conversion registry,
``%%`` is a literal percent sign. Unknown conversions are kept as literal text.
A template made only of conversions that all give None renders as None, so
its member is omitted.
"""

from __future__ import annotations

import re
from typing import Any

from serialog.events.models import LoggingEvent
from serialog.layout.conversions import Conversion, ConversionRegistry

_TOKEN = re.compile(r"%(?:(?P<percent>%)|(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:\{(?P<option>[^}]*)\})?)")


class PatternTemplate:
    """Compiled template rendering an event to text."""

    def __init__(self, pattern: str, conversions: ConversionRegistry) -> None:
        self.pattern = pattern
        self._parts: list[str | tuple[Conversion, str | None]] = self._compile(pattern, conversions)

    @staticmethod
    def _compile(
        pattern: str, conversions: ConversionRegistry
    ) -> list[str | tuple[Conversion, str | None]]:
        parts: list[str | tuple[Conversion, str | None]] = []
        position = 0

        for match in _TOKEN.finditer(pattern):
            if match.start() > position:
                parts.append(pattern[position : match.start()])
            position = match.end()

            if match.group("percent"):
                parts.append("%")
                continue

            conversion = conversions.find(match.group("name"))
            if conversion is None:
                parts.append(match.group(0))
            else:
                parts.append((conversion, match.group("option")))

        if position < len(pattern):
            parts.append(pattern[position:])

        return parts

    def format(self, event: LoggingEvent) -> str | None:
        """Render the template; None when it is made of conversions that all gave None."""

        chunks: list[str] = []
        empty = True
        for part in self._parts:
            if isinstance(part, str):
                chunks.append(part)
                empty = False
                continue
            conversion, option = part
            value = conversion(event, option)
            if value is not None:
                empty = False
            chunks.append(_text(value))
        return None if empty else "".join(chunks)

    __call__ = format

    def __repr__(self) -> str:
        return f"PatternTemplate({self.pattern!r})"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


__all__ = ["PatternTemplate"]
