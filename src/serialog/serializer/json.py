"""Compact JSON text encoder for normalized values."""

from __future__ import annotations

import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from serialog.errors import EncodingError
from serialog.serializer.decorators import DEFAULT_MAX_DEPTH
from serialog.serializer.reflection import reflect

# markup-sensitive characters are escaped so the text can be embedded in HTML
DEFAULT_ESCAPED_CHARS: dict[str, str] = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
}


def unicode_escape(char: str) -> str:
    """``\\uXXXX`` form of a character, as a surrogate pair beyond the BMP."""

    code = ord(char)
    if code > 0xFFFF:
        code -= 0x10000
        return "\\u%04x\\u%04x" % (0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF))
    return "\\u%04x" % code


class JsonSerializer:
    """Serialize normalized values (dict, list, str, numbers, bools, None) to JSON.

    Objects outside that set are reflected into their public fields, the way
    the decorators would, so that the encoder never fails on a stray value.
    """

    def __init__(
        self,
        *,
        escaped_chars: Mapping[str, str] | None = None,
        save_type: bool = False,
        type_member_name: str = "__type",
        stringify: bool = False,
        string_member_name: str = "String",
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.escaped_chars = dict(DEFAULT_ESCAPED_CHARS if escaped_chars is None else escaped_chars)
        self.save_type = save_type
        self.type_member_name = type_member_name
        self.stringify = stringify
        self.string_member_name = string_member_name
        self.max_depth = max_depth

    def serialize(self, obj: Any) -> str:
        out: list[str] = []
        self._write(obj, out, 0)
        return "".join(out)

    __call__ = serialize

    def escape(self, text: str) -> str:
        escaped = self.escaped_chars
        parts: list[str] = []
        for char in text:
            replacement = escaped.get(char)
            if replacement is not None:
                parts.append(replacement)
            elif " " <= char <= "~":
                parts.append(char)
            else:
                parts.append(unicode_escape(char))
        return "".join(parts)

    def _write(self, obj: Any, out: list[str], depth: int) -> None:
        if depth > self.max_depth:
            raise EncodingError(f"Value nested deeper than {self.max_depth} levels")

        if obj is None:
            out.append("null")
        elif isinstance(obj, bool):
            out.append("true" if obj else "false")
        elif isinstance(obj, str):
            self._write_string(obj, out)
        elif isinstance(obj, int):
            out.append(int.__repr__(obj))
        elif isinstance(obj, float):
            self._write_float(obj, out)
        elif isinstance(obj, Decimal):
            if obj.is_finite():
                out.append(str(obj))
            else:
                self._write_string(str(obj), out)
        elif isinstance(obj, Mapping):
            self._write_mapping(obj, out, depth)
        elif isinstance(obj, (list, tuple)):
            self._write_sequence(obj, out, depth)
        else:
            self._write_object(obj, out, depth)

    def _write_string(self, text: str, out: list[str]) -> None:
        out.append('"')
        out.append(self.escape(text))
        out.append('"')

    def _write_float(self, value: float, out: list[str]) -> None:
        if math.isfinite(value):
            out.append(float.__repr__(value))
        elif math.isnan(value):
            self._write_string("NaN", out)
        else:
            self._write_string("Infinity" if value > 0 else "-Infinity", out)

    def _write_mapping(self, mapping: Mapping[Any, Any], out: list[str], depth: int) -> None:
        out.append("{")
        first = True
        for key, value in mapping.items():
            if not first:
                out.append(",")
            first = False
            self._write_string(key if isinstance(key, str) else str(key), out)
            out.append(":")
            self._write(value, out, depth + 1)
        out.append("}")

    def _write_sequence(self, items: list[Any] | tuple[Any, ...], out: list[str], depth: int) -> None:
        out.append("[")
        for index, item in enumerate(items):
            if index:
                out.append(",")
            self._write(item, out, depth + 1)
        out.append("]")

    def _write_object(self, obj: Any, out: list[str], depth: int) -> None:
        fields = reflect(
            obj,
            save_type=self.save_type,
            type_member_name=self.type_member_name,
            stringify=self.stringify,
            string_member_name=self.string_member_name,
        )
        if fields is None:
            try:
                text = str(obj)
            except Exception as exc:
                raise EncodingError(f"Unable to encode {type(obj).__name__}: {exc}") from exc
            self._write_string(text, out)
        else:
            self._write_mapping(fields, out, depth)


__all__ = ["DEFAULT_ESCAPED_CHARS", "JsonSerializer", "unicode_escape"]
