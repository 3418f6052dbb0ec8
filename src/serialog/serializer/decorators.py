"""Normalizing decorators: reduce arbitrary values to JSON-safe data.

The result of :meth:`StandardTypesDecorator.decorate` only contains None,
str, bool, int, float, Decimal, dict and list. Each check in the chain
either handles the value or hands it to the next one; the last resort is
``str(value)``.
"""

from __future__ import annotations

import array
import io
import ipaddress
import os
from collections import UserString
from collections.abc import Iterator, Mapping, MappingView, Sequence, Set
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Protocol
from urllib.parse import DefragResult, ParseResult, SplitResult
from uuid import UUID

from pydantic import BaseModel

from serialog.errors import NormalizationError
from serialog.events.context import ContextStack
from serialog.serializer.reflection import reflect

DEFAULT_MAX_DEPTH = 64

_UNHANDLED = object()
_FLATTENED = object()

_URI_TYPES = (
    ParseResult,
    SplitResult,
    DefragResult,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
)

# finite containers only; streams and iterators would be consumed or block
_COLLECTION_TYPES = (Sequence, Set, MappingView, array.array)
_STREAM_TYPES = (io.IOBase, Iterator)


class Decorator(Protocol):
    def decorate(self, obj: Any) -> Any:
        ...


def _key(key: Any) -> str:
    if isinstance(key, str):
        return str.__str__(key)
    if isinstance(key, Enum):
        return key.name
    return str(key)


def mapping_items(obj: Any) -> list[tuple[str, Any]] | None:
    """Key/value pairs of a mapping-like value, or None for anything else."""

    if isinstance(obj, Mapping):
        return [(_key(key), value) for key, value in obj.items()]
    if isinstance(obj, BaseModel):
        return [(name, getattr(obj, name)) for name in type(obj).model_fields]
    return None


class StandardTypesDecorator:
    """Normalize a value graph, keeping its nesting."""

    def __init__(
        self,
        *,
        save_type: bool | None = None,
        type_member_name: str = "@type",
        stringify: bool | None = False,
        string_member_name: str = "String",
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.save_type = save_type
        self.type_member_name = type_member_name
        self.stringify = stringify
        self.string_member_name = string_member_name
        self.max_depth = max_depth
        self._chain = (
            self._standard_null,
            self._standard_string,
            self._standard_mapping,
            self._standard_datetime,
            self._standard_timedelta,
            self._standard_chars,
            self._standard_bytes,
            self._standard_primitive,
            self._standard_enum,
            self._standard_uuid,
            self._standard_uri,
            self._standard_context,
            self._standard_sequence,
            self._standard_object,
        )

    def decorate(self, obj: Any) -> Any:
        result = self._standardise(obj, 0, None, None)
        return None if result is _FLATTENED else result

    __call__ = decorate

    def _standardise(self, obj: Any, depth: int, flat: dict[str, Any] | None, path: str | None) -> Any:
        if depth > self.max_depth:
            raise NormalizationError(
                f"Value nested deeper than {self.max_depth} levels at {path or '<root>'}"
            )

        for step in self._chain:
            result = step(obj, depth, flat, path)
            if result is not _UNHANDLED:
                return result

        try:
            return str(obj)
        except Exception as exc:
            raise NormalizationError(
                f"Unable to convert {type(obj).__name__} to text: {exc}"
            ) from exc

    def _standard_null(self, obj: Any, *_: Any) -> Any:
        return None if obj is None else _UNHANDLED

    def _standard_string(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, str):
            return str.__str__(obj)
        if isinstance(obj, UserString):
            return str(obj)
        if isinstance(obj, io.StringIO):
            return obj.getvalue()
        return _UNHANDLED

    def _standard_mapping(self, obj: Any, depth: int, flat: dict[str, Any] | None, path: str | None) -> Any:
        items = mapping_items(obj)
        if items is None:
            return _UNHANDLED
        return {key: self._standardise(value, depth + 1, None, key) for key, value in items}

    def _standard_datetime(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()
        return _UNHANDLED

    def _standard_timedelta(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, timedelta):
            return obj.total_seconds()
        return _UNHANDLED

    def _standard_chars(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, array.array) and obj.typecode in ("u", "w"):
            return obj.tounicode()
        return _UNHANDLED

    def _standard_bytes(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return bytes(obj).decode("utf-8", errors="replace")
        if isinstance(obj, io.BytesIO):
            return obj.getvalue().decode("utf-8", errors="replace")
        return _UNHANDLED

    def _standard_primitive(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, Enum):
            return _UNHANDLED
        if isinstance(obj, bool):
            return bool(obj)
        if isinstance(obj, int):
            return int(obj)
        if isinstance(obj, float):
            return float(obj)
        if isinstance(obj, Decimal):
            return obj
        return _UNHANDLED

    def _standard_enum(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.name if obj.name is not None else str(obj.value)
        return _UNHANDLED

    def _standard_uuid(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, UUID):
            return str(obj)
        return _UNHANDLED

    def _standard_uri(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, (ParseResult, SplitResult, DefragResult)):
            return obj.geturl()
        if isinstance(obj, PurePath):
            return os.fspath(obj)
        if isinstance(obj, _URI_TYPES):
            return str(obj)
        return _UNHANDLED

    def _standard_context(self, obj: Any, *_: Any) -> Any:
        if isinstance(obj, ContextStack):
            return str(obj)
        return _UNHANDLED

    def _standard_sequence(self, obj: Any, depth: int, *_: Any) -> Any:
        if isinstance(obj, _STREAM_TYPES) or not isinstance(obj, _COLLECTION_TYPES):
            return _UNHANDLED
        return [self._standardise(item, depth + 1, None, None) for item in obj]

    def _standard_object(self, obj: Any, depth: int, flat: dict[str, Any] | None, path: str | None) -> Any:
        if isinstance(obj, _STREAM_TYPES):
            return _UNHANDLED
        fields = reflect(
            obj,
            save_type=self.save_type,
            type_member_name=self.type_member_name,
            stringify=self.stringify,
            string_member_name=self.string_member_name,
        )
        if fields is None:
            return _UNHANDLED
        return self._standard_mapping(fields, depth, flat, path)


class FlatStandardTypesDecorator(StandardTypesDecorator):
    """Normalize a value graph into one level of dot-path keys.

    ``{"a": {"b": 1, "c": None}}`` becomes ``{"a.b": 1}``: nested mappings
    and reflected objects contribute their entries under ``parent.child``
    and None leaves are dropped. Sequence elements are flattened on their own.
    """

    def _standard_mapping(self, obj: Any, depth: int, flat: dict[str, Any] | None, path: str | None) -> Any:
        items = mapping_items(obj)
        if items is None:
            return _UNHANDLED

        if flat is None:
            result: dict[str, Any] = {}
            self._flatten(items, depth, result, None)
            return result

        self._flatten(items, depth, flat, path)
        return _FLATTENED

    def _flatten(self, items: list[tuple[str, Any]], depth: int, flat: dict[str, Any], path: str | None) -> None:
        for key, value in items:
            if value is None:
                continue
            name = key if path is None else f"{path}.{key}"
            result = self._standardise(value, depth + 1, flat, name)
            if result is not _FLATTENED and result is not None:
                flat[name] = result


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "Decorator",
    "FlatStandardTypesDecorator",
    "StandardTypesDecorator",
    "mapping_items",
]
