"""Turning arbitrary objects into mappings of their public readable fields."""

from __future__ import annotations

import dataclasses
import inspect
from typing import Any, Mapping, Protocol, runtime_checkable

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


@runtime_checkable
class Reflectable(Protocol):
    """Objects choosing which of their fields get serialized."""

    def fields(self) -> Mapping[str, Any]:
        ...


def _public(name: str) -> bool:
    return not name.startswith("_")


def is_public_type(cls: type) -> bool:
    """True unless the class or one of its module components is underscore-private."""

    if not _public(cls.__name__):
        return False
    for part in cls.__module__.split("."):
        if part.startswith("_") and not (part.startswith("__") and part.endswith("__")):
            return False
    return True


def type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _declared_fields(obj: Any) -> dict[str, Any] | None:
    # runtime_checkable only sees that the attribute exists, not that it is a method
    if isinstance(obj, type):
        return None
    try:
        method = getattr(obj, "fields", None)
        if not callable(method):
            return None
        declared = method()
    except Exception as exc:
        logger.debug("fields_call_failed", type=type_name(type(obj)), error=str(exc))
        return None
    if not isinstance(declared, Mapping):
        return None
    return {str(key): value for key, value in declared.items()}


def public_fields(obj: Any) -> dict[str, Any] | None:
    """Public fields and properties of ``obj``; None when it exposes none at all.

    A ``fields()`` method returning a mapping wins. When it raises or returns
    something else the object is reflected like any other.
    """

    declared = _declared_fields(obj)
    if declared is not None:
        return declared

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            field.name: getattr(obj, field.name)
            for field in dataclasses.fields(obj)
            if _public(field.name)
        }

    if isinstance(obj, BaseModel):
        return {name: getattr(obj, name) for name in type(obj).model_fields if _public(name)}

    values: dict[str, Any] = {}
    found = False

    if isinstance(obj, BaseException):
        found = True
        values["message"] = str(obj)
        values["args"] = list(obj.args)

    for cls in type(obj).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if _public(name) and hasattr(obj, name):
                found = True
                values[name] = getattr(obj, name)

    attributes = getattr(obj, "__dict__", None)
    if isinstance(attributes, dict):
        found = True
        for name, value in attributes.items():
            if _public(name):
                values[name] = value

    for name, attribute in inspect.getmembers(type(obj)):
        if not isinstance(attribute, property) or not _public(name):
            continue
        found = True
        try:
            values[name] = getattr(obj, name)
        except Exception as exc:
            logger.debug("property_read_failed", type=type_name(type(obj)), property=name, error=str(exc))

    return values if found else None


def reflect(
    obj: Any,
    *,
    save_type: bool | None = None,
    type_member_name: str = "@type",
    stringify: bool | None = False,
    string_member_name: str = "String",
) -> dict[str, Any] | None:
    """Reflect ``obj`` and optionally inject its type name and string form.

    ``save_type`` None means "only for public types".
    """

    values = public_fields(obj)
    if values is None:
        return None

    cls = type(obj)
    if save_type is True or (save_type is None and is_public_type(cls)):
        values[type_member_name] = type_name(cls)

    if stringify is True:
        values[string_member_name] = str(obj)

    return values


__all__ = ["Reflectable", "is_public_type", "public_fields", "reflect", "type_name"]
