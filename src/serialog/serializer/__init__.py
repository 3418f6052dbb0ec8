"""Value normalization and JSON encoding."""

from serialog.serializer.decorators import (
    DEFAULT_MAX_DEPTH,
    Decorator,
    FlatStandardTypesDecorator,
    StandardTypesDecorator,
)
from serialog.serializer.json import DEFAULT_ESCAPED_CHARS, JsonSerializer
from serialog.serializer.reflection import Reflectable, reflect

__all__ = [
    "DEFAULT_ESCAPED_CHARS",
    "DEFAULT_MAX_DEPTH",
    "Decorator",
    "FlatStandardTypesDecorator",
    "JsonSerializer",
    "Reflectable",
    "StandardTypesDecorator",
    "reflect",
]
