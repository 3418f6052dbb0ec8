"""serialog: lay out log events as JSON documents described by arrangement specs."""

from serialog.errors import (
    ConfigurationError,
    EncodingError,
    NormalizationError,
    SerialogError,
    ValueResolutionError,
)
from serialog.events import ContextStack, LoggingEvent
from serialog.handlers import SerializedFormatter, SerializedRenderer
from serialog.layout import SerializedLayout, get_arrangement, parse
from serialog.serializer import FlatStandardTypesDecorator, JsonSerializer, StandardTypesDecorator

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ContextStack",
    "EncodingError",
    "FlatStandardTypesDecorator",
    "JsonSerializer",
    "LoggingEvent",
    "NormalizationError",
    "SerialogError",
    "SerializedFormatter",
    "SerializedLayout",
    "SerializedRenderer",
    "StandardTypesDecorator",
    "ValueResolutionError",
    "__version__",
    "get_arrangement",
    "parse",
]
