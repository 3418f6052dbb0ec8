"""Exception hierarchy shared by the arrangement parser, normalizer and encoder."""

from __future__ import annotations


class SerialogError(Exception):
    """Base class for all errors raised by serialog."""


class ConfigurationError(SerialogError, ValueError):
    """Raised when an arrangement spec or layout configuration cannot be used."""

    def __init__(self, message: str, *, spec: str | None = None) -> None:
        super().__init__(message)
        self.spec = spec


class ValueResolutionError(SerialogError):
    """Raised when a member getter fails to produce a value for an event."""

    def __init__(self, member_name: str, cause: BaseException) -> None:
        super().__init__(f"Error getting value for member '{member_name}': {cause}")
        self.member_name = member_name
        self.cause = cause


class NormalizationError(SerialogError):
    """Raised when a value cannot be reduced to a JSON-safe shape."""


class EncodingError(SerialogError):
    """Raised when the encoder meets a value outside the normalized union."""


__all__ = [
    "ConfigurationError",
    "EncodingError",
    "NormalizationError",
    "SerialogError",
    "ValueResolutionError",
]
