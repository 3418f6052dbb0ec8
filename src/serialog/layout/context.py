"""Explicit context threaded through nested parses and arrangement application."""

from __future__ import annotations

from dataclasses import dataclass, field

from serialog.layout.conversions import ConversionRegistry, ConversionSource, default_registry


@dataclass(slots=True)
class ArrangeContext:
    """Conversions visible to every nested parse started from the same setup call."""

    conversions: ConversionRegistry = field(default_factory=default_registry)

    @classmethod
    def create(cls, conversions: ArrangeContext | ConversionSource | None = None) -> ArrangeContext:
        """Build a context from caller conversions merged behind the built-ins."""

        if isinstance(conversions, ArrangeContext):
            return conversions
        return cls(default_registry(conversions))


__all__ = ["ArrangeContext"]
