"""Arranging, resolving and laying out the members of serialized events."""

from serialog.layout.arrangements import (
    DEFAULT_PRESET,
    PRESETS,
    Arrangement,
    DefaultArrangement,
    MultipleArrangement,
    NoArrangement,
    OptionArrangement,
    PluginArrangement,
    RemovalArrangement,
    arrange,
    register_preset,
    unregister_preset,
)
from serialog.layout.context import ArrangeContext
from serialog.layout.conversions import (
    BUILTIN_CONVERSIONS,
    Conversion,
    ConversionRegistry,
    default_registry,
)
from serialog.layout.members import ConversionCall, Member, MemberLayout
from serialog.layout.parser import ArrangementParser, get_arrangement, parse
from serialog.layout.serialized import SerializedLayout
from serialog.layout.templates import PatternTemplate

__all__ = [
    "BUILTIN_CONVERSIONS",
    "DEFAULT_PRESET",
    "PRESETS",
    "ArrangeContext",
    "Arrangement",
    "ArrangementParser",
    "Conversion",
    "ConversionCall",
    "ConversionRegistry",
    "DefaultArrangement",
    "Member",
    "MemberLayout",
    "MultipleArrangement",
    "NoArrangement",
    "OptionArrangement",
    "PatternTemplate",
    "PluginArrangement",
    "RemovalArrangement",
    "SerializedLayout",
    "arrange",
    "default_registry",
    "get_arrangement",
    "parse",
    "register_preset",
    "unregister_preset",
]
