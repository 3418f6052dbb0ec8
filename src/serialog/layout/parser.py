"""Parser for the compact arrangement spec grammar.

A spec is a ``;`` separated list of member specs::

    name                member "name" valued by the conversion "name"
    name:conv           member "name" valued by the conversion "conv"
    name=option         member "name" valued by option, itself parsed later
    name|template       member "name" valued by a rendered template
    name%conv:option    member "name" valued by "conv" called with option
    CLEAR!regex         remove members (all of them without regex)
    REMOVE!regex        same as CLEAR
    DEFAULT!preset      add the members of a named preset
    pkg.mod.Class!opt   instantiate a custom arrangement

A backslash escapes any of ``\\ ; = : ! % | ( )``. In templates unescaped
parentheses stand for the template engine's braces: ``%date(%H:%M)`` is
``%date{%H:%M}``.
"""

from __future__ import annotations

import importlib
import re
from typing import Any

import structlog

from serialog.errors import ConfigurationError
from serialog.layout.arrangements import (
    ARRANGEMENT_TYPES,
    Arrangement,
    DefaultArrangement,
    MultipleArrangement,
    PluginArrangement,
    RemovalArrangement,
)
from serialog.layout.context import ArrangeContext
from serialog.layout.conversions import ConversionSource
from serialog.layout.members import ConversionCall, Member
from serialog.layout.templates import PatternTemplate

logger = structlog.get_logger(__name__)

_SET_MATCHER = re.compile(r"(?P<member>(?:\\\\|\\;|[^;])+)(?:;|\Z)")
_SINGLE_MATCHER = re.compile(
    r"(?P<name>(?:\\\\|\\=|\\:|\\!|\\%|\\\||[^=:!%|])+)"
    r"(?:(?P<op>[=:!|])(?P<value>.*)\Z"
    r"|(?P<call>%)(?P<conversion>(?:\\\\|\\:|[^:])+)(?::(?P<option>.*)\Z|\Z)"
    r"|\Z)",
    re.DOTALL,
)
_SEMI_CLEAN = re.compile(r"\\\\|\\;")
_NAME_CLEAN = re.compile(r"\\\\|\\=|\\:|\\!|\\%|\\\|")
_BRACKET_CLEAN = re.compile(r"\\\\|\\\(|\\\)|[()]")
_ESCAPE_CHECK = re.compile(r"\\(?:[\\;=:!%|()]|(?P<bad>.|\Z))", re.DOTALL)

_ESCAPES = {
    "\\\\": "\\",
    "\\;": ";",
    "\\=": "=",
    "\\:": ":",
    "\\!": "!",
    "\\%": "%",
    "\\|": "|",
    "\\(": "(",
    "\\)": ")",
}
_BRACKETS = {
    "\\\\": "\\",
    "\\(": "(",
    "\\)": ")",
    "(": "{",
    ")": "}",
}

# bare reserved tokens and what they stand for
SHORTCUTS = {
    "DEFAULT": "DEFAULT!default",
    "default": "DEFAULT!default",
    "nxlog": "DEFAULT!nxlog",
    "CLEAR": "REMOVE!",
}


def _clean(match: re.Match[str]) -> str:
    try:
        return _ESCAPES[match.group(0)]
    except KeyError:
        raise ConfigurationError(f"Not sure how to clean '{match.group(0)}'") from None


def _bracket(match: re.Match[str]) -> str:
    try:
        return _BRACKETS[match.group(0)]
    except KeyError:
        raise ConfigurationError(f"Not sure how to bracket '{match.group(0)}'") from None


def unescape(text: str) -> str:
    """Resolve the structural escapes of a name."""

    return _NAME_CLEAN.sub(_clean, text)


class ArrangementParser:
    """Turns spec strings into arrangements, resolving members against a context."""

    def __init__(self, context: ArrangeContext | None = None) -> None:
        self.context = context if context is not None else ArrangeContext()

    def parse(self, spec: str | None) -> Arrangement | None:
        """Parse a whole spec; None when it holds no member specs."""

        if not spec:
            return None

        self._check_escapes(spec)

        composite = MultipleArrangement()
        matched = 0

        for match in _SET_MATCHER.finditer(spec):
            matched += len(match.group(0))
            member = match.group("member")
            member = SHORTCUTS.get(member, member)
            composite.add(self.parse_member(_SEMI_CLEAN.sub(_clean, member)))

        if matched != len(spec):
            raise ConfigurationError(f"Unable to parse option: {spec}", spec=spec)

        if not composite.arrangements:
            return None
        if len(composite.arrangements) == 1:
            return composite.arrangements[0]
        return composite

    def parse_member(self, text: str) -> Arrangement:
        """Parse a single member spec whose semicolons are already unescaped."""

        match = _SINGLE_MATCHER.fullmatch(text)

        option: str | None = None
        if match is None:
            name, op, value = "", "|", text
        elif match.group("call"):
            name, op, value = match.group("name"), "%", match.group("conversion")
            option = match.group("option")
        else:
            name, op, value = match.group("name"), match.group("op") or "", match.group("value") or ""

        name = unescape(name)

        if not op:
            if value:
                op = "|"
            else:
                op, value = ":", name

        if op == "!":
            return self._reserved(name, value)

        if op == ":":
            member = Member(name, option=Member(unescape(value)))
        elif op == "|":
            template = unescape(_BRACKET_CLEAN.sub(_bracket, value))
            member = Member(name, option=PatternTemplate(template, self.context.conversions))
        elif op == "%":
            member = Member(name, option=ConversionCall(unescape(value), option))
        elif op == "=":
            member = Member(name, option=value)
        else:
            raise ConfigurationError(f"Unknown arrangement: '{name}{op}'", spec=text)

        member.resolve(self.context)
        return member

    def _reserved(self, name: str, option: str) -> Arrangement:
        if name in ("CLEAR", "REMOVE"):
            return RemovalArrangement(option or None)
        if name == "DEFAULT":
            return DefaultArrangement(option)
        return self._custom(name, option)

    def _custom(self, name: str, option: str) -> Arrangement:
        module_name, _, attribute = name.rpartition(".")
        if not module_name or not attribute:
            raise ConfigurationError(f"Arrangement type not found: {name}", spec=name)

        try:
            target = getattr(importlib.import_module(module_name), attribute)
        except (ImportError, AttributeError) as exc:
            raise ConfigurationError(f"Arrangement type not found: {name}", spec=name) from exc

        try:
            instance: Any = target() if isinstance(target, type) else target
        except Exception as exc:
            raise ConfigurationError(f"Unable to create arrangement {name}: {exc}", spec=name) from exc

        if isinstance(instance, ARRANGEMENT_TYPES):
            arrangement = instance
        elif callable(getattr(instance, "arrange", None)):
            arrangement = PluginArrangement(instance)
        else:
            raise ConfigurationError(f"Arrangement type is not an arrangement: {name}", spec=name)

        arrangement.set_option(option)
        if isinstance(arrangement, Member):
            arrangement.resolve(self.context)
        return arrangement

    @staticmethod
    def _check_escapes(spec: str) -> None:
        for match in _ESCAPE_CHECK.finditer(spec):
            if match.group("bad") is not None:
                raise ConfigurationError(
                    f"Invalid escape at position {match.start()} in: {spec}", spec=spec
                )


def parse(
    spec: str | None,
    conversions: ArrangeContext | ConversionSource | None = None,
) -> Arrangement | None:
    """Parse ``spec``; raises :class:`ConfigurationError` when it is malformed."""

    return ArrangementParser(ArrangeContext.create(conversions)).parse(spec)


def get_arrangement(spec: str | None, context: ArrangeContext | None = None) -> Arrangement | None:
    """Parse ``spec``, logging configuration errors and returning None for them."""

    try:
        return ArrangementParser(context).parse(spec)
    except ConfigurationError as exc:
        logger.error("arrangement_parse_failed", spec=spec, error=str(exc))
        return None


__all__ = ["ArrangementParser", "SHORTCUTS", "get_arrangement", "parse", "unescape"]
