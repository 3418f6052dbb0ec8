"""Tests for the arrangement spec parser."""

import socket

import pytest

from serialog.errors import ConfigurationError
from serialog.layout.arrangements import (
    DefaultArrangement,
    MultipleArrangement,
    RemovalArrangement,
)
from serialog.layout.context import ArrangeContext
from serialog.layout.conversions import Conversion
from serialog.layout.members import ConversionCall, Member, MemberLayout
from serialog.layout.parser import SHORTCUTS, get_arrangement, parse, unescape
from serialog.layout.templates import PatternTemplate


def values_of(spec, event, conversions=None):
    """Arrange ``spec`` into a fresh layout and format ``event`` with it."""
    context = ArrangeContext.create(conversions)
    layout = MemberLayout()
    layout.arrange(parse(spec, context), context)
    return layout.format(event)


class TestParseShapes:
    """What kind of arrangement a spec turns into."""

    @pytest.mark.parametrize("spec", [None, ""])
    def test_empty_spec_is_none(self, spec):
        assert parse(spec) is None

    def test_single_member_is_returned_unwrapped(self):
        result = parse("level")

        assert isinstance(result, Member)
        assert result.name == "level"
        assert isinstance(result.source, Member)
        assert isinstance(result.source.source, Conversion)
        assert result.source.source.name == "level"

    def test_several_members_make_a_composite(self):
        result = parse("level;message;logger")

        assert isinstance(result, MultipleArrangement)
        assert [member.name for member in result.arrangements] == ["level", "message", "logger"]

    def test_trailing_separator_is_accepted(self):
        result = parse("level;message;")

        assert [member.name for member in result.arrangements] == ["level", "message"]

    def test_preset_with_custom_member(self):
        """DEFAULT!nxlog;Host=Name:hostname nests Name inside Host."""
        result = parse("DEFAULT!nxlog;Host=Name:hostname")

        assert isinstance(result, MultipleArrangement)
        preset, host = result.arrangements
        assert isinstance(preset, DefaultArrangement)
        assert preset.default == "nxlog"
        assert isinstance(host, Member)
        assert host.name == "Host"

        name = host.source
        assert isinstance(name, Member)
        assert name.name == "Name"
        assert isinstance(name.source, Member)
        assert name.source.name == "hostname"
        assert isinstance(name.source.source, Conversion)
        assert name.source.source.name == "hostname"

    def test_clear_is_removal_without_pattern(self):
        result = parse("CLEAR")

        assert isinstance(result, RemovalArrangement)
        assert result.pattern is None

    def test_remove_with_pattern(self):
        result = parse("REMOVE!^ex")

        assert isinstance(result, RemovalArrangement)
        assert result.pattern == "^ex"

    @pytest.mark.parametrize(
        ("spec", "preset"),
        [("DEFAULT", "default"), ("default", "default"), ("nxlog", "nxlog"), ("DEFAULT!", "default")],
    )
    def test_default_shortcuts(self, spec, preset):
        result = parse(spec)

        assert isinstance(result, DefaultArrangement)
        assert result.default == preset

    def test_shortcut_table(self):
        assert SHORTCUTS["CLEAR"] == "REMOVE!"

    def test_conversion_call(self):
        result = parse("Day%utcdate:%Y-%m-%d")

        assert isinstance(result, Member)
        assert result.option == ConversionCall("utcdate", "%Y-%m-%d")

    def test_template_member(self):
        result = parse("Line|[%level] %message")

        assert isinstance(result, Member)
        assert isinstance(result.source, PatternTemplate)

    def test_known_arrangement_type_by_dotted_name(self):
        result = parse("serialog.layout.arrangements.RemovalArrangement!^lev")

        assert isinstance(result, RemovalArrangement)
        assert result.pattern == "^lev"


class TestParseValues:
    """Values produced by parsed members."""

    def test_named_conversion(self, event):
        assert values_of("Severity:level;Text:message", event) == {"Severity": "INFO", "Text": "hello"}

    def test_nested_member_value(self, event):
        assert values_of("Host=Name:hostname", event) == {"Host": socket.gethostname()}

    def test_option_naming_a_conversion(self, event):
        assert values_of("Host=hostname", event) == {"Host": socket.gethostname()}

    def test_literal_option(self, event):
        assert values_of("Env=production", event) == {"Env": "production"}

    def test_unescaped_semicolon_ends_the_option(self, event):
        assert values_of("ctx=level;message", event) == {"ctx": "INFO", "message": "hello"}

    def test_escaped_semicolon_keeps_nested_spec_together(self, event):
        assert values_of(r"ctx=level\;message", event) == {"ctx": {"level": "INFO", "message": "hello"}}

    def test_conversion_with_option(self, event):
        assert values_of("Day%utcdate:%Y-%m-%d;Short%logger:1", event) == {
            "Day": "2024-01-02",
            "Short": "worker",
        }

    def test_template_rendering(self, event):
        assert values_of("Line|[%level] %message", event) == {"Line": "[INFO] hello"}

    def test_template_parentheses_become_braces(self, event):
        assert values_of("When|%utcdate(%H:%M)", event) == {"When": "03:04"}

    def test_escaped_parentheses_stay_literal(self, event):
        assert values_of(r"Text|a\(b\)", event) == {"Text": "a(b)"}

    def test_caller_conversions(self, event):
        conversions = {"tenant": lambda e: "acme"}

        assert values_of("tenant;level", event, conversions) == {"tenant": "acme", "level": "INFO"}

    def test_unknown_member_falls_back_to_event_property(self, make_event):
        event = make_event(properties={"request_id": "r-1"})

        assert values_of("request_id", event) == {"request_id": "r-1"}

    def test_removal_inside_spec(self, event):
        assert values_of("level;message;logger;REMOVE!^l", event) == {"message": "hello"}


class TestEscaping:
    """Backslash escapes in names and values."""

    @pytest.mark.parametrize("char", ["\\", ";", "=", ":", "!", "%", "|"])
    def test_escaped_character_is_literal_in_name(self, char):
        result = parse("a\\" + char + "b")

        assert isinstance(result, Member)
        assert result.name == "a" + char + "b"

    def test_escaped_colon_in_value(self, event):
        assert values_of(r"k:a\:b", event) == {"k": "a:b"}

    def test_unescape(self):
        assert unescape(r"a\=b\:c\\d") == "a=b:c\\d"

    @pytest.mark.parametrize("spec", ["level\\", r"a\qb", r"level;mess\age"])
    def test_invalid_escape_raises(self, spec):
        with pytest.raises(ConfigurationError):
            parse(spec)


class TestParseErrors:
    """Malformed specs."""

    def test_empty_member_spec_raises(self):
        with pytest.raises(ConfigurationError) as info:
            parse("level;;message")

        assert info.value.spec == "level;;message"

    def test_unknown_arrangement_type_raises(self):
        with pytest.raises(ConfigurationError):
            parse("no.such.module.Thing!x")

    def test_reserved_word_without_module_raises(self):
        with pytest.raises(ConfigurationError):
            parse("SOMETHING!x")

    def test_non_arrangement_type_raises(self):
        with pytest.raises(ConfigurationError):
            parse("collections.OrderedDict!x")

    def test_bad_removal_pattern_raises(self):
        with pytest.raises(ConfigurationError):
            parse("REMOVE!(")

    def test_get_arrangement_returns_none_on_error(self):
        assert get_arrangement("level;;message") is None

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse(r"a\qb")
