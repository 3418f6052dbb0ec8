"""Tests for arrangement variants and how they edit member lists."""

import pytest

from serialog.errors import ConfigurationError
from serialog.layout.arrangements import (
    PRESETS,
    DefaultArrangement,
    MultipleArrangement,
    NoArrangement,
    OptionArrangement,
    PluginArrangement,
    RemovalArrangement,
    arrange,
    preset_snapshot,
    register_preset,
    unregister_preset,
)
from serialog.layout.members import Member
from serialog.layout.parser import parse

DEFAULT_NAMES = ["date", "level", "appname", "logger", "thread", "ndc", "message", "exception"]
NXLOG_NAMES = ["EventTime", "Severity", "SourceName", "Logger", "Thread", "NDC", "Message", "Exception"]


def names_after(arrangement, members=None):
    members = list(members or [])
    arrange(arrangement, members)
    return [member.name for member in members]


@pytest.fixture
def members():
    """A few unresolved members."""
    return [Member("alpha"), Member("beta"), Member("gamma")]


class TestRemoval:
    """Removal with and without a name pattern."""

    def test_without_pattern_removes_everything(self, members):
        assert names_after(RemovalArrangement(), members) == []

    def test_without_pattern_is_idempotent(self, members):
        removal = RemovalArrangement()

        arrange(removal, members)
        assert members == []
        arrange(removal, members)
        assert members == []

    def test_clear_spec_empties_any_list(self, members):
        assert names_after(parse("CLEAR"), members) == []

    def test_pattern_is_searched(self, members):
        assert names_after(RemovalArrangement("^(alpha|gam)"), members) == ["beta"]

    def test_set_option_recompiles(self, members):
        removal = RemovalArrangement("alpha")
        removal.set_option("beta")

        assert names_after(removal, members) == ["alpha", "gamma"]

    def test_invalid_pattern_raises(self):
        with pytest.raises(ConfigurationError):
            RemovalArrangement("(")

    def test_list_is_edited_in_place(self, members):
        original = members

        arrange(RemovalArrangement("beta"), members)

        assert original is members
        assert [member.name for member in original] == ["alpha", "gamma"]


class TestComposite:
    """MultipleArrangement ordering."""

    def test_order_is_preserved_across_nesting(self):
        inner = MultipleArrangement([Member("B"), Member("C")])
        outer = MultipleArrangement([MultipleArrangement([Member("A")]), inner])

        assert names_after(outer) == ["A", "B", "C"]

    def test_option_is_applied_before_children(self):
        composite = MultipleArrangement([Member("second")], option="first")

        assert names_after(composite) == ["first", "second"]

    def test_add_ignores_none(self):
        composite = MultipleArrangement()
        composite.add(None)
        composite.add(Member("x"))

        assert len(composite.arrangements) == 1

    def test_preset_then_clear_then_member(self):
        assert names_after(parse("DEFAULT!nxlog;CLEAR;level")) == ["level"]

    def test_preset_with_removal(self):
        names = names_after(parse("DEFAULT;REMOVE!^(ndc|thread)$"))

        assert names == [name for name in DEFAULT_NAMES if name not in ("ndc", "thread")]


class TestDefault:
    """Named presets and their fallback."""

    def test_default_preset(self):
        assert names_after(DefaultArrangement()) == DEFAULT_NAMES

    def test_nxlog_preset(self):
        assert names_after(DefaultArrangement("nxlog")) == NXLOG_NAMES

    def test_unknown_preset_falls_back_to_default(self):
        arrangement = DefaultArrangement("missing")

        assert arrangement.resolve_spec() == PRESETS["default"]
        assert names_after(arrangement) == DEFAULT_NAMES

    def test_falls_back_to_first_preset_without_default(self):
        arrangement = DefaultArrangement("missing", config={"only": "level;message"})

        assert names_after(arrangement) == ["level", "message"]

    def test_no_presets_adds_nothing(self):
        arrangement = DefaultArrangement("default", config={})

        assert arrangement.resolve_spec() is None
        assert names_after(arrangement) == []

    def test_set_option_empty_means_default(self):
        arrangement = DefaultArrangement("nxlog")
        arrangement.set_option("")

        assert arrangement.default == "default"

    def test_registered_preset(self):
        register_preset("short", "level;message")
        try:
            assert "short" in preset_snapshot()
            assert names_after(DefaultArrangement("short")) == ["level", "message"]
        finally:
            assert unregister_preset("short") == "level;message"

        assert "short" not in preset_snapshot()

    def test_snapshot_is_a_copy(self):
        snapshot = preset_snapshot()
        snapshot["default"] = "level"

        assert PRESETS["default"] != "level"


class TestOtherVariants:
    """Option, no-op and plugin arrangements."""

    def test_option_arrangement_parses_its_option(self):
        assert names_after(OptionArrangement("level;message")) == ["level", "message"]

    def test_option_arrangement_without_option(self, members):
        assert names_after(OptionArrangement(), members) == ["alpha", "beta", "gamma"]

    def test_no_arrangement(self, members):
        assert names_after(NoArrangement(), members) == ["alpha", "beta", "gamma"]

    def test_none_is_a_no_op(self, members):
        assert names_after(None, members) == ["alpha", "beta", "gamma"]

    def test_member_is_appended(self, members):
        assert names_after(Member("delta"), members) == ["alpha", "beta", "gamma", "delta"]

    def test_plugin_arrangement(self, members):
        class Reverse:
            def __init__(self):
                self.option = None

            def set_option(self, value):
                self.option = value

            def arrange(self, members, context):
                members.reverse()

        plugin = PluginArrangement(Reverse())
        plugin.set_option("anything")

        assert plugin.target.option == "anything"
        assert names_after(plugin, members) == ["gamma", "beta", "alpha"]

    def test_unknown_object_raises(self, members):
        with pytest.raises(TypeError):
            arrange(object(), members)
