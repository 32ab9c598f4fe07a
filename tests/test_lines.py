"""Tests for configuration line helpers."""
import pytest

from junos_provider.engine.errors import LineParseError
from junos_provider.engine.lines import (
    first_field,
    join_id,
    parse_int,
    relative_lines,
    split_id,
    take_named,
    unquote,
)


class TestRelativeLines:
    """Tests for walking show output."""

    def test_strips_set_prefix(self):
        """Statements come back without the set prefix."""
        output = "set dynamic-db\nset \"65000 65001\"\n"
        assert list(relative_lines(output)) == ["dynamic-db", '"65000 65001"']

    def test_skips_blank_lines(self):
        """Blank and whitespace-only lines are dropped."""
        output = "\nset prefer\n   \nset version 4\n"
        assert list(relative_lines(output)) == ["prefer", "version 4"]

    def test_xml_envelope(self):
        """Start marker is skipped, end marker stops the walk."""
        output = (
            "<configuration-output>\n"
            "set key 10\n"
            "</configuration-output>\n"
            "set prefer\n"
        )
        assert list(relative_lines(output)) == ["key 10"]

    def test_empty_output(self):
        """Empty output yields nothing."""
        assert list(relative_lines("")) == []


class TestParseInt:
    """Tests for integer conversion of device tokens."""

    def test_valid(self):
        assert parse_int("42") == 42

    def test_invalid_carries_token(self):
        """Failure names the offending token."""
        with pytest.raises(LineParseError) as exc_info:
            parse_int("abc")
        assert "failed to convert value from 'abc' to integer" in str(exc_info.value)


class TestFields:
    """Tests for quote handling and field splitting."""

    def test_unquote(self):
        assert unquote('"65000 65001"') == "65000 65001"
        assert unquote("plain") == "plain"

    def test_first_field_plain(self):
        assert first_field("site1 password secret") == ("site1", "password secret")

    def test_first_field_quoted(self):
        """Quoted first word is kept whole."""
        head, rest = first_field('"ftp://host/a b" password "x"')
        assert head == '"ftp://host/a b"'
        assert rest == 'password "x"'

    def test_first_field_single(self):
        assert first_field("lonely") == ("lonely", "")


class TestTakeNamed:
    """Tests for the remove-then-reappend idiom."""

    def test_found_is_removed(self):
        blocks = [{"name": "a"}, {"name": "b"}]
        found = take_named(blocks, "a", lambda b: b["name"])
        assert found == {"name": "a"}
        assert blocks == [{"name": "b"}]

    def test_missing_returns_none(self):
        blocks = [{"name": "a"}]
        assert take_named(blocks, "z", lambda b: b["name"]) is None
        assert len(blocks) == 1

    def test_incremental_build(self):
        """A block spread over several lines is merged into one entry."""
        blocks: list[dict] = []
        for name, value in (("a", 1), ("b", 2), ("a", 3)):
            block = take_named(blocks, name, lambda b: b["name"]) or {"name": name, "values": []}
            block["values"].append(value)
            blocks.append(block)
        assert [b["name"] for b in blocks] == ["b", "a"]
        assert blocks[1]["values"] == [1, 3]


class TestIds:
    """Tests for resource ID helpers."""

    def test_join(self):
        assert join_id("a", "b") == "a_-_b"

    def test_split(self):
        assert split_id("a_-_b") == ["a", "b"]
        assert split_id("single") == ["single"]
