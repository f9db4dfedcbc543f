"""Unit tests for the decoders module."""

from __future__ import annotations

import pytest

from confprops.core import decoders
from confprops.core.decoders import (
    ListDecoder,
    MapDecoder,
    MapListDecoder,
    ScalarDecoder,
    TreeDecoder,
    decoder_for,
)
from confprops.core.errors import DecodeError

ALL_DECODERS = [
    decoders.string(),
    decoders.integer(),
    decoders.boolean(),
    decoders.string_list(),
    decoders.integer_list(),
    decoders.boolean_list(),
    decoders.string_map(),
    decoders.integer_map(),
    decoders.boolean_map(),
    decoders.string_map_list(),
    decoders.integer_map_list(),
    decoders.boolean_map_list(),
    decoders.string_tree(),
]


@pytest.mark.parametrize("decoder", ALL_DECODERS, ids=repr)
def test_absent_key_decodes_to_none(decoder):
    assert decoder.parse({"other": "1"}, "missing") is None


@pytest.mark.parametrize(
    "decoder", [d for d in ALL_DECODERS if not isinstance(d, (MapDecoder, MapListDecoder, TreeDecoder))], ids=repr
)
def test_empty_value_decodes_to_none(decoder):
    assert decoder.parse({"key": ""}, "key") is None


class TestScalarDecoders:
    """Test scalar conversion."""

    def test_string(self):
        assert decoders.string().parse({"name": "demo"}, "name") == "demo"

    def test_string_keeps_whitespace(self):
        assert decoders.string().parse({"name": " a b "}, "name") == " a b "

    @pytest.mark.parametrize("text,expected", [("42", 42), ("-7", -7), ("+3", 3), ("007", 7)])
    def test_integer(self, text, expected):
        assert decoders.integer().parse({"n": text}, "n") == expected

    @pytest.mark.parametrize("text", ["abc", "1.5", " 1", "1_000", "0x10"])
    def test_integer_failure_is_an_error(self, text):
        with pytest.raises(DecodeError) as exc_info:
            decoders.integer().parse({"n": text}, "n")
        assert exc_info.value.key == "n"
        assert exc_info.value.value == text

    @pytest.mark.parametrize("text,expected", [("true", True), ("FALSE", False), ("True", True)])
    def test_boolean(self, text, expected):
        assert decoders.boolean().parse({"flag": text}, "flag") is expected

    @pytest.mark.parametrize("text", ["yes", "1", "on", "maybe"])
    def test_boolean_failure_is_an_error(self, text):
        with pytest.raises(DecodeError):
            decoders.boolean().parse({"flag": text}, "flag")

    def test_decode_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            decoders.integer().parse({"n": "x"}, "n")

    def test_exact_key_only(self):
        assert decoders.string().parse({"name.first": "a"}, "name") is None


class TestListDecoders:
    """Test delimiter-based list splitting."""

    def test_trailing_empty_segment_preserved(self):
        assert decoders.string_list().parse({"k": "a;b;"}, "k") == ["a", "b", ""]

    def test_single_element(self):
        assert decoders.string_list().parse({"k": "a"}, "k") == ["a"]

    def test_inner_empty_segment_preserved(self):
        assert decoders.string_list().parse({"k": "a;;b"}, "k") == ["a", "", "b"]

    def test_integer_list(self):
        assert decoders.integer_list().parse({"k": "1;2;3"}, "k") == [1, 2, 3]

    def test_integer_list_trailing_delimiter_fails(self):
        with pytest.raises(DecodeError):
            decoders.integer_list().parse({"k": "1;2;"}, "k")

    def test_boolean_list(self):
        assert decoders.boolean_list().parse({"k": "true;false"}, "k") == [True, False]

    def test_custom_delimiter(self):
        decoder = decoders.string_list().with_delimiter(",")
        assert decoder.parse({"k": "a,b;c"}, "k") == ["a", "b;c"]

    def test_delimiter_is_literal(self):
        assert decoders.string_list("|").parse({"k": "a|b"}, "k") == ["a", "b"]
        assert decoders.string_list(".").parse({"k": "a.b"}, "k") == ["a", "b"]

    def test_with_delimiter_returns_copy(self):
        original = decoders.string_list()
        changed = original.with_delimiter(",")
        assert original.delimiter == ";"
        assert changed.delimiter == ","

    def test_empty_delimiter_rejected(self):
        with pytest.raises(ValueError):
            ListDecoder(decoders.STRING, "")


class TestMapDecoders:
    """Test prefix-grouped maps."""

    def test_prefix_selection_keeps_full_keys(self):
        mapping = {"p.x": "1", "p.y": "2", "q.z": "3"}
        assert decoders.string_map().parse(mapping, "p") == {"p.x": "1", "p.y": "2"}

    def test_no_match(self):
        assert decoders.string_map().parse({"q.z": "3"}, "p") is None

    def test_prefix_is_plain_string_prefix(self):
        mapping = {"db.host": "h", "dbx": "x"}
        assert decoders.string_map().parse(mapping, "db") == {"db.host": "h", "dbx": "x"}

    def test_empty_value_kept_for_strings(self):
        assert decoders.string_map().parse({"p.x": ""}, "p") == {"p.x": ""}

    def test_integer_map(self):
        assert decoders.integer_map().parse({"p.a": "1", "p.b": "2"}, "p") == {"p.a": 1, "p.b": 2}

    def test_integer_map_failure(self):
        with pytest.raises(DecodeError) as exc_info:
            decoders.integer_map().parse({"p.a": "1", "p.b": "two"}, "p")
        assert exc_info.value.key == "p.b"

    def test_boolean_map(self):
        assert decoders.boolean_map().parse({"f.a": "true"}, "f") == {"f.a": True}

    def test_map_of_integer_lists(self):
        mapping = {"p.x": "1;2", "p.y": ""}
        assert decoders.integer_map_list().parse(mapping, "p") == {"p.x": [1, 2], "p.y": []}

    def test_map_of_string_lists_dynamic_table(self):
        mapping = {"foo.0": "a;b", "foo.1": "c;d", "bar": "x"}
        assert decoders.string_map_list().parse(mapping, "foo") == {
            "foo.0": ["a", "b"],
            "foo.1": ["c", "d"],
        }

    def test_map_list_custom_delimiter(self):
        decoder = decoders.boolean_map_list(",")
        assert decoder.parse({"f.a": "true,false"}, "f") == {"f.a": [True, False]}

    def test_duplicate_keys_last_wins(self):
        class Pairs(dict):
            def items(self):
                return [("p.x", "first"), ("p.x", "second")]

        assert decoders.string_map().parse(Pairs(), "p") == {"p.x": "second"}


class TestTreeDecoder:
    """Test nested map folding."""

    def test_nested(self):
        mapping = {"db.main.host": "h", "db.main.port": "5432", "db.pool": "4", "dbx": "no"}
        assert decoders.string_tree().parse(mapping, "db") == {
            "main": {"host": "h", "port": "5432"},
            "pool": "4",
        }

    def test_converter_applies_to_leaves(self):
        decoder = TreeDecoder(decoders.INTEGER)
        assert decoder.parse({"n.a.b": "1"}, "n") == {"a": {"b": 1}}

    def test_empty_prefix_uses_whole_mapping(self):
        assert decoders.string_tree().parse({"a.b": "1", "c": "2"}, "") == {"a": {"b": "1"}, "c": "2"}

    def test_leaf_and_branch_conflict(self):
        with pytest.raises(DecodeError):
            decoders.string_tree().parse({"t.a": "1", "t.a.b": "2"}, "t")
        with pytest.raises(DecodeError):
            decoders.string_tree().parse({"t.a.b": "2", "t.a": "1"}, "t")


class TestDecoderFor:
    """Test building decoders by name."""

    @pytest.mark.parametrize(
        "name,cls",
        [
            ("string", ScalarDecoder),
            ("integer", ScalarDecoder),
            ("boolean-list", ListDecoder),
            ("integer-map", MapDecoder),
            ("string-map-list", MapListDecoder),
            ("string-tree", TreeDecoder),
        ],
    )
    def test_known_names(self, name, cls):
        assert isinstance(decoder_for(name), cls)

    def test_delimiter(self):
        assert decoder_for("integer-list", ",").parse({"k": "1,2"}, "k") == [1, 2]

    def test_delimiter_without_list_shape(self):
        with pytest.raises(ValueError):
            decoder_for("integer", ",")

    @pytest.mark.parametrize("name", ["float", "string-set", "", "integer-map-tree"])
    def test_unknown_names(self, name):
        with pytest.raises(ValueError):
            decoder_for(name)

    def test_factories_equal_named(self):
        assert decoder_for("integer-map-list") == decoders.integer_map_list()
