"""Tests for the schema property mapper."""

import math

import pytest

from docprops.models.schema import PropertySchemaEntry, PropertyType
from docprops.models.tree import MISSING
from docprops.services.schema_mapper import (
    lookup_path,
    map_schema_properties,
    parse_path,
    set_nested,
    to_number,
    to_text,
)

TREE = {
    "cp:coreProperties": {
        "dc:title": ["Quarterly Report"],
        "dc:subject": [""],
        "cp:revision": ["3"],
        "dcterms:created": [{"$": {"xsi:type": "dcterms:W3CDTF"}, "_": "2024-01-15T10:00:00Z"}],
    }
}


class TestPathLookup:
    """Tests for path parsing and lookup."""

    def test_parse_path(self):
        """Test dotted paths with indices split into segments."""
        assert parse_path("cp:coreProperties.dc:title[0]") == ("cp:coreProperties", "dc:title", 0)
        assert parse_path("a.b[1]._") == ("a", "b", 1, "_")

    def test_lookup_found(self):
        """Test lookup returns the value at the path."""
        assert lookup_path(TREE, "cp:coreProperties.dc:title[0]") == "Quarterly Report"
        assert lookup_path(TREE, "cp:coreProperties.dcterms:created[0]._") == "2024-01-15T10:00:00Z"

    def test_lookup_missing(self):
        """Test missing segments resolve to MISSING, not an error."""
        assert lookup_path(TREE, "cp:coreProperties.dc:creator[0]") is MISSING
        assert lookup_path(TREE, "cp:coreProperties.dc:title[1]") is MISSING
        assert lookup_path(TREE, "Properties.Pages[0]") is MISSING

    def test_lookup_does_not_index_into_text(self):
        """Test a name segment applied to a text leaf is MISSING."""
        assert lookup_path(TREE, "cp:coreProperties.dc:title[0].extra") is MISSING


class TestCoercion:
    """Tests for value coercion helpers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("42", 42),
            (" 7 ", 7),
            ("-3", -3),
            ("3.5", 3.5),
            ("1e3", 1000.0),
            ("", 0),
            ("0x1F", 31),
            ("0b101", 5),
            ("0o17", 15),
        ],
    )
    def test_to_number(self, raw, expected):
        """Test numeric text coerces like a decimal parser."""
        value = to_number(raw)
        assert value == expected
        assert type(value) is type(expected)

    def test_to_number_not_a_number(self):
        """Test non-numeric text coerces to NaN."""
        assert math.isnan(to_number("forty-two"))

    def test_to_number_infinity(self):
        """Test Infinity literals coerce to infinities."""
        assert to_number("Infinity") == math.inf
        assert to_number("-Infinity") == -math.inf

    def test_to_number_element_text(self):
        """Test element mappings coerce through their text."""
        assert to_number({"$": {"a": "b"}, "_": "12"}) == 12

    def test_to_text(self):
        """Test textual coercion of decoded values."""
        assert to_text("abc") == "abc"
        assert to_text(["a", "b"]) == "a,b"
        assert to_text({"_": "dated", "$": {}}) == "dated"
        assert to_text({"$": {"only": "attrs"}}) == ""
        assert to_text(None) == ""

    def test_set_nested(self):
        """Test dotted keys create nested mappings."""
        data = {"stats": "replaced"}
        set_nested(data, "stats.pages", 4)
        set_nested(data, "stats.words", 10)
        set_nested(data, "title", "x")

        assert data == {"stats": {"pages": 4, "words": 10}, "title": "x"}


class TestMapSchemaProperties:
    """Tests for map_schema_properties."""

    def test_maps_strings_and_numbers(self):
        """Test string and number entries are coerced by type."""
        entries = [
            PropertySchemaEntry(name="title", path="cp:coreProperties.dc:title[0]"),
            PropertySchemaEntry(
                name="revision", path="cp:coreProperties.cp:revision[0]", type=PropertyType.NUMBER
            ),
            PropertySchemaEntry(name="created", path="cp:coreProperties.dcterms:created[0]"),
        ]

        result = map_schema_properties(TREE, entries)

        assert result == {
            "title": "Quarterly Report",
            "revision": 3,
            "created": "2024-01-15T10:00:00Z",
        }

    def test_empty_string_dropped(self):
        """Test empty string values are omitted."""
        entries = [PropertySchemaEntry(name="subject", path="cp:coreProperties.dc:subject[0]")]

        assert map_schema_properties(TREE, entries) == {}

    def test_missing_path_skipped(self):
        """Test entries whose path is absent contribute nothing."""
        entries = [
            PropertySchemaEntry(name="creator", path="cp:coreProperties.dc:creator[0]"),
            PropertySchemaEntry(name="pages", path="Properties.Pages[0]", type=PropertyType.NUMBER),
        ]

        assert map_schema_properties(TREE, entries) == {}

    def test_nan_is_stored(self):
        """Test non-numeric text for a number entry is stored as NaN."""
        tree = {"Properties": {"Pages": ["many"]}}
        entries = [PropertySchemaEntry(name="pages", path="Properties.Pages[0]", type="number")]

        result = map_schema_properties(tree, entries)

        assert math.isnan(result["pages"])

    def test_dotted_output_name(self):
        """Test dotted output names nest the value."""
        tree = {"Properties": {"Pages": ["42"], "Words": ["900"]}}
        entries = [
            PropertySchemaEntry(name="stats.pages", path="Properties.Pages[0]", type="number"),
            PropertySchemaEntry(name="stats.words", path="Properties.Words[0]", type="number"),
        ]

        assert map_schema_properties(tree, entries) == {"stats": {"pages": 42, "words": 900}}

    def test_does_not_mutate_tree(self):
        """Test the decoded tree is left untouched."""
        snapshot = repr(TREE)
        entries = [PropertySchemaEntry(name="title", path="cp:coreProperties.dc:title[0]")]

        map_schema_properties(TREE, entries)

        assert repr(TREE) == snapshot
