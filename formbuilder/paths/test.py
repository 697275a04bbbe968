"""Unit tests for dotted-path addressing."""

import pytest

from formbuilder.paths import (
    get_nested_value,
    get_schema_at_path,
    join_path,
    set_nested_value,
    split_path,
)
from formbuilder.schema import SchemaNode


class TestSplitPath:
    """Tests for path segmentation."""

    @pytest.mark.unit
    @pytest.mark.parametrize("path", ["a.b", "a..b", ".a.b", "a.b.", "..a...b.."])
    def test_empty_segments_dropped(self, path):
        """Empty segments are filtered out."""
        assert split_path(path) == ["a", "b"]

    @pytest.mark.unit
    @pytest.mark.parametrize("path", [None, 3, ["a"], "", "..."])
    def test_invalid_paths(self, path):
        """Non-strings and all-empty paths have no segments."""
        assert split_path(path) == []

    @pytest.mark.unit
    def test_join_path(self):
        """Base path and name are dot-joined."""
        assert join_path("", "a") == "a"
        assert join_path("a.b", "c") == "a.b.c"


class TestGetNestedValue:
    """Tests for get_nested_value."""

    @pytest.mark.unit
    def test_top_level(self):
        """Top-level keys resolve."""
        assert get_nested_value({"name": "Jo"}, "name") == "Jo"

    @pytest.mark.unit
    def test_deeply_nested(self):
        """Deep paths resolve."""
        root = {"a": {"b": {"c": {"d": 4}}}}
        assert get_nested_value(root, "a.b.c.d") == 4

    @pytest.mark.unit
    def test_missing_path(self):
        """Missing segments give None."""
        assert get_nested_value({"a": {}}, "a.b.c") is None

    @pytest.mark.unit
    def test_through_scalar(self):
        """Traversal through a scalar gives None."""
        assert get_nested_value({"a": "text"}, "a.b") is None

    @pytest.mark.unit
    @pytest.mark.parametrize("path", [None, 7, "", ".."])
    def test_invalid_path(self, path):
        """Invalid paths give None."""
        assert get_nested_value({"a": 1}, path) is None

    @pytest.mark.unit
    def test_segment_filtering_idempotence(self):
        """Equivalent spellings of a path read the same value."""
        root = {"a": {"b": "x"}}
        assert (
            get_nested_value(root, "a..b")
            == get_nested_value(root, "a.b")
            == get_nested_value(root, ".a.b.")
            == "x"
        )

    @pytest.mark.unit
    def test_falsy_values_returned(self):
        """False, 0 and empty string are values, not absences."""
        root = {"a": False, "b": 0, "c": ""}
        assert get_nested_value(root, "a") is False
        assert get_nested_value(root, "b") == 0
        assert get_nested_value(root, "c") == ""


class TestSetNestedValue:
    """Tests for copy-on-write set_nested_value."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "path,value",
        [("a", 1), ("a.b", "x"), ("a.b.c", [1, 2]), ("x.y.z.w", True)],
    )
    def test_round_trip(self, path, value):
        """A value written at a path reads back."""
        root = {"a": {"b": {"c": 0}}, "d": 1}
        assert get_nested_value(set_nested_value(root, path, value), path) == value

    @pytest.mark.unit
    def test_does_not_mutate_input(self):
        """The input root is left untouched."""
        root = {"a": {"b": 1}}
        set_nested_value(root, "a.b", 2)
        assert root == {"a": {"b": 1}}

    @pytest.mark.unit
    def test_siblings_shared(self):
        """Untouched branches are shared by reference."""
        root = {"a": {"b": 1, "c": {"k": "v"}}, "d": {"e": 2}}
        new = set_nested_value(root, "a.b", 5)
        assert new is not root
        assert new["a"] is not root["a"]
        assert new["a"]["c"] is root["a"]["c"]
        assert new["d"] is root["d"]

    @pytest.mark.unit
    def test_creates_intermediates(self):
        """Missing intermediates are created as dicts."""
        assert set_nested_value({}, "a.b.c", 1) == {"a": {"b": {"c": 1}}}

    @pytest.mark.unit
    def test_overwrites_scalar_intermediate(self):
        """Scalar intermediates are replaced by dicts."""
        assert set_nested_value({"a": "text"}, "a.b", 1) == {"a": {"b": 1}}

    @pytest.mark.unit
    def test_list_intermediate_cloned(self):
        """Lists on the spine are shallow-cloned and not traversed."""
        tags = ["x", "y"]
        new = set_nested_value({"tags": tags}, "tags.first", "z")
        assert new["tags"] == ["x", "y"]
        assert new["tags"] is not tags

    @pytest.mark.unit
    @pytest.mark.parametrize("path", [None, 1, "", "..."])
    def test_invalid_path_is_noop(self, path):
        """Invalid paths return the input object unchanged."""
        root = {"a": 1}
        assert set_nested_value(root, path, 2) is root

    @pytest.mark.unit
    def test_none_root(self):
        """A missing root is treated as empty."""
        assert set_nested_value(None, "a", 1) == {"a": 1}

    @pytest.mark.unit
    def test_dotted_variants(self):
        """Empty segments are filtered before writing."""
        assert set_nested_value({}, ".a..b.", 1) == {"a": {"b": 1}}


class TestGetSchemaAtPath:
    """Tests for schema traversal."""

    @pytest.fixture
    def schema(self, contact_schema):
        return SchemaNode.model_validate(contact_schema)

    @pytest.mark.unit
    @pytest.mark.parametrize("path", [None, "", ".."])
    def test_empty_path_returns_root(self, schema, path):
        """Empty paths resolve to the root schema."""
        assert get_schema_at_path(schema, path) is schema

    @pytest.mark.unit
    def test_nested_lookup(self, schema):
        """Nested nodes resolve through properties."""
        node = get_schema_at_path(schema, "contact.email")
        assert node is not None
        assert node.format == "email"

    @pytest.mark.unit
    def test_missing_segment(self, schema):
        """Unknown names give None."""
        assert get_schema_at_path(schema, "contact.fax") is None

    @pytest.mark.unit
    def test_through_leaf(self, schema):
        """Traversal past a leaf gives None."""
        assert get_schema_at_path(schema, "name.first") is None
