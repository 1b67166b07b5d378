"""Tests for category normalization and color assignment."""

import pytest

from communal.categories import (
    CATEGORY_PRESETS,
    DYNAMIC_COLORS,
    UNCATEGORIZED,
    assign_category_colors,
    category_options,
    connection_categories,
    normalize_category,
    primary_category,
)


class TestNormalizeCategory:
    """Test category label normalization."""

    def test_trims(self):
        assert normalize_category("  Prayer ") == "Prayer"

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_becomes_uncategorized(self, value):
        assert normalize_category(value) == UNCATEGORIZED

    @pytest.mark.parametrize("value", ["  Prayer ", "", "Large Group"])
    def test_idempotent(self, value):
        once = normalize_category(value)
        assert normalize_category(once) == once


class TestConnectionCategories:
    """Test the shared category fallback rule."""

    def test_uses_categories_list(self, connection_factory):
        connection = connection_factory("1", "Sam", categories=[" Alpha", "Beta "])
        assert connection_categories(connection) == ["Alpha", "Beta"]
        assert primary_category(connection) == "Alpha"

    def test_falls_back_to_legacy_category(self, connection_factory):
        connection = connection_factory("1", "Sam", categories=[], category="Prayer")
        assert connection_categories(connection) == ["Prayer"]

    def test_never_empty(self, connection_factory):
        connection = connection_factory("1", "Sam", categories=[], category="")
        assert connection_categories(connection) == [UNCATEGORIZED]

    def test_duplicates_collapse(self, connection_factory):
        connection = connection_factory("1", "Sam", categories=["Alpha", " Alpha", ""])
        assert connection_categories(connection) == ["Alpha", UNCATEGORIZED]


class TestColors:
    """Test category color assignment."""

    def test_presets_have_fixed_colors(self):
        colors = assign_category_colors(["Prayer"])
        assert colors["Prayer"] == "#333333"
        assert colors["Freshman Group"] == "#E76127"

    def test_dynamic_colors_cycle(self):
        labels = [f"Group {i}" for i in range(len(DYNAMIC_COLORS) + 1)]

        colors = assign_category_colors(labels)

        assert colors["Group 0"] == DYNAMIC_COLORS[0]
        assert colors["Group 1"] == DYNAMIC_COLORS[1]
        assert colors[f"Group {len(DYNAMIC_COLORS)}"] == DYNAMIC_COLORS[0]

    def test_index_counts_only_unmapped_labels(self):
        colors = assign_category_colors(["Prayer", "Hiking", "LaFe", "Choir"])
        assert colors["Hiking"] == DYNAMIC_COLORS[0]
        assert colors["Choir"] == DYNAMIC_COLORS[1]


class TestCategoryOptions:
    """Test the category picker options."""

    def test_presets_then_sorted_dynamic(self, connection_factory):
        connections = [
            connection_factory("1", "Sam", categories=["hiking", "Prayer"]),
            connection_factory("2", "Kim", categories=["Choir"]),
        ]

        options = category_options(connections, extra=[" Bible Study "])

        presets = [label for label, _ in CATEGORY_PRESETS]
        assert options[: len(presets)] == presets
        assert options[len(presets):] == ["Bible Study", "Choir", "hiking"]
