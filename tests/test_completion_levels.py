"""Tests for completion level bucketing and labels."""

import pytest

from completion_levels import (
    COMPLETION_LEVEL_LABELS,
    color_hex_for,
    completion_level_for,
    css_color_for,
    label_for,
)


class TestCompletionLevelFor:

    @pytest.mark.parametrize("percentage,expected", [
        (None, 0),
        (-1, 0),
        (-5, 0),
        (-0.5, 1),
        (0, 1),
        (1, 1),
        (25, 1),
        (25.01, 2),
        (50, 2),
        (75, 2),
        (75.5, 3),
        (99.99, 3),
        (100, 4),
        (120, 4),
    ])
    def test_boundaries(self, percentage, expected):
        assert completion_level_for(percentage) == expected

    def test_zero_percent_is_not_empty(self):
        """A completion of 0 is a real value and lands in the lowest bucket."""
        assert completion_level_for(0) == 1


class TestLabels:

    def test_known_labels(self):
        assert label_for(0) == "(empty)"
        assert label_for(1) == "<25% complete"
        assert label_for(4) == "100% complete"

    def test_unknown_label(self):
        assert label_for(5) == "unknown?: 5"
        assert label_for(-1) == "unknown?: -1"

    def test_table_labels(self):
        for level, label in COMPLETION_LEVEL_LABELS.items():
            assert label_for(level) == label


class TestColors:

    def test_css_colors(self):
        assert css_color_for(0) == "rgb(255,0,0,0.8)"
        assert css_color_for(3) == "rgb(102,204,0,0.8)"
        assert css_color_for(4) == "black"
        assert css_color_for(-1) == "black"

    def test_hex_colors(self):
        assert color_hex_for(2) == "#FFFF00"
        assert color_hex_for(4) == "#000000"
