"""Tests for WCAG contrast helpers."""

import pytest

from accessibility_colors import get_accessible_text_color, get_contrast_ratio, hex_to_rgb
from completion_levels import LEVEL_COLOR_HEX
from constants import WCAGConstants


def test_hex_to_rgb():
    assert hex_to_rgb("#FF8000") == (255, 128, 0)
    assert hex_to_rgb("66cc00") == (102, 204, 0)


def test_contrast_ratio_extremes():
    assert get_contrast_ratio("#000000", "#FFFFFF") == pytest.approx(21.0)
    assert get_contrast_ratio("#FF0000", "#FF0000") == pytest.approx(1.0)


def test_contrast_ratio_is_symmetric():
    assert get_contrast_ratio("#FFFF00", "#000000") == pytest.approx(get_contrast_ratio("#000000", "#FFFF00"))


@pytest.mark.parametrize("background", LEVEL_COLOR_HEX)
def test_segment_text_color_is_readable(background):
    text = get_accessible_text_color(background)
    assert get_contrast_ratio(text, background) >= WCAGConstants.LARGE_TEXT_CONTRAST_RATIO


def test_yellow_gets_black_text():
    assert get_accessible_text_color("#FFFF00") == "#000000"
    assert get_contrast_ratio("#000000", "#FFFF00") >= WCAGConstants.NORMAL_TEXT_CONTRAST_RATIO


def test_dark_background_gets_white_text():
    assert get_accessible_text_color("#1F3A5F") == "#FFFFFF"
