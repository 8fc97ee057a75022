"""
Completion Level Definitions

Maps the discrete completion levels (0-4) used by the report to their
display labels and bar colors, and buckets raw fact sheet completion
percentages into those levels.

Usage:
    from completion_levels import (
        COMPLETION_LEVEL_LABELS,
        completion_level_for,
        label_for,
        color_for,
    )

    level = completion_level_for(node["completion"]["percentage"])
    print(label_for(level))
"""

from typing import Dict, List, Optional

from reportlab.lib import colors

from constants import CompletionThreshold


EMPTY_LABEL = "(empty)"

COMPLETION_LEVEL_LABELS: Dict[int, str] = {
    0: EMPTY_LABEL,
    1: "<25% complete",
    2: "26–75% complete",
    3: "76–99% complete",
    4: "100% complete",
}

# Bar fill per level, indexed by level. Level 4 and anything unknown
# use DEFAULT_LEVEL_COLOR.
LEVEL_COLORS: List[colors.Color] = [
    colors.Color(1.0, 0.0, 0.0, alpha=0.8),
    colors.Color(1.0, 128 / 255, 0.0, alpha=0.8),
    colors.Color(1.0, 1.0, 0.0, alpha=0.8),
    colors.Color(102 / 255, 204 / 255, 0.0, alpha=0.8),
]

LEVEL_COLOR_HEX: List[str] = ["#FF0000", "#FF8000", "#FFFF00", "#66CC00"]

DEFAULT_LEVEL_COLOR = colors.black
DEFAULT_LEVEL_COLOR_HEX = "#000000"


def completion_level_for(percentage: Optional[float]) -> int:
    """Bucket a completion percentage into a completion level.

    A missing percentage is level 0. Anything above the missing sentinel
    (including 0) is at least level 1.

    Args:
        percentage: Completion percentage of a fact sheet, or None

    Returns:
        Completion level between 0 and 4

    Example:
        >>> completion_level_for(None)
        0
        >>> completion_level_for(0)
        1
        >>> completion_level_for(80)
        3
    """
    if percentage is None:
        percentage = CompletionThreshold.MISSING_SENTINEL

    if percentage <= CompletionThreshold.MISSING_SENTINEL:
        return 0
    if percentage <= CompletionThreshold.LOW_MAX:
        return 1
    if percentage <= CompletionThreshold.PARTIAL_MAX:
        return 2
    if percentage < CompletionThreshold.COMPLETE:
        return 3
    return 4


def label_for(level: int) -> str:
    """Get the display label for a completion level."""
    return COMPLETION_LEVEL_LABELS.get(level, f"unknown?: {level}")


def color_for(level: int) -> colors.Color:
    """Get the reportlab bar color for a completion level."""
    if 0 <= level < len(LEVEL_COLORS):
        return LEVEL_COLORS[level]
    return DEFAULT_LEVEL_COLOR


def color_hex_for(level: int) -> str:
    """Get the opaque hex color for a completion level (for contrast checks)."""
    if 0 <= level < len(LEVEL_COLOR_HEX):
        return LEVEL_COLOR_HEX[level]
    return DEFAULT_LEVEL_COLOR_HEX


def css_color_for(level: int) -> str:
    """Get the CSS color string used in the serialized chart data."""
    if 0 <= level < len(LEVEL_COLORS):
        color = LEVEL_COLORS[level]
        return "rgb({},{},{},{})".format(
            int(round(color.red * 255)),
            int(round(color.green * 255)),
            int(round(color.blue * 255)),
            color.alpha,
        )
    return "black"
