"""
Accessibility Color Utilities for Chart Visualizations

WCAG 2.1 contrast helpers used when placing value labels on top of the
colored bar segments of the completion chart.

Reference: https://www.w3.org/WAI/WCAG21/Understanding/contrast-minimum.html
"""

from typing import Tuple

from constants import WCAGConstants


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to RGB tuple.

    Args:
        hex_color: Hex color string (e.g., "#FF5500" or "FF5500")

    Returns:
        Tuple of (R, G, B) values (0-255)
    """
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def get_relative_luminance(rgb: Tuple[int, int, int]) -> float:
    """Calculate relative luminance per WCAG 2.1."""
    def adjust(c: int) -> float:
        c_normalized = c / WCAGConstants.RGB_MAX
        if c_normalized <= WCAGConstants.SRGB_LINEAR_THRESHOLD:
            return c_normalized / WCAGConstants.LINEAR_DIVISOR
        return ((c_normalized + WCAGConstants.GAMMA_OFFSET) / WCAGConstants.GAMMA_DIVISOR) ** WCAGConstants.GAMMA_EXPONENT

    r, g, b = rgb
    return (WCAGConstants.RED_LUMINANCE_WEIGHT * adjust(r) +
            WCAGConstants.GREEN_LUMINANCE_WEIGHT * adjust(g) +
            WCAGConstants.BLUE_LUMINANCE_WEIGHT * adjust(b))


def get_contrast_ratio(color1: str, color2: str) -> float:
    """Calculate WCAG contrast ratio (1-21) between two hex colors."""
    lum1 = get_relative_luminance(hex_to_rgb(color1))
    lum2 = get_relative_luminance(hex_to_rgb(color2))

    lighter = max(lum1, lum2)
    darker = min(lum1, lum2)

    return (lighter + WCAGConstants.CONTRAST_ADJUSTMENT) / (darker + WCAGConstants.CONTRAST_ADJUSTMENT)


def get_accessible_text_color(background: str) -> str:
    """Get accessible text color (black or white) for a given background.

    Returns:
        "#FFFFFF" (white) or "#000000" (black) based on contrast
    """
    white_contrast = get_contrast_ratio(background, "#FFFFFF")
    black_contrast = get_contrast_ratio(background, "#000000")

    return "#FFFFFF" if white_contrast > black_contrast else "#000000"
