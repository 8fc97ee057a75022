"""
Centralized Constants Module for the Architect Completion Report

This module provides named constants for the magic numbers used throughout the
codebase, so thresholds and layout values can be changed in one place.

Categories:
- HTTP Status Codes
- LeanIX API Endpoints and Environment Variables
- Retry Configuration
- Completion Level Thresholds
- Report Trigger Configuration
- WCAG Accessibility Constants
- Chart Layout Constants
"""

from enum import IntEnum


# ============================================================================
# HTTP STATUS CODES
# ============================================================================

class HTTPStatus(IntEnum):
    """Standard HTTP status codes used in API responses."""
    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    TOO_MANY_REQUESTS = 429
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


# Status codes that indicate the token is invalid or lacks access
AUTH_ERROR_STATUSES = frozenset({
    HTTPStatus.UNAUTHORIZED,
    HTTPStatus.FORBIDDEN,
})

# Status codes worth another attempt
RETRYABLE_STATUSES = frozenset({
    HTTPStatus.TOO_MANY_REQUESTS,
    HTTPStatus.INTERNAL_SERVER_ERROR,
    HTTPStatus.BAD_GATEWAY,
    HTTPStatus.SERVICE_UNAVAILABLE,
    HTTPStatus.GATEWAY_TIMEOUT,
})


# ============================================================================
# LEANIX API
# ============================================================================

DEFAULT_BASE_URL = "https://app.leanix.net"
TOKEN_ENDPOINT = "/services/mtm/v1/oauth2/token"
GRAPHQL_ENDPOINT = "/services/pathfinder/v1/graphql"

# Environment variables read via python-dotenv
API_TOKEN_ENV_VAR = "LEANIX_API_TOKEN"
BASE_URL_ENV_VAR = "LEANIX_BASE_URL"
WORKSPACE_ENV_VAR = "LEANIX_WORKSPACE"

DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds


# ============================================================================
# RETRY CONFIGURATION CONSTANTS
# ============================================================================

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0  # seconds
DEFAULT_MAX_DELAY = 30.0  # seconds
DEFAULT_EXPONENTIAL_BASE = 2

# Fallback wait when a 429 response carries no usable Retry-After header
DEFAULT_RATE_LIMIT_COOLDOWN = 60.0  # seconds


# ============================================================================
# COMPLETION LEVEL THRESHOLDS
# ============================================================================

class CompletionThreshold:
    """Percentage boundaries used to bucket fact sheet completion.

    A missing percentage is replaced by MISSING_SENTINEL, which keeps it in
    level 0. Every other value above the sentinel lands in level 1 or higher,
    so a completion of exactly 0 percent is level 1.
    """
    MISSING_SENTINEL = -1
    LOW_MAX = 25        # sentinel < p <= 25  -> level 1
    PARTIAL_MAX = 75    # 25 < p <= 75        -> level 2
    COMPLETE = 100      # 75 < p < 100 -> level 3, p >= 100 -> level 4


# ============================================================================
# REPORT TRIGGER CONFIGURATION
# ============================================================================

# Quiet window for collapsing repeated facet-change events
DEBOUNCE_WINDOW_SECONDS = 1.0

# Page size of the allFactSheets query
MAX_FACT_SHEETS = 3000

# Nesting depth requested for facet responses
MAX_FACET_DEPTH = 5


# ============================================================================
# WCAG ACCESSIBILITY CONSTANTS
# ============================================================================

class WCAGConstants:
    """WCAG 2.1 accessibility constants for color contrast calculations.

    Reference: https://www.w3.org/WAI/WCAG21/Understanding/contrast-minimum.html
    """
    SRGB_LINEAR_THRESHOLD = 0.03928

    # Gamma correction constants for sRGB to linear conversion
    GAMMA_OFFSET = 0.055
    GAMMA_DIVISOR = 1.055
    GAMMA_EXPONENT = 2.4
    LINEAR_DIVISOR = 12.92

    # RGB to luminance weights (ITU-R BT.709)
    RED_LUMINANCE_WEIGHT = 0.2126
    GREEN_LUMINANCE_WEIGHT = 0.7152
    BLUE_LUMINANCE_WEIGHT = 0.0722

    CONTRAST_ADJUSTMENT = 0.05

    NORMAL_TEXT_CONTRAST_RATIO = 4.5
    LARGE_TEXT_CONTRAST_RATIO = 3.0

    RGB_MAX = 255


# ============================================================================
# CHART LAYOUT CONSTANTS
# ============================================================================

class ChartLayout:
    """Dimensions for the stacked completion bar chart (points)."""
    DEFAULT_WIDTH = 700
    DEFAULT_HEIGHT = 320
    MARGIN_LEFT = 50
    MARGIN_BOTTOM = 80
    MARGIN_RIGHT = 160
    MARGIN_TOP = 40
    TITLE_FONT_SIZE = 12
    AXIS_FONT_SIZE = 7
    LEGEND_FONT_SIZE = 8
    SEGMENT_FONT_SIZE = 6
    # Segments shorter than this get no value label
    MIN_LABEL_SEGMENT_HEIGHT = 10
    # Above this many people the category labels are angled
    ANGLED_LABEL_THRESHOLD = 8
