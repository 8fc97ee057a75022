"""
Retry utility module for LeanIX API calls with exponential backoff.

This module provides a helper for handling timeouts and
transient failures when calling the LeanIX token and GraphQL endpoints. It
implements exponential backoff with jitter and honours the Retry-After
header on HTTP 429 responses.

Authentication failures (HTTP 401/403) are never retried.
"""

import time
import random
import logging
from datetime import datetime

import requests

from constants import (
    AUTH_ERROR_STATUSES,
    RETRYABLE_STATUSES,
    HTTPStatus,
    DEFAULT_MAX_RETRIES,
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_DELAY,
    DEFAULT_EXPONENTIAL_BASE,
    DEFAULT_RATE_LIMIT_COOLDOWN,
)

# Get logger for this module
logger = logging.getLogger(__name__)

# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS = (
    TimeoutError,
    ConnectionError,
    requests.Timeout,
    requests.ConnectionError,
)


class LeanIXTimeoutError(Exception):
    """Raised when a LeanIX call still fails after the last retry."""
    def __init__(self, message, attempts=0, last_error=None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class RateLimitError(Exception):
    """
    HTTP 429 Rate Limit error.

    Carries the delay from the Retry-After header when the server sent one.
    """
    def __init__(self, message, retry_after=None, status_code=HTTPStatus.TOO_MANY_REQUESTS,
                 original_exception=None):
        super().__init__(message)
        self.retry_after = retry_after
        self.status_code = status_code
        self.original_exception = original_exception
        self.timestamp = datetime.now()

    def __str__(self):
        base_msg = super().__str__()
        if self.retry_after:
            return f"{base_msg} (retry after {self.retry_after}s)"
        return base_msg


class TokenAuthenticationError(Exception):
    """
    Authentication/authorization error for the LeanIX API token.

    Raised for HTTP 401 (token invalid or expired) and HTTP 403 (token lacks
    access to the workspace). Never retried.
    """
    def __init__(self, message, status_code=None, original_exception=None):
        super().__init__(message)
        self.status_code = status_code
        self.original_exception = original_exception
        self.timestamp = datetime.now()

    def __str__(self):
        base_msg = super().__str__()
        if self.status_code:
            return f"{base_msg} (HTTP {self.status_code})"
        return base_msg

    def get_actionable_message(self):
        """
        Get a user-friendly message with steps to resolve the token error.

        Returns:
            str: Instructions for fixing the token issue.
        """
        if self.status_code == HTTPStatus.FORBIDDEN:
            return (
                "The LeanIX API token was accepted but lacks access. To resolve this:\n"
                "  1. Check that the technical user has at least read access to the workspace\n"
                "  2. Check that LEANIX_BASE_URL points at the workspace's instance"
            )
        return (
            "The LeanIX API token is invalid or has expired. To resolve this:\n"
            "  1. Create a new API token for the technical user in the LeanIX administration\n"
            "  2. Update LEANIX_API_TOKEN in your environment or .env file\n"
            "  3. Re-run the report"
        )


def _status_code_of(exception):
    """Get the HTTP status code attached to an exception, if any."""
    status_code = getattr(exception, "status_code", None)
    if status_code is not None:
        return status_code
    response = getattr(exception, "response", None)
    if response is not None:
        return getattr(response, "status_code", None)
    return None


def is_rate_limit_error(exception):
    """
    Determine if an exception represents an HTTP 429 Rate Limit error.

    Args:
        exception: The exception to check

    Returns:
        bool: True if the exception is a rate limit error, False otherwise
    """
    if isinstance(exception, RateLimitError):
        return True
    return _status_code_of(exception) == HTTPStatus.TOO_MANY_REQUESTS


def is_token_error(exception):
    """
    Determine if an exception represents an authentication/token error.

    Args:
        exception: The exception to check

    Returns:
        bool: True for TokenAuthenticationError or any HTTP 401/403 error
    """
    if isinstance(exception, TokenAuthenticationError):
        return True
    return _status_code_of(exception) in AUTH_ERROR_STATUSES


def create_token_error(exception):
    """Wrap an HTTP error in a TokenAuthenticationError."""
    if isinstance(exception, TokenAuthenticationError):
        return exception
    return TokenAuthenticationError(
        f"Authentication failed: {exception}",
        status_code=_status_code_of(exception),
        original_exception=exception,
    )


def extract_retry_after_delay(exception, default_delay=DEFAULT_RATE_LIMIT_COOLDOWN):
    """
    Extract the Retry-After delay from an exception or its response.

    The Retry-After header can be specified as:
    1. Number of seconds: "60"
    2. HTTP date: "Wed, 21 Oct 2015 07:28:00 GMT"

    Args:
        exception: The exception that may contain retry-after information
        default_delay: Delay in seconds if Retry-After cannot be extracted

    Returns:
        float: The delay in seconds before retrying
    """
    if isinstance(exception, RateLimitError) and exception.retry_after:
        return float(exception.retry_after)

    response = getattr(exception, "response", None)
    headers = getattr(response, "headers", None)
    if headers:
        retry_after = headers.get("Retry-After") or headers.get("retry-after")
        if retry_after:
            parsed = _parse_retry_after_value(retry_after)
            if parsed is not None:
                return parsed

    return default_delay


def _parse_retry_after_value(value):
    """
    Parse a Retry-After header value.

    Args:
        value: The Retry-After header value (seconds or HTTP date)

    Returns:
        float: The delay in seconds, or None if the value cannot be parsed
    """
    try:
        return max(0.0, float(value))
    except (ValueError, TypeError):
        pass

    try:
        from email.utils import parsedate_to_datetime
        retry_time = parsedate_to_datetime(value)
        delay = (retry_time - datetime.now(retry_time.tzinfo)).total_seconds()
        return max(0.0, delay)
    except (ValueError, TypeError):
        logger.debug(f"Could not parse Retry-After value: {value!r}")
        return None


def is_retryable_error(exception):
    """
    Determine if an exception is retryable.

    Args:
        exception: The exception to check

    Returns:
        bool: True if the exception is retryable, False otherwise
    """
    # Token errors need a new token, not another attempt
    if is_token_error(exception):
        return False

    if is_rate_limit_error(exception):
        return True

    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        return True

    return _status_code_of(exception) in RETRYABLE_STATUSES


def calculate_backoff_delay(attempt, base_delay=DEFAULT_BASE_DELAY,
                            max_delay=DEFAULT_MAX_DELAY,
                            exponential_base=DEFAULT_EXPONENTIAL_BASE):
    """
    Calculate the delay for the next retry attempt using exponential backoff with jitter.

    Args:
        attempt: The current attempt number (0-based)
        base_delay: The base delay in seconds
        max_delay: The maximum delay in seconds
        exponential_base: The base for exponential calculation

    Returns:
        float: The delay in seconds before the next retry
    """
    delay = base_delay * (exponential_base ** attempt)

    # Jitter between 0.5x and 1.5x
    delay = delay * random.uniform(0.5, 1.5)

    return min(delay, max_delay)


def execute_with_retry(func, *args, max_retries=DEFAULT_MAX_RETRIES,
                       base_delay=DEFAULT_BASE_DELAY,
                       max_delay=DEFAULT_MAX_DELAY,
                       operation_name=None,
                       **kwargs):
    """
    Execute a function with retry logic and exponential backoff.

    Args:
        func: The function to execute
        *args: Positional arguments to pass to the function
        max_retries: Maximum number of retry attempts
        base_delay: Base delay in seconds between retries
        max_delay: Maximum delay in seconds between retries
        operation_name: Optional name for logging (defaults to function name)
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The result of the function

    Raises:
        TokenAuthenticationError: On HTTP 401/403, without retrying
        LeanIXTimeoutError: When all attempts failed with retryable errors
        Exception: Any non-retryable error, unchanged

    Usage:
        data = execute_with_retry(
            session.post,
            url,
            json=payload,
            operation_name="graphql",
        )
    """
    op_name = operation_name or getattr(func, '__name__', 'unknown_operation')

    for attempt in range(max_retries + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if is_token_error(e):
                token_error = create_token_error(e)
                logger.error(
                    f"Authentication error in {op_name}: {token_error}\n"
                    f"{token_error.get_actionable_message()}"
                )
                if token_error is e:
                    raise
                raise token_error from e

            if not is_retryable_error(e):
                logger.error(f"Non-retryable error in {op_name}: {e}")
                raise

            if attempt >= max_retries:
                logger.error(
                    f"Max retries ({max_retries}) exceeded for {op_name}. "
                    f"Last error: {e}"
                )
                raise LeanIXTimeoutError(
                    f"{op_name} failed after {max_retries + 1} attempts",
                    attempts=max_retries + 1,
                    last_error=e
                ) from e

            if is_rate_limit_error(e):
                delay = extract_retry_after_delay(e)
                logger.warning(
                    f"Rate limit (HTTP 429) in {op_name} "
                    f"(attempt {attempt + 1}/{max_retries + 1}): {e}. "
                    f"Waiting {delay:.1f}s (from Retry-After header)..."
                )
            else:
                delay = calculate_backoff_delay(attempt, base_delay, max_delay)
                logger.warning(
                    f"Timeout/connection error in {op_name} "
                    f"(attempt {attempt + 1}/{max_retries + 1}): {e}. "
                    f"Retrying in {delay:.2f} seconds..."
                )
            time.sleep(delay)

    # Unreachable: the loop either returns or raises
    raise LeanIXTimeoutError(f"{op_name} did not run", attempts=0)
