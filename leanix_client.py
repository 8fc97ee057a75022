"""
LeanIX client utilities for authenticated GraphQL access.

This module centralizes LeanIX configuration loading, API token exchange
and GraphQL execution with built-in retry handling:

1. Configuration loading from environment variables / .env (python-dotenv)
2. Exchange of the API token for a short-lived bearer token
3. GraphQL POSTs with retry, rate limit and authentication error handling

Usage:
    from leanix_client import LeanIXConfig, LeanIXClient

    config = LeanIXConfig.from_env()
    client = LeanIXClient(config)
    data = client.execute_graphql(query, variables)

Example:
    >>> client = LeanIXClient(LeanIXConfig(api_token="..."))
    >>> data = client.execute_graphql("{ allFactSheets { totalCount } }")
    >>> data["allFactSheets"]["totalCount"]
    1234
"""

import os
import json
import time
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import requests
from dotenv import load_dotenv

from constants import (
    API_TOKEN_ENV_VAR,
    BASE_URL_ENV_VAR,
    WORKSPACE_ENV_VAR,
    DEFAULT_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_DELAY,
    GRAPHQL_ENDPOINT,
    TOKEN_ENDPOINT,
    HTTPStatus,
)
from leanix_retry import (
    RateLimitError,
    execute_with_retry,
    extract_retry_after_delay,
)

# Get logger for this module
logger = logging.getLogger(__name__)

# Refresh the bearer token this many seconds before it expires
TOKEN_EXPIRY_MARGIN = 60.0


class GraphQLError(Exception):
    """
    Raised when the GraphQL endpoint answers with an errors list.

    Attributes:
        errors: The raw error objects returned by the server
    """
    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_errors(cls, errors: List[Dict[str, Any]]) -> "GraphQLError":
        messages = [str(error.get("message", error)) for error in errors]
        return cls("GraphQL query failed: " + "; ".join(messages), errors=errors)


@dataclass
class LeanIXConfig:
    """
    Connection settings for the LeanIX API.

    Attributes:
        api_token (str): API token of the technical user.
        base_url (str): Instance URL, e.g. https://acme.leanix.net
        workspace (Optional[str]): Workspace name, used for inventory links.
        timeout (float): Per-request timeout in seconds.
        max_retries (int): Maximum number of retry attempts for failed calls.
        base_delay (float): Initial delay in seconds between retries.
        max_delay (float): Maximum delay in seconds between retries.
    """
    api_token: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    workspace: Optional[str] = None
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")

    @property
    def token_url(self) -> str:
        return self.base_url + TOKEN_ENDPOINT

    @property
    def graphql_url(self) -> str:
        return self.base_url + GRAPHQL_ENDPOINT

    @classmethod
    def from_env(cls, load_env: bool = True, **overrides: Any) -> "LeanIXConfig":
        """
        Load the configuration from environment variables.

        Optionally loads a .env file first using python-dotenv.

        Args:
            load_env: Whether to load variables from a .env file.
            **overrides: Values that take precedence over the environment.

        Returns:
            LeanIXConfig built from the environment.

        Raises:
            ValueError: If no API token is configured.
        """
        if load_env:
            load_dotenv()

        token = overrides.pop("api_token", None) or os.getenv(API_TOKEN_ENV_VAR)
        if not token:
            error_msg = (
                f"{API_TOKEN_ENV_VAR} not found in environment or .env file. "
                "Please ensure the token is set in your environment or .env file."
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        settings: Dict[str, Any] = {
            "base_url": os.getenv(BASE_URL_ENV_VAR) or DEFAULT_BASE_URL,
            "workspace": os.getenv(WORKSPACE_ENV_VAR) or None,
        }
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return cls(api_token=token, **settings)


def _raise_for_response(response: requests.Response) -> None:
    """Raise the matching exception for an unsuccessful response."""
    if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
        error = requests.HTTPError(f"429 Too Many Requests for url: {response.url}", response=response)
        raise RateLimitError(
            "LeanIX rate limit exceeded",
            retry_after=extract_retry_after_delay(error),
            original_exception=error,
        )
    response.raise_for_status()


class LeanIXClient:
    """
    Thin LeanIX API client with token handling and retries.

    Usage:
        client = LeanIXClient(LeanIXConfig.from_env())
        data = client.execute_graphql(ALL_FACT_SHEETS_QUERY, variables)
    """

    def __init__(self, config: LeanIXConfig, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            config: LeanIX connection settings
            session: Optional requests session (a new one is created if omitted)
        """
        self._config = config
        self._session = session or requests.Session()
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    @property
    def config(self) -> LeanIXConfig:
        return self._config

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "LeanIXClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _retry(self, func, *args, operation_name: str, **kwargs):
        return execute_with_retry(
            func, *args,
            max_retries=self._config.max_retries,
            base_delay=self._config.base_delay,
            max_delay=self._config.max_delay,
            operation_name=operation_name,
            **kwargs
        )

    def _request_token(self) -> Dict[str, Any]:
        response = self._session.post(
            self._config.token_url,
            auth=("apitoken", self._config.api_token),
            data={"grant_type": "client_credentials"},
            timeout=self._config.timeout,
        )
        _raise_for_response(response)
        return response.json()

    def authenticate(self) -> str:
        """
        Exchange the API token for a bearer token.

        Returns:
            The bearer access token.
        """
        payload = self._retry(self._request_token, operation_name="oauth2_token")
        self._access_token = payload["access_token"]
        expires_in = float(payload.get("expires_in", 3600))
        self._token_expires_at = time.monotonic() + expires_in - TOKEN_EXPIRY_MARGIN
        logger.debug(f"Obtained LeanIX access token (expires in {expires_in:.0f}s)")
        return self._access_token

    def _bearer_token(self) -> str:
        if self._access_token is None or time.monotonic() >= self._token_expires_at:
            return self.authenticate()
        return self._access_token

    def _post_graphql(self, body: Dict[str, Any]) -> Dict[str, Any]:
        response = self._session.post(
            self._config.graphql_url,
            json=body,
            headers={"Authorization": f"Bearer {self._bearer_token()}"},
            timeout=self._config.timeout,
        )
        _raise_for_response(response)
        return response.json()

    def execute_graphql(
        self,
        query: str,
        variables: Optional[Union[Dict[str, Any], str]] = None
    ) -> Dict[str, Any]:
        """
        Execute a GraphQL document against the pathfinder endpoint.

        Args:
            query: GraphQL query document
            variables: Variables as a mapping or a JSON string

        Returns:
            The "data" member of the response

        Raises:
            GraphQLError: If the response carries GraphQL errors
            TokenAuthenticationError: On HTTP 401/403
            LeanIXTimeoutError: If all retries failed
        """
        if isinstance(variables, str):
            variables = json.loads(variables)

        body = {"query": query, "variables": variables or {}}
        payload = self._retry(self._post_graphql, body, operation_name="graphql")

        if payload.get("errors"):
            raise GraphQLError.from_errors(payload["errors"])
        return payload.get("data") or {}
