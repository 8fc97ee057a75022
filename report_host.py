"""
Report host boundary.

The report never talks to the inventory directly; it goes through a
ReportHost, which provides initialization, the loading spinner, GraphQL
execution and navigation back into the inventory. LeanIXReportHost is the
implementation backed by the LeanIX REST API.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from leanix_client import LeanIXClient

logger = logging.getLogger(__name__)


class ReportHost(ABC):
    """Operations the report needs from its hosting inventory."""

    def init(self) -> None:
        """Prepare the host connection."""

    def ready(self, config: Dict[str, Any]) -> None:
        """Announce the report configuration (facets, callbacks) to the host."""

    @abstractmethod
    def show_spinner(self) -> None:
        ...

    @abstractmethod
    def hide_spinner(self) -> None:
        ...

    @abstractmethod
    def execute_graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def navigate_to_inventory(self, facet_filters: List[Dict[str, Any]]) -> Any:
        ...


def build_inventory_url(base_url: str, workspace: Optional[str],
                        facet_filters: List[Dict[str, Any]]) -> str:
    """Build an inventory list URL restricted by the given facet filters.

    Args:
        base_url: LeanIX instance URL
        workspace: Workspace name, omitted from the path when None
        facet_filters: Facet filters in wire format

    Returns:
        Absolute inventory URL with the filters JSON-encoded in the query

    Example:
        >>> build_inventory_url("https://acme.leanix.net", "prod", [])
        'https://acme.leanix.net/prod/inventory?facetFilters=%5B%5D'
    """
    path = f"{base_url.rstrip('/')}/{workspace}/inventory" if workspace else f"{base_url.rstrip('/')}/inventory"
    encoded = quote(json.dumps(facet_filters, separators=(",", ":")), safe="")
    return f"{path}?facetFilters={encoded}"


class LeanIXReportHost(ReportHost):
    """ReportHost backed by the LeanIX API.

    The spinner is reported through the log, and navigation returns the
    inventory URL for the requested filter.
    """

    def __init__(self, client: LeanIXClient):
        self._client = client
        self._config: Dict[str, Any] = {}
        self._spinner_lock = threading.Lock()
        self._spinner_depth = 0

    @property
    def report_config(self) -> Dict[str, Any]:
        return self._config

    def init(self) -> None:
        self._client.authenticate()
        logger.info(f"Connected to LeanIX at {self._client.config.base_url}")

    def ready(self, config: Dict[str, Any]) -> None:
        self._config = config
        facet_keys = [facet.get("key") for facet in config.get("facets", [])]
        logger.debug(f"Report ready with facets {facet_keys}")

    @property
    def spinner_visible(self) -> bool:
        with self._spinner_lock:
            return self._spinner_depth > 0

    def show_spinner(self) -> None:
        # Overlapping refreshes share one spinner
        with self._spinner_lock:
            self._spinner_depth += 1
            first = self._spinner_depth == 1
        if first:
            logger.info("Loading inventory data...")

    def hide_spinner(self) -> None:
        with self._spinner_lock:
            if self._spinner_depth > 0:
                self._spinner_depth -= 1
            last = self._spinner_depth == 0
        if last:
            logger.debug("Loading finished")

    def execute_graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        return self._client.execute_graphql(query, variables)

    def navigate_to_inventory(self, facet_filters: List[Dict[str, Any]]) -> str:
        url = build_inventory_url(
            self._client.config.base_url,
            self._client.config.workspace,
            facet_filters,
        )
        logger.info(f"Inventory view: {url}")
        return url
