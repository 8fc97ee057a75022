"""
Inventory Query Module

Defines the allFactSheets GraphQL query, the facet filters it runs with,
and the fetch step that turns the host's response into subscription
records.

Usage:
    from inventory_query import (
        FacetFilter,
        ReportFacetsSelection,
        build_query_variables,
        query_subscriptions,
        person_filter,
    )

    records = query_subscriptions(host, ReportFacetsSelection())
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from completion_aggregator import SubscriptionRecord
from constants import MAX_FACET_DEPTH, MAX_FACT_SHEETS
from performance_timing import timed_operation
from report_host import ReportHost
from subscription_extractor import extract_subscriptions

# Set up logging
logger = logging.getLogger(__name__)


class FacetKeyOperator(Enum):
    """Operators the inventory accepts for combining facet keys."""
    OR = "OR"
    AND = "AND"
    NOR = "NOR"


@dataclass
class FacetFilter:
    """A single facet constraint.

    Attributes:
        facet_key: Facet the filter applies to (e.g. "category")
        operator: How the keys are combined
        keys: Selected facet values
    """
    facet_key: str
    operator: FacetKeyOperator
    keys: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire format used by the inventory API."""
        return {
            "facetKey": self.facet_key,
            "operator": self.operator.value,
            "keys": list(self.keys),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FacetFilter":
        return cls(
            facet_key=data["facetKey"],
            operator=FacetKeyOperator(data.get("operator", FacetKeyOperator.OR.value)),
            keys=list(data.get("keys") or []),
        )


@dataclass
class ReportFacetsSelection:
    """The current filter selection of the report.

    Attributes:
        facets: Facet filters, None to use the report defaults
        direct_hit_ids: Fact sheet ids to restrict the query to
        full_text_search_term: Optional full text search
    """
    facets: Optional[List[FacetFilter]] = None
    direct_hit_ids: Optional[List[str]] = None
    full_text_search_term: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportFacetsSelection":
        """Build a selection from the payload of a facet-change callback.

        Direct hits arrive as objects carrying an "id"; a missing "facets"
        member means the report defaults apply.
        """
        facets = data.get("facets")
        direct_hits = data.get("directHits")
        return cls(
            facets=[FacetFilter.from_dict(facet) for facet in facets] if facets is not None else None,
            direct_hit_ids=[hit["id"] for hit in direct_hits] if direct_hits is not None else None,
            full_text_search_term=data.get("fullTextSearchTerm"),
        )


IT_COMPONENT_TYPE_FILTER = FacetFilter("FactSheetTypes", FacetKeyOperator.OR, ["ITComponent"])
COMPONENT_CATEGORY_FILTER = FacetFilter("category", FacetKeyOperator.OR, ["component"])
NOT_RETIRED_FILTER = FacetFilter("installStatus", FacetKeyOperator.NOR, ["retired"])


def default_facet_filters() -> List[FacetFilter]:
    """Active, non-retired IT components of category "component"."""
    return [IT_COMPONENT_TYPE_FILTER, COMPONENT_CATEGORY_FILTER, NOT_RETIRED_FILTER]


def person_filter(person_id: str) -> List[FacetFilter]:
    """Default filters narrowed to fact sheets the person is subscribed to."""
    return default_facet_filters() + [
        FacetFilter("Subscriptions", FacetKeyOperator.OR, [person_id]),
    ]


ALL_FACT_SHEETS_QUERY = (
    "query allFactSheetsQuery($filter: FilterInput!, $sortings: [Sorting]) {"
    f" allFactSheets(first: {MAX_FACT_SHEETS}, filter: $filter, sort: $sortings) {{"
    " totalCount edges { node { ... on ITComponent {"
    " displayName completion { completion percentage }"
    " relITComponentToProductTeamUserGroup { edges { node { factSheet { ... on UserGroup {"
    " name parentRelation: relToParent { edges { node { factSheet { ... on UserGroup {"
    " name u_agileTeamType parentRelation: relToParent { edges { node { factSheet {"
    " ... on UserGroup { name u_agileTeamType } } } } } } } } } } } } } } }"
    " subscriptions { edges { node { user { id firstName lastName email }"
    " type roles { id name } } } } } } } }"
    " }"
)


def build_query_variables(selection: Optional[ReportFacetsSelection] = None) -> Dict[str, Any]:
    """Build the GraphQL variables for a filter selection.

    Args:
        selection: Current report selection, None for the defaults

    Returns:
        Variables mapping for ALL_FACT_SHEETS_QUERY
    """
    selection = selection or ReportFacetsSelection()
    facets = selection.facets if selection.facets is not None else default_facet_filters()

    return {
        "filter": {
            "responseOptions": {
                "maxFacetDepth": MAX_FACET_DEPTH,
            },
            "facetFilters": [facet.to_dict() for facet in facets],
            "ids": list(selection.direct_hit_ids) if selection.direct_hit_ids is not None else None,
        },
        "fullTextSearch": selection.full_text_search_term,
        "sortings": [
            {
                "key": "displayName",
                "order": "asc",
            }
        ],
    }


def query_subscriptions(
    host: ReportHost,
    selection: Optional[ReportFacetsSelection] = None
) -> List[SubscriptionRecord]:
    """Run the inventory query and extract architect subscriptions.

    The host spinner is shown for the duration of the call and hidden
    again whether or not the call succeeds.

    Args:
        host: Report host executing the query
        selection: Current report selection, None for the defaults

    Returns:
        Subscription records in payload order

    Raises:
        Exception: Whatever the host or the extraction raised, after logging
    """
    variables = build_query_variables(selection)
    try:
        host.show_spinner()
        with timed_operation("graphql_query", facets=len(variables["filter"]["facetFilters"])):
            data = host.execute_graphql(ALL_FACT_SHEETS_QUERY, variables)
        return extract_subscriptions(data)
    except Exception as e:
        logger.error(f"error in fetch_graphql_data: {e}")
        raise
    finally:
        host.hide_spinner()


def report_facet_config(
    facet_filters_changed: Optional[Callable[[ReportFacetsSelection], Any]] = None
) -> Dict[str, Any]:
    """Facet configuration announced to the host when the report is ready.

    Args:
        facet_filters_changed: Callback invoked with the new selection
            whenever the user changes the facet filters

    Returns:
        Report configuration mapping
    """
    return {
        "allowTableView": False,
        "facets": [
            {
                "key": "itComponent",
                "label": "IT Components",
                "fixedFactSheetType": "ITComponent",
                "defaultFilters": [
                    COMPONENT_CATEGORY_FILTER.to_dict(),
                    NOT_RETIRED_FILTER.to_dict(),
                ],
                "facetFiltersChangedCallback": facet_filters_changed,
            }
        ],
    }
