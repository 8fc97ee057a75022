"""
Subscription Extractor Module

Reads the allFactSheets GraphQL payload returned by the inventory API and
emits one SubscriptionRecord for every responsible architect subscribed to
a fact sheet, tagged with that fact sheet's completion level.

Usage:
    from subscription_extractor import extract_subscriptions, resolve_display_name

    data = host.execute_graphql(ALL_FACT_SHEETS_QUERY, variables)
    records = extract_subscriptions(data)
"""

import logging
from typing import Any, Dict, List, Optional

from completion_aggregator import SubscriptionRecord
from completion_levels import completion_level_for

# Set up logging
logger = logging.getLogger(__name__)

RESPONSIBLE_SUBSCRIPTION_TYPE = "RESPONSIBLE"

ARCHITECT_ROLE_NAMES = frozenset({
    "Product Area Architect",
    "Product Family Architect",
})


class InventoryResponseError(ValueError):
    """Raised when the GraphQL payload does not have the expected shape."""

    def __init__(self, message, payload=None):
        super().__init__(message)
        self.payload = payload


def resolve_display_name(
    first_name: Optional[str],
    last_name: Optional[str],
    email: Optional[str]
) -> Optional[str]:
    """Build the display name shown for a person in the chart.

    Args:
        first_name: User's first name
        last_name: User's last name, None when the profile has none
        email: User's e-mail address

    Returns:
        "first last" when a last name is present, otherwise the e-mail

    Example:
        >>> resolve_display_name("Ada", "Lovelace", "ada@example.com")
        'Ada Lovelace'
        >>> resolve_display_name("Ada", None, "ada@example.com")
        'ada@example.com'
    """
    if last_name is not None:
        return f"{first_name} {last_name}"
    return email


def _edges(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Get the edge list of a GraphQL connection, tolerating nulls."""
    if not connection:
        return []
    return connection.get("edges") or []


def _is_architect_subscription(subscription: Dict[str, Any]) -> bool:
    """Check whether a subscription is a responsible architect subscription."""
    if subscription.get("type") != RESPONSIBLE_SUBSCRIPTION_TYPE:
        return False
    roles = subscription.get("roles") or []
    return any((role or {}).get("name") in ARCHITECT_ROLE_NAMES for role in roles)


def extract_subscriptions(data: Dict[str, Any]) -> List[SubscriptionRecord]:
    """Extract architect subscription records from an allFactSheets payload.

    Args:
        data: The "data" member of the GraphQL response

    Returns:
        One SubscriptionRecord per (architect, fact sheet) pair, in the
        order the fact sheets and subscriptions appear in the payload

    Raises:
        InventoryResponseError: If the payload has no allFactSheets edges
    """
    if not isinstance(data, dict) or not isinstance(data.get("allFactSheets"), dict):
        raise InventoryResponseError("Response is missing allFactSheets", payload=data)

    fact_sheets = data["allFactSheets"]
    if "edges" not in fact_sheets or fact_sheets["edges"] is None:
        raise InventoryResponseError("allFactSheets has no edges", payload=data)

    records: List[SubscriptionRecord] = []
    skipped_without_user = 0

    for edge in fact_sheets["edges"]:
        node = (edge or {}).get("node") or {}
        completion = node.get("completion") or {}
        completion_level = completion_level_for(completion.get("percentage"))

        for sub_edge in _edges(node.get("subscriptions")):
            subscription = (sub_edge or {}).get("node") or {}
            if not _is_architect_subscription(subscription):
                continue

            user = subscription.get("user")
            if not user or user.get("id") is None:
                skipped_without_user += 1
                continue

            records.append(SubscriptionRecord(
                person_id=str(user["id"]),
                person_name=resolve_display_name(
                    user.get("firstName"),
                    user.get("lastName"),
                    user.get("email"),
                ),
                completion_level=completion_level,
            ))

    if skipped_without_user:
        logger.warning(f"Skipped {skipped_without_user} architect subscriptions without a user")

    logger.info(
        f"Extracted {len(records)} architect subscriptions from "
        f"{len(fact_sheets['edges'])} fact sheets"
        + (f" (total {fact_sheets['totalCount']})" if fact_sheets.get("totalCount") is not None else "")
    )
    return records
