"""Shared pytest fixtures for the completion report tests."""

import pytest

from completion_aggregator import SubscriptionRecord
from report_host import ReportHost


def make_subscription(user_id, first="Ann", last="Lee", email=None,
                      sub_type="RESPONSIBLE", roles=("Product Area Architect",)):
    """Build one subscription edge as returned by the inventory API."""
    return {
        "node": {
            "user": {
                "id": user_id,
                "firstName": first,
                "lastName": last,
                "email": email or f"{user_id}@example.com",
            },
            "type": sub_type,
            "roles": [{"id": f"r-{i}", "name": name} for i, name in enumerate(roles)],
        }
    }


def make_fact_sheet(name, percentage, subscriptions):
    """Build one allFactSheets edge."""
    completion = None if percentage is None else {"completion": percentage / 100.0, "percentage": percentage}
    return {
        "node": {
            "displayName": name,
            "completion": completion,
            "subscriptions": {"edges": list(subscriptions)},
        }
    }


@pytest.fixture
def graphql_data():
    """A small allFactSheets payload with mixed subscriptions."""
    return {
        "allFactSheets": {
            "totalCount": 4,
            "edges": [
                make_fact_sheet("Billing API", 20, [
                    make_subscription("u1", "Alice", "Adams"),
                    make_subscription("u2", "Bob", None, email="bob@example.com",
                                      roles=("Product Family Architect",)),
                ]),
                make_fact_sheet("Ledger", 100, [
                    make_subscription("u2", "Bob", None, email="bob@example.com",
                                      roles=("Product Family Architect",)),
                    make_subscription("u3", "Carl", "Cole", sub_type="OBSERVER"),
                ]),
                make_fact_sheet("Search", None, [
                    make_subscription("u1", "Alice", "Adams"),
                    make_subscription("u4", "Dana", "Doe", roles=("Business Owner",)),
                ]),
                make_fact_sheet("Empty", 50, []),
            ],
        }
    }


@pytest.fixture
def scenario_records():
    """Two records for Alice at level 1 and one for Bob at level 4."""
    return [
        SubscriptionRecord("p1", "Alice", 1),
        SubscriptionRecord("p1", "Alice", 1),
        SubscriptionRecord("p2", "Bob", 4),
    ]


class FakeHost(ReportHost):
    """In-memory report host recording every call."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []
        self.queries = []
        self.navigations = []
        self.config = None
        self.spinner_visible = False

    def init(self):
        self.calls.append("init")

    def ready(self, config):
        self.calls.append("ready")
        self.config = config

    def show_spinner(self):
        self.calls.append("show_spinner")
        self.spinner_visible = True

    def hide_spinner(self):
        self.calls.append("hide_spinner")
        self.spinner_visible = False

    def execute_graphql(self, query, variables):
        self.calls.append("execute_graphql")
        self.queries.append((query, variables))
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    def navigate_to_inventory(self, facet_filters):
        self.navigations.append(facet_filters)
        return f"nav:{facet_filters[-1]['keys'][0]}"


@pytest.fixture
def fake_host_factory():
    return FakeHost
