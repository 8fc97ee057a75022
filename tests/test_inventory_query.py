"""Tests for the inventory query, variables and facet configuration."""

import pytest

from completion_aggregator import SubscriptionRecord
from inventory_query import (
    ALL_FACT_SHEETS_QUERY,
    FacetFilter,
    FacetKeyOperator,
    ReportFacetsSelection,
    build_query_variables,
    default_facet_filters,
    person_filter,
    query_subscriptions,
    report_facet_config,
)
from subscription_extractor import InventoryResponseError

DEFAULT_FILTERS_WIRE = [
    {"facetKey": "FactSheetTypes", "operator": "OR", "keys": ["ITComponent"]},
    {"facetKey": "category", "operator": "OR", "keys": ["component"]},
    {"facetKey": "installStatus", "operator": "NOR", "keys": ["retired"]},
]


class TestFacetFilter:

    def test_round_trip_wire_format(self):
        wire = {"facetKey": "lifecycle", "operator": "NOR", "keys": ["endOfLife"]}
        assert FacetFilter.from_dict(wire).to_dict() == wire

    def test_from_dict_defaults_operator(self):
        facet = FacetFilter.from_dict({"facetKey": "x"})
        assert facet.operator is FacetKeyOperator.OR
        assert facet.keys == []


class TestReportFacetsSelectionFromDict:

    def test_callback_payload(self):
        selection = ReportFacetsSelection.from_dict({
            "facets": [{"facetKey": "lifecycle", "operator": "NOR", "keys": ["endOfLife"]}],
            "directHits": [{"id": "fs-1"}, {"id": "fs-2"}],
            "fullTextSearchTerm": "billing",
        })

        assert selection.facets == [FacetFilter("lifecycle", FacetKeyOperator.NOR, ["endOfLife"])]
        assert selection.direct_hit_ids == ["fs-1", "fs-2"]
        assert selection.full_text_search_term == "billing"

    def test_empty_payload_uses_defaults(self):
        variables = build_query_variables(ReportFacetsSelection.from_dict({}))

        assert variables["filter"]["facetFilters"] == DEFAULT_FILTERS_WIRE
        assert variables["filter"]["ids"] is None


class TestBuildQueryVariables:

    def test_defaults(self):
        variables = build_query_variables()

        assert variables == {
            "filter": {
                "responseOptions": {"maxFacetDepth": 5},
                "facetFilters": DEFAULT_FILTERS_WIRE,
                "ids": None,
            },
            "fullTextSearch": None,
            "sortings": [{"key": "displayName", "order": "asc"}],
        }

    def test_selection_overrides(self):
        selection = ReportFacetsSelection(
            facets=[FacetFilter("category", FacetKeyOperator.OR, ["software"])],
            direct_hit_ids=["fs-1", "fs-2"],
            full_text_search_term="billing",
        )
        variables = build_query_variables(selection)

        assert variables["filter"]["facetFilters"] == [
            {"facetKey": "category", "operator": "OR", "keys": ["software"]},
        ]
        assert variables["filter"]["ids"] == ["fs-1", "fs-2"]
        assert variables["fullTextSearch"] == "billing"

    def test_explicit_empty_facets_are_kept(self):
        variables = build_query_variables(ReportFacetsSelection(facets=[]))
        assert variables["filter"]["facetFilters"] == []


class TestPersonFilter:

    def test_appends_subscription_facet(self):
        filters = [f.to_dict() for f in person_filter("user-7")]

        assert filters[:3] == DEFAULT_FILTERS_WIRE
        assert filters[3] == {"facetKey": "Subscriptions", "operator": "OR", "keys": ["user-7"]}

    def test_defaults_not_mutated(self):
        person_filter("user-7")
        assert len(default_facet_filters()) == 3


class TestQuerySubscriptions:

    def test_returns_records_and_toggles_spinner(self, fake_host_factory, graphql_data):
        host = fake_host_factory(responses=[graphql_data])

        records = query_subscriptions(host)

        assert records[0] == SubscriptionRecord("u1", "Alice Adams", 1)
        assert host.calls == ["show_spinner", "execute_graphql", "hide_spinner"]
        query, variables = host.queries[0]
        assert query == ALL_FACT_SHEETS_QUERY
        assert variables["filter"]["facetFilters"] == DEFAULT_FILTERS_WIRE

    def test_host_error_is_logged_and_reraised(self, fake_host_factory, caplog):
        host = fake_host_factory(error=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            query_subscriptions(host)

        assert not host.spinner_visible
        assert "error in fetch_graphql_data" in caplog.text

    def test_malformed_response_reraised(self, fake_host_factory):
        host = fake_host_factory(responses=[{"unexpected": True}])

        with pytest.raises(InventoryResponseError):
            query_subscriptions(host)
        assert host.calls[-1] == "hide_spinner"


class TestQueryDocument:

    def test_query_requests_needed_fields(self):
        for fragment in ("allFactSheets(first: 3000", "completion { completion percentage }",
                         "user { id firstName lastName email }", "roles { id name }"):
            assert fragment in ALL_FACT_SHEETS_QUERY

    def test_braces_balanced(self):
        assert ALL_FACT_SHEETS_QUERY.count("{") == ALL_FACT_SHEETS_QUERY.count("}")


class TestReportFacetConfig:

    def test_config_shape(self):
        callback = object()
        config = report_facet_config(callback)

        assert config["allowTableView"] is False
        facet = config["facets"][0]
        assert facet["key"] == "itComponent"
        assert facet["fixedFactSheetType"] == "ITComponent"
        assert facet["defaultFilters"] == DEFAULT_FILTERS_WIRE[1:]
        assert facet["facetFiltersChangedCallback"] is callback
