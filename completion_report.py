"""
Architect Completion Report

Wires the report together: inventory query, aggregation, projection into
chart series, debounced refreshes on facet changes and navigation from a
chart bar back into the inventory.

All state lives on the CompletionReport instance. Each successful refresh
produces a ReportSnapshot holding the aggregation and the chart data it was
projected from; navigation resolves bar positions against a snapshot.

Usage:
    from completion_report import CompletionReport

    report = CompletionReport(host)
    report.initialize()
    snapshot = report.refresh()
    url = report.navigate_to_inventory(0)
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from completion_aggregator import AggregationResult, InvalidPersonIndexError, aggregate
from constants import DEBOUNCE_WINDOW_SECONDS
from debounce import Debouncer, RequestSequencer
from inventory_query import (
    ReportFacetsSelection,
    person_filter,
    query_subscriptions,
    report_facet_config,
)
from performance_timing import timed_operation
from report_host import ReportHost
from series_projector import ChartData, create_chart_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportSnapshot:
    """The data behind one rendered chart.

    Attributes:
        result: Aggregated per-person counts
        chart_data: Chart labels and series projected from result
        token: Sequence token of the refresh that produced it
        selection: Filter selection the data was queried with
    """
    result: AggregationResult
    chart_data: ChartData
    token: int = 0
    selection: Optional[ReportFacetsSelection] = None

    def person_id_at(self, index: int) -> str:
        return self.result.person_id_at(index)


def build_snapshot(records, token: int = 0,
                   selection: Optional[ReportFacetsSelection] = None) -> ReportSnapshot:
    """Aggregate records and project them into a snapshot."""
    with timed_operation("aggregation", records=len(records)):
        result = aggregate(records)
        chart_data = create_chart_data(result)
    return ReportSnapshot(result=result, chart_data=chart_data, token=token, selection=selection)


class CompletionReport:
    """
    Report controller owning the current snapshot.

    Refreshes may overlap (an in-flight query is never cancelled). Every
    refresh takes a sequence token when it starts, and its snapshot is only
    stored if no newer refresh has started since, so a slow stale response
    cannot replace a fresher one.
    """

    def __init__(self, host: ReportHost, debounce_wait: float = DEBOUNCE_WINDOW_SECONDS):
        self._host = host
        self._sequencer = RequestSequencer()
        self._lock = threading.Lock()
        self._snapshot: Optional[ReportSnapshot] = None
        self._debounced_refresh = Debouncer(self.refresh, wait=debounce_wait)

    @property
    def host(self) -> ReportHost:
        return self._host

    @property
    def snapshot(self) -> Optional[ReportSnapshot]:
        with self._lock:
            return self._snapshot

    @property
    def chart_data(self) -> Optional[ChartData]:
        snapshot = self.snapshot
        return snapshot.chart_data if snapshot is not None else None

    @property
    def fetch_debouncer(self) -> Debouncer:
        return self._debounced_refresh

    def initialize(self) -> None:
        """Connect to the host and register the facet configuration."""
        self._host.init()
        self._host.ready(report_facet_config(self.fetch_data))

    def refresh(self, selection: Optional[ReportFacetsSelection] = None) -> Optional[ReportSnapshot]:
        """Query, aggregate and project; store the snapshot if still current.

        Args:
            selection: Filter selection, None for the report defaults

        Returns:
            The new snapshot, or None if a newer refresh started meanwhile

        Raises:
            Exception: Query or extraction failures, after logging
        """
        token = self._sequencer.next_token()
        records = query_subscriptions(self._host, selection)
        snapshot = build_snapshot(records, token=token, selection=selection)

        with self._lock:
            if not self._sequencer.is_latest(token):
                logger.info(
                    f"Discarding stale report data (request {token}, "
                    f"latest {self._sequencer.latest})"
                )
                return None
            self._snapshot = snapshot

        logger.info(
            f"Report updated: {len(snapshot.result.people)} people, "
            f"levels {snapshot.result.levels}"
        )
        return snapshot

    def fetch_data(self, selection: Optional[Union[ReportFacetsSelection, Dict[str, Any]]] = None) -> None:
        """Debounced refresh; bursts of calls collapse into the last one.

        The host calls this with its raw facet selection payload, which is
        converted before it is queued.
        """
        if isinstance(selection, dict):
            selection = ReportFacetsSelection.from_dict(selection)
        self._debounced_refresh(selection)

    def navigate_to_inventory(self, person_index: int,
                              snapshot: Optional[ReportSnapshot] = None) -> Any:
        """Open the inventory filtered to the person behind a chart bar.

        Args:
            person_index: Position of the bar in the chart
            snapshot: Snapshot the chart was drawn from, defaults to the
                current one

        Returns:
            Whatever the host's navigation returns

        Raises:
            InvalidPersonIndexError: If the position does not map to a person
        """
        snapshot = snapshot or self.snapshot
        if snapshot is None:
            raise InvalidPersonIndexError("invalid person id", index=person_index)

        person_id = snapshot.person_id_at(person_index)
        facet_filters = [facet.to_dict() for facet in person_filter(person_id)]
        return self._host.navigate_to_inventory(facet_filters)
