"""
Command-line entry point for the architect completion report.

Runs one report: queries the LeanIX inventory, aggregates architect
subscriptions per person and completion level, and writes the result as a
PDF chart, JSON chart data and/or a text table.

Example:
    $ python completion_report_cli.py --output completion.pdf
    $ python completion_report_cli.py --text --search "payment"
    $ python completion_report_cli.py --navigate 3
"""

import sys
import json
import logging
import argparse
from typing import List, Optional

import requests

from chart_renderer import build_report_pdf
from completion_aggregator import InvalidPersonIndexError, format_completion_report
from completion_report import CompletionReport
from inventory_query import ReportFacetsSelection
from leanix_client import GraphQLError, LeanIXClient, LeanIXConfig
from leanix_retry import LeanIXTimeoutError, TokenAuthenticationError
from logging_config import add_log_level_argument, configure_logging
from performance_timing import PerformanceTimer
from report_host import LeanIXReportHost
from subscription_extractor import InventoryResponseError

# Logger will be configured in main() after parsing args
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Architect completion report for LeanIX IT components")
    parser.add_argument("--output", "-o", metavar="PDF",
                        help="Write the stacked bar chart report to this PDF file")
    parser.add_argument("--json", dest="json_path", metavar="FILE",
                        help="Write the chart data as JSON ('-' for stdout)")
    parser.add_argument("--text", action="store_true",
                        help="Print the per-person counts as a text table")
    parser.add_argument("--search", metavar="TERM",
                        help="Full text search applied to the inventory query")
    parser.add_argument("--fact-sheet-id", dest="fact_sheet_ids", action="append", metavar="ID",
                        help="Restrict the query to this fact sheet (repeatable)")
    parser.add_argument("--navigate", type=int, metavar="INDEX",
                        help="Print the inventory link for the person at this chart position")
    parser.add_argument("--base-url", help="LeanIX instance URL (overrides LEANIX_BASE_URL)")
    parser.add_argument("--workspace", help="LeanIX workspace (overrides LEANIX_WORKSPACE)")
    parser.add_argument("--log-file", help="Also write log output to this file")
    add_log_level_argument(parser)
    return parser


def selection_from_args(args: argparse.Namespace) -> ReportFacetsSelection:
    return ReportFacetsSelection(
        direct_hit_ids=args.fact_sheet_ids,
        full_text_search_term=args.search,
    )


def run_report(report: CompletionReport, args: argparse.Namespace) -> int:
    """Execute one report run against an initialized report."""
    timer = PerformanceTimer("report_run").start()
    snapshot = report.refresh(selection_from_args(args))
    timer.checkpoint("data_loaded", people=len(snapshot.result.people))

    if args.text or not (args.output or args.json_path or args.navigate is not None):
        print(format_completion_report(snapshot.result))

    if args.json_path:
        payload = json.dumps(snapshot.chart_data.to_dict(), indent=2, ensure_ascii=False)
        if args.json_path == "-":
            print(payload)
        else:
            with open(args.json_path, "w", encoding="utf-8") as f:
                f.write(payload)
            logger.info(f"Chart data written to {args.json_path}")

    if args.output:
        build_report_pdf(
            snapshot.chart_data,
            args.output,
            link_for=lambda index: report.navigate_to_inventory(index, snapshot),
        )

    if args.navigate is not None:
        print(report.navigate_to_inventory(args.navigate, snapshot))

    timer.stop()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(log_file=args.log_file, log_level=args.log_level)

    try:
        config = LeanIXConfig.from_env(base_url=args.base_url, workspace=args.workspace)
    except ValueError:
        return 1

    with LeanIXClient(config) as client:
        report = CompletionReport(LeanIXReportHost(client))
        try:
            report.initialize()
            return run_report(report, args)
        except TokenAuthenticationError as e:
            logger.error(f"Authentication failed: {e}")
        except InvalidPersonIndexError as e:
            logger.error(f"Cannot navigate: {e}")
        except (GraphQLError, InventoryResponseError, LeanIXTimeoutError) as e:
            logger.error(f"Report failed: {e}")
        except requests.RequestException as e:
            logger.error(f"LeanIX request failed: {e}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
