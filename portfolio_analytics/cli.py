"""Command-line interface for portfolio analytics."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys

from .clients import AnalyticsApiClient, FilePayloadSource
from .config import load_config
from .logging_setup import configure_logging
from .models import PortfolioView
from .services import DashboardService


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="portfolio-analytics",
        description="DeFi portfolio allocation, regime and yield analytics",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    snapshot_parser = sub.add_parser("snapshot", help="Fetch payloads from the API and report")
    snapshot_parser.add_argument("user_id", help="Portfolio owner id")
    snapshot_parser.add_argument("--json", action="store_true", help="Print the view as JSON")

    analyze_parser = sub.add_parser("analyze", help="Report on saved JSON payloads")
    analyze_parser.add_argument("directory", help="Directory holding the payload files")
    analyze_parser.add_argument("--json", action="store_true", help="Print the view as JSON")
    analyze_parser.add_argument(
        "--visitor",
        action="store_true",
        help="Ignore portfolio payloads and show the visitor view",
    )

    check_parser = sub.add_parser("check", help="Send a drift alert if rebalancing is due")
    check_parser.add_argument("user_id", help="Portfolio owner id")

    return parser


def view_to_json(view: PortfolioView) -> str:
    return json.dumps(dataclasses.asdict(view), indent=2, ensure_ascii=False)


def _print_view(service: DashboardService, view: PortfolioView, as_json: bool) -> None:
    print(view_to_json(view) if as_json else service.render_report(view))


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "snapshot":
        service = DashboardService(config, AnalyticsApiClient(config.api))
        _print_view(service, await service.load_view(args.user_id), args.json)
    elif args.command == "analyze":
        service = DashboardService(config, FilePayloadSource(args.directory))
        if args.visitor:
            view = await service.load_visitor_view()
        else:
            view = await service.load_view("local")
        _print_view(service, view, args.json)
    elif args.command == "check":
        service = DashboardService(config, AnalyticsApiClient(config.api))
        await service.check_and_alert(args.user_id)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
