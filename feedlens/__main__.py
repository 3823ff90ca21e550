#!/usr/bin/env python

"""
CLI entry point for Feedlens.

This module provides commands for running the gateway, inspecting and
seeding feedback, running analysis, and producing digests in-process.
"""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from typing import List

from feedlens.config import settings, print_settings
from feedlens.dashboard.filters import ALL, FeedbackFilters, apply_filters, compute_dashboard_stats
from feedlens.dashboard.render import URGENCY_ICONS
from feedlens.digest.workflow import DIGEST_WORKFLOW
from feedlens.feedback.models import FeedbackItem
from feedlens.services import FeedlensServices
from feedlens.utils.error_handling import FeedlensError


logger = logging.getLogger(__name__)


def print_feedback(items: List[FeedbackItem]) -> None:
    """Print feedback rows in a compact human-readable form."""
    for item in items:
        if item.is_analyzed:
            urgency = f"{URGENCY_ICONS.get(item.urgency, '')} {item.urgency}"
            print(f"#{item.id} [{item.source}] {urgency} {item.sentiment} - {item.theme}")
            print(f"    {item.summary}")
        else:
            print(f"#{item.id} [{item.source}] (unanalyzed)")
        print(f"    \"{item.message}\"")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Feedlens - feedback triage and digests")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress non-essential output")

    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the API gateway")
    serve.add_argument("--host", default=settings.api_gateway_host)
    serve.add_argument("--port", type=int, default=settings.api_gateway_port)

    list_cmd = subparsers.add_parser("list", help="List feedback")
    list_cmd.add_argument("--source", default=ALL)
    list_cmd.add_argument("--urgency", default=ALL)
    list_cmd.add_argument("--sentiment", default=ALL)
    list_cmd.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    add = subparsers.add_parser("add", help="Insert a feedback item (local seeding)")
    add.add_argument("message")
    add.add_argument("--source", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze one feedback item")
    analyze.add_argument("id", type=int)

    backfill = subparsers.add_parser("backfill", help="Analyze all unanalyzed feedback")
    backfill.add_argument("--concurrency", type=int, default=1)

    subparsers.add_parser("summary", help="Print an executive summary of analyzed feedback")
    subparsers.add_parser("digest", help="Run the digest workflow and print the result")
    subparsers.add_parser("settings", help="Show current settings")

    return parser


async def run_command(args: argparse.Namespace) -> int:
    """
    Run one CLI command.

    Returns:
        Process exit code
    """
    if args.command == "settings":
        print(print_settings())
        return 0

    services = FeedlensServices(settings)

    if args.command == "list":
        items = services.store.list_feedback()
        filters = FeedbackFilters(source=args.source, urgency=args.urgency, sentiment=args.sentiment)
        visible = apply_filters(items, filters)
        if args.json:
            print(json.dumps([item.model_dump(mode="json") for item in visible], indent=2))
        else:
            print_feedback(visible)
            stats = compute_dashboard_stats(items)
            print(f"\n{len(visible)}/{stats.total} shown, {stats.analyzed} analyzed, "
                  f"{stats.negative} negative, {stats.high_urgency} high urgency")
        return 0

    if args.command == "add":
        item = services.store.create(args.message, args.source)
        print(f"Added feedback #{item.id}")
        return 0

    if args.command == "analyze":
        item = await services.analyzer.analyze(args.id)
        print_feedback([item])
        return 0

    if args.command == "backfill":
        report = await services.analyzer.analyze_pending(concurrency=args.concurrency)
        print(f"Analyzed {len(report.analyzed)} of {report.total} pending items")
        for feedback_id, reason in report.failed.items():
            print(f"  #{feedback_id} failed: {reason}")
        return 1 if report.failed else 0

    if args.command == "summary":
        summary = await services.generator.generate_summary(services.store.list_analyzed())
        print(summary)
        return 0

    if args.command == "digest":
        instance = services.runtime.create_instance(DIGEST_WORKFLOW)
        result = await services.runtime.run_instance(instance.id)
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return 0 if result.error is None else 1

    return 2


def main() -> None:
    """
    Main entry point for the CLI.
    """
    parser = build_parser()
    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.info("Debug mode enabled")

    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    if args.command is None:
        parser.print_help()
        return

    if args.command == "serve":
        from feedlens.api_gateway.gateway import run_gateway
        run_gateway(host=args.host, port=args.port)
        return

    try:
        exit_code = asyncio.run(run_command(args))
    except FeedlensError as e:
        print(f"Error: {e.message}")
        exit_code = 1
    except KeyboardInterrupt:
        print("\nExiting...")
        exit_code = 0
    except Exception as e:
        print(f"Error: {e}")
        if logging.getLogger().getEffectiveLevel() <= logging.DEBUG:
            traceback.print_exc()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
