#!/usr/bin/env python3
"""
CLI for view-authenticity scoring

Usage:
    python -m viewguard.cli analyze records.csv --promoter P1 --campaign C1
    python -m viewguard.cli batch records.jsonl
    python -m viewguard.cli config

Thresholds are read from VIEWGUARD_* environment variables
(see viewguard.settings.DetectionSettings).
"""
import argparse
import json
import logging
import sys

from pydantic import ValidationError

from .detection.config import AggregationMode
from .detection.engine import BotDetectionEngine
from .detection.errors import InvalidInput
from .loader import load_records
from .review.batch import BatchAnalyzer
from .review.queue import payout_disposition
from .settings import DetectionSettings

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="View-authenticity bot detection CLI"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: VIEWGUARD_LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--aggregation",
        choices=[m.value for m in AggregationMode],
        default=None,
        help="Override how snapshot counts are totalled (sum or latest)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Score the records of one promoter/campaign pair"
    )
    analyze_parser.add_argument(
        "path",
        help="CSV, JSON or JSONL export of view records"
    )
    analyze_parser.add_argument(
        "--promoter",
        required=True,
        help="Promoter ID to analyze"
    )
    analyze_parser.add_argument(
        "--campaign",
        required=True,
        help="Campaign ID to analyze"
    )

    # Batch command
    batch_parser = subparsers.add_parser(
        "batch",
        help="Score every promoter/campaign pair found in an export"
    )
    batch_parser.add_argument(
        "path",
        help="CSV, JSON or JSONL export of view records"
    )
    batch_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum flagged pairs to print (default: 20)"
    )

    # Config command
    subparsers.add_parser(
        "config",
        help="Show the effective detection configuration"
    )

    return parser.parse_args(argv)


def build_engine(settings: DetectionSettings, args) -> BotDetectionEngine:
    """Create an engine from settings plus command line overrides."""
    config = settings.to_config()
    if args.aggregation:
        config = config.model_copy(update={"aggregation": AggregationMode(args.aggregation)})
    return BotDetectionEngine(config)


def cmd_analyze(engine: BotDetectionEngine, args) -> dict:
    """Execute the analyze command."""
    records = load_records(args.path)
    result = engine.analyze(args.promoter, args.campaign, records)
    return {
        "command": "analyze",
        "payout": payout_disposition(result.action),
        "summary": result.summary(),
        **result.to_dict(),
    }


def cmd_batch(engine: BotDetectionEngine, args) -> dict:
    """Execute the batch command."""
    records = load_records(args.path)
    report = BatchAnalyzer(engine).analyze_all(records)
    data = report.to_dict()
    data["results"] = data["results"][:args.limit]
    return {
        "command": "batch",
        **data,
    }


def cmd_config(engine: BotDetectionEngine, args) -> dict:
    """Execute the config command."""
    return {
        "command": "config",
        **engine.config.model_dump(mode="json"),
    }


def print_result(result: dict) -> None:
    """Human-readable output for a command result."""
    print(f"\n{'=' * 50}")
    print(f"Command: {result['command']}")
    print(f"{'=' * 50}")

    if result["command"] == "analyze":
        print(result["summary"])
        print(f"Payout:     {result['payout']}")

    elif result["command"] == "batch":
        print(f"Pairs analyzed: {result['pairs_analyzed']}")
        print("\nBy action:")
        for action, count in result["by_action"].items():
            print(f"  {action}: {count}")
        if result["results"]:
            print("\n  SCORE  | ACTION  | PROMOTER     | CAMPAIGN     | REASON")
            print("  " + "-" * 75)
            for r in result["results"]:
                print(
                    f"  {r['botScore']:>6.2f} | {r['action']:<7} | "
                    f"{r['promoterId'][:12]:<12} | {r['campaignId'][:12]:<12} | {r['reason'][:40]}"
                )
        if result["errors"]:
            print(f"\nErrors: {result['errors']}")

    elif result["command"] == "config":
        conf = result["confidence"]
        th = result["thresholds"]
        print("Confidence cut points:")
        print(f"  ban:     >= {conf['ban']}")
        print(f"  warning: >= {conf['warning']}")
        print(f"  monitor: >= {conf['monitor']}")
        print("Thresholds:")
        for name, value in th.items():
            print(f"  {name}: {value}")
        print(f"Aggregation: {result['aggregation']}")
        print(f"Pattern signals: {result['pattern_signals']}")

    print(f"{'=' * 50}\n")


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = DetectionSettings()
        logging.basicConfig(
            level=(args.log_level or settings.log_level).upper(),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        engine = build_engine(settings, args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    try:
        if args.command == "analyze":
            result = cmd_analyze(engine, args)
        elif args.command == "batch":
            result = cmd_batch(engine, args)
        elif args.command == "config":
            result = cmd_config(engine, args)
        else:
            logger.error(f"Unknown command: {args.command}")
            return 1
    except InvalidInput as e:
        logger.error(f"Invalid input: {e}")
        for err in e.errors:
            print(f"  - {err}", file=sys.stderr)
        return 2

    if args.json:
        result.pop("summary", None)
        print(json.dumps(result, indent=2))
    else:
        print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
