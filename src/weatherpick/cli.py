# connects input (city names) to the service and prints the ranking

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import List, Optional
from .client import WeatherAPIError
from .service import MAX_WORKERS, compare_cities, report_to_dict

DEFAULT_CITIES = ["Paris", "Tokyo", "New York", "Sydney", "Cape Town"]


def positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1 (got {n})")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weatherpick",
        description="Compare current weather across cities and pick the best destination.",
    )
    parser.add_argument("cities", nargs="*", help=f"cities to compare (default: {', '.join(DEFAULT_CITIES)})")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("--workers", type=positive_int, default=MAX_WORKERS, help="cities fetched at once")
    parser.add_argument("--fail-fast", action="store_true", help="abort on the first city that fails")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=os.getenv("WEATHERPICK_LOG_LEVEL", "WARNING").upper(),
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    # EmptyInputError and pydantic.ValidationError are both ValueErrors
    try:
        report = compare_cities(args.cities or DEFAULT_CITIES, max_workers=args.workers, fail_fast=args.fail_fast)
    except (WeatherAPIError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report_to_dict(report), ensure_ascii=False, indent=2))
        return 0

    for rank, c in enumerate(report.all_cities, start=1):
        print(f"{rank}. {c.city}: {c.score} ({c.weather_summary}) - {c.top_activity}")
    print(report.reason)
    for f in report.failures:
        print(f"failed: {f.city}: {f.error}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
