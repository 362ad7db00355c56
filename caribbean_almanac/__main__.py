"""Command-line entry for caribbean_almanac.

Prints the expanded almanac for a country and year, optionally filtered by
category, tags, free text or a single date.
"""

from __future__ import annotations

import argparse
import datetime
import json
import logging
import sys
from typing import Optional, Sequence

import yaml

from .almanac_logging import configure_logging
from .config_loader import load_config
from .event_expander import AlmanacExpander
from .event_filter import OccurrenceFilters, available_tags, events_for_date, filter_occurrences
from .exceptions import TemplateLoadError
from .occurrence_cache import OccurrenceCache
from .template_loader import load_templates


logger = logging.getLogger(__name__)


def _year(value: str) -> int:
    try:
        year = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid year: {value!r}") from None
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise argparse.ArgumentTypeError(f"year must be between 1 and 9999, got {year}")
    return year


def _iso_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {value!r}") from None


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the caribbean_almanac CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="caribbean_almanac",
        description="Caribbean Almanac - cultural and historical events by country and year",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m caribbean_almanac --country JM --year 2026
  python -m caribbean_almanac --country TT --category cultural --search carnival
  python -m caribbean_almanac --list-countries
        """,
    )

    parser.add_argument("--country", metavar="CODE", help="Country code (default from config: BS)")
    parser.add_argument("--year", type=_year, metavar="YEAR", help="Calendar year (default: current year)")
    parser.add_argument(
        "--category",
        choices=["all", "historical", "cultural"],
        default="all",
        help="Only show events of this category",
    )
    parser.add_argument(
        "--tag",
        action="append",
        default=[],
        dest="tags",
        metavar="TAG",
        help="Keep events with this tag (repeatable, any tag matches)",
    )
    parser.add_argument("--search", default="", help="Case-insensitive text in title, description or tags")
    parser.add_argument("--date", type=_iso_date, metavar="YYYY-MM-DD", help="Only show events on this date")
    parser.add_argument("--list-countries", action="store_true", help="List available countries and exit")
    parser.add_argument(
        "--list-tags",
        action="store_true",
        help="List the tags used by the selected country and year and exit",
    )
    parser.add_argument("--json", action="store_true", help="Print occurrences as JSON")
    parser.add_argument("--data", metavar="PATH", help="Event template data file (JSON or YAML)")
    parser.add_argument("--config", metavar="PATH", help="Configuration file (YAML)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the caribbean_almanac CLI.

    Returns:
        Process exit code: 0 on success, 1 when configuration or data cannot be loaded
    """
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        configure_logging(debug_mode=args.debug)
        logger.error("Failed to load configuration: %s", e)
        return 1

    configure_logging(debug_mode=args.debug, level_name=config.log_level)

    try:
        catalog = load_templates(args.data or config.data_path)
    except TemplateLoadError as e:
        logger.error("%s", e)
        return 1

    if args.list_countries:
        for code, name in catalog.available_countries():
            print(f"{code}  {name}")
        return 0

    country = (args.country or config.default_country).strip().upper()
    year = args.year if args.year is not None else config.effective_year

    expander = AlmanacExpander(catalog, cache=OccurrenceCache(max_size=config.cache_size))
    result = expander.expand_events_for_year(country, year)

    if args.list_tags:
        for tag in available_tags(result.occurrences):
            print(tag)
        return 0

    filters = OccurrenceFilters(category=args.category, tags=args.tags, search=args.search)
    occurrences = filter_occurrences(result.occurrences, filters)
    if args.date is not None:
        occurrences = events_for_date(occurrences, args.date)

    if args.json:
        print(json.dumps([o.model_dump(mode="json") for o in occurrences], indent=2))
        return 0

    name = catalog.country_name(country) or country
    print(f"{year} Calendar - {name}: {len(occurrences)} events found")
    for occurrence in occurrences:
        print(f"{occurrence.iso_date}  {occurrence.title} [{occurrence.category}]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
