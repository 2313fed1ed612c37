"""Command-line entry point.

Usage:
    python -m job_scraper list
    python -m job_scraper health
    python -m job_scraper scrape remoteok linkedin --max-pages 2 --max-jobs 40
    python -m job_scraper scrape --remote --tag python --parallel

Scraped jobs are written to stdout as JSON lines (one ``Job.to_dict()`` per
line). Exit code is 1 when any requested source fails.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from job_scraper.exceptions import JobScraperError
from job_scraper.logging_config import setup_logging
from job_scraper.scrapers.models import JobFilters, ScrapingOptions
from job_scraper.scrapers.registry import ScraperRegistry

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="job_scraper",
        description="Scrape job listings from versioned job-board layouts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show registered sources and their layout versions
  python -m job_scraper list

  # Scrape two sources, remote jobs only
  python -m job_scraper scrape remoteok arbeitnow --remote --max-jobs 50
        """,
    )
    parser.add_argument("--config", help="Path to scraper settings YAML")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--log-file", help="Also write JSON logs to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List registered sources and versions")
    subparsers.add_parser("health", help="Check that each source responds")

    scrape = subparsers.add_parser("scrape", help="Scrape jobs and print them as JSON lines")
    scrape.add_argument("sources", nargs="*", help="Source keys (default: all enabled)")
    scrape.add_argument("--max-pages", type=_positive_int, help="Page limit per source")
    scrape.add_argument("--max-jobs", type=_positive_int, help="Job limit per source")
    scrape.add_argument("--location", help="Keep jobs whose location contains this text")
    scrape.add_argument("--company", help="Keep jobs whose company contains this text")
    scrape.add_argument(
        "--tag", action="append", default=[], dest="tags", help="Keep jobs with this tag (repeatable)"
    )
    remote = scrape.add_mutually_exclusive_group()
    remote.add_argument(
        "--remote", action="store_const", const=True, dest="remote", help="Remote jobs only"
    )
    remote.add_argument(
        "--onsite", action="store_const", const=False, dest="remote", help="Non-remote jobs only"
    )
    scrape.add_argument(
        "--parallel", action="store_true", help="Scrape sources concurrently"
    )

    return parser


def build_options(args: argparse.Namespace) -> ScrapingOptions:
    filters = JobFilters(
        location=args.location,
        remote=args.remote,
        tags=args.tags,
        company=args.company,
    )
    return ScrapingOptions(
        max_pages=args.max_pages,
        max_jobs=args.max_jobs,
        filters=None if filters.is_empty() else filters,
    )


def cmd_list(registry: ScraperRegistry) -> int:
    for info in registry.get_scraper_info():
        status = "enabled" if info["enabled"] else "disabled"
        print(
            f"{info['key']:<10} {info['name']:<12} {status:<8} "
            f"current={info['current_version']} versions={','.join(info['versions'])} "
            f"{info['base_url']}"
        )
    return 0


def cmd_health(registry: ScraperRegistry) -> int:
    health = registry.check_all_health()
    for key, healthy in health.items():
        print(f"{key:<10} {'healthy' if healthy else 'unhealthy'}")
    return 0 if all(health.values()) else 1


def cmd_scrape(registry: ScraperRegistry, args: argparse.Namespace) -> int:
    names = args.sources or [
        key for key in registry.get_available_scrapers() if registry.configs[key].enabled
    ]
    summary = registry.scrape_sources(names, build_options(args), parallel=args.parallel)

    for job in summary.jobs:
        print(json.dumps(job.to_dict()))

    for name, error in summary.errors.items():
        logger.error(f"{name}: {error}")

    return 0 if summary.ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    load_dotenv()
    setup_logging(log_level=args.log_level, log_file=args.log_file)

    try:
        registry = ScraperRegistry(settings_path=args.config)

        if args.command == "list":
            return cmd_list(registry)
        if args.command == "health":
            return cmd_health(registry)
        return cmd_scrape(registry, args)
    except JobScraperError as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
