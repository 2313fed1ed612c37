"""Built-in source definitions."""

from typing import Dict

from job_scraper.exceptions import ScraperNotFoundError
from job_scraper.scrapers.source_config import SourceConfig
from job_scraper.scrapers.sources.arbeitnow import ARBEITNOW
from job_scraper.scrapers.sources.linkedin import LINKEDIN
from job_scraper.scrapers.sources.relocate import RELOCATE
from job_scraper.scrapers.sources.remoteok import REMOTEOK

BUILTIN_SOURCES: Dict[str, SourceConfig] = {
    source.key: source for source in (REMOTEOK, LINKEDIN, ARBEITNOW, RELOCATE)
}


def get_source_config(key: str) -> SourceConfig:
    """
    Look up a built-in source by key (case-insensitive).

    Raises:
        ScraperNotFoundError: If no source is registered under ``key``
    """
    try:
        return BUILTIN_SOURCES[key.lower()]
    except KeyError:
        raise ScraperNotFoundError(key) from None


__all__ = ["ARBEITNOW", "BUILTIN_SOURCES", "LINKEDIN", "RELOCATE", "REMOTEOK", "get_source_config"]
