"""Job source scrapers.

This module provides the per-source Scraper, its versioned parsers and the
registry that owns one Scraper per source.
"""

from job_scraper.scrapers.models import (
    Job,
    JobFilters,
    RateLimitConfig,
    ScrapingMetrics,
    ScrapingOptions,
    SessionInfo,
)
from job_scraper.scrapers.parser import JobParser, SelectorParser
from job_scraper.scrapers.registry import ScraperRegistry
from job_scraper.scrapers.scraper import Scraper
from job_scraper.scrapers.selectors import SelectorSet
from job_scraper.scrapers.source_config import SourceConfig

__all__ = [
    "Job",
    "JobFilters",
    "JobParser",
    "RateLimitConfig",
    "Scraper",
    "ScraperRegistry",
    "ScrapingMetrics",
    "ScrapingOptions",
    "SelectorParser",
    "SelectorSet",
    "SessionInfo",
    "SourceConfig",
]
