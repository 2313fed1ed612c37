"""
Scraper registry: one Scraper per source, resolved by name.

The registry builds a Scraper for every built-in source (with runtime
settings applied), hands them out by key, and runs several of them in one
call. Each Scraper owns its own session, rate limiter and version state,
so running sources in parallel needs no locking.
"""

import concurrent.futures
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from job_scraper.exceptions import ScraperNotFoundError
from job_scraper.logging_config import get_structured_logger
from job_scraper.scrapers.clock import Clock
from job_scraper.scrapers.models import Job, ScrapingMetrics, ScrapingOptions
from job_scraper.scrapers.scraper import Scraper
from job_scraper.scrapers.source_config import SourceConfig
from job_scraper.scrapers.sources import BUILTIN_SOURCES
from job_scraper.settings import get_source_settings

logger = logging.getLogger(__name__)
slogger = get_structured_logger(__name__)


@dataclass
class ScrapeSummary:
    """
    Outcome of scraping several sources.

    Attributes:
        jobs: Jobs from every successful source, in source order
        counts: Source key -> number of jobs returned
        errors: Source key -> error message for sources that failed
    """

    jobs: List[Job] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class ScraperRegistry:
    """
    Resolves source names to their Scraper instances.

    Args:
        sources: Source definitions to build scrapers for (default: built-ins)
        clock: Clock shared by all scrapers (default: one wall clock per scraper)
        fetcher: ``requests.request``-compatible callable passed to every scraper
        settings_path: Optional path to the scraper settings YAML
    """

    def __init__(
        self,
        sources: Optional[Iterable[SourceConfig]] = None,
        clock: Optional[Clock] = None,
        fetcher: Optional[Callable[..., Any]] = None,
        settings_path: Optional[str] = None,
    ):
        self.scrapers: Dict[str, Scraper] = {}
        self.configs: Dict[str, SourceConfig] = {}

        if sources is None:
            sources = BUILTIN_SOURCES.values()

        for source in sources:
            config = source.with_settings(get_source_settings(source.key, settings_path))
            config.validate()
            self.register_scraper(
                config.key, Scraper(config, clock=clock or Clock(), fetcher=fetcher)
            )

    def register_scraper(self, name: str, scraper: Scraper) -> None:
        key = name.lower()
        self.scrapers[key] = scraper
        self.configs[key] = scraper.config
        logger.info(f"Registered scraper: {key}")

    def get_scraper(self, name: str) -> Scraper:
        """
        Get the scraper registered under ``name`` (case-insensitive).

        Raises:
            ScraperNotFoundError: If no scraper has that name
        """
        scraper = self.scrapers.get(name.lower())
        if scraper is None:
            raise ScraperNotFoundError(name)
        return scraper

    def get_available_scrapers(self) -> List[str]:
        return list(self.scrapers)

    def get_all_scrapers(self) -> List[Scraper]:
        return list(self.scrapers.values())

    def get_enabled_scrapers(self) -> List[Scraper]:
        return [
            scraper for key, scraper in self.scrapers.items() if self.configs[key].enabled
        ]

    def scrape_sources(
        self,
        names: Iterable[str],
        options: Optional[ScrapingOptions] = None,
        parallel: bool = False,
    ) -> ScrapeSummary:
        """
        Scrape the named sources; a failing source never stops the others.

        Args:
            names: Source keys to scrape
            options: Options applied to every source
            parallel: Run sources concurrently, one worker thread per source

        Returns:
            ScrapeSummary with jobs in the order ``names`` were given
        """
        names = [name.lower() for name in names]
        summary = ScrapeSummary()
        results: Dict[str, List[Job]] = {}

        runnable = []
        for name in names:
            if name in self.scrapers:
                runnable.append(name)
            else:
                summary.errors[name] = str(ScraperNotFoundError(name))
                logger.error(f"Failed to scrape {name}: scraper not found")

        slogger.scrape_activity(
            "registry", "started", {"sources": runnable, "parallel": parallel}
        )

        if parallel and len(runnable) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=len(runnable)) as executor:
                futures = {
                    executor.submit(self.scrapers[name].scrape_jobs, options): name
                    for name in runnable
                }
                for future in concurrent.futures.as_completed(futures):
                    name = futures[future]
                    try:
                        results[name] = future.result()
                    except Exception as e:
                        summary.errors[name] = str(e)
                        logger.error(f"Failed to scrape {name}: {e}")
        else:
            for name in runnable:
                try:
                    results[name] = self.scrapers[name].scrape_jobs(options)
                except Exception as e:
                    summary.errors[name] = str(e)
                    logger.error(f"Failed to scrape {name}: {e}")

        for name in runnable:
            if name in results:
                summary.jobs.extend(results[name])
                summary.counts[name] = len(results[name])

        slogger.scrape_activity(
            "registry",
            "completed",
            {"jobs": len(summary.jobs), "counts": summary.counts, "errors": summary.errors},
        )
        return summary

    def scrape_all(
        self, options: Optional[ScrapingOptions] = None, parallel: bool = False
    ) -> List[Job]:
        """Scrape every enabled source and return the combined jobs."""
        names = [key for key in self.scrapers if self.configs[key].enabled]
        return self.scrape_sources(names, options, parallel=parallel).jobs

    def scrape_specific(
        self, names: Iterable[str], options: Optional[ScrapingOptions] = None
    ) -> List[Job]:
        return self.scrape_sources(names, options).jobs

    def get_scraper_metrics(self) -> Dict[str, ScrapingMetrics]:
        return {scraper.name: scraper.get_metrics() for scraper in self.get_all_scrapers()}

    def check_all_health(self) -> Dict[str, bool]:
        """Run is_healthy() for every registered scraper."""
        return {key: scraper.is_healthy() for key, scraper in self.scrapers.items()}

    def get_scraper_info(self) -> List[Dict[str, Any]]:
        return [
            {
                "key": key,
                "name": scraper.name,
                "base_url": scraper.base_url,
                "current_version": scraper.get_current_version(),
                "versions": scraper.get_available_versions(),
                "enabled": self.configs[key].enabled,
            }
            for key, scraper in self.scrapers.items()
        ]
