"""
Per-source scraper: pagination, version detection and fallback.

A Scraper owns the parsers for every known layout version of its source,
remembers which one worked last, and walks the listing pages with it.
When the current version breaks (first page fails or yields nothing) it
looks for a better one:

    try current version
      └─ failed → detect version from markup markers
           ├─ new version found → try it
           └─ still failing → try every remaining version in order
                └─ all failed → AllVersionsFailedError

Each version is tried at most once per call. Whichever version produces
data becomes the current version for the next call.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from job_scraper.exceptions import (
    AllVersionsFailedError,
    ConfigurationError,
    EmptyPageError,
    PageFetchError,
    VersionNotFoundError,
)
from job_scraper.logging_config import get_structured_logger
from job_scraper.scrapers.clock import Clock
from job_scraper.scrapers.filters import apply_filters
from job_scraper.scrapers.models import (
    Job,
    RateLimitConfig,
    ScrapingMetrics,
    ScrapingOptions,
    SessionInfo,
    utc_now,
)
from job_scraper.scrapers.parser import JobParser, SelectorParser
from job_scraper.scrapers.rate_limiter import RateLimiter
from job_scraper.scrapers.session_manager import SessionManager
from job_scraper.scrapers.source_config import SourceConfig

logger = logging.getLogger(__name__)
slogger = get_structured_logger(__name__)


class Scraper:
    """
    Scraper for one source.

    Args:
        config: Source description (URLs, limits, selector sets per version)
        clock: Time/random source shared with the session manager and rate limiter
        fetcher: ``requests.request``-compatible callable (None → requests.request)
        parsers: Optional version -> parser mapping used instead of building
                 SelectorParsers from ``config.versions``
    """

    def __init__(
        self,
        config: SourceConfig,
        clock: Optional[Clock] = None,
        fetcher: Optional[Callable[..., Any]] = None,
        parsers: Optional[Dict[str, JobParser]] = None,
    ):
        self.config = config
        self.name = config.name
        self.base_url = config.base_url
        self.clock = clock or Clock()

        self.session_manager = SessionManager(
            clock=self.clock, fetcher=fetcher, timeout=config.request_timeout_seconds
        )
        self.rate_limiter = RateLimiter(config.rate_limit, clock=self.clock)

        self.versions: Dict[str, JobParser] = {}
        if parsers is None:
            parsers = {
                version: SelectorParser(
                    selectors,
                    source=config.name,
                    origin=config.origin,
                    default_location=config.default_location,
                )
                for version, selectors in config.versions.items()
            }
        for version, parser in parsers.items():
            self.register_version(version, parser)

        if not self.versions:
            raise ConfigurationError(f"{self.name} must register at least one version")

        self.current_version = next(iter(self.versions))
        self.metrics = ScrapingMetrics(version=self.current_version)

    # ------------------------------------------------------------------
    # Version registry
    # ------------------------------------------------------------------

    def register_version(self, version: str, parser: JobParser) -> None:
        """Add (or replace) the parser for a layout version."""
        if not isinstance(parser, JobParser):
            raise TypeError(f"{type(parser).__name__} does not implement JobParser")
        self.versions[version] = parser
        logger.debug(f"Registered {self.name} parser version {version}")

    def get_current_version(self) -> str:
        return self.current_version

    def get_available_versions(self) -> List[str]:
        return list(self.versions)

    def _set_current_version(self, version: str, reason: str) -> None:
        if version != self.current_version:
            slogger.version_change(self.name, self.current_version, version, reason)
        self.current_version = version
        self.metrics.version = version

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def get_rate_limit(self) -> RateLimitConfig:
        return self.config.rate_limit

    def make_request(self, url: str) -> Any:
        """Fetch ``url`` through the rate limiter and session, recording metrics."""

        def _request() -> Any:
            start = self.clock.now_ms()
            try:
                response = self.session_manager.make_request(url)
            except Exception:
                self._record_request(self.clock.now_ms() - start, success=False)
                raise
            self._record_request(self.clock.now_ms() - start, success=bool(response.ok))
            return response

        return self.rate_limiter.run(_request)

    def _record_request(self, duration_ms: float, success: bool) -> None:
        metrics = self.metrics
        metrics.total_requests += 1
        if success:
            metrics.successful_requests += 1
        else:
            metrics.failed_requests += 1

        total_time = metrics.average_response_time_ms * (metrics.total_requests - 1) + duration_ms
        metrics.average_response_time_ms = total_time / metrics.total_requests
        metrics.last_scraped = utc_now()

    def fetch_page(self, url: str) -> str:
        """
        Fetch one listing page.

        Raises:
            PageFetchError: If the response status is not OK
            requests.RequestException: On transport failures
        """
        response = self.make_request(url)
        if not response.ok:
            raise PageFetchError(url, response.status_code, response.reason)
        return response.text

    # ------------------------------------------------------------------
    # Scraping
    # ------------------------------------------------------------------

    def scrape_jobs(self, options: Optional[ScrapingOptions] = None) -> List[Job]:
        """
        Scrape the source, falling back across versions if needed.

        Args:
            options: Limits and filters; source defaults apply when omitted

        Returns:
            Jobs in page order, filtered, then truncated to max_jobs

        Raises:
            AllVersionsFailedError: If no registered version produced data
            VersionNotFoundError: Never swallowed; indicates a programming error
        """
        options = options or ScrapingOptions()
        max_pages = options.max_pages or self.config.default_max_pages
        max_jobs = options.max_jobs or self.config.default_max_jobs

        slogger.scrape_activity(
            self.name,
            "started",
            {"version": self.current_version, "max_pages": max_pages, "max_jobs": max_jobs},
        )

        attempted: List[str] = []
        jobs = self._try_version(self.current_version, max_pages, max_jobs, attempted)

        if jobs is None:
            logger.warning(
                f"Current version {self.current_version} failed, attempting version detection"
            )
            detected = self.detect_version()
            if detected and detected not in attempted:
                logger.info(f"{self.name} structure changed, trying {detected}")
                jobs = self._try_version(detected, max_pages, max_jobs, attempted)
                if jobs is not None:
                    self._set_current_version(detected, "detected")

        if jobs is None:
            for version in list(self.versions):
                if version in attempted:
                    continue
                logger.info(f"Trying fallback version: {version}")
                jobs = self._try_version(version, max_pages, max_jobs, attempted)
                if jobs is not None:
                    self._set_current_version(version, "fallback")
                    break

        if jobs is None:
            slogger.scrape_activity(
                self.name, "failed", {"attempted": attempted}, level="error"
            )
            raise AllVersionsFailedError(self.name, attempted)

        jobs = apply_filters(jobs, options.filters)[:max_jobs]

        slogger.scrape_activity(
            self.name, "completed", {"version": self.current_version, "jobs": len(jobs)}
        )
        return jobs

    def _try_version(
        self, version: str, max_pages: int, max_jobs: int, attempted: List[str]
    ) -> Optional[List[Job]]:
        """Run one version; None means it failed and the cascade should continue."""
        attempted.append(version)
        try:
            return self.scrape_with_version(version, max_pages, max_jobs)
        except VersionNotFoundError:
            raise
        except Exception as e:
            logger.warning(f"{self.name} version {version} failed: {e}")
            return None

    def scrape_with_version(self, version: str, max_pages: int, max_jobs: int) -> List[Job]:
        """
        Walk listing pages with one parser version.

        Stops at max_pages, max_jobs, an empty page, or when the page has no
        next link. Failures on page 1 propagate; later failures keep the
        jobs collected so far.

        Raises:
            VersionNotFoundError: If ``version`` is not registered
            EmptyPageError: If page 1 has no jobs and no empty-listing marker
            PageFetchError: If page 1 returns a non-OK status
        """
        parser = self.versions.get(version)
        if parser is None:
            raise VersionNotFoundError(self.name, version)

        jobs: List[Job] = []
        page = 1

        while page <= max_pages and len(jobs) < max_jobs:
            url = self.config.build_page_url(page)
            try:
                logger.debug(f"Scraping {self.name} page {page}: {url}")
                html = self.fetch_page(url)
                page_jobs = parser.parse_jobs(html)

                if not page_jobs:
                    if page == 1:
                        if parser.is_empty_listing(html):
                            logger.info(f"{self.name} reports no listings right now")
                            break
                        raise EmptyPageError(url)
                    logger.warning(f"No jobs found on page {page}")
                    break

                jobs.extend(page_jobs)
                logger.debug(f"Found {len(page_jobs)} jobs on page {page}")

                if not parser.has_next_page(html):
                    logger.debug("No more pages available")
                    break

                page += 1
                self.clock.sleep_ms(
                    self.clock.jitter_ms(
                        self.config.page_delay_ms, self.config.page_delay_jitter_ms
                    )
                )
            except Exception as e:
                if page == 1:
                    raise
                logger.error(f"Failed to scrape {self.name} page {page}: {e}")
                break

        return jobs

    def detect_version(self) -> Optional[str]:
        """
        Identify the layout from markers in the base URL's markup.

        Newer registrations are checked first. Returns None when the
        request fails or no registered version's markers are present.
        """
        try:
            html = self.fetch_page(self.base_url)
        except Exception as e:
            logger.error(f"Version detection failed for {self.name}: {e}")
            return None

        for version in reversed(list(self.versions)):
            markers = getattr(self.versions[version], "markers", ())
            if any(marker in html for marker in markers):
                logger.debug(f"Detected {self.name} version {version}")
                return version
        return None

    def is_healthy(self) -> bool:
        """One request to the base URL; True iff it returns an OK status."""
        try:
            response = self.make_request(self.base_url)
            return bool(response.ok)
        except Exception as e:
            logger.error(f"Health check failed for {self.name}: {e}")
            return False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_metrics(self) -> ScrapingMetrics:
        return self.metrics.model_copy()

    def get_rate_limiter_metrics(self) -> Dict[str, Any]:
        return self.rate_limiter.get_metrics()

    def get_session_info(self) -> SessionInfo:
        return self.session_manager.get_session_info()
