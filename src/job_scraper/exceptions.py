"""Custom exceptions for the job scraper engine.

This module defines domain-specific exceptions that provide clearer error
handling and better context than generic Python exceptions.
"""

from typing import Optional


class JobScraperError(Exception):
    """Base exception for all job scraper errors.

    All custom exceptions in this module inherit from this base class,
    making it easy to catch all scraper-specific errors.
    """

    pass


class ConfigurationError(JobScraperError):
    """Raised when there's an error in configuration.

    Examples:
    - Settings file is not a mapping
    - Unknown source name in settings
    - Invalid source definition (no versions registered)
    """

    pass


class ScraperError(JobScraperError):
    """Raised when scraping operations fail.

    Examples:
    - Failed to fetch page
    - Page parsed to zero job cards
    - Unknown parser version
    """

    pass


class PageFetchError(ScraperError):
    """Raised when a listing page returns a non-OK HTTP status.

    Attributes:
        url: The URL that was requested
        status_code: HTTP status code returned
        reason: HTTP reason phrase
    """

    def __init__(self, url: str, status_code: int, reason: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        self.reason = reason or ""
        super().__init__(f"HTTP {status_code}: {self.reason}".rstrip())


class EmptyPageError(ScraperError):
    """Raised when the first page of an attempt yields no job cards.

    The selectors of the active version may no longer match the layout, so
    the scraper treats this like a hard failure and moves on to detection.
    """

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No jobs found on first page: {url}")


class VersionNotFoundError(ScraperError):
    """Raised when a scrape is requested for a version that was never registered.

    This is a programming error and is never retried.
    """

    def __init__(self, source: str, version: str):
        self.source = source
        self.version = version
        super().__init__(f"Parser for version {version} not found ({source})")


class AllVersionsFailedError(ScraperError):
    """Raised once every registered version of a source has failed.

    Attributes:
        source: Display name of the source
        attempted: Versions tried during the call, in order
    """

    def __init__(self, source: str, attempted: Optional[list] = None):
        self.source = source
        self.attempted = attempted or []
        super().__init__(f"All {source} scraper versions failed")


class ScraperNotFoundError(ScraperError):
    """Raised when the registry has no scraper under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Scraper '{name}' not found")
