"""Static description of one job source."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

from job_scraper.exceptions import ConfigurationError
from job_scraper.scrapers.models import RateLimitConfig
from job_scraper.scrapers.selectors import SelectorSet


@dataclass
class SourceConfig:
    """
    Everything a Scraper needs to know about a source.

    Attributes:
        key: Registry key and settings key (e.g. "remoteok")
        name: Display name stamped on jobs (e.g. "RemoteOK")
        base_url: Root URL; used for detection and health checks
        rate_limit: Request pacing for the source
        versions: Layout version -> selector set, in registration order.
                  The first entry is the default current version.
        listing_path: Path appended to base_url for listing pages ("/jobs")
        page_param: Query parameter carrying the page number or offset
        page_size: When > 0, pages are addressed by an item offset of
                   (page - 1) * page_size instead of the page number
        page_delay_ms: Fixed part of the pause between pages
        page_delay_jitter_ms: Random extra pause between pages
        default_max_pages: Page limit when the caller gives none
        default_max_jobs: Job limit when the caller gives none
        default_location: Location used for cards that have none
        request_timeout_seconds: Per-request timeout
        enabled: Whether scrape_all includes this source
    """

    key: str
    name: str
    base_url: str
    rate_limit: RateLimitConfig
    versions: Dict[str, SelectorSet] = field(default_factory=dict)

    # Pagination
    listing_path: str = ""
    page_param: str = "page"
    page_size: int = 0
    page_delay_ms: int = 3000
    page_delay_jitter_ms: int = 2000

    # Defaults
    default_max_pages: int = 5
    default_max_jobs: int = 100
    default_location: str = ""

    request_timeout_seconds: float = 30
    enabled: bool = True

    @property
    def origin(self) -> str:
        """Scheme and host of base_url, used to absolutize relative links."""
        parts = urlsplit(self.base_url)
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def default_version(self) -> str:
        return next(iter(self.versions))

    def build_page_url(self, page: int) -> str:
        """
        URL of a 1-based listing page.

        Page 1 is the bare listing URL; later pages add the page parameter.
        """
        listing_url = f"{self.base_url.rstrip('/')}{self.listing_path}"
        if page <= 1:
            return listing_url

        value = (page - 1) * self.page_size if self.page_size > 0 else page
        separator = "&" if "?" in listing_url else "?"
        return f"{listing_url}{separator}{self.page_param}={value}"

    def with_settings(self, settings: Optional[Dict[str, Any]]) -> "SourceConfig":
        """
        Return a copy with runtime settings applied.

        Args:
            settings: Output of settings.get_source_settings()
        """
        if not settings:
            return self
        return replace(
            self,
            base_url=settings.get("base_url") or self.base_url,
            request_timeout_seconds=settings.get(
                "request_timeout_seconds", self.request_timeout_seconds
            ),
            enabled=settings.get("enabled", self.enabled),
        )

    def validate(self) -> None:
        """
        Validate configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.key or not self.name:
            raise ConfigurationError("Source key and name are required")

        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Invalid base_url for {self.name}: {self.base_url!r}. Must be http(s)"
            )

        if not self.versions:
            raise ConfigurationError(f"{self.name} must register at least one version")

        if self.page_size < 0:
            raise ConfigurationError(f"page_size for {self.name} must be >= 0")

        if self.default_max_pages <= 0 or self.default_max_jobs <= 0:
            raise ConfigurationError(f"Default limits for {self.name} must be positive")
