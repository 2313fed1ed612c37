"""
Pydantic models shared by parsers, scrapers and the registry.

Job records leave the engine through ``Job.to_dict()``, which produces the
camelCase shape the persistence layer upserts on ``applyLink``.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    """Listing status as stored downstream."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Job(BaseModel):
    """
    Normalized job listing produced by a parser.

    ``source_id`` is derived from title and company only, so re-scrapes of
    the same listing always produce the same value.
    """

    title: str
    company: str
    location: str = ""
    apply_link: str = Field(default="", description="Absolute URL, or empty when unknown")
    posted_date: datetime = Field(default_factory=utc_now)
    salary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    status: JobStatus = JobStatus.ACTIVE
    applied: bool = False
    date_scraped: datetime = Field(default_factory=utc_now)
    last_updated: datetime = Field(default_factory=utc_now)
    search_text: str = ""
    source: str
    source_id: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the record shape handed to persistence."""
        return {
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "applyLink": self.apply_link,
            "postedDate": self.posted_date.isoformat(),
            "salary": self.salary,
            "tags": list(self.tags),
            "status": self.status.value,
            "applied": self.applied,
            "dateScraped": self.date_scraped.isoformat(),
            "lastUpdated": self.last_updated.isoformat(),
            "searchText": self.search_text,
            "source": self.source,
            "sourceId": self.source_id,
        }


class DelayRange(BaseModel):
    """Randomized delay window in milliseconds."""

    min_ms: int = Field(ge=0)
    max_ms: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "DelayRange":
        if self.max_ms < self.min_ms:
            raise ValueError("max_ms must be >= min_ms")
        return self


class RateLimitConfig(BaseModel):
    """
    Request pacing for one source.

    Fixed per scraper instance. Pages are always fetched one at a time, so
    max_concurrent_requests is pinned to 1.
    """

    requests_per_minute: int = Field(gt=0)
    delay_between_requests: DelayRange
    max_concurrent_requests: int = Field(default=1, ge=1, le=1)

    model_config = ConfigDict(frozen=True)


class JobFilters(BaseModel):
    """
    Optional narrowing applied to the aggregated result of a scrape.

    All string comparisons are case-insensitive substring matches; tags
    match when any requested tag equals any job tag.
    """

    location: Optional[str] = None
    remote: Optional[bool] = None
    tags: List[str] = Field(default_factory=list)
    company: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def is_empty(self) -> bool:
        return not (self.location or self.remote is not None or self.tags or self.company)


class ScrapingOptions(BaseModel):
    """
    Per-call scraping input.

    Behavior:
    - max_pages=None → use the source's default page limit
    - max_jobs=None → use the source's default job limit
    - filters=None → return every scraped job
    - force_refresh is passed through for callers that cache results
    """

    max_pages: Optional[int] = Field(default=None, gt=0)
    max_jobs: Optional[int] = Field(default=None, gt=0)
    filters: Optional[JobFilters] = None
    force_refresh: bool = False

    model_config = ConfigDict(frozen=True)


class ScrapingMetrics(BaseModel):
    """Request counters for one scraper instance."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    average_response_time_ms: float = 0.0
    last_scraped: Optional[datetime] = None
    version: str = "unknown"


class SessionInfo(BaseModel):
    """Read-only snapshot of session manager state."""

    session_age_ms: float
    request_count: int
    cookie_count: int
    user_agent: str

    model_config = ConfigDict(frozen=True)
