"""LinkedIn public job search (https://linkedin.com/jobs)."""

from job_scraper.scrapers.models import DelayRange, RateLimitConfig
from job_scraper.scrapers.selectors import SelectorSet
from job_scraper.scrapers.source_config import SourceConfig

# Guest search results are served 25 per page
PAGE_SIZE = 25

V1_SELECTORS = SelectorSet(
    job_cards=(".job-search-card",),
    title=(".job-search-card__title",),
    company=(".job-search-card__subtitle",),
    location=(".job-search-card__location",),
    apply_link=(".job-search-card__title-link@href", ".base-card__full-link@href"),
    posted_date=(".job-search-card__listdate@datetime", ".job-search-card__listdate"),
    salary=(".job-search-card__salary-info",),
    tags=(".job-search-card__metadata-item",),
    next_page=(".artdeco-pagination__button--next",),
    current_page=(".artdeco-pagination__indicator--active",),
    no_results=(".jobs-search-no-results-banner",),
    markers=("job-search-card", "artdeco-pagination"),
)

V2_SELECTORS = SelectorSet(
    job_cards=(".job-card-container", "[data-job-id]"),
    title=(".job-card-list__title", "h3 a"),
    company=(
        ".job-card-container__company-name",
        ".job-card-container__primary-description",
    ),
    location=(".job-card-container__metadata-item",),
    apply_link=(".job-card-list__title@href", "h3 a@href", "a.job-card-container__link@href"),
    posted_date=("time@datetime", ".job-card-container__listed-time"),
    salary=(".job-card-container__salary",),
    tags=(".job-card-container__skills", ".job-card-container__footer-item"),
    next_page=(".artdeco-pagination__button--next", ".pagination__next"),
    current_page=(".artdeco-pagination__indicator--active",),
    no_results=(".jobs-search-no-results-banner",),
    markers=("job-card-container", "job-card-list"),
)

LINKEDIN = SourceConfig(
    key="linkedin",
    name="LinkedIn",
    base_url="https://linkedin.com/jobs",
    rate_limit=RateLimitConfig(
        requests_per_minute=20,
        delay_between_requests=DelayRange(min_ms=3000, max_ms=8000),
    ),
    versions={"v1": V1_SELECTORS, "v2": V2_SELECTORS},
    page_param="start",
    page_size=PAGE_SIZE,
    page_delay_ms=5000,
    page_delay_jitter_ms=3000,
    default_max_pages=3,
    default_max_jobs=50,
    default_location="Remote",
)
