"""Arbeitnow (https://www.arbeitnow.com): German job board with benefit badges."""

from job_scraper.scrapers.models import DelayRange, RateLimitConfig
from job_scraper.scrapers.selectors import SelectorSet
from job_scraper.scrapers.source_config import SourceConfig

# Badge element -> tag label; only the first badge present is recorded
JOB_TYPE_FLAGS = (
    (".job-card__remote", "Remote"),
    (".job-card__full-time", "Full-time"),
    (".job-card__part-time", "Part-time"),
    (".job-card__contract", "Contract"),
    (".job-card__visa-sponsorship", "Visa Sponsorship"),
    (".job-card__relocation", "Relocation Package"),
)

V1_SELECTORS = SelectorSet(
    job_cards=(".job-card",),
    title=(".job-card__title",),
    company=(".job-card__company",),
    location=(".job-card__location",),
    apply_link=(".job-card__title a@href", "a.job-card__link@href"),
    posted_date=(".job-card__date time@datetime", ".job-card__date"),
    salary=(".job-card__salary",),
    tags=(".job-card__tags .tag",),
    extra_tags=(".job-card__benefits .benefit", ".job-card__perks .perk"),
    flags=JOB_TYPE_FLAGS,
    next_page=(".pagination__next",),
    current_page=(".pagination__current",),
    no_results=(".no-results",),
    markers=("job-card",),
)

ARBEITNOW = SourceConfig(
    key="arbeitnow",
    name="Arbeitnow",
    base_url="https://www.arbeitnow.com",
    rate_limit=RateLimitConfig(
        requests_per_minute=30,
        delay_between_requests=DelayRange(min_ms=2000, max_ms=5000),
    ),
    versions={"v1": V1_SELECTORS},
    page_param="page",
    page_delay_ms=3000,
    page_delay_jitter_ms=2000,
    default_max_pages=5,
    default_max_jobs=100,
    default_location="Germany",
)
