"""Relocate.me (https://relocate.me): jobs with relocation support."""

from job_scraper.scrapers.models import DelayRange, RateLimitConfig
from job_scraper.scrapers.selectors import SelectorSet
from job_scraper.scrapers.source_config import SourceConfig

RELOCATION_FLAGS = (
    (".job-card__visa-sponsorship", "Visa Sponsorship"),
    (".job-card__relocation-package", "Relocation Package"),
    (".job-card__remote", "Remote"),
    (".job-card__full-time", "Full-time"),
    (".job-card__part-time", "Part-time"),
    (".job-card__contract", "Contract"),
)

V1_SELECTORS = SelectorSet(
    job_cards=(".job-card",),
    title=(".job-card__title",),
    company=(".job-card__company",),
    location=(".job-card__location", ".job-card__country"),
    apply_link=(".job-card__title a@href",),
    posted_date=(".job-card__date time@datetime", ".job-card__date"),
    salary=(".job-card__salary",),
    tags=(".job-card__tags .tag",),
    extra_tags=(".job-card__benefits .benefit", ".job-card__perks .perk"),
    flags=RELOCATION_FLAGS,
    next_page=(".pagination__next",),
    current_page=(".pagination__current",),
    no_results=(".no-results",),
    markers=("job-card", "pagination"),
)

RELOCATE = SourceConfig(
    key="relocate",
    name="Relocate.me",
    base_url="https://relocate.me",
    rate_limit=RateLimitConfig(
        requests_per_minute=25,
        delay_between_requests=DelayRange(min_ms=2500, max_ms=6000),
    ),
    versions={"v1": V1_SELECTORS},
    listing_path="/jobs",
    page_param="page",
    page_delay_ms=4000,
    page_delay_jitter_ms=2000,
    default_max_pages=4,
    default_max_jobs=80,
)
