"""RemoteOK (https://remoteok.com): table-based listing, two known layouts."""

from job_scraper.scrapers.models import DelayRange, RateLimitConfig
from job_scraper.scrapers.selectors import SelectorSet
from job_scraper.scrapers.source_config import SourceConfig

# Table rows, one <tr class="job"> per listing
V1_SELECTORS = SelectorSet(
    job_cards=("tr.job",),
    title=("td.company_and_position h2",),
    company=("td.company_and_position h3",),
    location=("td.location",),
    apply_link=("td.source a@href", "td.company_and_position a@href"),
    posted_date=("td.date time@datetime", "td.date", "td.time"),
    salary=("td.salary",),
    tags=("td.tags span", "td.tags a"),
    next_page=(".pagination .next a",),
    current_page=(".pagination .current",),
    markers=('class="job"', "company_and_position"),
)

# Card-based redesign
V2_SELECTORS = SelectorSet(
    job_cards=(".job-listing", "tr[data-href]", "[data-job]"),
    title=(".job-listing h2", "h2 a", "h3 a", ".job-title a", 'a[href*="/remote-jobs/"]'),
    company=(".company-name", ".company a", "[data-company]"),
    location=(".location", "[data-location]"),
    apply_link=("h2 a@href", ".job-title a@href", 'a[href*="/remote-jobs/"]@href', "@data-href"),
    posted_date=("time@datetime", ".time", "[data-time]"),
    salary=(".salary", "[data-salary]"),
    tags=(".tags a", ".tags span", "[data-tags] a"),
    next_page=('a[rel="next"]', ".pagination .next"),
    current_page=(".pagination .current", '[aria-current="page"]'),
    markers=("job-listing", "company-name"),
)

REMOTEOK = SourceConfig(
    key="remoteok",
    name="RemoteOK",
    base_url="https://remoteok.com",
    rate_limit=RateLimitConfig(
        requests_per_minute=30,
        delay_between_requests=DelayRange(min_ms=2000, max_ms=5000),
    ),
    versions={"v1": V1_SELECTORS, "v2": V2_SELECTORS},
    page_param="page",
    page_delay_ms=3000,
    page_delay_jitter_ms=2000,
    default_max_pages=5,
    default_max_jobs=100,
    default_location="Remote",
)
