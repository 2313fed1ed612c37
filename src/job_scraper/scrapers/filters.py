"""Post-scrape narrowing of job lists by location, remote, tags and company.

Filters run on the aggregated result of a successful scrape. They never
feed back into version detection or fallback: a scrape that returns jobs
is a success even when every job is filtered out.
"""

import logging
from typing import List, Optional

from job_scraper.scrapers.models import Job, JobFilters

logger = logging.getLogger(__name__)

# Location or tag text that marks a listing as remote
REMOTE_KEYWORDS = ("remote", "anywhere", "worldwide", "distributed")


def is_remote(job: Job) -> bool:
    location = job.location.lower()
    if any(keyword in location for keyword in REMOTE_KEYWORDS):
        return True
    return any(tag.lower() in REMOTE_KEYWORDS for tag in job.tags)


def matches_filters(job: Job, filters: JobFilters) -> bool:
    """True if the job satisfies every filter that is set."""
    if filters.location and filters.location.lower() not in job.location.lower():
        return False

    if filters.company and filters.company.lower() not in job.company.lower():
        return False

    if filters.remote is not None and is_remote(job) != filters.remote:
        return False

    if filters.tags:
        wanted = {tag.lower() for tag in filters.tags}
        if not any(tag.lower() in wanted for tag in job.tags):
            return False

    return True


def apply_filters(jobs: List[Job], filters: Optional[JobFilters]) -> List[Job]:
    """Return the jobs matching ``filters``, preserving order."""
    if filters is None or filters.is_empty():
        return jobs

    kept = [job for job in jobs if matches_filters(job, filters)]
    logger.debug(f"Filters kept {len(kept)} of {len(jobs)} jobs")
    return kept
