"""
Versioned page parsers.

A parser turns the raw markup of one listing page into ``Job`` records and
answers the pagination questions the scraper asks between pages. Parsers
are stateless; the scraper keeps one per registered layout version.

Every parser satisfies the ``JobParser`` protocol. The stock implementation,
``SelectorParser``, is driven entirely by a ``SelectorSet``, so supporting a
new layout means registering a new selector set rather than subclassing.
"""

import logging
import re
from datetime import datetime
from typing import Any, List, Optional, Protocol, Tuple, runtime_checkable

from bs4 import BeautifulSoup

from job_scraper.constants import SOURCE_ID_SEPARATOR
from job_scraper.scrapers.models import Job, utc_now
from job_scraper.scrapers.selectors import (
    SelectorSet,
    all_values,
    any_present,
    first_matches,
    first_value,
)
from job_scraper.utils.date_utils import parse_flexible_date
from job_scraper.utils.text import clean_text, clean_title

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_PAGE_NUMBER_RE = re.compile(r"\d+")


@runtime_checkable
class JobParser(Protocol):
    """Capabilities the scraper relies on for one layout version."""

    markers: Tuple[str, ...]

    def parse_jobs(self, html: Optional[str]) -> List[Job]: ...

    def has_next_page(self, html: Optional[str]) -> bool: ...

    def get_current_page(self, html: Optional[str]) -> int: ...

    def is_empty_listing(self, html: Optional[str]) -> bool: ...


def normalize_url(raw: Optional[str], origin: str) -> str:
    """
    Turn an extracted link into an absolute URL.

    Rules:
        ""                  -> ""
        "/jobs/1"           -> origin + "/jobs/1"
        "//cdn.example/x"   -> origin + "//cdn.example/x"
        "https://..."       -> unchanged (any "scheme:" prefix, e.g. "mailto:")
        "example.com/x"     -> "https://example.com/x"

    Args:
        raw: Link as found in the markup
        origin: Scheme and host of the source (e.g. "https://remoteok.com")
    """
    url = (raw or "").strip()
    if not url:
        return ""
    if _SCHEME_RE.match(url):
        return url
    if url.startswith("/"):
        return f"{origin.rstrip('/')}{url}"
    return f"https://{url}"


def generate_source_id(title: str, company: str) -> str:
    """
    Build the deterministic listing id from title and company.

    >>> generate_source_id("Senior Dev (Remote)", "ACME, Inc.")
    'senior-dev-remote-acme-inc'
    """
    combined = f"{title}{SOURCE_ID_SEPARATOR}{company}".lower()
    return _NON_ALNUM_RE.sub(SOURCE_ID_SEPARATOR, combined).strip(SOURCE_ID_SEPARATOR)


def _make_soup(html: Any) -> Optional[BeautifulSoup]:
    if not html or not isinstance(html, (str, bytes)):
        return None
    return BeautifulSoup(html, "html.parser")


class SelectorParser:
    """
    Parser for one layout version, described by a SelectorSet.

    Args:
        selectors: Selector set for the layout
        source: Display name stamped on every Job (e.g. "RemoteOK")
        origin: Scheme and host used to absolutize relative links
        default_location: Location used when a card has none
    """

    def __init__(
        self,
        selectors: SelectorSet,
        source: str,
        origin: str,
        default_location: str = "",
    ):
        self.selectors = selectors
        self.source = source
        self.origin = origin
        self.default_location = default_location

    @property
    def markers(self) -> Tuple[str, ...]:
        return self.selectors.markers

    def parse_jobs(self, html: Optional[str]) -> List[Job]:
        """
        Parse every job card on the page.

        Cards missing a title or company are skipped. Never raises; markup
        that cannot be parsed yields an empty list.
        """
        try:
            soup = _make_soup(html)
            if soup is None:
                return []

            now = utc_now()
            jobs = []
            for card in first_matches(soup, self.selectors.job_cards):
                job = self.parse_job_card(card, now)
                if job:
                    jobs.append(job)
            return jobs
        except Exception as e:
            logger.error(f"Error parsing {self.source} jobs: {e}")
            return []

    def parse_job_card(self, card: Any, now: Optional[datetime] = None) -> Optional[Job]:
        """Extract one Job from a card element, or None if it lacks title or company."""
        sel = self.selectors
        now = now or utc_now()

        try:
            title = clean_title(first_value(card, sel.title))
            company = clean_text(first_value(card, sel.company))
            if not title or not company:
                logger.warning(f"Skipping {self.source} card without title or company")
                return None

            location = clean_text(first_value(card, sel.location)) or self.default_location
            salary = clean_text(first_value(card, sel.salary)) or None

            return Job(
                title=title,
                company=company,
                location=location,
                apply_link=self.normalize_url(first_value(card, sel.apply_link)),
                posted_date=parse_flexible_date(first_value(card, sel.posted_date), now=now),
                salary=salary,
                tags=self._extract_tags(card),
                date_scraped=now,
                last_updated=now,
                search_text=f"{title} {company} {location}".lower(),
                source=self.source,
                source_id=generate_source_id(title, company),
            )
        except Exception as e:
            logger.warning(f"Error parsing {self.source} job card: {e}")
            return None

    def _extract_tags(self, card: Any) -> List[str]:
        sel = self.selectors
        tags = all_values(card, sel.tags)

        for selector in sel.extra_tags:
            tags.extend(all_values(card, (selector,)))

        for selector, label in sel.flags:
            if any_present(card, (selector,)):
                tags.append(label)
                break

        return tags

    def normalize_url(self, raw: Optional[str]) -> str:
        return normalize_url(raw, self.origin)

    def has_next_page(self, html: Optional[str]) -> bool:
        try:
            soup = _make_soup(html)
            if soup is None:
                return False
            return any_present(soup, self.selectors.next_page)
        except Exception as e:
            logger.debug(f"Error checking next page for {self.source}: {e}")
            return False

    def get_current_page(self, html: Optional[str]) -> int:
        """Return the 1-based page number shown in the pagination widget."""
        try:
            soup = _make_soup(html)
            if soup is None:
                return 1
            match = _PAGE_NUMBER_RE.search(first_value(soup, self.selectors.current_page))
            page = int(match.group()) if match else 1
            return page if page >= 1 else 1
        except Exception as e:
            logger.debug(f"Error reading current page for {self.source}: {e}")
            return 1

    def is_empty_listing(self, html: Optional[str]) -> bool:
        """True when the page explicitly says there are no listings."""
        if not self.selectors.no_results:
            return False
        try:
            soup = _make_soup(html)
            if soup is None:
                return False
            return any_present(soup, self.selectors.no_results)
        except Exception as e:
            logger.debug(f"Error checking empty listing for {self.source}: {e}")
            return False
