"""
Selector sets: declarative descriptions of one page layout of one source.

Every semantic field maps to an ordered tuple of candidate CSS selectors.
Extraction tries candidates in order and keeps the first non-empty result,
so a layout tweak that renames one class can be absorbed by listing the old
and new selector side by side.

Attribute values use the "@" syntax:
    "a@href"            -> href attribute of the first <a>
    "time@datetime"     -> datetime attribute of the first <time>
    "@data-url"         -> attribute of the element itself
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from job_scraper.utils.text import clean_text

logger = logging.getLogger(__name__)

Candidates = Tuple[str, ...]


@dataclass(frozen=True)
class SelectorSet:
    """
    Selectors for one layout version of a source.

    Attributes:
        job_cards: Selectors for the repeated job-card element
        title, company, location, apply_link, posted_date, salary:
            Per-field candidates, evaluated inside a card
        tags: Candidates for the card's tag elements (all matches are kept)
        extra_tags: Further tag groups appended after tags (benefits, perks)
        flags: (selector, label) pairs; the first present selector adds its label as a tag
        next_page: Presence of any match means another page exists
        current_page: Element whose text holds the current page number
        no_results: Presence of any match means the source has no listings right now
        markers: Raw-markup substrings identifying this layout during version detection
    """

    job_cards: Candidates
    title: Candidates
    company: Candidates
    location: Candidates = ()
    apply_link: Candidates = ()
    posted_date: Candidates = ()
    salary: Candidates = ()
    tags: Candidates = ()
    extra_tags: Candidates = ()
    flags: Tuple[Tuple[str, str], ...] = ()
    next_page: Candidates = ()
    current_page: Candidates = ()
    no_results: Candidates = ()
    markers: Tuple[str, ...] = field(default_factory=tuple)


def split_selector(selector: str) -> Tuple[str, Optional[str]]:
    """Split "css@attr" into ("css", "attr"); plain selectors get attr None."""
    css, sep, attr = selector.partition("@")
    return css.strip(), (attr.strip() or None) if sep else None


def extract_value(element: Any, selector: str) -> str:
    """
    Extract text or an attribute value with one selector.

    Returns:
        Cleaned value, or "" when nothing matched
    """
    css, attr = split_selector(selector)
    target = element.select_one(css) if css else element
    if target is None:
        return ""

    if attr:
        value = target.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        return clean_text(value) if value else ""

    return clean_text(target.get_text(" ", strip=True))


def first_value(element: Any, candidates: Candidates) -> str:
    """Return the first non-empty value produced by the candidates, in order."""
    for selector in candidates:
        try:
            value = extract_value(element, selector)
        except Exception as e:
            logger.debug(f"Selector '{selector}' failed: {e}")
            continue
        if value:
            return value
    return ""


def first_matches(element: Any, candidates: Candidates) -> List[Any]:
    """Return the nodes of the first candidate that matches anything."""
    for selector in candidates:
        try:
            nodes = element.select(selector)
        except Exception as e:
            logger.debug(f"Selector '{selector}' failed: {e}")
            continue
        if nodes:
            return nodes
    return []


def all_values(element: Any, candidates: Candidates) -> List[str]:
    """
    Return every non-empty value of the first candidate that yields any.

    Used for tag lists, where one selector matches many elements.
    """
    for selector in candidates:
        css, attr = split_selector(selector)
        try:
            nodes = element.select(css) if css else [element]
        except Exception as e:
            logger.debug(f"Selector '{selector}' failed: {e}")
            continue

        values = []
        for node in nodes:
            raw = node.get(attr) if attr else node.get_text(" ", strip=True)
            text = clean_text(raw) if isinstance(raw, str) else ""
            if text:
                values.append(text)
        if values:
            return values
    return []


def any_present(element: Any, candidates: Candidates) -> bool:
    """True if any candidate selector matches at least one node."""
    return bool(first_matches(element, candidates))
