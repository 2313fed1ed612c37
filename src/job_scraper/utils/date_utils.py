"""Date parsing utilities for scraped job cards."""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import dateutil.parser

logger = logging.getLogger(__name__)

_RELATIVE_PATTERN = re.compile(
    r"(?P<num>\d+)\+?\s*(?P<unit>seconds?|secs?|minutes?|mins?|hours?|hrs?|h|days?|d|weeks?|w|months?|mo)\s+ago",
)
_GERMAN_LONG_PATTERN = re.compile(r"\b(\d{1,2})\.(\d{1,2})\.(\d{4})\b")
_GERMAN_SHORT_PATTERN = re.compile(r"\b(\d{1,2})\.(\d{1,2})\.(\d{2})\b")
_SLASH_PATTERN = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b")


def _utc_date(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_relative_date(text: str, now: datetime) -> Optional[datetime]:
    """
    Resolve expressions like "3 days ago", "5 hrs ago", "today", "yesterday".

    Args:
        text: Lowercased date text
        now: Reference timestamp

    Returns:
        Resolved datetime or None if the text is not relative
    """
    if text in {"today", "just posted", "posted today", "just now"}:
        return now
    if text == "yesterday":
        return now - timedelta(days=1)

    match = _RELATIVE_PATTERN.search(text)
    if not match:
        return None

    num = int(match.group("num"))
    unit = match.group("unit")

    if unit.startswith("s"):
        delta = timedelta(seconds=num)
    elif unit.startswith("mo"):
        delta = timedelta(days=num * 30)  # rough approximation
    elif unit.startswith("m"):
        delta = timedelta(minutes=num)
    elif unit.startswith("h"):
        delta = timedelta(hours=num)
    elif unit.startswith("d"):
        delta = timedelta(days=num)
    else:
        delta = timedelta(weeks=num)

    return now - delta


def parse_german_date(text: str) -> Optional[datetime]:
    """Parse DD.MM.YYYY or DD.MM.YY (years below 50 map to 20YY)."""
    match = _GERMAN_LONG_PATTERN.search(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _utc_date(year, month, day)

    match = _GERMAN_SHORT_PATTERN.search(text)
    if match:
        day, month, short_year = (int(part) for part in match.groups())
        year = 2000 + short_year if short_year < 50 else 1900 + short_year
        return _utc_date(year, month, day)

    return None


def parse_slash_date(text: str) -> Optional[datetime]:
    """
    Parse MM/DD/YYYY, or DD/MM/YYYY when the first part cannot be a month.

    Ambiguous dates (both parts <= 12) are read as US order.
    """
    match = _SLASH_PATTERN.search(text)
    if not match:
        return None

    first, second, year = (int(part) for part in match.groups())
    if first > 12:
        return _utc_date(year, second, first)
    return _utc_date(year, first, second)


def parse_flexible_date(date_string: Optional[str], now: Optional[datetime] = None) -> datetime:
    """
    Parse a posted-date string into a timezone-aware UTC datetime.

    Handles:
    - ISO 8601 (e.g., "2024-01-15T10:30:00Z")
    - RFC 2822 and human-readable dates (via dateutil)
    - Relative dates (e.g., "2 days ago", "today", "yesterday")
    - German dates (e.g., "15.01.2024", "15.01.24")
    - Slash dates (e.g., "01/15/2024", "15/01/2024")

    Anything unparseable falls back to ``now``; this never raises.

    Args:
        date_string: Raw date text from a job card
        now: Reference timestamp (defaults to the current UTC time)

    Returns:
        Parsed datetime (UTC)
    """
    now = now or datetime.now(timezone.utc)
    if not date_string or not isinstance(date_string, str):
        return now

    text = date_string.strip()
    lowered = text.lower()

    if "." in text:
        german = parse_german_date(text)
        if german:
            return german

    relative = parse_relative_date(lowered, now)
    if relative:
        return relative

    if "/" in text:
        slash = parse_slash_date(text)
        if slash:
            return slash

    try:
        parsed = dateutil.parser.parse(text)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Failed to parse date '{date_string}': {e}")
        return now

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
