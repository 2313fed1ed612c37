"""
Browser-like session state for one source.

The session manager owns a cookie jar, a user agent picked from a small
pool of real browser strings, and the counters that decide when the
identity is thrown away. Every outbound request of a scraper goes through
``make_request`` so headers and cookies stay consistent within a session.
"""

import logging
import re
from typing import Any, Callable, Dict, Optional

import requests
from requests.utils import DEFAULT_ACCEPT_ENCODING

from job_scraper.constants import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ROTATION_COOLDOWN_JITTER_MS,
    ROTATION_COOLDOWN_MIN_MS,
    SESSION_MAX_AGE_MS,
    SESSION_MAX_REQUESTS,
    USER_AGENTS,
)
from job_scraper.logging_config import get_structured_logger
from job_scraper.scrapers.clock import Clock
from job_scraper.scrapers.models import SessionInfo

logger = logging.getLogger(__name__)
slogger = get_structured_logger(__name__)

# A comma starts a new cookie only when followed by "name=".
# Commas inside Expires dates ("Wed, 21 Oct 2015") are followed by a space and digits.
_COOKIE_BOUNDARY_RE = re.compile(r",\s*(?=[^;,=\s]+=)")

BASE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    # Only encodings the installed requests/urllib3 stack can decode
    "Accept-Encoding": DEFAULT_ACCEPT_ENCODING,
    "DNT": "1",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Cache-Control": "max-age=0",
}


def split_set_cookie(header: Optional[str]) -> Dict[str, str]:
    """
    Parse a (possibly folded) Set-Cookie header into name -> value.

    Attributes (Path, Expires, HttpOnly, ...) are ignored. A cookie set to
    an empty value is returned with value "" so callers can delete it.

    >>> split_set_cookie("a=1; Expires=Wed, 21 Oct 2015 07:28:00 GMT, b=2")
    {'a': '1', 'b': '2'}
    """
    cookies: Dict[str, str] = {}
    if not header:
        return cookies

    for segment in _COOKIE_BOUNDARY_RE.split(header):
        name_value = segment.split(";", 1)[0]
        name, sep, value = name_value.partition("=")
        name = name.strip()
        if not name or not sep:
            continue
        cookies[name] = value.strip()
    return cookies


def _header_value(headers: Any, name: str) -> Optional[str]:
    if not headers:
        return None
    value = headers.get(name)
    if value is not None:
        return value
    wanted = name.lower()
    for key, val in headers.items():
        if key.lower() == wanted:
            return val
    return None


class SessionManager:
    """
    Identity and cookie state shared by all requests of one scraper.

    Rotation happens lazily at the start of ``make_request`` once the
    session is older than SESSION_MAX_AGE_MS or has issued more than
    SESSION_MAX_REQUESTS requests.

    Args:
        clock: Time/random source (defaults to the wall clock)
        fetcher: ``requests.request``-compatible callable; resolved at call
            time when None so ``requests.request`` can be patched in tests
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        fetcher: Optional[Callable[..., Any]] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ):
        self.clock = clock or Clock()
        self.fetcher = fetcher
        self.timeout = timeout
        self.cookies: Dict[str, str] = {}
        self.session_start = self.clock.now_ms()
        self.request_count = 0
        self.current_user_agent = self._pick_user_agent()

    def _pick_user_agent(self) -> str:
        return self.clock.choice(USER_AGENTS)

    def get_cookie_string(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self.cookies.items())

    def get_headers(self) -> Dict[str, str]:
        """Full browser header set for the current identity."""
        return {
            "User-Agent": self.current_user_agent,
            **BASE_HEADERS,
            "Cookie": self.get_cookie_string(),
        }

    def session_age_ms(self) -> float:
        return self.clock.now_ms() - self.session_start

    def should_rotate(self) -> bool:
        return (
            self.session_age_ms() > SESSION_MAX_AGE_MS
            or self.request_count > SESSION_MAX_REQUESTS
        )

    def rotate_session(self) -> None:
        """Drop cookies, reset counters, pick a new identity and cool down."""
        slogger.session_rotation(
            {"request_count": self.request_count, "session_age_ms": self.session_age_ms()}
        )

        self.cookies.clear()
        self.request_count = 0
        self.current_user_agent = self._pick_user_agent()

        self.clock.sleep_ms(
            self.clock.jitter_ms(ROTATION_COOLDOWN_MIN_MS, ROTATION_COOLDOWN_JITTER_MS)
        )
        # New session starts once the cool-down is over
        self.session_start = self.clock.now_ms()

    def make_request(
        self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs: Any
    ) -> Any:
        """
        Issue a GET request with session headers and cookies.

        Args:
            url: URL to fetch
            headers: Header overrides; these win over session headers
            **kwargs: Passed through to the fetcher (method defaults to GET)

        Returns:
            The fetcher's response object

        Raises:
            requests.RequestException: Transport failures propagate unchanged
        """
        if self.should_rotate():
            self.rotate_session()

        merged = {**self.get_headers(), **(headers or {})}
        method = kwargs.pop("method", "GET")
        kwargs.setdefault("timeout", self.timeout)

        # Counted before dispatch so failed attempts count toward the cap
        self.request_count += 1

        fetcher = self.fetcher or requests.request
        logger.debug(f"{method} {url} (request {self.request_count} of session)")
        response = fetcher(method, url, headers=merged, **kwargs)

        self.update_cookies(response)
        return response

    def update_cookies(self, response: Any) -> None:
        """Merge Set-Cookie values from a response into the jar."""
        header = _header_value(getattr(response, "headers", None), "Set-Cookie")
        for name, value in split_set_cookie(header).items():
            if value:
                self.cookies[name] = value
            else:
                self.cookies.pop(name, None)

    def get_session_info(self) -> SessionInfo:
        return SessionInfo(
            session_age_ms=self.session_age_ms(),
            request_count=self.request_count,
            cookie_count=len(self.cookies),
            user_agent=self.current_user_agent,
        )
