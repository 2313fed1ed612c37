"""Per-source request pacing."""

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from job_scraper.constants import RATE_LIMIT_WINDOW_MS
from job_scraper.scrapers.clock import Clock
from job_scraper.scrapers.models import RateLimitConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RateLimiter:
    """
    Enforces requests_per_minute and a randomized minimum spacing.

    Requests are sequential per scraper, so waiting happens inline before
    each request rather than through a queue. The first request of a
    window is never delayed.
    """

    def __init__(self, config: RateLimitConfig, clock: Optional[Clock] = None):
        self.config = config
        self.clock = clock or Clock()
        self.request_count = 0
        self.last_request_time: Optional[float] = None
        self.reset_time = self.clock.now_ms() + RATE_LIMIT_WINDOW_MS

    def _next_spacing_ms(self) -> float:
        delay = self.config.delay_between_requests
        return self.clock.jitter_ms(delay.min_ms, delay.max_ms - delay.min_ms)

    def wait(self) -> None:
        """Block until another request is allowed, then account for it."""
        now = self.clock.now_ms()

        if now > self.reset_time:
            self.request_count = 0
            self.reset_time = now + RATE_LIMIT_WINDOW_MS

        if self.request_count >= self.config.requests_per_minute:
            wait_ms = self.reset_time - now
            logger.warning(f"Rate limit reached, waiting {wait_ms:.0f}ms")
            self.clock.sleep_ms(wait_ms)
            self.request_count = 0
            self.reset_time = self.clock.now_ms() + RATE_LIMIT_WINDOW_MS
        elif self.last_request_time is not None:
            elapsed = now - self.last_request_time
            spacing = self._next_spacing_ms()
            if elapsed < spacing:
                logger.debug(f"Rate limiting: waiting {spacing - elapsed:.0f}ms")
                self.clock.sleep_ms(spacing - elapsed)

        self.request_count += 1
        self.last_request_time = self.clock.now_ms()

    def run(self, request: Callable[[], T]) -> T:
        """Wait for a slot, then run ``request``; its exceptions propagate."""
        self.wait()
        return request()

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "request_count": self.request_count,
            "last_request_time": self.last_request_time,
            "reset_time": self.reset_time,
        }
