"""Time and randomness source for delays, session age and jitter.

Scrapers, session managers and rate limiters never call ``time`` or
``random`` directly; they go through a Clock so tests can substitute a
clock whose sleeps only advance a counter.
"""

import random
import time
from typing import Optional


class Clock:
    """Wall-clock implementation backed by ``time`` and ``random``."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def now_ms(self) -> float:
        """Monotonic milliseconds, for measuring ages and spacing."""
        return time.monotonic() * 1000

    def sleep_ms(self, ms: float) -> None:
        if ms > 0:
            time.sleep(ms / 1000)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self.rng.random()

    def choice(self, options):
        return self.rng.choice(options)

    def jitter_ms(self, base_ms: float, spread_ms: float) -> float:
        """``base_ms`` plus a uniform random share of ``spread_ms``."""
        return base_ms + self.random() * spread_ms
