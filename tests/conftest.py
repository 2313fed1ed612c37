"""Shared pytest fixtures for all tests."""

from unittest.mock import Mock

import pytest

from job_scraper.scrapers.clock import Clock
from job_scraper.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def set_test_environment(monkeypatch, tmp_path):
    """
    Automatically isolate environment for all tests.

    Sets ENVIRONMENT, points SCRAPER_CONFIG_PATH at a file that does not
    exist so built-in defaults apply, and drops any base-URL overrides from
    the developer's shell.
    """
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("SCRAPER_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    for key in ("REMOTEOK", "LINKEDIN", "ARBEITNOW", "RELOCATE"):
        monkeypatch.delenv(f"{key}_BASE_URL", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


class FakeClock(Clock):
    """
    Deterministic clock: sleeping only advances ``now``.

    ``random()`` always returns ``random_value`` and ``choice`` picks the
    first option, so jittered delays are predictable.
    """

    def __init__(self, start_ms: float = 0.0, random_value: float = 0.5):
        super().__init__()
        self.now = start_ms
        self.random_value = random_value
        self.sleeps = []

    def now_ms(self) -> float:
        return self.now

    def sleep_ms(self, ms: float) -> None:
        self.sleeps.append(ms)
        if ms > 0:
            self.now += ms

    def advance(self, ms: float) -> None:
        self.now += ms

    def random(self) -> float:
        return self.random_value

    def choice(self, options):
        return options[0]


@pytest.fixture
def fake_clock():
    """Clock that never sleeps in real time."""
    return FakeClock()


def build_response(text="", status_code=200, reason="OK", headers=None):
    response = Mock()
    response.ok = 200 <= status_code < 400
    response.status_code = status_code
    response.reason = reason
    response.text = text
    response.headers = headers or {}
    return response


@pytest.fixture
def make_response():
    """
    Factory for mock ``requests`` responses.

    Usage:
        response = make_response("<html>...</html>", status_code=200)
    """
    return build_response


@pytest.fixture
def fetcher(make_response):
    """Mock fetcher returning an empty 200 page unless reconfigured."""
    return Mock(return_value=make_response("<html></html>"))
