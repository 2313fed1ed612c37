"""Tests for the Scraper pagination and version fallback cascade."""

from unittest.mock import Mock

import pytest
import requests

from job_scraper.exceptions import (
    AllVersionsFailedError,
    ConfigurationError,
    EmptyPageError,
    PageFetchError,
    VersionNotFoundError,
)
from job_scraper.scrapers.models import (
    DelayRange,
    JobFilters,
    RateLimitConfig,
    ScrapingMetrics,
    ScrapingOptions,
)
from job_scraper.scrapers.scraper import Scraper
from job_scraper.scrapers.selectors import SelectorSet
from job_scraper.scrapers.source_config import SourceConfig

BASE_URL = "https://jobs.example.com"

V1 = SelectorSet(
    job_cards=(".job",),
    title=(".title",),
    company=(".company",),
    location=(".location",),
    apply_link=(".title a@href",),
    next_page=(".next",),
    no_results=(".no-results",),
    markers=("v1-layout",),
)

V2 = SelectorSet(
    job_cards=(".listing",),
    title=(".name",),
    company=(".employer",),
    next_page=("a[rel=next]",),
    markers=("v2-layout",),
)


def v1_page(*titles, next_page=False, locations=None):
    locations = locations or ["Remote"] * len(titles)
    cards = "".join(
        f'<div class="job"><h2 class="title"><a href="/jobs/{t}">{t}</a></h2>'
        f'<span class="company">Co {t}</span><span class="location">{loc}</span></div>'
        for t, loc in zip(titles, locations)
    )
    nav = '<a class="next" href="?page=2">Next</a>' if next_page else ""
    return f'<html><body class="v1-layout">{cards}{nav}</body></html>'


def v2_page(*titles):
    cards = "".join(
        f'<article class="listing"><h3 class="name">{t}</h3><p class="employer">Co {t}</p></article>'
        for t in titles
    )
    return f'<html><body class="v2-layout">{cards}</body></html>'


def make_config(versions=None, **overrides):
    values = dict(
        key="test",
        name="TestBoard",
        base_url=BASE_URL,
        rate_limit=RateLimitConfig(
            requests_per_minute=1000,
            delay_between_requests=DelayRange(min_ms=0, max_ms=0),
        ),
        versions=versions if versions is not None else {"v1": V1, "v2": V2},
        page_delay_ms=1000,
        page_delay_jitter_ms=0,
        default_max_pages=5,
        default_max_jobs=100,
    )
    values.update(overrides)
    return SourceConfig(**values)


def _response(text="", status_code=200, reason="OK"):
    response = Mock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.reason = reason
    response.text = text
    response.headers = {}
    return response


def routed_fetcher(pages):
    """Fetcher serving ``pages`` by URL; values are markup or prepared responses."""

    def _fetch(method, url, **kwargs):
        page = pages.get(url)
        if page is None:
            return _response("", status_code=404, reason="Not Found")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, str):
            return _response(page)
        return page

    return Mock(side_effect=_fetch)


def requested_urls(fetcher):
    return [call.args[1] for call in fetcher.call_args_list]


class TestPagination:
    """Test scrape_with_version page loop."""

    def test_truncates_to_max_jobs(self, fake_clock):
        """2 jobs per page, max_pages=2, max_jobs=3 -> exactly 3 jobs."""
        fetcher = routed_fetcher(
            {
                BASE_URL: v1_page("a", "b", next_page=True),
                f"{BASE_URL}?page=2": v1_page("c", "d", next_page=True),
            }
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        jobs = scraper.scrape_jobs(ScrapingOptions(max_pages=2, max_jobs=3))

        assert [job.title for job in jobs] == ["a", "b", "c"]
        assert requested_urls(fetcher) == [BASE_URL, f"{BASE_URL}?page=2"]

    def test_stops_without_next_page(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: v1_page("a", "b")})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        jobs = scraper.scrape_jobs()

        assert len(jobs) == 2
        assert fetcher.call_count == 1

    def test_sleeps_between_pages(self, fake_clock):
        fetcher = routed_fetcher(
            {
                BASE_URL: v1_page("a", next_page=True),
                f"{BASE_URL}?page=2": v1_page("b"),
            }
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        scraper.scrape_jobs()

        assert 1000 in fake_clock.sleeps

    def test_empty_later_page_stops_softly(self, fake_clock):
        fetcher = routed_fetcher(
            {
                BASE_URL: v1_page("a", next_page=True),
                f"{BASE_URL}?page=2": v1_page(next_page=True),
            }
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        jobs = scraper.scrape_with_version("v1", max_pages=5, max_jobs=100)

        assert [job.title for job in jobs] == ["a"]

    def test_later_page_error_keeps_partial_results(self, fake_clock):
        fetcher = routed_fetcher(
            {
                BASE_URL: v1_page("a", "b", next_page=True),
                f"{BASE_URL}?page=2": _response("", status_code=500, reason="Server Error"),
            }
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        jobs = scraper.scrape_with_version("v1", max_pages=5, max_jobs=100)

        assert [job.title for job in jobs] == ["a", "b"]

    def test_later_page_network_error_keeps_partial_results(self, fake_clock):
        fetcher = routed_fetcher(
            {
                BASE_URL: v1_page("a", next_page=True),
                f"{BASE_URL}?page=2": requests.Timeout("timed out"),
            }
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert len(scraper.scrape_with_version("v1", max_pages=5, max_jobs=100)) == 1

    def test_first_page_http_error_raises(self, fake_clock):
        fetcher = routed_fetcher(
            {BASE_URL: _response("", status_code=503, reason="Service Unavailable")}
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        with pytest.raises(PageFetchError, match="HTTP 503: Service Unavailable"):
            scraper.scrape_with_version("v1", max_pages=5, max_jobs=100)

    def test_first_page_without_jobs_raises(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: v1_page()})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        with pytest.raises(EmptyPageError):
            scraper.scrape_with_version("v1", max_pages=5, max_jobs=100)

    def test_unknown_version_raises(self, fake_clock, fetcher):
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        with pytest.raises(VersionNotFoundError):
            scraper.scrape_with_version("v9", max_pages=1, max_jobs=1)
        fetcher.assert_not_called()

    def test_uses_source_defaults(self, fake_clock):
        pages = {BASE_URL: v1_page("p1", next_page=True)}
        for page in range(2, 10):
            pages[f"{BASE_URL}?page={page}"] = v1_page(f"p{page}", next_page=True)
        fetcher = routed_fetcher(pages)
        scraper = Scraper(make_config(default_max_pages=3), clock=fake_clock, fetcher=fetcher)

        jobs = scraper.scrape_jobs()

        assert [job.title for job in jobs] == ["p1", "p2", "p3"]


class TestFallbackCascade:
    """Test detection and fallback across registered versions."""

    def test_single_version_zero_jobs_fails(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: "<html><body>maintenance</body></html>"})
        scraper = Scraper(make_config(versions={"v1": V1}), clock=fake_clock, fetcher=fetcher)

        with pytest.raises(AllVersionsFailedError, match="All TestBoard scraper versions failed"):
            scraper.scrape_jobs()

    def test_detected_version_takes_over(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: v2_page("x", "y")})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        jobs = scraper.scrape_jobs()

        assert [job.title for job in jobs] == ["x", "y"]
        assert scraper.get_current_version() == "v2"
        assert scraper.get_metrics().version == "v2"

    def test_fallback_when_detection_finds_nothing(self, fake_clock):
        v2_unmarked = SelectorSet(
            job_cards=V2.job_cards, title=V2.title, company=V2.company, markers=()
        )
        fetcher = routed_fetcher({BASE_URL: v2_page("x")})
        scraper = Scraper(
            make_config(versions={"v1": V1, "v2": v2_unmarked}), clock=fake_clock, fetcher=fetcher
        )

        jobs = scraper.scrape_jobs()

        assert [job.title for job in jobs] == ["x"]
        assert scraper.get_current_version() == "v2"

    def test_current_version_reflects_producing_version(self, fake_clock):
        """A failing detected version does not stay current."""
        v3 = SelectorSet(
            job_cards=(".never",), title=(".t",), company=(".c",), markers=("v2-layout",)
        )
        fetcher = routed_fetcher({BASE_URL: v2_page("x")})
        scraper = Scraper(
            make_config(versions={"v1": V1, "v2": V2, "v3": v3}), clock=fake_clock, fetcher=fetcher
        )

        jobs = scraper.scrape_jobs()

        # v3 is detected first (newest), fails, then v2 succeeds as fallback
        assert [job.title for job in jobs] == ["x"]
        assert scraper.get_current_version() == "v2"

    def test_each_version_tried_once(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: '<div class="v1-layout"></div>'})
        scraper = Scraper(make_config(versions={"v1": V1}), clock=fake_clock, fetcher=fetcher)

        with pytest.raises(AllVersionsFailedError) as exc_info:
            scraper.scrape_jobs()

        assert exc_info.value.attempted == ["v1"]
        # One page request plus one detection request
        assert fetcher.call_count == 2

    def test_working_version_remembered(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: v2_page("x")})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)
        scraper.scrape_jobs()
        fetcher.reset_mock()

        scraper.scrape_jobs()

        assert fetcher.call_count == 1

    def test_version_not_found_is_not_swallowed(self, fake_clock, fetcher):
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)
        scraper.current_version = "gone"

        with pytest.raises(VersionNotFoundError):
            scraper.scrape_jobs()

    def test_empty_listing_marker_is_success(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: '<div class="v1-layout"><p class="no-results"></p></div>'})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert scraper.scrape_jobs() == []
        assert scraper.get_current_version() == "v1"
        assert fetcher.call_count == 1

    def test_network_failure_everywhere(self, fake_clock):
        fetcher = Mock(side_effect=requests.ConnectionError("offline"))
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        with pytest.raises(AllVersionsFailedError) as exc_info:
            scraper.scrape_jobs()

        assert exc_info.value.attempted == ["v1", "v2"]


class TestFilters:
    """Test that filters narrow results without affecting the cascade."""

    def test_filters_apply_before_truncation(self, fake_clock):
        fetcher = routed_fetcher(
            {BASE_URL: v1_page("a", "b", "c", locations=["Remote", "Paris", "Berlin"])}
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        jobs = scraper.scrape_jobs(
            ScrapingOptions(max_jobs=1, filters=JobFilters(location="berlin"))
        )

        assert [job.title for job in jobs] == ["c"]

    def test_filtering_everything_out_is_not_a_failure(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: v1_page("a", "b")})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        jobs = scraper.scrape_jobs(ScrapingOptions(filters=JobFilters(company="nobody")))

        assert jobs == []
        assert scraper.get_current_version() == "v1"
        assert fetcher.call_count == 1


class TestDetectVersion:
    """Test marker-based version detection."""

    def test_newest_matching_version_wins(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: '<div class="v1-layout v2-layout"></div>'})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert scraper.detect_version() == "v2"

    def test_older_version_detected(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: '<div class="v1-layout"></div>'})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert scraper.detect_version() == "v1"

    def test_no_markers_match(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: "<div></div>"})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert scraper.detect_version() is None

    def test_http_error(self, fake_clock):
        fetcher = routed_fetcher({})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert scraper.detect_version() is None

    def test_network_error(self, fake_clock):
        fetcher = Mock(side_effect=requests.ConnectionError("offline"))
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert scraper.detect_version() is None


class TestHealth:
    """Test is_healthy."""

    def test_healthy(self, fake_clock):
        scraper = Scraper(
            make_config(), clock=fake_clock, fetcher=routed_fetcher({BASE_URL: "<html></html>"})
        )
        assert scraper.is_healthy() is True

    def test_unhealthy_status(self, fake_clock):
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=routed_fetcher({}))
        assert scraper.is_healthy() is False

    def test_request_error(self, fake_clock):
        fetcher = Mock(side_effect=requests.Timeout("slow"))
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)
        assert scraper.is_healthy() is False


class TestIntrospection:
    """Test versions, rate limit, metrics and session info."""

    def test_versions(self, fake_clock, fetcher):
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert scraper.get_current_version() == "v1"
        assert scraper.get_available_versions() == ["v1", "v2"]

    def test_rate_limit_is_constant(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: v1_page("a")})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        before = scraper.get_rate_limit()
        scraper.scrape_jobs()
        after = scraper.get_rate_limit()

        assert before == after
        assert after.requests_per_minute == 1000
        assert after.max_concurrent_requests == 1

    def test_metrics_count_success_and_failure(self, fake_clock):
        fetcher = routed_fetcher(
            {
                BASE_URL: v1_page("a", next_page=True),
                f"{BASE_URL}?page=2": _response("", status_code=500, reason="Error"),
            }
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)
        scraper.scrape_jobs()

        metrics = scraper.get_metrics()
        assert isinstance(metrics, ScrapingMetrics)
        assert metrics.total_requests == 2
        assert metrics.successful_requests == 1
        assert metrics.failed_requests == 1
        assert metrics.last_scraped is not None

    def test_metrics_copy_is_detached(self, fake_clock, fetcher):
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        metrics = scraper.get_metrics()
        metrics.total_requests = 99

        assert scraper.get_metrics().total_requests == 0

    def test_session_info_counts_requests(self, fake_clock):
        fetcher = routed_fetcher({BASE_URL: v1_page("a")})
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)
        scraper.scrape_jobs()

        assert scraper.get_session_info().request_count == 1

    def test_rate_limiter_metrics_advance_with_scrape(self, fake_clock):
        fetcher = routed_fetcher(
            {BASE_URL: v1_page("a", next_page=True), f"{BASE_URL}?page=2": v1_page("b")}
        )
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        assert scraper.get_rate_limiter_metrics()["request_count"] == 0
        assert scraper.get_rate_limiter_metrics()["last_request_time"] is None

        scraper.scrape_jobs()

        metrics = scraper.get_rate_limiter_metrics()
        assert metrics["request_count"] == 2
        assert metrics["last_request_time"] is not None

    def test_register_version(self, fake_clock, fetcher):
        scraper = Scraper(make_config(versions={"v1": V1}), clock=fake_clock, fetcher=fetcher)
        parser = Mock()

        scraper.register_version("v2", parser)

        assert scraper.get_available_versions() == ["v1", "v2"]
        assert scraper.versions["v2"] is parser

    def test_register_rejects_non_parser(self, fake_clock, fetcher):
        scraper = Scraper(make_config(), clock=fake_clock, fetcher=fetcher)

        with pytest.raises(TypeError):
            scraper.register_version("v3", object())

    def test_requires_a_version(self, fake_clock, fetcher):
        with pytest.raises(ConfigurationError):
            Scraper(make_config(versions={}), clock=fake_clock, fetcher=fetcher)

    def test_custom_parsers(self, fake_clock, make_response):
        parser = Mock()
        parser.parse_jobs.return_value = []
        parser.is_empty_listing.return_value = True
        fetcher = Mock(return_value=make_response("<html></html>"))

        scraper = Scraper(
            make_config(), clock=fake_clock, fetcher=fetcher, parsers={"custom": parser}
        )

        assert scraper.get_available_versions() == ["custom"]
        assert scraper.scrape_jobs() == []
        parser.parse_jobs.assert_called_once_with("<html></html>")
