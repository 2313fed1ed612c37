"""Resilient job-listing scraper engine."""

__version__ = "0.1.0"
