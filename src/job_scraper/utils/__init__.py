"""Shared utility functions."""

from job_scraper.utils.date_utils import parse_flexible_date
from job_scraper.utils.text import clean_text, clean_title

__all__ = ["parse_flexible_date", "clean_text", "clean_title"]
