"""Runtime settings loaded from a YAML file with environment overrides.

Usage:
    from job_scraper.settings import get_source_settings

    remoteok = get_source_settings("remoteok")
    base_url = remoteok.get("base_url")

Lookup order for the settings file:
    1. explicit ``path`` argument
    2. ``SCRAPER_CONFIG_PATH`` environment variable
    3. ``config/scrapers.yaml`` relative to the working directory

A missing file is not an error: every source falls back to its built-in
defaults.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from job_scraper.constants import DEFAULT_REQUEST_TIMEOUT_SECONDS
from job_scraper.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "scrapers.yaml"
SOURCE_KEYS = ("enabled", "base_url", "request_timeout_seconds")


def _resolve_config_path(path: Optional[str]) -> Path:
    if path:
        return Path(path)
    env_path = os.environ.get("SCRAPER_CONFIG_PATH")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def _validate_sources(sources: Any, config_path: Path) -> Dict[str, Dict[str, Any]]:
    if sources is None:
        return {}
    if not isinstance(sources, dict):
        raise ConfigurationError(f"'sources' in {config_path} must be a mapping")

    validated: Dict[str, Dict[str, Any]] = {}
    for name, values in sources.items():
        values = values or {}
        if not isinstance(values, dict):
            raise ConfigurationError(f"Settings for source '{name}' must be a mapping")

        unknown = set(values) - set(SOURCE_KEYS)
        if unknown:
            raise ConfigurationError(
                f"Unknown settings for source '{name}': {', '.join(sorted(unknown))}"
            )

        timeout = values.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigurationError(
                f"request_timeout_seconds for '{name}' must be a positive number"
            )

        validated[str(name).lower()] = {
            "enabled": bool(values.get("enabled", True)),
            "base_url": values.get("base_url") or None,
            "request_timeout_seconds": timeout,
        }
    return validated


@lru_cache(maxsize=4)
def load_scraper_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load scraper settings from YAML.

    Results are cached for the lifetime of the process.

    Args:
        path: Optional settings file path

    Returns:
        Settings dictionary with a normalized ``sources`` mapping

    Raises:
        ConfigurationError: If the file exists but has an invalid shape
    """
    config_path = _resolve_config_path(path)

    if not config_path.exists():
        logger.debug(f"No scraper settings at {config_path}, using defaults")
        return {"sources": {}}

    try:
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")

    settings = {"sources": _validate_sources(raw.get("sources"), config_path)}
    logger.debug(f"Loaded scraper settings from {config_path}")
    return settings


def clear_settings_cache() -> None:
    """Clear cached settings (useful for testing or config reload)."""
    load_scraper_settings.cache_clear()


def get_source_settings(name: str, path: Optional[str] = None) -> Dict[str, Any]:
    """
    Get settings for one source, applying the ``<NAME>_BASE_URL`` env override.

    Args:
        name: Source key (e.g. "remoteok")
        path: Optional settings file path

    Returns:
        Dict with enabled, base_url (None when not overridden) and
        request_timeout_seconds
    """
    key = name.lower()
    source = dict(
        load_scraper_settings(path)["sources"].get(
            key,
            {
                "enabled": True,
                "base_url": None,
                "request_timeout_seconds": DEFAULT_REQUEST_TIMEOUT_SECONDS,
            },
        )
    )

    env_url = os.environ.get(f"{key.upper()}_BASE_URL")
    if env_url:
        source["base_url"] = env_url

    return source
