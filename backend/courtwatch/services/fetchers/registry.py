"""Registry of slot fetchers keyed by venue platform.

Parsers live outside this package. Modules listed in SCRAPE_FETCHER_MODULES (comma-separated
import paths) are imported on first use and are expected to call register() at import time.
"""
import importlib
import logging
import os
from typing import Any

from courtwatch.services.fetchers.types import DueTarget, RawSlot

logger = logging.getLogger(__name__)

_fetchers: dict[str, Any] = {}
_initialized = False


def register(platform: str, fetcher: Any) -> None:
    """Register a fetcher (e.g. 'courtside', 'clubspark')."""
    _fetchers[platform] = fetcher
    logger.info("Registered slot fetcher: %s", platform)


def unregister(platform: str) -> None:
    _fetchers.pop(platform, None)


def get_fetcher(platform: str) -> Any:
    """Get fetcher by platform. Raises KeyError if unknown."""
    _init_registry()
    if platform not in _fetchers:
        raise KeyError(f"No fetcher registered for platform: {platform}. Available: {list(_fetchers.keys())}")
    return _fetchers[platform]


def list_fetchers() -> list[str]:
    """List registered platform keys."""
    _init_registry()
    return list(_fetchers.keys())


def fetch_for_target(target: DueTarget) -> list[RawSlot]:
    """Default fetch used by scrape passes: dispatch on the venue's platform."""
    return get_fetcher(target.platform).fetch(target)


def _init_registry() -> None:
    global _initialized
    if _initialized:
        return
    _initialized = True
    raw = os.environ.get("SCRAPE_FETCHER_MODULES", "")
    for name in (s.strip() for s in raw.split(",")):
        if not name:
            continue
        try:
            importlib.import_module(name)
        except ImportError as e:
            logger.error("Could not import fetcher module %s: %s", name, e)
