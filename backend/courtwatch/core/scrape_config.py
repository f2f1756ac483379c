"""
Scrape scheduling config. .env is the source of truth; these defaults apply only when
the env var is unset. All values read at import time.

Env vars: SCRAPE_DAYS_AHEAD, SCRAPE_DAY0_CUTOFF_HOUR, SCRAPE_TIMEZONE,
SCRAPE_MAX_CONCURRENT_FETCHES, SCRAPE_FETCH_STAGGER_MS, SCRAPE_TICK_MINUTES,
SCRAPE_FAILURE_THRESHOLD (percent), CLEANUP_DAYS.

Passes themselves take a ScrapeConfig so tests (and scripts) can run with their own values.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load backend/.env so scripts/tests/workers that import scrape_config see env vars too
_backend_dir = Path(__file__).resolve().parent.parent.parent
load_dotenv(_backend_dir / ".env", override=False)  # no-op if file missing

_log = logging.getLogger(__name__)


def _int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = os.environ.get(key)
    if raw is None:
        v = default
    else:
        try:
            v = int(raw.strip())
        except ValueError:
            v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


def _float(key: str, default: float, min_val: float | None = None, max_val: float | None = None) -> float:
    raw = os.environ.get(key)
    try:
        v = float(raw.strip()) if raw is not None else default
    except ValueError:
        v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


# -----------------------------------------------------------------------------
# Horizon and cadence
# -----------------------------------------------------------------------------
SCRAPE_TIMEZONE = os.environ.get("SCRAPE_TIMEZONE", "Europe/London").strip() or "Europe/London"
SCRAPE_DAYS_AHEAD = _int("SCRAPE_DAYS_AHEAD", 8, min_val=1, max_val=31)
# Today's slots relax to the after-cutoff interval from this local hour on
SCRAPE_DAY0_CUTOFF_HOUR = _int("SCRAPE_DAY0_CUTOFF_HOUR", 18, min_val=0, max_val=24)

# -----------------------------------------------------------------------------
# Fetch concurrency and trigger
# -----------------------------------------------------------------------------
SCRAPE_MAX_CONCURRENT_FETCHES = _int("SCRAPE_MAX_CONCURRENT_FETCHES", 6, min_val=1, max_val=32)
SCRAPE_FETCH_STAGGER_MS = _int("SCRAPE_FETCH_STAGGER_MS", 100, min_val=0, max_val=2000)
SCRAPE_TICK_MINUTES = _int("SCRAPE_TICK_MINUTES", 5, min_val=1, max_val=60)

# -----------------------------------------------------------------------------
# Alerting and retention
# -----------------------------------------------------------------------------
SCRAPE_FAILURE_THRESHOLD = _float("SCRAPE_FAILURE_THRESHOLD", 20.0, min_val=0.0, max_val=100.0)
CLEANUP_DAYS = _int("CLEANUP_DAYS", 7, min_val=1, max_val=90)

_log.info(
    "Scrape config (from env): days_ahead=%s day0_cutoff_hour=%s timezone=%s "
    "max_concurrent_fetches=%s fetch_stagger_ms=%s tick_minutes=%s failure_threshold=%s cleanup_days=%s",
    SCRAPE_DAYS_AHEAD,
    SCRAPE_DAY0_CUTOFF_HOUR,
    SCRAPE_TIMEZONE,
    SCRAPE_MAX_CONCURRENT_FETCHES,
    SCRAPE_FETCH_STAGGER_MS,
    SCRAPE_TICK_MINUTES,
    SCRAPE_FAILURE_THRESHOLD,
    CLEANUP_DAYS,
)


@dataclass(frozen=True)
class ScrapeConfig:
    """Snapshot of scrape config for passing around (e.g. tests)."""
    days_ahead: int = 8
    day0_cutoff_hour: int = 18
    timezone: str = "Europe/London"
    max_concurrent_fetches: int = 6
    fetch_stagger_ms: int = 100
    failure_alert_threshold: float = 20.0
    cleanup_days: int = 7


def get_scrape_config() -> ScrapeConfig:
    return ScrapeConfig(
        days_ahead=SCRAPE_DAYS_AHEAD,
        day0_cutoff_hour=SCRAPE_DAY0_CUTOFF_HOUR,
        timezone=SCRAPE_TIMEZONE,
        max_concurrent_fetches=SCRAPE_MAX_CONCURRENT_FETCHES,
        fetch_stagger_ms=SCRAPE_FETCH_STAGGER_MS,
        failure_alert_threshold=SCRAPE_FAILURE_THRESHOLD,
        cleanup_days=CLEANUP_DAYS,
    )
