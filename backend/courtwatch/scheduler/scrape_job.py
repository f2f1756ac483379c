"""
Runs every SCRAPE_TICK_MINUTES: one scrape pass in its own session.

Passes never overlap inside this process: a tick that finds the previous pass still running is
skipped. The last pass's timing and counts are kept in a small heartbeat for GET /scrape/status.
"""
import logging
import threading
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from courtwatch.core.errors import PassAlreadyRunning
from courtwatch.db.session import SessionLocal
from courtwatch.services.differ import ensure_venues_exist
from courtwatch.services.scrape_pass import PassResult, run_pass

logger = logging.getLogger(__name__)

_pass_lock = threading.Lock()
_heartbeat_lock = threading.Lock()
_heartbeat: dict[str, Any] = {
    "running": False,
    "last_started_at": None,
    "last_finished_at": None,
    "last_error": None,
    "last_result": None,
}


def _set_heartbeat(**kwargs: Any) -> None:
    with _heartbeat_lock:
        _heartbeat.update(kwargs)


def get_scrape_job_heartbeat() -> dict[str, Any]:
    """Copy of the in-process job state: running, last start/finish, last error, last counts."""
    with _heartbeat_lock:
        return dict(_heartbeat)


def is_pass_running() -> bool:
    return _pass_lock.locked()


def _result_summary(result: PassResult) -> dict[str, Any]:
    out = asdict(result)
    out["started_at"] = result.started_at.isoformat()
    out["failure_rate"] = round(result.failure_rate, 1)
    return out


def run_scrape_pass_now(now: datetime | None = None) -> PassResult:
    """
    Run one pass in a fresh session. Raises PassAlreadyRunning if a pass is in progress.
    Storage errors propagate after rollback.
    """
    if not _pass_lock.acquire(blocking=False):
        raise PassAlreadyRunning("Scrape pass already in progress")
    started = datetime.now(timezone.utc)
    _set_heartbeat(running=True, last_started_at=started.isoformat(), last_error=None)
    db = SessionLocal()
    try:
        ensure_venues_exist(db)
        result = run_pass(db, now)
        _set_heartbeat(last_result=_result_summary(result))
        return result
    except Exception as e:
        db.rollback()
        _set_heartbeat(last_error=str(e))
        raise
    finally:
        db.close()
        _set_heartbeat(running=False, last_finished_at=datetime.now(timezone.utc).isoformat())
        _pass_lock.release()


def run_scrape_job() -> None:
    """Scheduler entrypoint. Never raises; a skipped or failed tick is logged and the next tick retries."""
    try:
        run_scrape_pass_now()
    except PassAlreadyRunning:
        logger.info("Scrape job: previous pass still running, skipping this tick")
    except Exception as e:
        logger.exception("Scrape job failed: %s", e)
