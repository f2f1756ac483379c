"""
Scrape API: status, recent runs, current availability, and a cron trigger for one pass.

POST /scrape/run is for an external cron (or a manual kick). When CRON_SECRET is set it must be
sent as "Authorization: Bearer <secret>".
"""
import asyncio
import logging
import secrets
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response
from sqlalchemy.orm import Session

from courtwatch.config import settings
from courtwatch.core.errors import PassAlreadyRunning, error_to_http
from courtwatch.core.scrape_config import get_scrape_config
from courtwatch.db.session import get_db
from courtwatch.scheduler.scrape_job import get_scrape_job_heartbeat, is_pass_running, run_scrape_job
from courtwatch.services.differ import get_availability
from courtwatch.services.run_log import recent_runs
from courtwatch.services.scheduling import get_scrape_status

router = APIRouter()
logger = logging.getLogger(__name__)

# Passes started by POST /scrape/run, referenced until they finish
_background_tasks: set[asyncio.Task] = set()


def _check_cron_secret(authorization: str | None = Header(None)) -> None:
    expected = settings.cron_secret
    if not expected:
        return
    given = (authorization or "").removeprefix("Bearer ").strip()
    if not secrets.compare_digest(given, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")


def _start_in_background(fn) -> asyncio.Task:
    task = asyncio.create_task(asyncio.to_thread(fn))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


@router.get("/scrape/status")
async def scrape_status(db: Session = Depends(get_db)):
    """
    Targets in the horizon, how many are due right now (per day offset), and the in-process job
    heartbeat (running, last start/finish, last counts).
    """
    try:
        out = get_scrape_status(db, datetime.now(timezone.utc), get_scrape_config())
    except Exception as e:
        logger.warning("scrape_status failed: %s", e, exc_info=True)
        raise error_to_http(e) from e
    out["job"] = get_scrape_job_heartbeat()
    return out


@router.get("/scrape/runs")
async def scrape_runs(db: Session = Depends(get_db), limit: int = Query(20, ge=1, le=200)):
    """Most recent passes, newest first."""
    return {"runs": recent_runs(db, limit)}


@router.get("/availability/{venue}/{date_str}")
async def availability(venue: str, date_str: str, db: Session = Depends(get_db)):
    """Current stored slots for one venue and date (YYYY-MM-DD)."""
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(status_code=400, detail="date must be YYYY-MM-DD")
    return {"venue": venue, "date": date_str, "slots": get_availability(db, venue, date_str)}


@router.post("/scrape/run", dependencies=[Depends(_check_cron_secret)])
async def trigger_scrape_run():
    """Start one pass in the background and return 202. 409 if a pass is already running."""
    if is_pass_running():
        raise error_to_http(PassAlreadyRunning())
    _start_in_background(run_scrape_job)
    return Response(
        status_code=202,
        content='{"ok": true, "message": "Scrape pass started in background."}',
        media_type="application/json",
    )
