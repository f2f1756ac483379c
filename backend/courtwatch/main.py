"""
FastAPI app entrypoint.

Scrape pass every SCRAPE_TICK_MINUTES (scheduler), retention daily; HTTP for status and a cron trigger.
"""
import logging
import os
import threading
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any courtwatch code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

from courtwatch.api.routes import scrape
from courtwatch.core.constants import (
    RETENTION_JOB_HOUR,
    RETENTION_JOB_ID,
    RETENTION_JOB_MINUTE,
    SCRAPE_JOB_ID,
    SCRAPE_JOB_INTERVAL_MINUTES,
)
from courtwatch.db.session import SessionLocal
from courtwatch.scheduler.retention_job import run_retention_job
from courtwatch.scheduler.scrape_job import run_scrape_job
from courtwatch.services.differ import ensure_venues_exist

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler()


def _seed_venues() -> None:
    db = SessionLocal()
    try:
        ensure_venues_exist(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _scheduler.add_job(
        run_scrape_job,
        "interval",
        minutes=SCRAPE_JOB_INTERVAL_MINUTES,
        id=SCRAPE_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    _scheduler.add_job(
        run_retention_job,
        "cron",
        hour=RETENTION_JOB_HOUR,
        minute=RETENTION_JOB_MINUTE,
        id=RETENTION_JOB_ID,
    )
    _scheduler.start()
    app.state.scheduler = _scheduler

    def startup_background():
        # Seed venues and run one pass on startup; the scheduler takes over after that.
        try:
            _seed_venues()
            run_scrape_job()
            logger.info("Scrape pass on startup done; next tick in %s min", SCRAPE_JOB_INTERVAL_MINUTES)
        except Exception as e:
            logger.warning("Scrape pass on startup failed: %s", e, exc_info=True)

    threading.Thread(target=startup_background, daemon=True).start()
    logger.info("Court watch backend ready")
    yield
    _scheduler.shutdown(wait=False)


app = FastAPI(title="Court Watch", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the dashboard frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_cors_extra = os.getenv("CORS_ORIGINS", "")
if _cors_extra:
    _cors_origins.extend(o.strip() for o in _cors_extra.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(scrape.router, tags=["scrape"])


@app.get("/", include_in_schema=False)
def root():
    return {"message": "Court Watch API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
