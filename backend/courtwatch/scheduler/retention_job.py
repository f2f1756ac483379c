"""Runs daily: delete slot rows and notification log rows for slots more than CLEANUP_DAYS in the past."""
import logging
from datetime import datetime, timezone

from courtwatch.core.scrape_config import get_scrape_config
from courtwatch.db.session import SessionLocal
from courtwatch.services.retention import prune_old_notification_logs, prune_old_slots
from courtwatch.services.scheduling import local_now

logger = logging.getLogger(__name__)


def run_retention_job() -> None:
    cfg = get_scrape_config()
    now = datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        today = local_now(now, cfg).date()
        slots = prune_old_slots(db, today, cfg.cleanup_days)
        logs = prune_old_notification_logs(db, today, cfg.cleanup_days)
        logger.info("Retention: removed %s slots, %s notification log rows", slots, logs)
    except Exception as e:
        db.rollback()
        logger.exception("Retention job failed: %s", e)
    finally:
        db.close()
