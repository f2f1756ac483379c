"""
Retention: keep slots and the notification log bounded. Runs as its own daily job, never inside a
scrape pass, so passes only ever add or update slot rows.
"""
import logging
from datetime import date, timedelta

from sqlalchemy.orm import Session

from courtwatch.core.scrape_config import CLEANUP_DAYS
from courtwatch.models.notification_log import NotificationLogEntry
from courtwatch.models.slot import Slot

logger = logging.getLogger(__name__)


def prune_old_slots(db: Session, today: date, keep_days: int = CLEANUP_DAYS) -> int:
    """Delete slots whose date is more than keep_days before today."""
    cutoff = (today - timedelta(days=keep_days)).isoformat()
    deleted = db.query(Slot).filter(Slot.date < cutoff).delete(synchronize_session=False)
    db.commit()
    logger.info("Retention: deleted %s slots (before %s)", deleted, cutoff)
    return deleted


def prune_old_notification_logs(db: Session, today: date, keep_days: int = CLEANUP_DAYS) -> int:
    """
    Delete notification log entries whose slot date is more than keep_days before today.
    Keyed on the slot's date, not sent_at: a slot notified days ahead keeps its dedup row until the
    slot itself has passed.
    """
    cutoff = (today - timedelta(days=keep_days)).isoformat()
    deleted = (
        db.query(NotificationLogEntry)
        .filter(NotificationLogEntry.slot_date < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Retention: deleted %s notification log entries (slots before %s)", deleted, cutoff)
    return deleted
