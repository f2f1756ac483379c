"""
Scrape scheduler: which (venue, date) targets are due now and when each is next due.

- Target = (venue_slug, date). One row per pair for every date in the horizon (local today + N-1 days).
- Day offset = target date - local today (SCRAPE_TIMEZONE). Cadence is tiered by offset:
  today 10 min until the cutoff hour then 240 min, tomorrow 10, day 2 20, day 3 40, days 4+ 60.
- mark_scraped runs after every attempt, success or failure, so a failing target keeps the
  normal cadence instead of retrying every tick.
- Timestamps are stored in UTC; only the day offset and the cutoff hour use local time.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import or_
from sqlalchemy.orm import Session

from courtwatch.core.constants import (
    DAY0_AFTER_CUTOFF_INTERVAL_MINUTES,
    DEFAULT_SCRAPE_INTERVAL_MINUTES,
    SCRAPE_INTERVALS,
)
from courtwatch.core.scrape_config import SCRAPE_DAY0_CUTOFF_HOUR, ScrapeConfig, get_scrape_config
from courtwatch.db.upsert import insert_for
from courtwatch.models.scrape_target import ScrapeTarget
from courtwatch.models.venue import Venue
from courtwatch.services.fetchers.types import DueTarget

logger = logging.getLogger(__name__)


def as_utc(dt: datetime) -> datetime:
    """Naive values (SQLite round-trip) are UTC; aware values are converted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def local_now(now: datetime | None = None, config: ScrapeConfig | None = None) -> datetime:
    """now (default: current time) in the schedule timezone."""
    cfg = config or get_scrape_config()
    now_utc = as_utc(now) if now is not None else datetime.now(timezone.utc)
    return now_utc.astimezone(ZoneInfo(cfg.timezone))


def interval_minutes(day_offset: int, current_hour: int, cutoff_hour: int = SCRAPE_DAY0_CUTOFF_HOUR) -> int:
    """Re-check interval for a target day_offset days ahead, given the current local hour."""
    if day_offset == 0 and current_hour >= cutoff_hour:
        return DAY0_AFTER_CUTOFF_INTERVAL_MINUTES
    return SCRAPE_INTERVALS.get(day_offset, DEFAULT_SCRAPE_INTERVAL_MINUTES)


def day_offset(date_str: str, today: date) -> int:
    """Whole days from today to date_str (negative for past dates)."""
    return (date.fromisoformat(date_str) - today).days


def next_n_days(n: int, today: date) -> list[str]:
    """ISO dates for today and the following n-1 days."""
    return [(today + timedelta(days=i)).isoformat() for i in range(n)]


def horizon_dates(now: datetime | None = None, config: ScrapeConfig | None = None) -> list[str]:
    cfg = config or get_scrape_config()
    return next_n_days(cfg.days_ahead, local_now(now, cfg).date())


def ensure_targets(db: Session, dates: list[str], now: datetime | None = None) -> int:
    """
    Create a target for every (active venue, date) pair not tracked yet, immediately due.
    Idempotent (insert .. on conflict do nothing), so concurrent passes cannot duplicate rows.
    Returns the number of targets created.
    """
    if not dates:
        return 0
    now_utc = as_utc(now) if now is not None else datetime.now(timezone.utc)
    slugs = [s for (s,) in db.query(Venue.slug).filter(Venue.active.is_(True)).all()]
    existing = {
        (venue_slug, d)
        for venue_slug, d in db.query(ScrapeTarget.venue_slug, ScrapeTarget.date)
        .filter(ScrapeTarget.date.in_(dates))
        .all()
    }
    rows = [
        {"venue_slug": slug, "date": d, "last_scraped_at": None, "next_scrape_at": now_utc}
        for slug in slugs
        for d in dates
        if (slug, d) not in existing
    ]
    if rows:
        db.execute(
            insert_for(db, ScrapeTarget)
            .values(rows)
            .on_conflict_do_nothing(index_elements=["venue_slug", "date"])
        )
    db.commit()
    if rows:
        logger.info("Created %s scrape targets for %s dates", len(rows), len(dates))
    return len(rows)


def due_targets(db: Session, now: datetime | None = None, config: ScrapeConfig | None = None) -> list[DueTarget]:
    """
    Targets whose next_scrape_at is NULL or <= now, annotated with day offset and interval.
    Past dates and targets for unknown/inactive venues are skipped.
    """
    cfg = config or get_scrape_config()
    local = local_now(now, cfg)
    now_utc = as_utc(local)
    today = local.date()

    rows = (
        db.query(ScrapeTarget)
        .filter(or_(ScrapeTarget.next_scrape_at.is_(None), ScrapeTarget.next_scrape_at <= now_utc))
        .order_by(ScrapeTarget.date.asc(), ScrapeTarget.venue_slug.asc())
        .all()
    )
    venues = {v.slug: v for v in db.query(Venue).filter(Venue.active.is_(True)).all()}

    out: list[DueTarget] = []
    for row in rows:
        offset = day_offset(row.date, today)
        if offset < 0:
            continue
        venue = venues.get(row.venue_slug)
        if venue is None:
            logger.debug("Target %s %s: venue unknown or inactive, skipping", row.venue_slug, row.date)
            continue
        out.append(
            DueTarget(
                venue_slug=venue.slug,
                venue_name=venue.name,
                platform=venue.platform,
                date=row.date,
                day_offset=offset,
                interval_minutes=interval_minutes(offset, local.hour, cfg.day0_cutoff_hour),
                external_id=venue.external_id,
                host=venue.host,
            )
        )
    return out


def mark_scraped(
    db: Session,
    venue_slug: str,
    date_str: str,
    now: datetime | None = None,
    config: ScrapeConfig | None = None,
) -> datetime:
    """
    Record a scrape attempt: last_scraped_at = now, next_scrape_at = now + interval.
    Called whether or not the fetch succeeded. Upsert keyed on (venue_slug, date), so
    repeating it (or racing another pass) converges on the same row. Returns next_scrape_at.
    """
    cfg = config or get_scrape_config()
    local = local_now(now, cfg)
    now_utc = as_utc(local)
    offset = day_offset(date_str, local.date())
    next_at = now_utc + timedelta(minutes=interval_minutes(offset, local.hour, cfg.day0_cutoff_hour))
    stmt = insert_for(db, ScrapeTarget).values(
        venue_slug=venue_slug,
        date=date_str,
        last_scraped_at=now_utc,
        next_scrape_at=next_at,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["venue_slug", "date"],
        set_={"last_scraped_at": now_utc, "next_scrape_at": next_at},
    )
    db.execute(stmt)
    db.commit()
    return next_at


def prune_stale(db: Session, today: date) -> int:
    """Delete targets whose date is before today. Returns count deleted."""
    deleted = (
        db.query(ScrapeTarget)
        .filter(ScrapeTarget.date < today.isoformat())
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.info("Pruned %s past scrape targets (before %s)", deleted, today.isoformat())
    return deleted


def get_scrape_status(db: Session, now: datetime | None = None, config: ScrapeConfig | None = None) -> dict:
    """Counts for debugging/monitoring: total targets, due now, and {total, due} per day offset."""
    cfg = config or get_scrape_config()
    local = local_now(now, cfg)
    now_utc = as_utc(local)
    today = local.date()

    total = 0
    due_now = 0
    by_day_offset: dict[int, dict[str, int]] = {}
    for row in db.query(ScrapeTarget).all():
        total += 1
        is_due = row.next_scrape_at is None or as_utc(row.next_scrape_at) <= now_utc
        if is_due:
            due_now += 1
        offset = day_offset(row.date, today)
        if offset < 0:
            continue
        bucket = by_day_offset.setdefault(offset, {"total": 0, "due": 0})
        bucket["total"] += 1
        if is_due:
            bucket["due"] += 1
    return {
        "total_targets": total,
        "due_now": due_now,
        "by_day_offset": dict(sorted(by_day_offset.items())),
    }
