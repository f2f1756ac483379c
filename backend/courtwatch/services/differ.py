"""
Availability differ: store the latest scraped status per slot and report slots that just opened.

A change is strictly "known and unavailable -> now available". A slot seen for the first time as
available is not a change: there is no unavailable baseline for it, and the first scrape of a new
date would otherwise notify every open slot at once.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from courtwatch.core.constants import STATUS_AVAILABLE
from courtwatch.core.venues import VENUES
from courtwatch.db.upsert import insert_for
from courtwatch.models.slot import Slot
from courtwatch.models.venue import Venue
from courtwatch.services.fetchers.types import RawSlot, slot_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotChange:
    """A slot that transitioned into available during this pass. Not persisted."""
    venue: str  # slug
    venue_name: str
    date: str
    time: str
    court: str
    old_status: str | None
    new_status: str
    price: str | None = None

    @property
    def key(self) -> str:
        return slot_key(self.venue, self.date, self.time, self.court)


def ensure_venues_exist(db: Session) -> int:
    """Insert any venue from core.venues.VENUES missing in the DB. Returns count created."""
    known = {slug for (slug,) in db.query(Venue.slug).all()}
    created = 0
    for cfg in VENUES:
        if cfg["slug"] in known:
            continue
        db.add(
            Venue(
                slug=cfg["slug"],
                name=cfg["name"],
                platform=cfg.get("platform") or "courtside",
                external_id=cfg.get("external_id"),
                host=cfg.get("host"),
                active=True,
            )
        )
        created += 1
    if created:
        db.commit()
        logger.info("Added %s venues", created)
    return created


def store_and_diff(db: Session, raw_slots: list[RawSlot], now: datetime | None = None) -> list[SlotChange]:
    """
    Upsert every observed slot and return the ones that became available.
    Unknown venue slugs are skipped. Duplicate identities in one batch: last write wins.
    """
    if not raw_slots:
        return []
    now = now or datetime.now(timezone.utc)

    slugs = {s.venue for s in raw_slots}
    venues = {v.slug: v for v in db.query(Venue).filter(Venue.slug.in_(slugs)).all()}
    for slug in sorted(slugs - venues.keys()):
        logger.warning("Differ: unknown venue %s, skipping its slots", slug)

    # Current status per identity, loaded once for the whole batch
    venue_ids = [v.id for v in venues.values()]
    dates = {s.date for s in raw_slots}
    current: dict[tuple, str] = {}
    if venue_ids:
        for row in (
            db.query(Slot.venue_id, Slot.date, Slot.time, Slot.court, Slot.status)
            .filter(Slot.venue_id.in_(venue_ids), Slot.date.in_(dates))
            .all()
        ):
            current[(row.venue_id, row.date, row.time, row.court)] = row.status

    changes: list[SlotChange] = []
    for raw in raw_slots:
        venue = venues.get(raw.venue)
        if venue is None:
            continue
        ident = (venue.id, raw.date, raw.time, raw.court)
        old_status = current.get(ident)
        if raw.status == STATUS_AVAILABLE and old_status is not None and old_status != STATUS_AVAILABLE:
            changes.append(
                SlotChange(
                    venue=venue.slug,
                    venue_name=venue.name,
                    date=raw.date,
                    time=raw.time,
                    court=raw.court,
                    old_status=old_status,
                    new_status=raw.status,
                    price=raw.price,
                )
            )
        stmt = insert_for(db, Slot).values(
            venue_id=venue.id,
            date=raw.date,
            time=raw.time,
            court=raw.court,
            status=raw.status,
            price=raw.price,
            updated_at=now,
        )
        db.execute(
            stmt.on_conflict_do_update(
                index_elements=["venue_id", "date", "time", "court"],
                set_={"status": raw.status, "price": raw.price, "updated_at": now},
            )
        )
        current[ident] = raw.status

    db.commit()
    logger.info("Differ: stored %s slots, %s newly available", len(raw_slots), len(changes))
    return changes


def get_availability(db: Session, venue_slug: str, date_str: str) -> list[dict]:
    """Current slots for one venue and date, ordered by time then court."""
    venue = db.query(Venue).filter(Venue.slug == venue_slug).first()
    if not venue:
        return []
    rows = (
        db.query(Slot)
        .filter(Slot.venue_id == venue.id, Slot.date == date_str)
        .order_by(Slot.time.asc(), Slot.court.asc())
        .all()
    )
    return [
        {
            "time": r.time,
            "court": r.court,
            "status": r.status,
            "price": r.price,
            "updated_at": r.updated_at.isoformat() if r.updated_at else None,
        }
        for r in rows
    ]
