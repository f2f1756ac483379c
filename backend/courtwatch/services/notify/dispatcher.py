"""
Dispatch slot changes to users: match against active watches, dedupe per channel against the
notification log, send one batched message per channel, then log what was delivered.

Log rows are written only after send() returns, so a failed send leaves the slots eligible on the
next pass (at-least-once). Each (watch, channel) is isolated: one failure never stops the others.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.orm import Session

from courtwatch.core.errors import UnsupportedChannelError
from courtwatch.db.upsert import insert_for
from courtwatch.models.notification_channel import NotificationChannel
from courtwatch.models.notification_log import NotificationLogEntry
from courtwatch.models.venue import Venue
from courtwatch.models.watch import Watch
from courtwatch.services.differ import SlotChange
from courtwatch.services.notify.channels import get_channel
from courtwatch.services.notify.matching import canonical_day_times, matches_watch

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    messages_sent: int = 0
    entries_logged: int = 0
    failures: list[str] = field(default_factory=list)


def notify_users(
    db: Session,
    changes: list[SlotChange],
    now: datetime | None = None,
    *,
    get_sender: Callable[[str], Any] = get_channel,
) -> DispatchResult:
    """Notify every active watch's channels about matching changes. See module docstring."""
    result = DispatchResult()
    if not changes:
        return result
    now = now or datetime.now(timezone.utc)

    watches = db.query(Watch).filter(Watch.active.is_(True)).order_by(Watch.id.asc()).all()
    venue_ids = {slug: vid for vid, slug in db.query(Venue.id, Venue.slug).all()}

    for watch in watches:
        try:
            day_times = canonical_day_times(watch)
        except ValueError as e:
            logger.warning("Watch %s: unreadable time preferences, skipping (%s)", watch.id, e)
            continue
        matching = [c for c in changes if matches_watch(c, watch.venue_id, day_times, venue_ids)]
        if not matching:
            continue

        channels = (
            db.query(NotificationChannel)
            .filter(NotificationChannel.user_id == watch.user_id, NotificationChannel.active.is_(True))
            .order_by(NotificationChannel.id.asc())
            .all()
        )
        for channel in channels:
            _notify_channel(db, watch, channel, matching, now, get_sender, result)

    if result.messages_sent or result.failures:
        logger.info(
            "Dispatch: %s messages sent, %s slots logged, %s failures",
            result.messages_sent,
            result.entries_logged,
            len(result.failures),
        )
    return result


def _notify_channel(
    db: Session,
    watch: Watch,
    channel: NotificationChannel,
    matching: list[SlotChange],
    now: datetime,
    get_sender: Callable[[str], Any],
    result: DispatchResult,
) -> None:
    keys = [c.key for c in matching]
    already_sent = {
        k
        for (k,) in db.query(NotificationLogEntry.slot_key)
        .filter(NotificationLogEntry.channel_id == channel.id, NotificationLogEntry.slot_key.in_(keys))
        .all()
    }
    pending: list[SlotChange] = []
    seen: set[str] = set()
    for c in matching:
        if c.key in already_sent or c.key in seen:
            continue
        seen.add(c.key)
        pending.append(c)
    if not pending:
        return

    try:
        sender = get_sender(channel.type)
    except UnsupportedChannelError:
        logger.error(
            "Unsupported notification channel type: %s for user %s. Channel ID: %s. Notification not sent.",
            channel.type,
            watch.user_id,
            channel.id,
        )
        result.failures.append(f"channel {channel.id}: unsupported type {channel.type}")
        return

    try:
        message = sender.format(pending)
        sender.send(channel.destination, message)
    except Exception as e:
        logger.warning(
            "Failed to notify user %s via %s (channel %s): %s",
            watch.user_id,
            channel.type,
            channel.id,
            e,
            exc_info=True,
        )
        result.failures.append(f"channel {channel.id}: {e}")
        return

    rows = [
        {
            "user_id": watch.user_id,
            "channel_id": channel.id,
            "slot_key": c.key,
            "slot_date": c.date,
            "sent_at": now,
        }
        for c in pending
    ]
    db.execute(
        insert_for(db, NotificationLogEntry)
        .values(rows)
        .on_conflict_do_nothing(index_elements=["channel_id", "slot_key"])
    )
    db.commit()
    result.messages_sent += 1
    result.entries_logged += len(rows)
    logger.info("Notified user %s via %s: %s slots", watch.user_id, channel.type, len(pending))
