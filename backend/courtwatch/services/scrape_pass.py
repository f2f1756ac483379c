"""
One scrape pass: ensure targets -> due targets -> concurrent fetch -> mark scraped -> diff ->
notify -> prune -> failure-rate alert -> run log.

Fetches run in a bounded thread pool with staggered submission so one host does not get every
request at once. Each fetch is isolated: its exception is recorded and siblings keep running. Diff
and dispatch start only after every fetch has settled. Every due target is marked scraped with the
pass start time, whether its fetch succeeded or not.

Storage errors are not caught here; they abort the pass and the caller rolls back.
"""
import logging
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from courtwatch.core.scrape_config import ScrapeConfig, get_scrape_config
from courtwatch.services.alerts import alert_on_failure_rate
from courtwatch.services.differ import store_and_diff
from courtwatch.services.fetchers.registry import fetch_for_target
from courtwatch.services.fetchers.types import DueTarget, RawSlot
from courtwatch.services.notify.dispatcher import notify_users
from courtwatch.services.run_log import record_run
from courtwatch.services.scheduling import (
    as_utc,
    due_targets,
    ensure_targets,
    horizon_dates,
    local_now,
    mark_scraped,
    prune_stale,
)

logger = logging.getLogger(__name__)

FetchFn = Callable[[DueTarget], list[RawSlot]]


@dataclass
class PassResult:
    """Counts for one pass. Returned to the caller; nothing is kept in module state."""
    started_at: datetime
    targets_due: int = 0
    fetched: int = 0
    failed: int = 0
    slots_scraped: int = 0
    changes: int = 0
    notified: int = 0
    pruned: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def failure_rate(self) -> float:
        """Failed fetches as a percentage of attempted fetches (0 when nothing was fetched)."""
        total = self.fetched + self.failed
        return (self.failed / total * 100) if total else 0.0


def _fetch_all(
    targets: list[DueTarget], fetch: FetchFn, config: ScrapeConfig
) -> tuple[list[RawSlot], list[tuple[DueTarget, Exception]]]:
    """Fetch every target; all complete regardless of individual failures."""
    slots: list[RawSlot] = []
    failures: list[tuple[DueTarget, Exception]] = []
    if not targets:
        return slots, failures

    stagger_seconds = config.fetch_stagger_ms / 1000
    workers = max(1, min(config.max_concurrent_fetches, len(targets)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scrape_fetch") as executor:
        submitted = []
        for i, target in enumerate(targets):
            if i and stagger_seconds:
                time.sleep(stagger_seconds)
            submitted.append((target, executor.submit(fetch, target)))

        for target, future in submitted:
            try:
                got = future.result()
            except Exception as e:
                logger.warning("Fetch %s failed: %s", target.label, e)
                failures.append((target, e))
                continue
            got = list(got or [])
            slots.extend(got)
            logger.debug("Fetched %s: %s slots", target.label, len(got))
    return slots, failures


def run_pass(
    db: Session,
    now: datetime | None = None,
    *,
    fetch: FetchFn | None = None,
    config: ScrapeConfig | None = None,
    alert: Callable[[PassResult], object] | None = None,
) -> PassResult:
    """
    Run one scrape pass and return its counts.
    fetch defaults to the platform registry; alert defaults to the admin email on high failure rate.
    """
    cfg = config or get_scrape_config()
    fetch = fetch or fetch_for_target
    if alert is None:
        def alert(r: PassResult) -> object:
            return alert_on_failure_rate(r, cfg.failure_alert_threshold)

    started_at = as_utc(now) if now is not None else datetime.now(timezone.utc)
    result = PassResult(started_at=started_at)

    ensure_targets(db, horizon_dates(started_at, cfg), started_at)
    targets = due_targets(db, started_at, cfg)
    result.targets_due = len(targets)
    if targets:
        by_day = Counter(t.day_offset for t in targets)
        logger.info(
            "Scrape pass: %s targets due (%s)",
            len(targets),
            ", ".join(f"day {d}: {c}" for d, c in sorted(by_day.items())),
        )
    else:
        logger.info("Scrape pass: no targets due")

    slots, failures = _fetch_all(targets, fetch, cfg)
    result.fetched = len(targets) - len(failures)
    result.failed = len(failures)
    result.failures = [f"{t.label}: {e}" for t, e in failures]
    result.slots_scraped = len(slots)

    for target in targets:
        mark_scraped(db, target.venue_slug, target.date, started_at, cfg)

    changes = store_and_diff(db, slots)
    result.changes = len(changes)
    dispatch = notify_users(db, changes)
    result.notified = dispatch.messages_sent

    result.pruned = prune_stale(db, local_now(started_at, cfg).date())

    try:
        alert(result)
    except Exception as e:
        logger.warning("Failure-rate alert hook raised (ignored): %s", e, exc_info=True)

    record_run(db, result)
    logger.info(
        "Scrape pass done: due=%s fetched=%s failed=%s slots=%s changes=%s notified=%s pruned=%s",
        result.targets_due,
        result.fetched,
        result.failed,
        result.slots_scraped,
        result.changes,
        result.notified,
        result.pruned,
    )
    return result
