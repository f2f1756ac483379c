import threading
import time
from datetime import datetime, timedelta, timezone

from courtwatch.core.errors import FetchError
from courtwatch.core.scrape_config import ScrapeConfig
from courtwatch.models import NotificationLogEntry, ScrapeRun, ScrapeTarget, Slot
from courtwatch.services.fetchers.types import RawSlot
from courtwatch.services.scrape_pass import PassResult, run_pass
from fakes import FakeFetcher

TODAY = ("v1", "2025-06-10")


def _court1(status):
    return RawSlot(venue="v1", date="2025-06-10", time="6pm", court="Court 1", status=status)


def test_booked_then_available_notifies_once(db, venue, make_watch, email_sender, now, config):
    make_watch({"tuesday": ["6pm"]})
    fetch = FakeFetcher({TODAY: [_court1("booked")]})

    first = run_pass(db, now, fetch=fetch, config=config, alert=lambda r: None)
    assert first.targets_due == 8
    assert first.fetched == 8
    assert first.changes == 0
    assert email_sender.sent == []

    fetch.slots[TODAY] = [_court1("available")]
    second = run_pass(db, now + timedelta(minutes=11), fetch=fetch, config=config, alert=lambda r: None)
    # Only today and tomorrow (10 min cadence) are due again
    assert second.targets_due == 2
    assert second.changes == 1
    assert second.notified == 1
    assert len(email_sender.sent) == 1
    assert [c.key for c in email_sender.sent[0][1]] == ["v1:2025-06-10:6pm:Court 1"]
    assert db.query(NotificationLogEntry).one().slot_key == "v1:2025-06-10:6pm:Court 1"

    third = run_pass(db, now + timedelta(minutes=22), fetch=fetch, config=config, alert=lambda r: None)
    assert third.changes == 0
    assert len(email_sender.sent) == 1


def test_reopened_slot_is_not_sent_again(db, venue, make_watch, email_sender, now, config):
    make_watch({"tuesday": ["6pm"]})
    fetch = FakeFetcher({TODAY: [_court1("booked")]})
    t = now
    for status in ("booked", "available", "booked", "available"):
        fetch.slots[TODAY] = [_court1(status)]
        run_pass(db, t, fetch=fetch, config=config, alert=lambda r: None)
        t += timedelta(minutes=11)
    assert len(email_sender.sent) == 1
    assert db.query(Slot).one().status == "available"


def test_no_targets_due_is_a_quiet_pass(db, venue, now, config):
    fetch = FakeFetcher()
    run_pass(db, now, fetch=fetch, config=config, alert=lambda r: None)
    fetch.calls.clear()

    result = run_pass(db, now + timedelta(minutes=1), fetch=fetch, config=config, alert=lambda r: None)
    assert result.targets_due == 0
    assert fetch.calls == []
    assert result.failure_rate == 0.0


def test_fetch_failure_is_isolated_and_still_marked(db, venue, now, config):
    failing_date = ("v1", "2025-06-12")
    fetch = FakeFetcher({TODAY: [_court1("booked")]}, failing=[failing_date])
    alerts: list[PassResult] = []

    result = run_pass(db, now, fetch=fetch, config=config, alert=alerts.append)

    assert result.failed == 1
    assert result.fetched == 7
    assert result.slots_scraped == 1
    assert result.failures == ["v1 2025-06-12: upstream returned 503 for v1 2025-06-12"]
    assert result.failure_rate == 100 / 8
    assert alerts == [result]

    # The failed target keeps its normal cadence instead of retrying every tick
    row = db.query(ScrapeTarget).filter_by(venue_slug="v1", date="2025-06-12").one()
    assert row.last_scraped_at.replace(tzinfo=timezone.utc) == now
    assert row.next_scrape_at.replace(tzinfo=timezone.utc) == now + timedelta(minutes=20)


def test_alert_hook_errors_do_not_fail_the_pass(db, venue, now, config):
    def broken_alert(result):
        raise RuntimeError("smtp exploded")

    result = run_pass(db, now, fetch=FakeFetcher(failing=[TODAY]), config=config, alert=broken_alert)
    assert result.failed == 1
    assert db.query(ScrapeRun).count() == 1


def test_pass_prunes_past_targets_and_records_run(db, venue, now, config):
    db.add(ScrapeTarget(venue_slug="v1", date="2025-06-01", next_scrape_at=None))
    db.commit()

    result = run_pass(db, now, fetch=FakeFetcher(), config=config, alert=lambda r: None)

    assert result.pruned == 1
    assert db.query(ScrapeTarget).filter(ScrapeTarget.date < "2025-06-10").count() == 0
    run = db.query(ScrapeRun).one()
    assert run.targets_due == 8
    assert run.fetched == 8
    assert run.errors_json is None


def test_failure_rate_is_a_percentage():
    r = PassResult(started_at=datetime.now(timezone.utc), fetched=3, failed=1)
    assert r.failure_rate == 25.0


class _TrackingFetcher:
    """Blocks each fetch briefly and records how many were in flight at once."""

    def __init__(self, delay=0.05):
        self.delay = delay
        self.lock = threading.Lock()
        self.in_flight = 0
        self.peak = 0

    def __call__(self, target):
        with self.lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            time.sleep(self.delay)
            return []
        finally:
            with self.lock:
                self.in_flight -= 1


def test_fetches_overlap_up_to_the_concurrency_cap(db, venue, now):
    fetch = _TrackingFetcher()
    config = ScrapeConfig(fetch_stagger_ms=0, max_concurrent_fetches=3)

    result = run_pass(db, now, fetch=fetch, config=config, alert=lambda r: None)

    assert result.fetched == 8
    assert fetch.peak == 3
    assert fetch.in_flight == 0


def test_slow_and_failing_fetches_are_all_collected_before_diffing(db, venue, make_watch, email_sender, now, config):
    make_watch({"tuesday": ["6pm"]})
    run_pass(db, now, fetch=FakeFetcher({TODAY: [_court1("booked")]}), config=config, alert=lambda r: None)

    def fetch(target):
        if target.date == "2025-06-10":
            time.sleep(0.2)
            return [_court1("available")]
        raise FetchError(f"blocked {target.label}")

    result = run_pass(db, now + timedelta(minutes=11), fetch=fetch, config=config, alert=lambda r: None)

    assert result.targets_due == 2
    assert result.fetched == 1
    assert result.failures == ["v1 2025-06-11: blocked v1 2025-06-11"]
    assert result.changes == 1
    assert len(email_sender.sent) == 1


def test_naive_now_is_read_as_utc(db, venue, now, config):
    result = run_pass(db, now.replace(tzinfo=None), fetch=FakeFetcher(), config=config, alert=lambda r: None)
    assert result.started_at == now
    row = db.query(ScrapeTarget).filter_by(venue_slug="v1", date="2025-06-10").one()
    assert row.next_scrape_at.replace(tzinfo=timezone.utc) == now + timedelta(minutes=10)
