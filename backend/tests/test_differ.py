from courtwatch.core.venues import VENUES
from courtwatch.models import Slot, Venue
from courtwatch.services.differ import ensure_venues_exist, get_availability, store_and_diff
from courtwatch.services.fetchers.types import RawSlot


def _slot(status, time="6pm", court="Court 1", date="2025-06-10", venue="v1", price=None):
    return RawSlot(venue=venue, date=date, time=time, court=court, status=status, price=price)


def test_first_sighting_is_never_a_change(db, venue):
    assert store_and_diff(db, [_slot("available"), _slot("booked", court="Court 2")]) == []
    assert db.query(Slot).count() == 2


def test_booked_to_available_is_a_change(db, venue):
    store_and_diff(db, [_slot("booked")])
    changes = store_and_diff(db, [_slot("available", price="£6.00")])

    assert len(changes) == 1
    change = changes[0]
    assert change.key == "v1:2025-06-10:6pm:Court 1"
    assert change.venue_name == "Venue One"
    assert (change.old_status, change.new_status) == ("booked", "available")
    assert change.price == "£6.00"


def test_any_unavailable_status_counts_as_baseline(db, venue):
    store_and_diff(db, [_slot("closed", court="A"), _slot("coaching", court="B")])
    changes = store_and_diff(db, [_slot("available", court="A"), _slot("available", court="B")])
    assert sorted(c.old_status for c in changes) == ["closed", "coaching"]


def test_staying_available_is_not_a_change(db, venue):
    store_and_diff(db, [_slot("booked")])
    assert len(store_and_diff(db, [_slot("available")])) == 1
    assert store_and_diff(db, [_slot("available")]) == []


def test_becoming_unavailable_updates_state_without_change(db, venue):
    store_and_diff(db, [_slot("booked")])
    store_and_diff(db, [_slot("available")])
    assert store_and_diff(db, [_slot("booked")]) == []
    assert db.query(Slot).one().status == "booked"


def test_duplicate_identity_in_one_batch_last_write_wins(db, venue):
    store_and_diff(db, [_slot("booked")])
    changes = store_and_diff(db, [_slot("available"), _slot("booked")])
    assert len(changes) == 1
    assert db.query(Slot).one().status == "booked"


def test_unknown_venue_slots_are_skipped(db, venue):
    store_and_diff(db, [_slot("booked", venue="nowhere"), _slot("booked")])
    changes = store_and_diff(db, [_slot("available", venue="nowhere"), _slot("available")])
    assert [c.venue for c in changes] == ["v1"]
    assert db.query(Slot).count() == 1


def test_get_availability_orders_by_time_then_court(db, venue):
    store_and_diff(
        db,
        [_slot("booked", time="7pm", court="Court 1"), _slot("available", time="6pm", court="Court 2"),
         _slot("booked", time="6pm", court="Court 1")],
    )
    rows = get_availability(db, "v1", "2025-06-10")
    assert [(r["time"], r["court"], r["status"]) for r in rows] == [
        ("6pm", "Court 1", "booked"),
        ("6pm", "Court 2", "available"),
        ("7pm", "Court 1", "booked"),
    ]
    assert get_availability(db, "nowhere", "2025-06-10") == []


def test_ensure_venues_exist_seeds_configured_venues_once(db):
    assert ensure_venues_exist(db) == len(VENUES)
    assert ensure_venues_exist(db) == 0
    west_ham = db.query(Venue).filter_by(slug="west-ham-park").one()
    assert west_ham.platform == "clubspark"
    assert west_ham.external_id == "WestHamPark"


def _snapshot(db):
    return sorted(
        (s.venue_id, s.date, s.time, s.court, s.status, s.price)
        for s in db.query(Slot).all()
    )


def test_same_batch_twice_is_idempotent(db, venue):
    batch = [
        _slot("available", court="Court 1", price="£6.00"),
        _slot("booked", court="Court 2"),
        _slot("closed", court="Court 3"),
    ]
    store_and_diff(db, batch)
    before = _snapshot(db)

    assert store_and_diff(db, batch) == []
    assert _snapshot(db) == before
    assert len(before) == 3
