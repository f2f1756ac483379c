import logging

import pytest

from courtwatch.models import NotificationChannel, NotificationLogEntry, Watch
from courtwatch.services.differ import SlotChange
from courtwatch.services.notify import channels
from courtwatch.services.notify.dispatcher import notify_users
from fakes import RecordingChannel

TUESDAY = {"tuesday": ["6pm"]}


def _change(time="6pm", court="Court 1", date="2025-06-10", venue="v1"):
    return SlotChange(
        venue=venue,
        venue_name="Venue One",
        date=date,
        time=time,
        court=court,
        old_status="booked",
        new_status="available",
    )


def _logged_keys(db, channel_id):
    return {
        k for (k,) in db.query(NotificationLogEntry.slot_key).filter(NotificationLogEntry.channel_id == channel_id)
    }


def test_no_changes_sends_nothing(db, venue, make_watch, email_sender):
    make_watch(TUESDAY)
    result = notify_users(db, [])
    assert result.messages_sent == 0
    assert email_sender.sent == []


def test_matching_changes_are_batched_into_one_message(db, venue, make_watch, email_sender):
    user, channel, _ = make_watch({"tuesday": ["6pm", "7pm"]})
    changes = [_change("6pm"), _change("7pm"), _change("8pm")]

    result = notify_users(db, changes)

    assert result.messages_sent == 1
    assert result.entries_logged == 2
    assert len(email_sender.sent) == 1
    destination, sent = email_sender.sent[0]
    assert destination == user.email
    assert [c.time for c in sent] == ["6pm", "7pm"]
    assert _logged_keys(db, channel.id) == {"v1:2025-06-10:6pm:Court 1", "v1:2025-06-10:7pm:Court 1"}


def test_slot_is_never_sent_twice_to_the_same_channel(db, venue, make_watch, email_sender):
    make_watch(TUESDAY)
    notify_users(db, [_change()])
    result = notify_users(db, [_change()])
    assert result.messages_sent == 0
    assert len(email_sender.sent) == 1


def test_overlapping_watches_share_the_channel_dedup(db, venue, make_watch, email_sender):
    user, channel, _ = make_watch(TUESDAY)
    db.add(Watch(user_id=user.id, venue_id=venue.id, day_times_json='{"tuesday": ["6pm"]}', active=True))
    db.commit()

    notify_users(db, [_change()])
    assert len(email_sender.sent) == 1
    assert db.query(NotificationLogEntry).count() == 1


def test_each_channel_gets_its_own_message(db, venue, make_watch, email_sender, chat_sender):
    make_watch(TUESDAY)
    make_watch(TUESDAY, channel_type="chat", destination="12345")
    result = notify_users(db, [_change()])
    assert result.messages_sent == 2
    assert len(email_sender.sent) == 1
    assert chat_sender.sent[0][0] == "12345"


def test_legacy_telegram_type_routes_to_chat_sender(db, venue, make_watch, chat_sender):
    make_watch(TUESDAY, channel_type="telegram", destination="999")
    notify_users(db, [_change()])
    assert chat_sender.sent[0][0] == "999"


def test_failed_send_is_not_logged_and_retries_next_time(db, venue, make_watch, monkeypatch):
    failing = RecordingChannel(fail=True)
    monkeypatch.setitem(channels._channels, "email", failing)
    _, channel, _ = make_watch(TUESDAY)

    result = notify_users(db, [_change()])
    assert result.messages_sent == 0
    assert len(result.failures) == 1
    assert _logged_keys(db, channel.id) == set()

    failing.fail = False
    result = notify_users(db, [_change()])
    assert result.messages_sent == 1
    assert _logged_keys(db, channel.id) == {"v1:2025-06-10:6pm:Court 1"}


def test_one_failing_channel_does_not_stop_others(db, venue, make_watch, monkeypatch, chat_sender):
    monkeypatch.setitem(channels._channels, "email", RecordingChannel(fail=True))
    make_watch(TUESDAY)
    make_watch(TUESDAY, channel_type="chat", destination="42")
    result = notify_users(db, [_change()])
    assert result.messages_sent == 1
    assert len(result.failures) == 1
    assert len(chat_sender.sent) == 1


def test_unsupported_channel_type_is_logged_and_skipped(db, venue, make_watch, email_sender, caplog):
    _, sms_channel, _ = make_watch(TUESDAY, channel_type="sms", destination="+440000")
    make_watch(TUESDAY)
    with caplog.at_level(logging.ERROR, logger="courtwatch.services.notify.dispatcher"):
        result = notify_users(db, [_change()])
    assert "Unsupported notification channel type: sms" in caplog.text
    assert result.messages_sent == 1
    assert _logged_keys(db, sms_channel.id) == set()


def test_inactive_watch_is_ignored(db, venue, make_watch, email_sender):
    make_watch(TUESDAY, active=False)
    assert notify_users(db, [_change()]).messages_sent == 0


def test_malformed_watch_is_skipped(db, venue, make_watch, email_sender):
    _, _, bad = make_watch(TUESDAY)
    bad.day_times_json = "{oops"
    db.commit()
    make_watch(TUESDAY)
    assert notify_users(db, [_change()]).messages_sent == 1


@pytest.mark.parametrize("venue_filter_matches, expected", [(True, 1), (False, 0)])
def test_venue_filter_is_applied(db, venue, make_watch, email_sender, venue_filter_matches, expected):
    venue_id = venue.id if venue_filter_matches else venue.id + 100
    make_watch(TUESDAY, venue_id=venue_id)
    assert notify_users(db, [_change()]).messages_sent == expected


def test_failing_channel_does_not_stop_same_users_other_channel(db, venue, make_watch, monkeypatch, chat_sender):
    monkeypatch.setitem(channels._channels, "email", RecordingChannel(fail=True))
    user, email_channel, _ = make_watch(TUESDAY)
    chat_channel = NotificationChannel(user_id=user.id, type="chat", destination="777", active=True)
    db.add(chat_channel)
    db.commit()

    result = notify_users(db, [_change()])

    assert result.messages_sent == 1
    assert chat_sender.sent[0][0] == "777"
    assert _logged_keys(db, email_channel.id) == set()
    assert _logged_keys(db, chat_channel.id) == {"v1:2025-06-10:6pm:Court 1"}
