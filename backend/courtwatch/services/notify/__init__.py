"""
Notifications: watch matching, per-channel dedup and delivery.
"""
from courtwatch.services.notify.channels import ChatChannel, EmailChannel, get_channel, register_channel
from courtwatch.services.notify.dispatcher import DispatchResult, notify_users
from courtwatch.services.notify.matching import canonical_day_times, expand_legacy_times, matches_watch

__all__ = [
    "ChatChannel",
    "DispatchResult",
    "EmailChannel",
    "canonical_day_times",
    "expand_legacy_times",
    "get_channel",
    "matches_watch",
    "notify_users",
    "register_channel",
]
