"""
Slot fetchers: one per booking platform (Courtside, ClubSpark, ...).
Each fetches and parses in its own way but returns the same normalized RawSlot list
so scheduling, diffing and notifications stay platform-agnostic.
"""
from courtwatch.services.fetchers.base import SlotFetcher
from courtwatch.services.fetchers.registry import fetch_for_target, get_fetcher, list_fetchers, register
from courtwatch.services.fetchers.types import DueTarget, RawSlot, slot_key

__all__ = [
    "DueTarget",
    "RawSlot",
    "SlotFetcher",
    "fetch_for_target",
    "get_fetcher",
    "list_fetchers",
    "register",
    "slot_key",
]
