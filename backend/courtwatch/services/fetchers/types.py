"""Normalized types shared by all fetchers and the scheduler. Same shape regardless of platform."""
from dataclasses import dataclass


def slot_key(venue: str, date_str: str, time_label: str, court: str) -> str:
    """Stable key for one bookable slot: venue:date:time:court. Used by the notification dedup log."""
    return f"{venue}:{date_str}:{time_label}:{court}"


@dataclass(frozen=True)
class RawSlot:
    """One slot observation as returned by a fetcher."""
    venue: str  # venue slug
    date: str  # YYYY-MM-DD
    time: str  # display label, compared verbatim (case/whitespace-normalized)
    court: str
    status: str  # available | booked | closed | coaching
    price: str | None = None

    @property
    def key(self) -> str:
        return slot_key(self.venue, self.date, self.time, self.court)


@dataclass(frozen=True)
class DueTarget:
    """A (venue, date) scrape target that is due, with the venue details a fetcher needs."""
    venue_slug: str
    venue_name: str
    platform: str
    date: str
    day_offset: int
    interval_minutes: int
    external_id: str | None = None
    host: str | None = None

    @property
    def label(self) -> str:
        return f"{self.venue_slug} {self.date}"
