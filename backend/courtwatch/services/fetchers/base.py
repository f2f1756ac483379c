"""Protocol for slot fetchers. One per booking platform; all return the same normalized shape."""
from typing import Protocol

from courtwatch.services.fetchers.types import DueTarget, RawSlot


class SlotFetcher(Protocol):
    """Interface for Courtside, ClubSpark, etc. Same contract; only fetch/parse differs."""

    @property
    def platform(self) -> str:
        """Platform key matching Venue.platform (e.g. 'courtside', 'clubspark')."""
        ...

    def fetch(self, target: DueTarget) -> list[RawSlot]:
        """
        Fetch current slots for one venue and date.
        Raises on any failure (network, block page, parse error); retries/proxies are the fetcher's business.
        """
        ...
