from courtwatch.services.differ import SlotChange, ensure_venues_exist, get_availability, store_and_diff
from courtwatch.services.scheduling import (
    due_targets,
    ensure_targets,
    get_scrape_status,
    interval_minutes,
    mark_scraped,
    prune_stale,
)
from courtwatch.services.scrape_pass import PassResult, run_pass

__all__ = [
    "PassResult",
    "SlotChange",
    "due_targets",
    "ensure_targets",
    "ensure_venues_exist",
    "get_availability",
    "get_scrape_status",
    "interval_minutes",
    "mark_scraped",
    "prune_stale",
    "run_pass",
    "store_and_diff",
]
