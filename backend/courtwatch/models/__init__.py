from courtwatch.models.notification_channel import NotificationChannel
from courtwatch.models.notification_log import NotificationLogEntry
from courtwatch.models.scrape_run import ScrapeRun
from courtwatch.models.scrape_target import ScrapeTarget
from courtwatch.models.slot import Slot
from courtwatch.models.user import User
from courtwatch.models.venue import Venue
from courtwatch.models.watch import Watch

__all__ = [
    "NotificationChannel",
    "NotificationLogEntry",
    "ScrapeRun",
    "ScrapeTarget",
    "Slot",
    "User",
    "Venue",
    "Watch",
]
