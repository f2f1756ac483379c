"""
Centralized constants for the scrape scheduler and jobs.

Change job IDs or cadence here instead of scattering literals across main and services.
Env-driven knobs (horizon, concurrency, thresholds) live in scrape_config.
"""
from courtwatch.core.scrape_config import SCRAPE_TICK_MINUTES

# Scheduler job IDs (must match ids used in main.py add_job)
SCRAPE_JOB_ID = "scrape_pass"
RETENTION_JOB_ID = "retention"
SCRAPE_JOB_INTERVAL_MINUTES = SCRAPE_TICK_MINUTES
RETENTION_JOB_HOUR = 3
RETENTION_JOB_MINUTE = 15

# Re-check interval in minutes per day offset (0 = today). Offsets not listed use the default.
SCRAPE_INTERVALS: dict[int, int] = {
    0: 10,
    1: 10,
    2: 20,
    3: 40,
    4: 60,
    5: 60,
    6: 60,
    7: 60,
}
DEFAULT_SCRAPE_INTERVAL_MINUTES = 60
# Today after the cutoff hour: slots are no longer bookable, poll every 4 hours
DAY0_AFTER_CUTOFF_INTERVAL_MINUTES = 240

# Slot statuses reported by fetchers
STATUS_AVAILABLE = "available"
STATUS_BOOKED = "booked"
STATUS_CLOSED = "closed"
STATUS_COACHING = "coaching"
SLOT_STATUSES = (STATUS_AVAILABLE, STATUS_BOOKED, STATUS_CLOSED, STATUS_COACHING)

# Notification channel types; "telegram" rows predate the generic "chat" type
CHANNEL_EMAIL = "email"
CHANNEL_CHAT = "chat"
CHANNEL_TYPE_ALIASES = {"telegram": CHANNEL_CHAT}

DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
WEEKDAY_NAMES = DAY_NAMES[:5]
WEEKEND_NAMES = DAY_NAMES[5:]

# Cap on failure lines kept per pass (run log + alert email)
MAX_FAILURES_REPORTED = 50
