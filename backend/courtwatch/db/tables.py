"""
Single source of truth for database tables that exist after migrations (001–002).

Use these names when writing raw SQL (e.g. TRUNCATE).
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "venues",
    "users",
    "scrape_targets",
    "slots",
    "watches",
    "notification_channels",
    "notification_log",
    "scrape_runs",
)

# Tables rebuilt by scraping alone (safe to clear; the next pass refills them).
SCRAPE_STATE_TABLE_NAMES = (
    "slots",
    "scrape_targets",
)
