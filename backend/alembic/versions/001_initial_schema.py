"""Initial schema: venues, users, scrape targets, slots, watches, notification channels/log, scrape runs.

Watches start with the weekday/weekend time lists only; per-day preferences arrive in 002.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("platform", sa.String(32), nullable=False, server_default="courtside"),
        sa.Column("external_id", sa.String(128), nullable=True),
        sa.Column("host", sa.String(256), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_venues_slug", "venues", ["slug"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "scrape_targets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("venue_slug", sa.String(128), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("last_scraped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_scrape_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("venue_slug", "date", name="uq_scrape_targets_venue_date"),
    )
    op.create_index("ix_scrape_targets_venue_slug", "scrape_targets", ["venue_slug"])
    op.create_index("ix_scrape_targets_date", "scrape_targets", ["date"])
    op.create_index("ix_scrape_targets_next_scrape_at", "scrape_targets", ["next_scrape_at"])

    op.create_table(
        "slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time", sa.String(32), nullable=False),
        sa.Column("court", sa.String(128), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("price", sa.String(32), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("venue_id", "date", "time", "court", name="uq_slots_identity"),
    )
    op.create_index("ix_slots_venue_id", "slots", ["venue_id"])
    op.create_index("ix_slots_date", "slots", ["date"])

    op.create_table(
        "watches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=True),
        sa.Column("weekday_times_json", sa.Text(), nullable=True),
        sa.Column("weekend_times_json", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_watches_user_id", "watches", ["user_id"])

    op.create_table(
        "notification_channels",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("destination", sa.String(255), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_notification_channels_user_id", "notification_channels", ["user_id"])

    op.create_table(
        "notification_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("notification_channels.id"), nullable=False),
        sa.Column("slot_key", sa.String(320), nullable=False),
        sa.Column("slot_date", sa.String(10), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("channel_id", "slot_key", name="uq_notification_log_channel_slot"),
    )
    op.create_index("ix_notification_log_channel_id", "notification_log", ["channel_id"])
    op.create_index("ix_notification_log_slot_date", "notification_log", ["slot_date"])

    op.create_table(
        "scrape_runs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("targets_due", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("fetched", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("failed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("slots_scraped", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("changes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notified", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pruned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("errors_json", sa.Text(), nullable=True),
    )
    op.create_index("ix_scrape_runs_started_at", "scrape_runs", ["started_at"])


def downgrade() -> None:
    op.drop_index("ix_scrape_runs_started_at", table_name="scrape_runs")
    op.drop_table("scrape_runs")
    op.drop_index("ix_notification_log_slot_date", table_name="notification_log")
    op.drop_index("ix_notification_log_channel_id", table_name="notification_log")
    op.drop_table("notification_log")
    op.drop_index("ix_notification_channels_user_id", table_name="notification_channels")
    op.drop_table("notification_channels")
    op.drop_index("ix_watches_user_id", table_name="watches")
    op.drop_table("watches")
    op.drop_index("ix_slots_date", table_name="slots")
    op.drop_index("ix_slots_venue_id", table_name="slots")
    op.drop_table("slots")
    op.drop_index("ix_scrape_targets_next_scrape_at", table_name="scrape_targets")
    op.drop_index("ix_scrape_targets_date", table_name="scrape_targets")
    op.drop_index("ix_scrape_targets_venue_slug", table_name="scrape_targets")
    op.drop_table("scrape_targets")
    op.drop_table("users")
    op.drop_index("ix_venues_slug", table_name="venues")
    op.drop_table("venues")
