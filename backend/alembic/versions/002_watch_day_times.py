"""Add watches.day_times_json (per-day time preferences) and backfill it from the weekday/weekend lists.

Legacy columns stay; matching prefers day_times_json and falls back to expanding the legacy pair.
"""
import json
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")
WEEKEND = ("saturday", "sunday")


def _load_list(value):
    if not value:
        return []
    try:
        data = json.loads(value)
    except (TypeError, ValueError):
        return []
    return [str(t) for t in data] if isinstance(data, list) else []


def upgrade() -> None:
    op.add_column("watches", sa.Column("day_times_json", sa.Text(), nullable=True))

    conn = op.get_bind()
    rows = conn.execute(
        sa.text(
            "SELECT id, weekday_times_json, weekend_times_json FROM watches "
            "WHERE day_times_json IS NULL "
            "AND (weekday_times_json IS NOT NULL OR weekend_times_json IS NOT NULL)"
        )
    ).fetchall()
    for row in rows:
        weekday = _load_list(row.weekday_times_json)
        weekend = _load_list(row.weekend_times_json)
        day_times = {d: list(weekday) for d in WEEKDAYS}
        day_times.update({d: list(weekend) for d in WEEKEND})
        conn.execute(
            sa.text("UPDATE watches SET day_times_json = :js WHERE id = :id"),
            {"js": json.dumps(day_times), "id": row.id},
        )


def downgrade() -> None:
    op.drop_column("watches", "day_times_json")
