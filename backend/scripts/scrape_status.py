#!/usr/bin/env python3
"""
Print scrape target counts (total, due now, per day offset) and the last few passes.
Run: cd backend && python scripts/scrape_status.py
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from courtwatch.db.session import SessionLocal
from courtwatch.services.run_log import recent_runs
from courtwatch.services.scheduling import get_scrape_status


def main():
    db = SessionLocal()
    try:
        status = get_scrape_status(db, datetime.now(timezone.utc))
        print(f"Targets: {status['total_targets']} total, {status['due_now']} due now")
        for offset, counts in status["by_day_offset"].items():
            print(f"  day {offset}: {counts['due']}/{counts['total']} due")
        runs = recent_runs(db, limit=5)
        print("\nRecent passes:")
        if not runs:
            print("  (none)")
        for r in runs:
            print(
                f"  {r['started_at']}  due={r['targets_due']} failed={r['failed']} "
                f"changes={r['changes']} notified={r['notified']}"
            )
    finally:
        db.close()


if __name__ == "__main__":
    main()
