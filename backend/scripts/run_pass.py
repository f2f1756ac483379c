#!/usr/bin/env python3
"""
Run one scrape pass from the shell and print its counts.
Exits 1 when any fetch failed.
Run: cd backend && python scripts/run_pass.py
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from courtwatch.core.errors import PassAlreadyRunning
from courtwatch.scheduler.scrape_job import run_scrape_pass_now


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    try:
        result = run_scrape_pass_now()
    except PassAlreadyRunning:
        print("A pass is already running.")
        sys.exit(1)
    print(
        f"Done. due={result.targets_due} fetched={result.fetched} failed={result.failed} "
        f"slots={result.slots_scraped} changes={result.changes} notified={result.notified} pruned={result.pruned}"
    )
    for line in result.failures:
        print(f"  failed: {line}")
    if result.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
