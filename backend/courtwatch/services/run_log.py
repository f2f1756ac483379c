"""Persist one ScrapeRun row per pass; list recent runs for the status API."""
import json
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from courtwatch.core.constants import MAX_FAILURES_REPORTED
from courtwatch.models.scrape_run import ScrapeRun


def record_run(db: Session, result, finished_at: datetime | None = None) -> ScrapeRun:
    row = ScrapeRun(
        started_at=result.started_at,
        finished_at=finished_at or datetime.now(timezone.utc),
        targets_due=result.targets_due,
        fetched=result.fetched,
        failed=result.failed,
        slots_scraped=result.slots_scraped,
        changes=result.changes,
        notified=result.notified,
        pruned=result.pruned,
        errors_json=json.dumps(result.failures[:MAX_FAILURES_REPORTED]) if result.failures else None,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def recent_runs(db: Session, limit: int = 20) -> list[dict]:
    rows = db.query(ScrapeRun).order_by(ScrapeRun.started_at.desc(), ScrapeRun.id.desc()).limit(limit).all()
    out = []
    for r in rows:
        try:
            errors = json.loads(r.errors_json) if r.errors_json else []
        except (TypeError, json.JSONDecodeError):
            errors = []
        out.append({
            "id": r.id,
            "started_at": r.started_at.isoformat() if r.started_at else None,
            "finished_at": r.finished_at.isoformat() if r.finished_at else None,
            "targets_due": r.targets_due,
            "fetched": r.fetched,
            "failed": r.failed,
            "slots_scraped": r.slots_scraped,
            "changes": r.changes,
            "notified": r.notified,
            "pruned": r.pruned,
            "errors": errors,
        })
    return out
