from datetime import datetime, timezone

import pytest

from courtwatch.core.errors import PassAlreadyRunning
from courtwatch.models import Venue
from courtwatch.scheduler import scrape_job
from courtwatch.services.scrape_pass import PassResult


@pytest.fixture
def job_session(monkeypatch, session_factory):
    monkeypatch.setattr(scrape_job, "SessionLocal", session_factory)
    return session_factory


def _fake_pass(calls):
    def run(db, now=None):
        calls.append(now)
        return PassResult(started_at=datetime(2025, 6, 10, 9, 0, tzinfo=timezone.utc), targets_due=3, fetched=3)

    return run


def test_run_now_seeds_venues_and_updates_heartbeat(monkeypatch, job_session):
    calls = []
    monkeypatch.setattr(scrape_job, "run_pass", _fake_pass(calls))

    result = scrape_job.run_scrape_pass_now()

    assert result.targets_due == 3
    assert len(calls) == 1
    db = job_session()
    try:
        assert db.query(Venue).count() > 0
    finally:
        db.close()
    beat = scrape_job.get_scrape_job_heartbeat()
    assert beat["running"] is False
    assert beat["last_error"] is None
    assert beat["last_result"]["targets_due"] == 3
    assert beat["last_result"]["failure_rate"] == 0.0
    assert not scrape_job.is_pass_running()


def test_second_pass_is_refused_while_one_runs(monkeypatch, job_session):
    calls = []
    monkeypatch.setattr(scrape_job, "run_pass", _fake_pass(calls))
    assert scrape_job._pass_lock.acquire(blocking=False)
    try:
        assert scrape_job.is_pass_running()
        with pytest.raises(PassAlreadyRunning):
            scrape_job.run_scrape_pass_now()
        # The scheduler entrypoint skips quietly
        scrape_job.run_scrape_job()
    finally:
        scrape_job._pass_lock.release()
    assert calls == []


def test_job_logs_and_survives_pass_errors(monkeypatch, job_session, caplog):
    def failing_pass(db, now=None):
        raise RuntimeError("database went away")

    monkeypatch.setattr(scrape_job, "run_pass", failing_pass)
    scrape_job.run_scrape_job()

    assert "Scrape job failed: database went away" in caplog.text
    assert scrape_job.get_scrape_job_heartbeat()["last_error"] == "database went away"
    assert not scrape_job.is_pass_running()
