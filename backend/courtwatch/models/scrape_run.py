"""One row per scrape pass: counts and failures, for the status API and debugging."""
from sqlalchemy import Column, DateTime, Integer, Text

from courtwatch.db.base import Base


class ScrapeRun(Base):
    __tablename__ = "scrape_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    started_at = Column(DateTime(timezone=True), nullable=False, index=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    targets_due = Column(Integer, nullable=False, default=0)
    fetched = Column(Integer, nullable=False, default=0)
    failed = Column(Integer, nullable=False, default=0)
    slots_scraped = Column(Integer, nullable=False, default=0)
    changes = Column(Integer, nullable=False, default=0)
    notified = Column(Integer, nullable=False, default=0)
    pruned = Column(Integer, nullable=False, default=0)
    errors_json = Column(Text, nullable=True)  # JSON array of "venue date: error"
