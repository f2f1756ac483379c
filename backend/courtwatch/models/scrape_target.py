"""One row per (venue, date) in the scraping horizon. next_scrape_at NULL = due now. Past dates are pruned."""
from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint

from courtwatch.db.base import Base


class ScrapeTarget(Base):
    __tablename__ = "scrape_targets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    venue_slug = Column(String(128), nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    last_scraped_at = Column(DateTime(timezone=True), nullable=True)
    next_scrape_at = Column(DateTime(timezone=True), nullable=True, index=True)

    __table_args__ = (UniqueConstraint("venue_slug", "date", name="uq_scrape_targets_venue_date"),)
