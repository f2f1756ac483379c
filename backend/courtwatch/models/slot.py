"""Last observed status per (venue, date, time, court). No history: one row per identity, updated in place."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from courtwatch.db.base import Base


class Slot(Base):
    __tablename__ = "slots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)
    time = Column(String(32), nullable=False)  # display label as scraped, e.g. "6pm" or "14:00"
    court = Column(String(128), nullable=False)
    status = Column(String(16), nullable=False)  # available | booked | closed | coaching
    price = Column(String(32), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("venue_id", "date", "time", "court", name="uq_slots_identity"),)
