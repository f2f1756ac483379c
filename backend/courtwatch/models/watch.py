"""User's standing subscription: venue (NULL = all venues) and preferred times per day of week.

day_times_json: {"monday": ["6pm", "7pm"], ...}. Rows created before per-day preferences only have
weekday_times_json / weekend_times_json; those are expanded when read (services.notify.matching).
"""
from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text

from courtwatch.db.base import Base


class Watch(Base):
    __tablename__ = "watches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=True)
    day_times_json = Column(Text, nullable=True)
    weekday_times_json = Column(Text, nullable=True)  # legacy: JSON array for Mon–Fri
    weekend_times_json = Column(Text, nullable=True)  # legacy: JSON array for Sat–Sun
    active = Column(Boolean, nullable=False, default=True)
