"""Canonical venue record; slots and watches reference it by id, scrape targets by slug."""
from sqlalchemy import Boolean, Column, Integer, String

from courtwatch.db.base import Base


class Venue(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(128), nullable=False, unique=True, index=True)
    name = Column(String(256), nullable=False)
    platform = Column(String(32), nullable=False, default="courtside")  # picks the fetcher
    external_id = Column(String(128), nullable=True)  # platform-side venue id (ClubSpark)
    host = Column(String(256), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
