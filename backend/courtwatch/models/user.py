"""Subscriber. Owns watches and notification channels; managed by the web app."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from courtwatch.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
