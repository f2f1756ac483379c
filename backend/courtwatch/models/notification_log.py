"""Dedup log: one row per (channel, slot_key) once a message containing that slot was delivered."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from courtwatch.db.base import Base


class NotificationLogEntry(Base):
    __tablename__ = "notification_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    channel_id = Column(Integer, ForeignKey("notification_channels.id"), nullable=False, index=True)
    slot_key = Column(String(320), nullable=False)  # venue:date:time:court
    slot_date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD, drives retention
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("channel_id", "slot_key", name="uq_notification_log_channel_slot"),)
