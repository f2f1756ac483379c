"""Delivery endpoint for one user: email address or chat id."""
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from courtwatch.db.base import Base


class NotificationChannel(Base):
    __tablename__ = "notification_channels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(16), nullable=False)  # email | chat (legacy: telegram)
    destination = Column(String(255), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
