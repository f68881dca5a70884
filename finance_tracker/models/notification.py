from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class NotificationType(str, Enum):
    CATEGORY = "category"
    EXPENSE = "expense"


class NotificationStatus(str, Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    DENIED = "denied"


class MessageSender(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Notification(Base):
    """An approval thread: a request raised by a user and resolved by an admin"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)  # 'category' or 'expense'
    status = Column(String, nullable=False, default=NotificationStatus.REQUESTED.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Messages are append-only; insertion id gives thread order
    messages = relationship(
        "NotificationMessage",
        back_populates="notification",
        order_by="NotificationMessage.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_notifications_user_created", "user_id", "created_at"),
        Index("ix_notifications_status_created", "status", "created_at"),
    )


class NotificationMessage(Base):
    __tablename__ = "notification_messages"

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(Integer, ForeignKey("notifications.id"), nullable=False, index=True)
    sender = Column(String, nullable=False)  # 'user' or 'admin'
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    notification = relationship("Notification", back_populates="messages")
