"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.sql import expression

from notification_engine.infrastructure.database import Base
from notification_engine.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("notification_user_read_idx", "user_id", "read", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category = Column(String(50), nullable=False, index=True)
    event_type = Column("type", String(100), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    short_message = Column(String(255), nullable=True)
    priority = Column(String(20), nullable=False, default="medium")
    read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    read_at = Column(DateTime(), nullable=True)
    related_entity_type = Column(String(50), nullable=True)
    related_entity_id = Column(String(100), nullable=True)
    related_entity_name = Column(String(255), nullable=True)
    created_by = Column(String(255), nullable=True)
    action_url = Column(String(500), nullable=True)
    additional_notes = Column(Text, nullable=True)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    deleted_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
