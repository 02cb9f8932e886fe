"""SQLAlchemy model for per-user notification preferences."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer

from notification_engine.infrastructure.database import Base
from notification_engine.utils import now_in_app_naive_datetime

from ._types import json_type


class NotificationPreferenceModel(Base):
    """Stored preferences document for a single user."""

    __tablename__ = "notification_preference"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    preferences = Column(json_type, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationPreferenceModel"]
