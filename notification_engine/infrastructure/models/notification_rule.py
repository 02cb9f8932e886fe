"""SQLAlchemy model for notification rules."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import expression

from notification_engine.infrastructure.database import Base
from notification_engine.utils import now_in_app_naive_datetime

from ._types import json_type


class NotificationRuleModel(Base):
    """Database representation of the admin-managed notification rules."""

    __tablename__ = "notification_rule"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(50), nullable=False)
    event_type = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    enabled = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    priority = Column(String(20), nullable=False)
    recipient_roles = Column(json_type, nullable=False, default=list)
    channels = Column(json_type, nullable=False, default=list)
    conditions = Column(json_type, nullable=True)
    exclude_actor = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    dedupe_window_seconds = Column(Integer, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationRuleModel"]
