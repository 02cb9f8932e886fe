"""SQLAlchemy model for notification delivery attempts."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from notification_engine.infrastructure.database import Base
from notification_engine.utils import now_in_app_naive_datetime


class DeliveryLogModel(Base):
    """Append-only log of delivery attempts per notification and channel."""

    __tablename__ = "notification_delivery_log"

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(
        Integer,
        ForeignKey("notification.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    channel = Column(String(20), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="queued", index=True)
    provider_response = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["DeliveryLogModel"]
