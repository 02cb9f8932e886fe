"""SQLAlchemy model for the user table."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from notification_engine.infrastructure.database import Base


class UserModel(Base):
    """Identity directory entry for a system user."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("role.id"), nullable=True, index=True)
    full_name = Column(String(120), nullable=True)
    email = Column(String(120), nullable=True, index=True)
    phone = Column(String(30), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    deleted = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    role = relationship("RoleModel", lazy="joined")


__all__ = ["UserModel"]
