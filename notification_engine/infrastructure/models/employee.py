"""SQLAlchemy models for the organisation structure used by recipient lookups."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String

from notification_engine.infrastructure.database import Base


class DepartmentModel(Base):
    """Department with an optional managing user."""

    __tablename__ = "department"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    manager_id = Column(Integer, ForeignKey("user.id"), nullable=True)


class EmployeeModel(Base):
    """Employee record linked to a user account."""

    __tablename__ = "employee"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=True, index=True)
    department_id = Column(Integer, ForeignKey("department.id"), nullable=True)
    reports_to = Column(Integer, ForeignKey("user.id"), nullable=True)
    termination_date = Column(Date, nullable=True)


__all__ = ["DepartmentModel", "EmployeeModel"]
