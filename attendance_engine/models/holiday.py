"""
Holiday calendar models
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Boolean, CheckConstraint
from sqlalchemy.sql import func
from attendance_engine.db.base import Base


class Holiday(Base):
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    name = Column(String, nullable=False)
    recurring = Column(Boolean, nullable=False, default=False)  # same month/day every year
    created_by_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)


class CalendarSetting(Base):
    """Single-row weekly rest day configuration."""
    __tablename__ = "calendar_settings"

    id = Column(Integer, primary_key=True, index=True)
    weekly_off_day = Column(Integer, nullable=False, default=7)  # ISO weekday, 7 = Sunday
    weekly_off_enabled = Column(Boolean, nullable=False, default=True)
    updated_by_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    __table_args__ = (
        CheckConstraint("weekly_off_day BETWEEN 1 AND 7", name="check_weekly_off_day"),
    )
