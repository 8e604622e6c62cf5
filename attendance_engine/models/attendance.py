"""
Attendance record model: one row per (user, work date), created on check-in and closed once on check-out.
"""
from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, String, Text, Boolean, Float, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from attendance_engine.db.base import Base, enum_column_type
from attendance_engine.models.employee import Department


class WorkLocation(str, enum.Enum):
    OFFICE = "office"
    OFF_SITE = "off-site"


class AttendanceStatus(str, enum.Enum):
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class AttendanceRecord(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    work_date = Column(Date, nullable=False, index=True)  # business time zone date
    status = Column(enum_column_type(AttendanceStatus), nullable=False, default=AttendanceStatus.CHECKED_IN)

    check_in_at = Column(DateTime(timezone=True), nullable=False)
    check_out_at = Column(DateTime(timezone=True), nullable=True)

    work_location = Column(enum_column_type(WorkLocation), nullable=False, default=WorkLocation.OFFICE)
    location_details = Column(Text, nullable=True)
    off_site_reason = Column(Text, nullable=True)
    customer_details = Column(Text, nullable=True)

    # Policy snapshot taken at check-in
    department = Column(enum_column_type(Department), nullable=False)
    required_check_in_time = Column(String(5), nullable=False)
    required_check_out_time = Column(String(5), nullable=False)

    is_late = Column(Boolean, nullable=False, default=False)
    late_reason = Column(Text, nullable=True)

    is_late_checkout = Column(Boolean, nullable=False, default=False)
    checkout_late_reason = Column(Text, nullable=True)
    is_overtime = Column(Boolean, nullable=False, default=False)
    overtime_reason = Column(Text, nullable=True)
    overtime_hours = Column(Integer, nullable=False, default=0)
    overtime_minutes = Column(Integer, nullable=False, default=0)
    total_overtime_minutes = Column(Integer, nullable=False, default=0)

    # Device position (advisory unless GEOFENCE_ENFORCEMENT says otherwise)
    check_in_latitude = Column(Float, nullable=True)
    check_in_longitude = Column(Float, nullable=True)
    check_out_latitude = Column(Float, nullable=True)
    check_out_longitude = Column(Float, nullable=True)
    within_geofence = Column(Boolean, nullable=True)
    needs_review = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    user = relationship("Employee", backref="attendance_records")

    __table_args__ = (
        UniqueConstraint("user_id", "work_date", name="uq_attendance_user_work_date"),
        CheckConstraint("check_out_at IS NULL OR check_out_at >= check_in_at", name="check_attendance_out_after_in"),
    )
