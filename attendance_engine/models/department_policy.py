"""
Department policy model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from attendance_engine.db.base import Base, enum_column_type
from attendance_engine.models.employee import Department


class DepartmentPolicy(Base):
    __tablename__ = "department_policies"

    id = Column(Integer, primary_key=True, index=True)
    department = Column(enum_column_type(Department), nullable=False, unique=True)

    # "HH:MM", business time zone
    required_check_in_time = Column(String(5), nullable=False, default="09:00")
    required_check_out_time = Column(String(5), nullable=False, default="18:00")

    allows_off_site_work = Column(Boolean, nullable=False, default=False)
    overtime_allowed = Column(Boolean, nullable=False, default=False)

    # Monthly quotas (calendar month)
    max_monthly_permission_hours = Column(Integer, nullable=False, default=2)
    max_monthly_casual_leaves = Column(Integer, nullable=False, default=1)

    updated_by_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    updated_by = relationship("Employee", foreign_keys=[updated_by_id])
