"""
Department policy schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from attendance_engine.models.employee import Department
from attendance_engine.utils.datetime_utils import iso_local

DEFAULT_CHECK_IN_TIME = "09:00"
DEFAULT_CHECK_OUT_TIME = "18:00"
DEFAULT_PERMISSION_HOURS = 2
DEFAULT_CASUAL_LEAVES = 1


class EffectivePolicy(BaseModel):
    """
    Fully populated policy the business rules consume.

    Built from a stored DepartmentPolicy row, or from system defaults when the department
    has none (is_default=True). Never partially populated.
    """
    department: Department
    required_check_in_time: str = DEFAULT_CHECK_IN_TIME
    required_check_out_time: str = DEFAULT_CHECK_OUT_TIME
    allows_off_site_work: bool = False
    overtime_allowed: bool = False
    max_monthly_permission_hours: int = DEFAULT_PERMISSION_HOURS
    max_monthly_casual_leaves: int = DEFAULT_CASUAL_LEAVES
    is_default: bool = True

    model_config = ConfigDict(frozen=True)


class PolicyUpdate(BaseModel):
    """Schema for creating or partially updating a department policy (HH:MM times, business time zone)"""
    required_check_in_time: Optional[str] = Field(None, description="Required check-in time, HH:MM")
    required_check_out_time: Optional[str] = Field(None, description="Required check-out time, HH:MM")
    allows_off_site_work: Optional[bool] = None
    overtime_allowed: Optional[bool] = None
    max_monthly_permission_hours: Optional[int] = Field(None, description="Permission hours per calendar month")
    max_monthly_casual_leaves: Optional[int] = Field(None, description="Casual leave days per calendar month")


class PolicyOut(BaseModel):
    """Schema for department policy output. Datetimes in the business time zone."""
    id: int
    department: Department
    required_check_in_time: str
    required_check_out_time: str
    allows_off_site_work: bool
    overtime_allowed: bool
    max_monthly_permission_hours: int
    max_monthly_casual_leaves: int
    updated_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_local(dt)

