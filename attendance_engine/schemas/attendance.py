"""
Attendance schemas
"""
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from attendance_engine.models.attendance import WorkLocation, AttendanceStatus
from attendance_engine.models.employee import Department
from attendance_engine.utils.datetime_utils import iso_local


class CheckInRequest(BaseModel):
    """Schema for check-in. Coordinates are optional; the device may deny geolocation."""
    work_location: WorkLocation = Field(..., description="office or off-site")
    location_details: Optional[str] = Field(None, description="Where the off-site work happens")
    off_site_reason: Optional[str] = Field(None, description="Why the work is off-site")
    customer_details: Optional[str] = Field(None, description="Customer context (Sales/Marketing off-site)")
    late_reason: Optional[str] = Field(None, description="Required when checking in after the required time")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class CheckOutRequest(BaseModel):
    """Schema for check-out"""
    late_reason: Optional[str] = Field(None, description="Required for a late check-out without overtime")
    overtime_reason: Optional[str] = Field(None, description="Required for overtime")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class AttendanceOut(BaseModel):
    """Schema for attendance record output. Datetimes in the business time zone."""
    id: int
    user_id: int
    work_date: date
    status: AttendanceStatus
    check_in_at: datetime
    check_out_at: Optional[datetime] = None
    work_location: WorkLocation
    location_details: Optional[str] = None
    off_site_reason: Optional[str] = None
    customer_details: Optional[str] = None
    department: Department
    required_check_in_time: str
    required_check_out_time: str
    is_late: bool
    late_reason: Optional[str] = None
    is_late_checkout: bool
    checkout_late_reason: Optional[str] = None
    is_overtime: bool
    overtime_reason: Optional[str] = None
    overtime_hours: int
    overtime_minutes: int
    total_overtime_minutes: int
    within_geofence: Optional[bool] = None
    needs_review: bool

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("check_in_at", "check_out_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_local(dt)


class AttendanceListResponse(BaseModel):
    """Schema for attendance list response"""
    items: List[AttendanceOut]
    total: int


class AdminAttendanceOut(AttendanceOut):
    """Attendance record with the employee's name, for administrators"""
    employee_name: Optional[str] = None


class AdminAttendanceListResponse(BaseModel):
    items: List[AdminAttendanceOut]
    total: int


class MonthlyStatsOut(BaseModel):
    """Monthly attendance summary for one user"""
    year: int
    month: int
    total_days: int
    present_days: int
    late_days: int
    overtime_days: int
    approved_leaves: int


class GeofenceCheckRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class GeofenceCheckOut(BaseModel):
    """Advisory geofence result used to pre-fill the work location choice"""
    within_office: bool
    nearest_office: Optional[str] = None
    distance_meters: Optional[float] = None
    suggested_work_location: WorkLocation
