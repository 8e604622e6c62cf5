"""
Holiday calendar schemas
"""
from datetime import date as date_type, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from attendance_engine.utils.datetime_utils import iso_local


class HolidayCreate(BaseModel):
    """Schema for creating a holiday"""
    date: date_type = Field(..., description="Holiday date")
    name: str = Field(..., min_length=1, description="Holiday name")
    recurring: bool = Field(False, description="Repeat on the same month/day every year")


class HolidayOut(BaseModel):
    """Schema for holiday output. Datetimes in the business time zone."""
    id: int
    date: date_type
    name: str
    recurring: bool
    created_by_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_local(dt)


class CalendarSettingsUpdate(BaseModel):
    weekly_off_day: Optional[int] = Field(None, ge=1, le=7, description="ISO weekday (1=Monday, 7=Sunday)")
    weekly_off_enabled: Optional[bool] = None


class CalendarSettingsOut(BaseModel):
    weekly_off_day: int
    weekly_off_enabled: bool

    model_config = ConfigDict(from_attributes=True)


class DayCheckOut(BaseModel):
    date: date_type
    non_working: bool
