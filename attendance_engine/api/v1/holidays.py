"""
Holiday calendar endpoints: holidays, weekly rest day settings and day checks
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from attendance_engine.core.deps import get_db, get_current_user
from attendance_engine.models.employee import Employee
from attendance_engine.schemas.holiday import (
    CalendarSettingsOut,
    CalendarSettingsUpdate,
    DayCheckOut,
    HolidayCreate,
    HolidayOut,
)
from attendance_engine.services import calendar_service

router = APIRouter()


@router.get("", response_model=List[HolidayOut])
async def list_holidays_endpoint(
    year: Optional[int] = Query(None, description="Filter by year (recurring holidays always included)"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    return [HolidayOut.model_validate(h) for h in calendar_service.list_holidays(db, year)]


@router.post("", response_model=HolidayOut, status_code=status.HTTP_201_CREATED)
async def create_holiday_endpoint(
    payload: HolidayCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    holiday = calendar_service.create_holiday(
        db, current_user, holiday_date=payload.date, name=payload.name, recurring=payload.recurring
    )
    return HolidayOut.model_validate(holiday)


@router.get("/settings", response_model=CalendarSettingsOut)
async def get_settings_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    return CalendarSettingsOut.model_validate(calendar_service.get_calendar_settings(db))


@router.put("/settings", response_model=CalendarSettingsOut)
async def update_settings_endpoint(
    payload: CalendarSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    row = calendar_service.update_calendar_settings(
        db,
        current_user,
        weekly_off_day=payload.weekly_off_day,
        weekly_off_enabled=payload.weekly_off_enabled,
    )
    return CalendarSettingsOut.model_validate(row)


@router.get("/check", response_model=DayCheckOut)
async def check_day_endpoint(
    day: date = Query(..., alias="date", description="Date to check (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Whether a date is a non-working day (weekly rest day or holiday)."""
    return DayCheckOut(date=day, non_working=calendar_service.is_non_working_day(db, day))


@router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holiday_endpoint(
    holiday_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    calendar_service.delete_holiday(db, current_user, holiday_id)
