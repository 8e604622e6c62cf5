"""
Attendance endpoints: check-in / check-out for the calling employee, own records and stats.
Work dates follow the business time zone; all datetimes are returned with its offset.
"""
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from attendance_engine.core.deps import get_db, get_current_user
from attendance_engine.models.attendance import WorkLocation
from attendance_engine.models.employee import Employee
from attendance_engine.schemas.attendance import (
    AttendanceListResponse,
    AttendanceOut,
    CheckInRequest,
    CheckOutRequest,
    GeofenceCheckOut,
    GeofenceCheckRequest,
    MonthlyStatsOut,
)
from attendance_engine.services import attendance_service, geofence_service
from attendance_engine.utils.datetime_utils import now_utc, to_local

router = APIRouter()
_log = logging.getLogger(__name__)


@router.post("/check-in", response_model=AttendanceOut, status_code=201)
async def check_in_endpoint(
    payload: CheckInRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """
    Check in for today.
    409 AlreadyCheckedIn if a record exists; 400/403 for policy and input violations.
    """
    _log.debug("check_in: user_id=%s location=%s", current_user.id, payload.work_location.value)
    record = attendance_service.check_in(
        db,
        current_user,
        work_location=payload.work_location,
        location_details=payload.location_details,
        off_site_reason=payload.off_site_reason,
        customer_details=payload.customer_details,
        late_reason=payload.late_reason,
        latitude=payload.latitude,
        longitude=payload.longitude,
    )
    return AttendanceOut.model_validate(record)


@router.post("/check-out", response_model=AttendanceOut)
async def check_out_endpoint(
    payload: Optional[CheckOutRequest] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Check out of today's record. 400 NotCheckedIn / 409 AlreadyCheckedOut on state errors."""
    payload = payload or CheckOutRequest()
    record = attendance_service.check_out(
        db,
        current_user,
        late_reason=payload.late_reason,
        overtime_reason=payload.overtime_reason,
        latitude=payload.latitude,
        longitude=payload.longitude,
    )
    return AttendanceOut.model_validate(record)


@router.get("/today", response_model=Optional[AttendanceOut])
async def today_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Today's record for the current user, or null before check-in."""
    record = attendance_service.get_today_record(db, current_user.id)
    return AttendanceOut.model_validate(record) if record else None


@router.get("/my", response_model=AttendanceListResponse)
async def my_endpoint(
    from_date: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Own attendance records, newest first."""
    records = attendance_service.list_records(db, current_user.id, from_date, to_date)
    return AttendanceListResponse(
        items=[AttendanceOut.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/stats", response_model=MonthlyStatsOut)
async def stats_endpoint(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Monthly summary for the current user (defaults to the current month)."""
    local_now = to_local(now_utc())
    return attendance_service.monthly_stats(
        db, current_user.id, year or local_now.year, month or local_now.month
    )


@router.post("/geofence-check", response_model=GeofenceCheckOut)
async def geofence_check_endpoint(
    payload: GeofenceCheckRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Advisory: is the device inside an office geofence? Used to pre-fill the work location."""
    result = geofence_service.check_position(db, payload.latitude, payload.longitude)
    return GeofenceCheckOut(
        within_office=result.within_office,
        nearest_office=result.nearest_office,
        distance_meters=result.distance_meters,
        suggested_work_location=WorkLocation.OFFICE if result.within_office else WorkLocation.OFF_SITE,
    )
