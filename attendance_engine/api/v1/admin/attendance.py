"""
Admin attendance endpoints: date-range list across employees and clearing the geofence review flag.
Records flagged by geofence enforcement (needs_review) are found with ?needs_review=true.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from attendance_engine.core.deps import get_db, require_access
from attendance_engine.models.attendance import AttendanceRecord
from attendance_engine.models.employee import AccessLevel, Department, Employee
from attendance_engine.schemas.attendance import (
    AdminAttendanceListResponse,
    AdminAttendanceOut,
    AttendanceOut,
)
from attendance_engine.services import attendance_service

router = APIRouter()


def _record_to_admin_dto(record: AttendanceRecord) -> AdminAttendanceOut:
    return AdminAttendanceOut(
        **dict(AttendanceOut.model_validate(record)),
        employee_name=record.user.name if record.user else None,
    )


@router.get("", response_model=AdminAttendanceListResponse)
async def admin_list(
    from_date: date = Query(..., alias="from"),
    to_date: date = Query(..., alias="to"),
    department: Optional[Department] = Query(None),
    user_id: Optional[int] = Query(None),
    needs_review: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_access(AccessLevel.ADMIN)),
):
    """GET /api/v1/admin/attendance?from=&to=&department=&user_id=&needs_review="""
    records = attendance_service.admin_list_records(
        db,
        from_date=from_date,
        to_date=to_date,
        department=department,
        user_id=user_id,
        needs_review=needs_review,
    )
    items = [_record_to_admin_dto(r) for r in records]
    return AdminAttendanceListResponse(items=items, total=len(items))


@router.post("/{record_id}/review", response_model=AdminAttendanceOut)
async def admin_mark_reviewed(
    record_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_access(AccessLevel.ADMIN)),
):
    """POST /api/v1/admin/attendance/{record_id}/review - clear needs_review. Audited."""
    record = attendance_service.mark_reviewed(db, record_id, current_user)
    return _record_to_admin_dto(record)
