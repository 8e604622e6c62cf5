"""
Reports and exports endpoints
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from attendance_engine.core.deps import get_db, require_access
from attendance_engine.models.employee import AccessLevel, Department, Employee
from attendance_engine.services.audit_service import log_audit
from attendance_engine.services.report_service import (
    ATTENDANCE_HEADERS,
    OVERTIME_HEADERS,
    get_attendance_rows,
    get_overtime_rows,
)
from attendance_engine.utils.csv_export import stream_csv

router = APIRouter()


@router.get("/attendance.csv")
async def export_attendance_csv(
    from_date: date = Query(..., alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: date = Query(..., alias="to", description="End date (YYYY-MM-DD)"),
    department: Optional[Department] = Query(None, description="Department snapshotted at check-in"),
    user_id: Optional[int] = Query(None, description="Filter by employee ID"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_access(AccessLevel.ADMIN)),
):
    """
    Export attendance records as CSV

    Filters:
    - from, to: Required work date range (inclusive)
    - department, user_id: Optional
    """
    rows = get_attendance_rows(db, from_date, to_date, department=department, user_id=user_id)

    log_audit(
        db=db,
        actor_id=current_user.id,
        action="REPORT_EXPORT",
        entity_type="report",
        meta={
            "report_type": "attendance",
            "from_date": from_date,
            "to_date": to_date,
            "department": department,
            "user_id": user_id,
            "row_count": len(rows),
        },
    )
    db.commit()

    filename = f"attendance_{from_date.strftime('%Y%m%d')}_{to_date.strftime('%Y%m%d')}.csv"
    return stream_csv(headers=ATTENDANCE_HEADERS, rows=rows, filename=filename)


@router.get("/overtime.csv")
async def export_overtime_csv(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    department: Optional[Department] = Query(None, description="Department snapshotted at check-in"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_access(AccessLevel.ADMIN)),
):
    """Export the month's overtime check-outs as CSV"""
    rows = get_overtime_rows(db, year, month, department=department)

    log_audit(
        db=db,
        actor_id=current_user.id,
        action="REPORT_EXPORT",
        entity_type="report",
        meta={
            "report_type": "overtime",
            "year": year,
            "month": month,
            "department": department,
            "row_count": len(rows),
        },
    )
    db.commit()

    filename = f"overtime_{year}{month:02d}.csv"
    return stream_csv(headers=OVERTIME_HEADERS, rows=rows, filename=filename)
