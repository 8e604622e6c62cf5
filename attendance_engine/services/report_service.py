"""
Report service - attendance and overtime rows for CSV export

Rows are plain dictionaries keyed by the report's column names. Datetimes are rendered
in the business time zone.
"""
from datetime import date
from typing import Dict, List, Optional
from sqlalchemy.orm import Session, joinedload

from attendance_engine.models.attendance import AttendanceRecord
from attendance_engine.models.employee import Department
from attendance_engine.services.attendance_service import admin_list_records
from attendance_engine.utils.datetime_utils import iso_local, month_bounds

ATTENDANCE_HEADERS = [
    "employee_id",
    "employee_name",
    "department",
    "work_date",
    "status",
    "work_location",
    "check_in_at",
    "is_late",
    "late_reason",
    "check_out_at",
    "is_late_checkout",
    "checkout_late_reason",
    "is_overtime",
    "total_overtime_minutes",
    "within_geofence",
    "needs_review",
]

OVERTIME_HEADERS = [
    "employee_id",
    "employee_name",
    "department",
    "work_date",
    "required_check_out_time",
    "check_out_at",
    "overtime_hours",
    "overtime_minutes",
    "total_overtime_minutes",
    "overtime_reason",
]


def _employee_name(record: AttendanceRecord) -> Optional[str]:
    return record.user.name if record.user else None


def get_attendance_rows(
    db: Session,
    from_date: date,
    to_date: date,
    department: Optional[Department] = None,
    user_id: Optional[int] = None,
) -> List[Dict]:
    """
    Attendance rows for export, ordered by work date then employee

    Raises:
        HTTPException: 400 if from_date is after to_date
    """
    records = admin_list_records(db, from_date, to_date, department=department, user_id=user_id)
    return [
        {
            "employee_id": r.user_id,
            "employee_name": _employee_name(r),
            "department": r.department,
            "work_date": r.work_date,
            "status": r.status,
            "work_location": r.work_location,
            "check_in_at": iso_local(r.check_in_at),
            "is_late": r.is_late,
            "late_reason": r.late_reason,
            "check_out_at": iso_local(r.check_out_at),
            "is_late_checkout": r.is_late_checkout,
            "checkout_late_reason": r.checkout_late_reason,
            "is_overtime": r.is_overtime,
            "total_overtime_minutes": r.total_overtime_minutes,
            "within_geofence": r.within_geofence,
            "needs_review": r.needs_review,
        }
        for r in records
    ]


def get_overtime_rows(
    db: Session,
    year: int,
    month: int,
    department: Optional[Department] = None,
) -> List[Dict]:
    """Overtime check-outs with a work date in the given month."""
    first, last = month_bounds(year, month)
    query = (
        db.query(AttendanceRecord)
        .options(joinedload(AttendanceRecord.user))
        .filter(
            AttendanceRecord.is_overtime == True,  # noqa: E712
            AttendanceRecord.work_date >= first,
            AttendanceRecord.work_date <= last,
        )
    )
    if department is not None:
        query = query.filter(AttendanceRecord.department == department)

    records = query.order_by(AttendanceRecord.work_date, AttendanceRecord.user_id).all()
    return [
        {
            "employee_id": r.user_id,
            "employee_name": _employee_name(r),
            "department": r.department,
            "work_date": r.work_date,
            "required_check_out_time": r.required_check_out_time,
            "check_out_at": iso_local(r.check_out_at),
            "overtime_hours": r.overtime_hours,
            "overtime_minutes": r.overtime_minutes,
            "total_overtime_minutes": r.total_overtime_minutes,
            "overtime_reason": r.overtime_reason,
        }
        for r in records
    ]
