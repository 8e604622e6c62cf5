"""
Attendance service: per-user, per-day check-in / check-out lifecycle.

Work dates and required times are evaluated in the business time zone; instants are stored
in UTC. A record is created on check-in with a snapshot of the department's required times
and closed exactly once on check-out.
"""
import logging
from calendar import monthrange
from datetime import date, datetime
from typing import List, Optional
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from attendance_engine.core.errors import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    LateReasonRequired,
    MissingRequiredFields,
    NotCheckedIn,
    OffSiteNotPermitted,
    OfficeCheckoutRequired,
    OvertimeReasonRequired,
)
from attendance_engine.models.attendance import AttendanceRecord, AttendanceStatus, WorkLocation
from attendance_engine.models.employee import Department, Employee, FIELD_DEPARTMENTS, OFFICE_CHECKOUT_DEPARTMENTS
from attendance_engine.models.leave import LeaveRequest, LeaveStatus
from attendance_engine.schemas.attendance import MonthlyStatsOut
from attendance_engine.services import geofence_service
from attendance_engine.services.audit_service import log_audit
from attendance_engine.services.policy_service import resolve_policy
from attendance_engine.utils.datetime_utils import (
    ensure_utc,
    local_date,
    local_instant,
    month_bounds,
    now_utc,
)

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def get_record(db: Session, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
    return (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.user_id == user_id, AttendanceRecord.work_date == work_date)
        .first()
    )


def get_today_record(db: Session, user_id: int, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
    """Record for the current business day, if the user has checked in."""
    now = ensure_utc(now) or now_utc()
    return get_record(db, user_id, local_date(now))


def check_in(
    db: Session,
    user: Employee,
    work_location: WorkLocation,
    location_details: Optional[str] = None,
    off_site_reason: Optional[str] = None,
    customer_details: Optional[str] = None,
    late_reason: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    now: Optional[datetime] = None,
) -> AttendanceRecord:
    """
    Check a user in for the current business day

    Args:
        db: Database session
        user: Employee checking in
        work_location: office or off-site (self-reported)
        location_details: Off-site location text
        off_site_reason: Why the work is off-site
        customer_details: Customer context, required for Sales/Marketing off-site
        late_reason: Required when checking in after the required check-in time
        latitude: Device latitude, if the device shared one
        longitude: Device longitude, if the device shared one
        now: Evaluation instant (defaults to server time)

    Returns:
        The created AttendanceRecord

    Raises:
        AlreadyCheckedIn: If the user already has a record for the day
        OffSiteNotPermitted: If the department does not allow off-site work
        MissingRequiredFields: If Sales/Marketing off-site details are missing
        LateReasonRequired: If late without a reason
        LocationNotVerified: If geofence enforcement rejects the claim
    """
    now = ensure_utc(now) or now_utc()
    work_date = local_date(now)

    if get_record(db, user.id, work_date) is not None:
        raise AlreadyCheckedIn()

    policy = resolve_policy(db, user.department)
    off_site = work_location == WorkLocation.OFF_SITE

    # Sales and Marketing are always allowed off-site, whatever their policy says
    if off_site and not policy.allows_off_site_work and user.department not in FIELD_DEPARTMENTS:
        raise OffSiteNotPermitted()

    if off_site and user.department in FIELD_DEPARTMENTS:
        if _blank(location_details) or _blank(off_site_reason) or _blank(customer_details):
            raise MissingRequiredFields()

    is_late = now > local_instant(work_date, policy.required_check_in_time)
    if is_late and _blank(late_reason):
        raise LateReasonRequired()

    verdict = geofence_service.evaluate_claim(db, work_location, latitude, longitude)

    record = AttendanceRecord(
        user_id=user.id,
        work_date=work_date,
        status=AttendanceStatus.CHECKED_IN,
        check_in_at=now,
        work_location=work_location,
        location_details=location_details if off_site else None,
        off_site_reason=off_site_reason if off_site else None,
        customer_details=customer_details if off_site else None,
        department=user.department,
        required_check_in_time=policy.required_check_in_time,
        required_check_out_time=policy.required_check_out_time,
        is_late=is_late,
        late_reason=late_reason if is_late else None,
        check_in_latitude=latitude,
        check_in_longitude=longitude,
        within_geofence=verdict.within_office,
        needs_review=verdict.needs_review,
        created_at=now,
        updated_at=now,
    )
    db.add(record)
    try:
        db.flush()
    except IntegrityError:
        # A concurrent check-in for the same (user, work_date) won the insert
        db.rollback()
        logger.info("Concurrent check-in rejected: user_id=%s work_date=%s", user.id, work_date)
        raise AlreadyCheckedIn()

    log_audit(
        db=db,
        actor_id=user.id,
        action="CHECK_IN",
        entity_type="attendance",
        entity_id=record.id,
        meta={
            "work_date": work_date,
            "work_location": work_location,
            "is_late": is_late,
            "within_geofence": verdict.within_office,
            "needs_review": verdict.needs_review,
        },
    )
    db.commit()
    db.refresh(record)

    logger.info(
        "Check-in: user_id=%s work_date=%s location=%s late=%s",
        user.id, work_date, work_location.value, is_late,
    )
    return record


def check_out(
    db: Session,
    user: Employee,
    late_reason: Optional[str] = None,
    overtime_reason: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    now: Optional[datetime] = None,
) -> AttendanceRecord:
    """
    Check a user out of the current business day

    A check-out after the required time (snapshotted at check-in) is overtime when the
    department currently allows overtime, otherwise a late check-out.

    Raises:
        NotCheckedIn: If there is no record for the day
        AlreadyCheckedOut: If the record is already closed
        OvertimeReasonRequired: If overtime without a reason
        LateReasonRequired: If a late check-out without a reason
        OfficeCheckoutRequired: If CRE/Accounts/HR checked in off-site
    """
    now = ensure_utc(now) or now_utc()
    work_date = local_date(now)

    record = get_record(db, user.id, work_date)
    if record is None:
        raise NotCheckedIn()
    if record.status == AttendanceStatus.CHECKED_OUT:
        raise AlreadyCheckedOut()

    policy = resolve_policy(db, user.department)
    required_out = local_instant(work_date, record.required_check_out_time)
    is_late_checkout = now > required_out
    is_overtime = is_late_checkout and policy.overtime_allowed

    overtime_total = 0
    if is_overtime:
        if _blank(overtime_reason):
            raise OvertimeReasonRequired()
        overtime_total = int((now - required_out).total_seconds() // 60)
    elif is_late_checkout and _blank(late_reason):
        raise LateReasonRequired()

    if user.department in OFFICE_CHECKOUT_DEPARTMENTS and record.work_location != WorkLocation.OFFICE:
        raise OfficeCheckoutRequired()

    check_in_at = ensure_utc(record.check_in_at)
    # Close only a record that is still open; a concurrent check-out leaves 0 rows.
    closed = (
        db.query(AttendanceRecord)
        .filter(
            AttendanceRecord.id == record.id,
            AttendanceRecord.status == AttendanceStatus.CHECKED_IN,
        )
        .update(
            {
                AttendanceRecord.check_out_at: max(now, check_in_at),
                AttendanceRecord.status: AttendanceStatus.CHECKED_OUT,
                AttendanceRecord.is_late_checkout: is_late_checkout,
                AttendanceRecord.checkout_late_reason: (
                    late_reason if is_late_checkout and not is_overtime else None
                ),
                AttendanceRecord.is_overtime: is_overtime,
                AttendanceRecord.overtime_reason: overtime_reason if is_overtime else None,
                AttendanceRecord.overtime_hours: overtime_total // 60,
                AttendanceRecord.overtime_minutes: overtime_total % 60,
                AttendanceRecord.total_overtime_minutes: overtime_total,
                AttendanceRecord.check_out_latitude: latitude,
                AttendanceRecord.check_out_longitude: longitude,
                AttendanceRecord.updated_at: now,
            },
            synchronize_session=False,
        )
    )
    if closed == 0:
        db.rollback()
        raise AlreadyCheckedOut()

    log_audit(
        db=db,
        actor_id=user.id,
        action="CHECK_OUT",
        entity_type="attendance",
        entity_id=record.id,
        meta={
            "work_date": work_date,
            "is_late_checkout": is_late_checkout,
            "is_overtime": is_overtime,
            "overtime_minutes": overtime_total,
        },
    )
    db.commit()
    db.refresh(record)

    logger.info(
        "Check-out: user_id=%s work_date=%s late=%s overtime=%s (%d min)",
        user.id, work_date, is_late_checkout, is_overtime, overtime_total,
    )
    return record


def list_records(
    db: Session,
    user_id: int,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None
) -> List[AttendanceRecord]:
    """Attendance records of a user, newest work date first."""
    query = db.query(AttendanceRecord).filter(AttendanceRecord.user_id == user_id)
    if from_date:
        query = query.filter(AttendanceRecord.work_date >= from_date)
    if to_date:
        query = query.filter(AttendanceRecord.work_date <= to_date)
    return query.order_by(AttendanceRecord.work_date.desc()).all()


def monthly_stats(db: Session, user_id: int, year: int, month: int) -> MonthlyStatsOut:
    """Present, late and overtime days plus approved leaves starting in the month."""
    first, last = month_bounds(year, month)
    records = list_records(db, user_id, first, last)

    approved = (
        db.query(LeaveRequest)
        .filter(LeaveRequest.user_id == user_id, LeaveRequest.status == LeaveStatus.APPROVED)
        .all()
    )
    approved_in_month = [
        leave for leave in approved
        if first <= local_date(leave.start_at) <= last
    ]

    return MonthlyStatsOut(
        year=year,
        month=month,
        total_days=monthrange(year, month)[1],
        present_days=len(records),
        late_days=sum(1 for r in records if r.is_late),
        overtime_days=sum(1 for r in records if r.is_overtime),
        approved_leaves=len(approved_in_month),
    )


# --- Administration ---


def admin_list_records(
    db: Session,
    from_date: date,
    to_date: date,
    department: Optional[Department] = None,
    user_id: Optional[int] = None,
    needs_review: Optional[bool] = None,
) -> List[AttendanceRecord]:
    """
    Attendance records of all employees in a date range

    Department filters on the department snapshotted at check-in.

    Raises:
        HTTPException: 400 if from_date is after to_date
    """
    if from_date > to_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="from must be less than or equal to to",
        )

    query = (
        db.query(AttendanceRecord)
        .options(joinedload(AttendanceRecord.user))
        .filter(
            AttendanceRecord.work_date >= from_date,
            AttendanceRecord.work_date <= to_date,
        )
    )
    if department is not None:
        query = query.filter(AttendanceRecord.department == department)
    if user_id is not None:
        query = query.filter(AttendanceRecord.user_id == user_id)
    if needs_review is not None:
        query = query.filter(AttendanceRecord.needs_review == needs_review)

    return query.order_by(AttendanceRecord.work_date, AttendanceRecord.user_id).all()


def mark_reviewed(db: Session, record_id: int, actor: Employee) -> AttendanceRecord:
    """Clear the geofence review flag on a record. Already-clear records are returned as is."""
    record = db.query(AttendanceRecord).filter(AttendanceRecord.id == record_id).first()
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Attendance record {record_id} not found"
        )
    if not record.needs_review:
        return record

    record.needs_review = False
    record.updated_at = now_utc()
    db.flush()

    log_audit(
        db=db,
        actor_id=actor.id,
        action="ATTENDANCE_REVIEWED",
        entity_type="attendance",
        entity_id=record.id,
        meta={"user_id": record.user_id, "work_date": record.work_date},
    )
    db.commit()
    db.refresh(record)
    logger.info("Attendance %s reviewed by employee %s", record.id, actor.id)
    return record
