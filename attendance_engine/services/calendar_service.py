"""
Calendar service: non-working days, business-day counts and working-hour durations.

A day is non-working when it is the weekly rest day (if enabled), matches a recurring
holiday by month/day, or is a one-off holiday.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional, Set
from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from attendance_engine.core.errors import Forbidden
from attendance_engine.models.employee import AccessLevel, Employee
from attendance_engine.models.holiday import CalendarSetting, Holiday
from attendance_engine.services.audit_service import log_audit
from attendance_engine.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

DEFAULT_WEEKLY_OFF_DAY = 7  # Sunday


def get_calendar_settings(db: Session) -> CalendarSetting:
    """Stored weekly rest day settings, or an unsaved row carrying the defaults."""
    row = db.query(CalendarSetting).order_by(CalendarSetting.id).first()
    if row is None:
        row = CalendarSetting(weekly_off_day=DEFAULT_WEEKLY_OFF_DAY, weekly_off_enabled=True)
    return row


def _weekly_off(db: Session) -> Optional[int]:
    row = get_calendar_settings(db)
    return row.weekly_off_day if row.weekly_off_enabled else None


def non_working_days_in_range(db: Session, start: date, end: date) -> Set[date]:
    """All non-working dates in [start, end] inclusive (empty when end < start)."""
    if end < start:
        return set()

    weekly_off = _weekly_off(db)
    holidays = (
        db.query(Holiday)
        .filter(or_(Holiday.recurring == True, Holiday.date.between(start, end)))  # noqa: E712
        .all()
    )
    one_off = {h.date for h in holidays if not h.recurring}
    recurring = {(h.date.month, h.date.day) for h in holidays if h.recurring}

    result: Set[date] = set()
    day = start
    while day <= end:
        if (
            (weekly_off is not None and day.isoweekday() == weekly_off)
            or day in one_off
            or (day.month, day.day) in recurring
        ):
            result.add(day)
        day += timedelta(days=1)
    return result


def is_non_working_day(db: Session, day: date) -> bool:
    return day in non_working_days_in_range(db, day, day)


def business_days_between(db: Session, start: date, end: date) -> int:
    """Days in [start, end] inclusive that are working days; 0 when end < start."""
    if end < start:
        return 0
    total = (end - start).days + 1
    return total - len(non_working_days_in_range(db, start, end))


# --- Holiday management ---


def _require_master_admin(actor: Employee) -> None:
    if actor.access_level != AccessLevel.MASTER_ADMIN:
        raise Forbidden("Only a master administrator can change the holiday calendar")


def list_holidays(db: Session, year: Optional[int] = None) -> List[Holiday]:
    """
    Holidays ordered by date

    With a year, returns that year's one-off holidays plus every recurring holiday.
    """
    query = db.query(Holiday)
    if year is not None:
        query = query.filter(
            or_(
                Holiday.recurring == True,  # noqa: E712
                Holiday.date.between(date(year, 1, 1), date(year, 12, 31)),
            )
        )
    return query.order_by(Holiday.date, Holiday.id).all()


def create_holiday(
    db: Session,
    actor: Employee,
    holiday_date: date,
    name: str,
    recurring: bool = False
) -> Holiday:
    """
    Create a holiday

    Raises:
        Forbidden: If actor is not a master administrator
        HTTPException: 409 if a holiday already exists for that date (month/day for recurring ones)
    """
    _require_master_admin(actor)

    if recurring:
        # Clashes with a recurring holiday on the same month/day, whatever its stored year
        existing = next(
            (
                h for h in db.query(Holiday).filter(Holiday.recurring == True).all()  # noqa: E712
                if (h.date.month, h.date.day) == (holiday_date.month, holiday_date.day)
            ),
            None,
        )
    else:
        existing = db.query(Holiday).filter(Holiday.date == holiday_date, Holiday.recurring == False).first()  # noqa: E712
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Holiday already exists for date {holiday_date}"
        )

    holiday = Holiday(
        date=holiday_date,
        name=name,
        recurring=recurring,
        created_by_id=actor.id,
        created_at=now_utc(),
    )
    db.add(holiday)
    db.flush()

    log_audit(
        db=db,
        actor_id=actor.id,
        action="HOLIDAY_CREATE",
        entity_type="holiday",
        entity_id=holiday.id,
        meta={"date": holiday_date, "name": name, "recurring": recurring},
    )
    db.commit()
    db.refresh(holiday)
    logger.info("Holiday %s on %s created (recurring=%s)", name, holiday_date, recurring)
    return holiday


def delete_holiday(db: Session, actor: Employee, holiday_id: int) -> None:
    _require_master_admin(actor)
    holiday = db.query(Holiday).filter(Holiday.id == holiday_id).first()
    if not holiday:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Holiday {holiday_id} not found"
        )

    meta = {"date": holiday.date, "name": holiday.name, "recurring": holiday.recurring}
    db.delete(holiday)
    log_audit(
        db=db,
        actor_id=actor.id,
        action="HOLIDAY_DELETE",
        entity_type="holiday",
        entity_id=holiday_id,
        meta=meta,
    )
    db.commit()


def update_calendar_settings(
    db: Session,
    actor: Employee,
    weekly_off_day: Optional[int] = None,
    weekly_off_enabled: Optional[bool] = None
) -> CalendarSetting:
    """Change the weekly rest day or switch it on/off (creates the settings row on first use)."""
    _require_master_admin(actor)
    if weekly_off_day is not None and not 1 <= weekly_off_day <= 7:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="weekly_off_day must be an ISO weekday between 1 and 7"
        )

    row = get_calendar_settings(db)
    if row.id is None:
        db.add(row)
    if weekly_off_day is not None:
        row.weekly_off_day = weekly_off_day
    if weekly_off_enabled is not None:
        row.weekly_off_enabled = weekly_off_enabled
    row.updated_by_id = actor.id
    row.updated_at = now_utc()
    db.flush()

    log_audit(
        db=db,
        actor_id=actor.id,
        action="CALENDAR_SETTINGS_UPDATE",
        entity_type="calendar_settings",
        entity_id=row.id,
        meta={"weekly_off_day": row.weekly_off_day, "weekly_off_enabled": row.weekly_off_enabled},
    )
    db.commit()
    db.refresh(row)
    return row
