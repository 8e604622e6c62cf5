"""
Tests for the holiday calendar: non-working days, business days and holiday management
"""
from datetime import date

import pytest
from fastapi import HTTPException

from attendance_engine.core.errors import Forbidden
from attendance_engine.models.holiday import Holiday
from attendance_engine.services import calendar_service
from attendance_engine.services.calendar_service import (
    business_days_between,
    is_non_working_day,
    non_working_days_in_range,
)


def test_sunday_is_non_working_by_default(db):
    assert is_non_working_day(db, date(2026, 10, 4)) is True
    assert is_non_working_day(db, date(2026, 10, 5)) is False


def test_saturday_is_a_working_day(db):
    assert is_non_working_day(db, date(2026, 10, 10)) is False


def test_one_off_holiday(db):
    db.add(Holiday(date=date(2026, 10, 2), name="Gandhi Jayanti"))
    db.commit()
    assert is_non_working_day(db, date(2026, 10, 2)) is True
    assert is_non_working_day(db, date(2027, 10, 2)) is False


def test_recurring_holiday_matches_every_year(db):
    db.add(Holiday(date=date(2020, 1, 26), name="Republic Day", recurring=True))
    db.commit()
    assert is_non_working_day(db, date(2027, 1, 26)) is True
    assert is_non_working_day(db, date(2027, 1, 27)) is False


def test_weekly_off_can_be_disabled(db, master_admin):
    calendar_service.update_calendar_settings(db, master_admin, weekly_off_enabled=False)
    assert is_non_working_day(db, date(2026, 10, 4)) is False


def test_weekly_off_day_can_move(db, master_admin):
    calendar_service.update_calendar_settings(db, master_admin, weekly_off_day=6)
    assert is_non_working_day(db, date(2026, 10, 10)) is True
    assert is_non_working_day(db, date(2026, 10, 11)) is False


def test_invalid_weekly_off_day(db, master_admin):
    with pytest.raises(HTTPException) as exc:
        calendar_service.update_calendar_settings(db, master_admin, weekly_off_day=8)
    assert exc.value.status_code == 400


def test_non_working_days_in_range(db):
    days = non_working_days_in_range(db, date(2026, 10, 1), date(2026, 10, 31))
    assert days == {date(2026, 10, 4), date(2026, 10, 11), date(2026, 10, 18), date(2026, 10, 25)}


def test_business_days_single_day(db):
    assert business_days_between(db, date(2026, 10, 5), date(2026, 10, 5)) == 1
    assert business_days_between(db, date(2026, 10, 4), date(2026, 10, 4)) == 0


def test_business_days_empty_when_end_before_start(db):
    assert business_days_between(db, date(2026, 10, 5), date(2026, 10, 1)) == 0


def test_business_days_skip_sunday_and_holiday(db):
    db.add(Holiday(date=date(2026, 10, 13), name="Local festival"))
    db.commit()
    # Fri 16 .. Mon 19 less Sunday 18
    assert business_days_between(db, date(2026, 10, 16), date(2026, 10, 19)) == 3
    # Mon 12 .. Wed 14 less Tuesday holiday
    assert business_days_between(db, date(2026, 10, 12), date(2026, 10, 14)) == 2


def test_holiday_management_requires_master_admin(db, make_employee):
    with pytest.raises(Forbidden):
        calendar_service.create_holiday(db, make_employee(), date(2026, 12, 25), "Christmas")


def test_create_list_delete_holiday(db, master_admin):
    christmas = calendar_service.create_holiday(db, master_admin, date(2026, 12, 25), "Christmas", recurring=True)
    calendar_service.create_holiday(db, master_admin, date(2027, 3, 4), "Holi")

    names_2026 = [h.name for h in calendar_service.list_holidays(db, year=2026)]
    assert names_2026 == ["Christmas"]
    assert len(calendar_service.list_holidays(db)) == 2

    calendar_service.delete_holiday(db, master_admin, christmas.id)
    assert [h.name for h in calendar_service.list_holidays(db)] == ["Holi"]


def test_duplicate_holiday_conflicts(db, master_admin):
    calendar_service.create_holiday(db, master_admin, date(2026, 12, 25), "Christmas")
    with pytest.raises(HTTPException) as exc:
        calendar_service.create_holiday(db, master_admin, date(2026, 12, 25), "Christmas again")
    assert exc.value.status_code == 409


def test_recurring_holiday_conflicts_across_years(db, master_admin):
    calendar_service.create_holiday(db, master_admin, date(2025, 1, 26), "Republic Day", recurring=True)
    with pytest.raises(HTTPException) as exc:
        calendar_service.create_holiday(db, master_admin, date(2026, 1, 26), "Republic Day", recurring=True)
    assert exc.value.status_code == 409

    # A one-off holiday on the same month/day of another year is a different entry
    calendar_service.create_holiday(db, master_admin, date(2026, 1, 26), "Plant shutdown")
    assert len(calendar_service.list_holidays(db)) == 2


def test_delete_missing_holiday(db, master_admin):
    with pytest.raises(HTTPException) as exc:
        calendar_service.delete_holiday(db, master_admin, 999)
    assert exc.value.status_code == 404
