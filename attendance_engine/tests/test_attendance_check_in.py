"""
Tests for attendance check-in
"""
from datetime import date

import pytest

from attendance_engine.core.config import settings
from attendance_engine.core.errors import (
    AlreadyCheckedIn,
    LateReasonRequired,
    LocationNotVerified,
    MissingRequiredFields,
    OffSiteNotPermitted,
)
from attendance_engine.models import AttendanceRecord, AuditLog, Department
from attendance_engine.models.attendance import AttendanceStatus, WorkLocation
from attendance_engine.services import attendance_service
from attendance_engine.tests.helpers import ist


def test_on_time_office_check_in(db, make_employee):
    user = make_employee()
    record = attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 5, 8, 45))

    assert record.work_date == date(2026, 10, 5)
    assert record.status == AttendanceStatus.CHECKED_IN
    assert record.is_late is False
    assert record.late_reason is None
    assert record.department == Department.TECHNICAL
    assert record.required_check_in_time == "09:00"
    assert record.required_check_out_time == "18:00"
    assert db.query(AuditLog).filter(AuditLog.action == "CHECK_IN").count() == 1


def test_exactly_on_time_is_not_late(db, make_employee):
    record = attendance_service.check_in(db, make_employee(), WorkLocation.OFFICE, now=ist(2026, 10, 5, 9, 0))
    assert record.is_late is False


def test_late_without_reason_is_rejected(db, make_employee):
    user = make_employee()
    with pytest.raises(LateReasonRequired):
        attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 5, 9, 1))
    with pytest.raises(LateReasonRequired):
        attendance_service.check_in(db, user, WorkLocation.OFFICE, late_reason="   ", now=ist(2026, 10, 5, 9, 1))
    assert db.query(AttendanceRecord).count() == 0


def test_late_with_reason(db, make_employee):
    record = attendance_service.check_in(
        db, make_employee(), WorkLocation.OFFICE, late_reason="Traffic", now=ist(2026, 10, 5, 9, 40)
    )
    assert record.is_late is True
    assert record.late_reason == "Traffic"


def test_department_check_in_time_is_used(db, make_employee, make_policy):
    make_policy(Department.TECHNICAL, required_check_in_time="10:00")
    record = attendance_service.check_in(db, make_employee(), WorkLocation.OFFICE, now=ist(2026, 10, 5, 9, 40))
    assert record.is_late is False
    assert record.required_check_in_time == "10:00"


def test_second_check_in_same_day(db, make_employee):
    user = make_employee()
    attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 5, 8, 0))
    with pytest.raises(AlreadyCheckedIn):
        attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 5, 8, 30))


def test_next_day_check_in_is_allowed(db, make_employee):
    user = make_employee()
    attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 5, 8, 0))
    record = attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 6, 8, 0))
    assert record.work_date == date(2026, 10, 6)


def test_concurrent_check_in_loses_on_unique_constraint(db, make_employee, monkeypatch):
    user = make_employee()
    attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 5, 8, 0))

    # Simulate the second request having read "no record" before the first committed
    monkeypatch.setattr(attendance_service, "get_record", lambda *args, **kwargs: None)
    with pytest.raises(AlreadyCheckedIn):
        attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 5, 8, 1))

    assert db.query(AttendanceRecord).count() == 1


def test_work_date_uses_business_time_zone(db, make_employee):
    # 01:00 IST on the 6th is still the 5th in UTC
    record = attendance_service.check_in(db, make_employee(), WorkLocation.OFFICE, now=ist(2026, 10, 6, 1, 0))
    assert record.work_date == date(2026, 10, 6)


def test_off_site_not_permitted_by_policy(db, make_employee):
    with pytest.raises(OffSiteNotPermitted):
        attendance_service.check_in(
            db, make_employee(), WorkLocation.OFF_SITE,
            location_details="Site", off_site_reason="Install", now=ist(2026, 10, 5, 8, 0),
        )


def test_off_site_permitted_by_policy(db, make_employee, make_policy):
    make_policy(Department.TECHNICAL, allows_off_site_work=True)
    record = attendance_service.check_in(
        db, make_employee(), WorkLocation.OFF_SITE,
        location_details="Rooftop, Anna Nagar", off_site_reason="Panel installation", now=ist(2026, 10, 5, 8, 0),
    )
    assert record.work_location == WorkLocation.OFF_SITE
    assert record.location_details == "Rooftop, Anna Nagar"


@pytest.mark.parametrize("department", [Department.SALES, Department.MARKETING])
def test_field_departments_always_allowed_off_site(db, make_employee, make_policy, department):
    make_policy(department, allows_off_site_work=False)
    record = attendance_service.check_in(
        db, make_employee(department=department), WorkLocation.OFF_SITE,
        location_details="Customer site", off_site_reason="Demo", customer_details="Acme Textiles",
        now=ist(2026, 10, 5, 8, 0),
    )
    assert record.customer_details == "Acme Textiles"


@pytest.mark.parametrize("missing", ["location_details", "off_site_reason", "customer_details"])
def test_field_departments_must_describe_off_site_work(db, make_employee, missing):
    details = {"location_details": "Customer site", "off_site_reason": "Demo", "customer_details": "Acme"}
    details[missing] = " "
    with pytest.raises(MissingRequiredFields):
        attendance_service.check_in(
            db, make_employee(department=Department.SALES), WorkLocation.OFF_SITE,
            now=ist(2026, 10, 5, 8, 0), **details,
        )


def test_office_check_in_ignores_off_site_fields(db, make_employee):
    record = attendance_service.check_in(
        db, make_employee(department=Department.SALES), WorkLocation.OFFICE,
        location_details="ignored", now=ist(2026, 10, 5, 8, 0),
    )
    assert record.location_details is None


def test_geofence_flag_mode_marks_record(db, make_employee, monkeypatch):
    monkeypatch.setattr(settings, "GEOFENCE_ENFORCEMENT", "flag")
    record = attendance_service.check_in(db, make_employee(), WorkLocation.OFFICE, now=ist(2026, 10, 5, 8, 0))
    assert record.needs_review is True
    assert record.within_geofence is None


def test_geofence_reject_mode_blocks_check_in(db, make_employee, monkeypatch):
    monkeypatch.setattr(settings, "GEOFENCE_ENFORCEMENT", "reject")
    with pytest.raises(LocationNotVerified):
        attendance_service.check_in(
            db, make_employee(), WorkLocation.OFFICE, latitude=13.0, longitude=80.0, now=ist(2026, 10, 5, 8, 0)
        )
    assert db.query(AttendanceRecord).count() == 0


def test_get_today_record(db, make_employee):
    user = make_employee()
    assert attendance_service.get_today_record(db, user.id, now=ist(2026, 10, 5, 12, 0)) is None
    attendance_service.check_in(db, user, WorkLocation.OFFICE, now=ist(2026, 10, 5, 8, 0))
    assert attendance_service.get_today_record(db, user.id, now=ist(2026, 10, 5, 12, 0)) is not None
