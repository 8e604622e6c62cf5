"""
Tests for monthly leave quotas and eligibility
"""
import pytest

from attendance_engine.models import Department, LeaveRequest
from attendance_engine.models.leave import LeaveStatus, LeaveType
from attendance_engine.services import leave_eligibility_service as eligibility
from attendance_engine.tests.helpers import ist
from attendance_engine.utils.datetime_utils import ensure_utc

NOW = ist(2026, 10, 15, 12, 0)


def _leave(db, user, leave_type, start_at, end_at, status=LeaveStatus.PENDING):
    leave = LeaveRequest(
        user_id=user.id,
        leave_type=leave_type,
        start_at=ensure_utc(start_at),
        end_at=ensure_utc(end_at),
        reason="Family function",
        status=status,
    )
    db.add(leave)
    db.commit()
    return leave


@pytest.fixture
def user(make_employee):
    return make_employee()


@pytest.fixture
def policy(make_policy):
    return make_policy(Department.TECHNICAL, max_monthly_casual_leaves=1, max_monthly_permission_hours=2)


def test_department_without_policy_is_always_eligible(db, user):
    _leave(db, user, LeaveType.CASUAL, ist(2026, 10, 5, 9), ist(2026, 10, 7, 18))
    result = eligibility.check_eligibility(db, user, LeaveType.CASUAL, now=NOW)
    assert result.eligible is True
    assert result.reason is None


def test_fresh_month_is_eligible(db, user, policy):
    assert eligibility.check_eligibility(db, user, LeaveType.CASUAL, now=NOW).eligible is True
    assert eligibility.check_eligibility(db, user, LeaveType.PERMISSION, now=NOW).eligible is True


def test_casual_quota_exhausted(db, user, policy):
    _leave(db, user, LeaveType.CASUAL, ist(2026, 10, 5, 9), ist(2026, 10, 5, 18))

    result = eligibility.check_eligibility(db, user, LeaveType.CASUAL, now=NOW)
    assert result.eligible is False
    assert result.reason == "You have already used your allowed 1 casual leave(s) this month"


def test_permission_quota_exhausted(db, user, policy):
    _leave(db, user, LeaveType.PERMISSION, ist(2026, 10, 5, 10), ist(2026, 10, 5, 12))

    result = eligibility.check_eligibility(db, user, LeaveType.PERMISSION, now=NOW)
    assert result.eligible is False
    assert "2 hours of permission" in result.reason


@pytest.mark.parametrize("leave_type", [LeaveType.SICK, LeaveType.VACATION])
def test_sick_and_vacation_have_no_quota(db, user, policy, leave_type):
    _leave(db, user, LeaveType.CASUAL, ist(2026, 10, 5, 9), ist(2026, 10, 5, 18))
    _leave(db, user, LeaveType.PERMISSION, ist(2026, 10, 6, 10), ist(2026, 10, 6, 12))
    assert eligibility.check_eligibility(db, user, leave_type, now=NOW).eligible is True


def test_rejected_requests_do_not_consume_quota(db, user, policy):
    _leave(db, user, LeaveType.CASUAL, ist(2026, 10, 5, 9), ist(2026, 10, 5, 18), status=LeaveStatus.REJECTED)
    assert eligibility.remaining_casual_days(db, user, now=NOW) == 1


@pytest.mark.parametrize("status", [LeaveStatus.PENDING, LeaveStatus.ESCALATED, LeaveStatus.APPROVED])
def test_open_and_approved_requests_consume_quota(db, user, policy, status):
    _leave(db, user, LeaveType.CASUAL, ist(2026, 10, 5, 9), ist(2026, 10, 5, 18), status=status)
    assert eligibility.remaining_casual_days(db, user, now=NOW) == 0


def test_other_users_requests_are_ignored(db, user, policy, make_employee):
    other = make_employee(name="Other")
    _leave(db, other, LeaveType.CASUAL, ist(2026, 10, 5, 9), ist(2026, 10, 5, 18))
    assert eligibility.remaining_casual_days(db, user, now=NOW) == 1


def test_casual_days_exclude_non_working_days(db, user, make_policy):
    make_policy(Department.TECHNICAL, max_monthly_casual_leaves=5)
    # Friday 16th to Monday 19th spans Sunday 18th
    _leave(db, user, LeaveType.CASUAL, ist(2026, 10, 16, 9), ist(2026, 10, 19, 18))
    assert eligibility.used_casual_days(db, user, now=NOW) == 3
    assert eligibility.remaining_casual_days(db, user, now=NOW) == 2


def test_casual_days_are_clipped_to_the_month(db, user, make_policy):
    make_policy(Department.TECHNICAL, max_monthly_casual_leaves=2)
    # Wednesday 30 September to Thursday 1 October
    _leave(db, user, LeaveType.CASUAL, ist(2026, 9, 30, 9), ist(2026, 10, 1, 18))

    assert eligibility.used_casual_days(db, user, now=NOW) == 1
    assert eligibility.used_casual_days(db, user, now=ist(2026, 9, 10, 12)) == 1
    assert eligibility.used_casual_days(db, user, now=ist(2026, 11, 10, 12)) == 0


def test_permission_hours_are_summed_before_rounding(db, user, policy):
    _leave(db, user, LeaveType.PERMISSION, ist(2026, 10, 6, 16, 0), ist(2026, 10, 6, 16, 30), status=LeaveStatus.APPROVED)
    _leave(db, user, LeaveType.PERMISSION, ist(2026, 10, 7, 16, 0), ist(2026, 10, 7, 16, 30), status=LeaveStatus.APPROVED)

    now = ist(2026, 10, 8, 12, 0)
    assert eligibility.used_permission_hours(db, user, now=now) == pytest.approx(1.0)
    assert eligibility.remaining_permission_hours(db, user, now=now) == 1
    assert eligibility.check_eligibility(db, user, LeaveType.PERMISSION, now=now).eligible is True


def test_partial_hour_left_is_not_offered_but_still_eligible(db, user, policy):
    _leave(db, user, LeaveType.PERMISSION, ist(2026, 10, 5, 10, 0), ist(2026, 10, 5, 11, 30))

    assert eligibility.used_permission_hours(db, user, now=NOW) == pytest.approx(1.5)
    assert eligibility.remaining_permission_hours(db, user, now=NOW) == 0
    assert eligibility.check_eligibility(db, user, LeaveType.PERMISSION, now=NOW).eligible is True


def test_permission_hours_include_non_working_time(db, user, make_policy):
    make_policy(Department.TECHNICAL, max_monthly_permission_hours=4)
    # Saturday 23:00 to Sunday 01:00
    _leave(db, user, LeaveType.PERMISSION, ist(2026, 10, 17, 23, 0), ist(2026, 10, 18, 1, 0))
    assert eligibility.used_permission_hours(db, user, now=NOW) == pytest.approx(2.0)


def test_permission_hours_count_in_month_of_start(db, user, policy):
    _leave(db, user, LeaveType.PERMISSION, ist(2026, 9, 29, 10), ist(2026, 9, 29, 12))
    assert eligibility.used_permission_hours(db, user, now=NOW) == 0


def test_remaining_is_never_negative(db, user, policy):
    _leave(db, user, LeaveType.CASUAL, ist(2026, 10, 5, 9), ist(2026, 10, 9, 18))
    assert eligibility.used_casual_days(db, user, now=NOW) == 5
    assert eligibility.remaining_casual_days(db, user, now=NOW) == 0


def test_remaining_only_decreases_as_requests_are_added(db, user, make_policy):
    make_policy(Department.TECHNICAL, max_monthly_casual_leaves=3)
    seen = [eligibility.remaining_casual_days(db, user, now=NOW)]
    for day in (5, 6, 7, 8):
        _leave(db, user, LeaveType.CASUAL, ist(2026, 10, day, 9), ist(2026, 10, day, 18))
        seen.append(eligibility.remaining_casual_days(db, user, now=NOW))
    assert seen == [3, 2, 1, 0, 0]


def test_leave_balance(db, user, policy):
    _leave(db, user, LeaveType.PERMISSION, ist(2026, 10, 5, 10), ist(2026, 10, 5, 11))

    balance = eligibility.leave_balance(db, user, now=NOW)
    assert balance.year == 2026
    assert balance.month == 10
    assert balance.max_monthly_casual_leaves == 1
    assert balance.remaining_casual_days == 1
    assert balance.max_monthly_permission_hours == 2
    assert balance.remaining_permission_hours == 1
    assert balance.policy_configured is True
