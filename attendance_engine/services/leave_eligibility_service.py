"""
Leave eligibility: remaining monthly casual-leave days and permission hours.

Quota windows are calendar months in the business time zone. Requests that are pending,
escalated or approved all consume quota; rejected requests do not.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from attendance_engine.models.employee import Employee
from attendance_engine.models.leave import LeaveRequest, LeaveType, QUOTA_STATUSES
from attendance_engine.schemas.leave import LeaveBalanceOut
from attendance_engine.services.calendar_service import business_days_between
from attendance_engine.services.policy_service import resolve_policy
from attendance_engine.utils.datetime_utils import ensure_utc, local_date, month_bounds, now_utc, to_local

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    reason: Optional[str] = None


def _current_month(now: Optional[datetime]) -> Tuple[date, date]:
    local_now = to_local(ensure_utc(now) or now_utc())
    return month_bounds(local_now.year, local_now.month)


def _quota_requests(db: Session, user_id: int, leave_type: LeaveType) -> List[LeaveRequest]:
    return (
        db.query(LeaveRequest)
        .filter(
            LeaveRequest.user_id == user_id,
            LeaveRequest.leave_type == leave_type,
            LeaveRequest.status.in_(QUOTA_STATUSES),
        )
        .all()
    )


def used_casual_days(db: Session, user: Employee, now: Optional[datetime] = None) -> int:
    """Business days of casual leave overlapping the current month, clipped to the month."""
    first, last = _current_month(now)
    used = 0
    for leave in _quota_requests(db, user.id, LeaveType.CASUAL):
        start = max(local_date(leave.start_at), first)
        end = min(local_date(leave.end_at), last)
        if start <= end:
            used += business_days_between(db, start, end)
    return used


def used_permission_hours(db: Session, user: Employee, now: Optional[datetime] = None) -> float:
    """Sum of (end - start) in hours over permission requests starting in the current month."""
    first, last = _current_month(now)
    seconds = 0.0
    for leave in _quota_requests(db, user.id, LeaveType.PERMISSION):
        if first <= local_date(leave.start_at) <= last:
            seconds += (ensure_utc(leave.end_at) - ensure_utc(leave.start_at)).total_seconds()
    return seconds / 3600


def remaining_casual_days(db: Session, user: Employee, now: Optional[datetime] = None) -> int:
    policy = resolve_policy(db, user.department)
    return max(0, policy.max_monthly_casual_leaves - used_casual_days(db, user, now))


def remaining_permission_hours(db: Session, user: Employee, now: Optional[datetime] = None) -> int:
    """Whole permission hours left this month (partial hours are not offered)."""
    policy = resolve_policy(db, user.department)
    return max(0, math.floor(policy.max_monthly_permission_hours - used_permission_hours(db, user, now)))


def check_eligibility(
    db: Session,
    user: Employee,
    leave_type: LeaveType,
    now: Optional[datetime] = None
) -> EligibilityResult:
    """
    Whether the user may request another leave of this type this month

    Ineligible only when the relevant monthly balance is exhausted. Sick and vacation
    leave have no monthly quota, and a department without a stored policy is always
    eligible.
    """
    policy = resolve_policy(db, user.department)
    if policy.is_default:
        return EligibilityResult(eligible=True)

    if leave_type == LeaveType.CASUAL and remaining_casual_days(db, user, now) <= 0:
        logger.debug("Casual leave quota exhausted: user_id=%s", user.id)
        return EligibilityResult(
            eligible=False,
            reason=f"You have already used your allowed {policy.max_monthly_casual_leaves} casual leave(s) this month",
        )

    if leave_type == LeaveType.PERMISSION and used_permission_hours(db, user, now) >= policy.max_monthly_permission_hours:
        logger.debug("Permission hour quota exhausted: user_id=%s", user.id)
        return EligibilityResult(
            eligible=False,
            reason=f"You have already used your allowed {policy.max_monthly_permission_hours} hours of permission this month",
        )

    return EligibilityResult(eligible=True)


def leave_balance(db: Session, user: Employee, now: Optional[datetime] = None) -> LeaveBalanceOut:
    """Remaining casual days and permission hours for the current month with their limits."""
    policy = resolve_policy(db, user.department)
    local_now = to_local(ensure_utc(now) or now_utc())
    return LeaveBalanceOut(
        year=local_now.year,
        month=local_now.month,
        max_monthly_casual_leaves=policy.max_monthly_casual_leaves,
        remaining_casual_days=remaining_casual_days(db, user, now),
        max_monthly_permission_hours=policy.max_monthly_permission_hours,
        remaining_permission_hours=remaining_permission_hours(db, user, now),
        policy_configured=not policy.is_default,
    )
