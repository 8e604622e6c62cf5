"""
Leave approval workflow - submission, approval, rejection and escalation

States: pending -> approved | rejected | escalated; escalated -> approved | rejected | escalated.
Approved and rejected are terminal. Every decision is written with a compare-and-set on
(id, status, current_approver_id) so two approvers cannot both decide the same request.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from attendance_engine.core.errors import (
    ApproverNotFound,
    CannotEscalateFurther,
    EscalationRequired,
    Forbidden,
    IncludesNonWorkingDay,
    InvalidRange,
    LeaveNotFound,
    NotEligible,
    NotPending,
    ReasonRequired,
)
from attendance_engine.models.employee import AccessLevel, Employee, EscalationPath, OrgRole
from attendance_engine.models.leave import (
    LeaveApprovalEntry,
    LeaveDecision,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    OPEN_STATUSES,
)
from attendance_engine.services import directory_service
from attendance_engine.services.audit_service import log_audit
from attendance_engine.services.calendar_service import business_days_between, non_working_days_in_range
from attendance_engine.services.leave_eligibility_service import check_eligibility
from attendance_engine.utils.datetime_utils import ensure_utc, local_date, now_utc

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _resolve_initial_approver(db: Session, user: Employee) -> Employee:
    """Reporting manager, else the first holder above the user's rung on the ladder."""
    if user.reporting_manager_id and user.reporting_manager_id != user.id:
        manager = directory_service.get_active_employee(db, user.reporting_manager_id)
        if manager:
            return manager

    approver = directory_service.find_approver_above(db, user.role, exclude_ids={user.id})
    if approver is None:
        raise ApproverNotFound(f"No approver is configured above role {user.role.value}")
    return approver


def submit(
    db: Session,
    user: Employee,
    leave_type: LeaveType,
    start_at: datetime,
    end_at: datetime,
    reason: str,
    supporting_document_ref: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Submit a leave request

    Args:
        db: Database session
        user: Requesting employee
        leave_type: casual, permission, sick or vacation
        start_at: Start instant
        end_at: End instant
        reason: Free-text reason
        supporting_document_ref: Optional document reference
        now: Evaluation instant for the monthly quota window

    Returns:
        The pending LeaveRequest

    Raises:
        NotEligible: If the monthly balance for the type is exhausted
        InvalidRange: If end_at is before start_at
        IncludesNonWorkingDay: If a non-permission leave covers a non-working day
        ApproverNotFound: If nobody can approve the request
    """
    now = ensure_utc(now) or now_utc()
    start_at = ensure_utc(start_at)
    end_at = ensure_utc(end_at)

    eligibility = check_eligibility(db, user, leave_type, now)
    if not eligibility.eligible:
        raise NotEligible(eligibility.reason)

    if end_at < start_at:
        raise InvalidRange()

    if leave_type != LeaveType.PERMISSION:
        off_days = non_working_days_in_range(db, local_date(start_at), local_date(end_at))
        if off_days:
            listed = ", ".join(d.isoformat() for d in sorted(off_days))
            raise IncludesNonWorkingDay(
                f"Leave cannot include non-working days ({listed}); they are already holidays"
            )

    approver = _resolve_initial_approver(db, user)

    leave = LeaveRequest(
        user_id=user.id,
        leave_type=leave_type,
        start_at=start_at,
        end_at=end_at,
        reason=reason,
        supporting_document_ref=supporting_document_ref,
        status=LeaveStatus.PENDING,
        current_approver_id=approver.id,
        created_at=now,
        updated_at=now,
    )
    db.add(leave)
    db.flush()

    log_audit(
        db=db,
        actor_id=user.id,
        action="LEAVE_SUBMIT",
        entity_type="leave",
        entity_id=leave.id,
        meta={
            "leave_type": leave_type,
            "start_at": start_at,
            "end_at": end_at,
            "current_approver_id": approver.id,
        },
    )
    db.commit()
    db.refresh(leave)

    logger.info(
        "Leave submitted: leave_id=%s user_id=%s type=%s approver_id=%s",
        leave.id, user.id, leave_type.value, approver.id,
    )
    return leave


def get_request(db: Session, request_id: int) -> LeaveRequest:
    leave = db.query(LeaveRequest).filter(LeaveRequest.id == request_id).first()
    if not leave:
        raise LeaveNotFound(f"Leave request with id {request_id} not found")
    return leave


def get_request_for_viewer(db: Session, request_id: int, viewer: Employee) -> LeaveRequest:
    """Leave request visible to its requester, anyone who decided on it, or administrators."""
    leave = get_request(db, request_id)
    if viewer.access_level in (AccessLevel.ADMIN, AccessLevel.MASTER_ADMIN):
        return leave
    involved = {leave.user_id, leave.current_approver_id} | {entry.approver_id for entry in leave.history}
    if viewer.id not in involved:
        raise Forbidden("You cannot view this leave request")
    return leave


def _check_can_decide(leave: LeaveRequest, actor: Employee) -> None:
    if leave.status not in OPEN_STATUSES:
        raise NotPending()
    if actor.id == leave.user_id:
        raise Forbidden("You cannot decide on your own leave request")
    if leave.current_approver_id != actor.id:
        raise Forbidden()


def _requester_of(db: Session, leave: LeaveRequest) -> Employee:
    requester = directory_service.get_employee(db, leave.user_id)
    if requester is None:
        raise LeaveNotFound(f"Requester of leave request {leave.id} not found")
    return requester


def requires_escalation(requester: Employee, approver: Employee) -> bool:
    """An approver cannot decide for a peer or a superior."""
    return requester.role.level >= approver.role.level


def _compare_and_set(
    db: Session,
    leave_id: int,
    expected_status: LeaveStatus,
    expected_approver_id: Optional[int],
    values: Dict[str, Any],
) -> None:
    """
    Apply values only if the request still has the expected status and approver

    Raises:
        NotPending: If another decision got there first
    """
    updated = (
        db.query(LeaveRequest)
        .filter(
            LeaveRequest.id == leave_id,
            LeaveRequest.status == expected_status,
            LeaveRequest.current_approver_id == expected_approver_id,
        )
        .update(values, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        logger.info("Leave decision lost compare-and-set: leave_id=%s expected=%s", leave_id, expected_status.value)
        raise NotPending()


def _record_decision(
    db: Session,
    leave: LeaveRequest,
    actor: Employee,
    decision: LeaveDecision,
    comment: Optional[str],
    now: datetime,
    before: LeaveStatus,
    meta: Optional[Dict[str, Any]] = None,
) -> LeaveRequest:
    db.add(
        LeaveApprovalEntry(
            leave_request_id=leave.id,
            approver_id=actor.id,
            decision=decision,
            comment=comment,
            created_at=now,
        )
    )
    log_audit(
        db=db,
        actor_id=actor.id,
        action=f"LEAVE_{decision.name}",
        entity_type="leave",
        entity_id=leave.id,
        meta={"before": before, "after": decision, "comment": comment, **(meta or {})},
    )
    db.commit()
    db.refresh(leave)

    logger.info(
        "Leave status transition: leave_id=%s before=%s after=%s actor_id=%s",
        leave.id, before.value, leave.status.value, actor.id,
    )
    return leave


def approve(
    db: Session,
    request_id: int,
    approver: Employee,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Approve a pending or escalated request

    Raises:
        LeaveNotFound: If the request does not exist
        NotPending: If the request is already decided (or a concurrent decision won)
        Forbidden: If approver is not the current approver, or is the requester
        EscalationRequired: If the requester is at or above the approver's level
    """
    now = ensure_utc(now) or now_utc()
    leave = get_request(db, request_id)
    _check_can_decide(leave, approver)

    requester = _requester_of(db, leave)
    if requires_escalation(requester, approver):
        raise EscalationRequired()

    before = leave.status
    _compare_and_set(db, leave.id, before, approver.id, {
        LeaveRequest.status: LeaveStatus.APPROVED,
        LeaveRequest.approved_by_id: approver.id,
        LeaveRequest.approver_notes: notes,
        LeaveRequest.decided_at: now,
        LeaveRequest.updated_at: now,
    })
    return _record_decision(db, leave, approver, LeaveDecision.APPROVED, notes, now, before)


def reject(
    db: Session,
    request_id: int,
    approver: Employee,
    notes: Optional[str],
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Reject a pending or escalated request; notes are mandatory

    Raises:
        ReasonRequired: If notes are empty
        (plus the same errors as approve)
    """
    now = ensure_utc(now) or now_utc()
    leave = get_request(db, request_id)
    _check_can_decide(leave, approver)

    requester = _requester_of(db, leave)
    if requires_escalation(requester, approver):
        raise EscalationRequired()

    if _blank(notes):
        raise ReasonRequired()

    before = leave.status
    _compare_and_set(db, leave.id, before, approver.id, {
        LeaveRequest.status: LeaveStatus.REJECTED,
        LeaveRequest.approver_notes: notes,
        LeaveRequest.decided_at: now,
        LeaveRequest.updated_at: now,
    })
    return _record_decision(db, leave, approver, LeaveDecision.REJECTED, notes, now, before)


def _resolve_escalation_target(
    db: Session,
    rung: OrgRole,
    requester: Employee,
    approver: Employee,
    target_approver_id: Optional[int],
) -> Employee:
    if target_approver_id is None:
        target = directory_service.find_role_holder(db, rung, exclude_ids={requester.id, approver.id})
        if target is None:
            raise ApproverNotFound(f"No {rung.value} is available to receive this escalation")
        return target

    target = directory_service.get_active_employee(db, target_approver_id)
    if target is None:
        raise ApproverNotFound(f"Employee {target_approver_id} not found")
    if target.id in (requester.id, approver.id):
        raise Forbidden("A request cannot be escalated to its requester or current approver")

    path = db.query(EscalationPath).filter(EscalationPath.role == rung).first()
    holds_rung = target.role == rung or (path is not None and path.approver_id == target.id)
    if not holds_rung:
        raise Forbidden(f"Escalation target must hold the {rung.value} role")
    return target


def escalate(
    db: Session,
    request_id: int,
    approver: Employee,
    target_approver_id: Optional[int] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Forward a request to the next rung above the acting approver

    Without target_approver_id the target is the escalation path holder for the next rung,
    else any active employee with that role (never the requester).

    Raises:
        NotPending: If the request is already decided (or a concurrent decision won)
        Forbidden: If approver is not the current approver, or the target does not hold the next rung
        CannotEscalateFurther: If the approver is at the top of the ladder
        ApproverNotFound: If no holder of the next rung is available
    """
    now = ensure_utc(now) or now_utc()
    leave = get_request(db, request_id)
    _check_can_decide(leave, approver)

    rung = approver.role.next_rung()
    if rung is None:
        raise CannotEscalateFurther()

    requester = _requester_of(db, leave)
    target = _resolve_escalation_target(db, rung, requester, approver, target_approver_id)

    before = leave.status
    values = {
        LeaveRequest.status: LeaveStatus.ESCALATED,
        LeaveRequest.escalated_from_id: approver.id,
        LeaveRequest.escalated_to_id: target.id,
        LeaveRequest.current_approver_id: target.id,
        LeaveRequest.updated_at: now,
    }
    if not _blank(notes):
        values[LeaveRequest.approver_notes] = notes
    _compare_and_set(db, leave.id, before, approver.id, values)
    return _record_decision(
        db, leave, approver, LeaveDecision.ESCALATED, notes, now, before,
        meta={"escalated_to_id": target.id, "rung": rung},
    )


def leave_duration(db: Session, leave: LeaveRequest) -> Tuple[float, str]:
    """Hours for permission (2 decimals), inclusive business days otherwise."""
    if leave.leave_type == LeaveType.PERMISSION:
        hours = (ensure_utc(leave.end_at) - ensure_utc(leave.start_at)).total_seconds() / 3600
        return round(hours, 2), "hours"
    days = business_days_between(db, local_date(leave.start_at), local_date(leave.end_at))
    return float(days), "days"


def list_my_requests(db: Session, user_id: int) -> List[LeaveRequest]:
    """Requests submitted by the user, newest first."""
    return (
        db.query(LeaveRequest)
        .filter(LeaveRequest.user_id == user_id)
        .order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
        .all()
    )


def list_for_approver(db: Session, approver_id: int) -> List[LeaveRequest]:
    """Pending and escalated requests awaiting the approver, oldest first."""
    return (
        db.query(LeaveRequest)
        .filter(
            LeaveRequest.current_approver_id == approver_id,
            LeaveRequest.status.in_(OPEN_STATUSES),
        )
        .order_by(LeaveRequest.created_at.asc(), LeaveRequest.id.asc())
        .all()
    )


def list_escalation_paths(db: Session) -> List[EscalationPath]:
    return db.query(EscalationPath).order_by(EscalationPath.id).all()


def set_escalation_path(db: Session, role: OrgRole, approver_id: int, actor: Employee) -> EscalationPath:
    """
    Name the employee who receives escalations for a rung

    Raises:
        Forbidden: If actor is not a master administrator
        ApproverNotFound: If approver_id is not an active employee
    """
    if actor.access_level != AccessLevel.MASTER_ADMIN:
        raise Forbidden("Only a master administrator can configure escalation paths")
    if directory_service.get_active_employee(db, approver_id) is None:
        raise ApproverNotFound(f"Employee {approver_id} not found")

    path = db.query(EscalationPath).filter(EscalationPath.role == role).first()
    if path is None:
        path = EscalationPath(role=role, approver_id=approver_id)
        db.add(path)
    else:
        path.approver_id = approver_id
    path.updated_by_id = actor.id
    path.updated_at = now_utc()
    db.flush()

    log_audit(
        db=db,
        actor_id=actor.id,
        action="ESCALATION_PATH_SET",
        entity_type="escalation_path",
        entity_id=path.id,
        meta={"role": role, "approver_id": approver_id},
    )
    db.commit()
    db.refresh(path)
    logger.info("Escalation path for %s set to employee %s", role.value, approver_id)
    return path
