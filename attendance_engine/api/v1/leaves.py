"""
Leave endpoints: balance and eligibility, submission, approval queue and decisions
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from attendance_engine.core.deps import get_db, get_current_user
from attendance_engine.models.employee import Employee
from attendance_engine.models.leave import LeaveRequest, LeaveType
from attendance_engine.schemas.leave import (
    ApproveRequest,
    EligibilityOut,
    EscalateRequest,
    LeaveBalanceOut,
    LeaveListResponse,
    LeaveOut,
    LeaveSubmitRequest,
    RejectRequest,
)
from attendance_engine.services import leave_eligibility_service, leave_workflow_service

router = APIRouter()


def _leave_out(db: Session, leave: LeaveRequest) -> LeaveOut:
    duration, unit = leave_workflow_service.leave_duration(db, leave)
    return LeaveOut.model_validate(leave).model_copy(update={"duration": duration, "duration_unit": unit})


@router.get("/balance", response_model=LeaveBalanceOut)
async def balance_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Remaining casual days and permission hours this month."""
    return leave_eligibility_service.leave_balance(db, current_user)


@router.get("/eligibility", response_model=EligibilityOut)
async def eligibility_endpoint(
    leave_type: LeaveType = Query(..., description="Leave type to check"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    result = leave_eligibility_service.check_eligibility(db, current_user, leave_type)
    return EligibilityOut(leave_type=leave_type, eligible=result.eligible, reason=result.reason)


@router.post("", response_model=LeaveOut, status_code=201)
async def submit_endpoint(
    payload: LeaveSubmitRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """
    Submit a leave request.
    400 NotEligible / InvalidRange / IncludesNonWorkingDay; 404 ApproverNotFound.
    """
    leave = leave_workflow_service.submit(
        db,
        current_user,
        leave_type=payload.leave_type,
        start_at=payload.start_at,
        end_at=payload.end_at,
        reason=payload.reason,
        supporting_document_ref=payload.supporting_document_ref,
    )
    return _leave_out(db, leave)


@router.get("/my", response_model=LeaveListResponse)
async def my_leaves_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    leaves = leave_workflow_service.list_my_requests(db, current_user.id)
    return LeaveListResponse(items=[_leave_out(db, leave) for leave in leaves], total=len(leaves))


@router.get("/approvals", response_model=LeaveListResponse)
async def approvals_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Pending and escalated requests awaiting the current user, oldest first."""
    leaves = leave_workflow_service.list_for_approver(db, current_user.id)
    return LeaveListResponse(items=[_leave_out(db, leave) for leave in leaves], total=len(leaves))


@router.get("/{leave_id}", response_model=LeaveOut)
async def get_leave_endpoint(
    leave_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    leave = leave_workflow_service.get_request_for_viewer(db, leave_id, current_user)
    return _leave_out(db, leave)


@router.post("/{leave_id}/approve", response_model=LeaveOut)
async def approve_endpoint(
    leave_id: int,
    payload: Optional[ApproveRequest] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Approve. 409 NotPending; 403 Forbidden / EscalationRequired."""
    payload = payload or ApproveRequest()
    leave = leave_workflow_service.approve(db, leave_id, current_user, notes=payload.notes)
    return _leave_out(db, leave)


@router.post("/{leave_id}/reject", response_model=LeaveOut)
async def reject_endpoint(
    leave_id: int,
    payload: RejectRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Reject with mandatory notes. 400 ReasonRequired when notes are empty."""
    leave = leave_workflow_service.reject(db, leave_id, current_user, notes=payload.notes)
    return _leave_out(db, leave)


@router.post("/{leave_id}/escalate", response_model=LeaveOut)
async def escalate_endpoint(
    leave_id: int,
    payload: Optional[EscalateRequest] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Forward to the next rung. 400 CannotEscalateFurther at the top of the ladder."""
    payload = payload or EscalateRequest()
    leave = leave_workflow_service.escalate(
        db,
        leave_id,
        current_user,
        target_approver_id=payload.target_approver_id,
        notes=payload.notes,
    )
    return _leave_out(db, leave)
