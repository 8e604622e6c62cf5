"""
Escalation path endpoints: who receives escalations for each org role
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from attendance_engine.core.deps import get_db, get_current_user, require_access
from attendance_engine.models.employee import AccessLevel, Employee, OrgRole
from attendance_engine.schemas.employee import EscalationPathOut, EscalationPathUpdate
from attendance_engine.services import leave_workflow_service

router = APIRouter()


@router.get("", response_model=List[EscalationPathOut])
async def list_escalation_paths_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_access(AccessLevel.ADMIN)),
):
    return [EscalationPathOut.model_validate(p) for p in leave_workflow_service.list_escalation_paths(db)]


@router.put("/{role}", response_model=EscalationPathOut)
async def set_escalation_path_endpoint(
    role: OrgRole,
    payload: EscalationPathUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    path = leave_workflow_service.set_escalation_path(db, role, payload.approver_id, current_user)
    return EscalationPathOut.model_validate(path)
