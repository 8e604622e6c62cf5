"""
Department policy endpoints (writes are master-admin only)
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from attendance_engine.core.deps import get_db, get_current_user
from attendance_engine.models.employee import Department, Employee
from attendance_engine.schemas.policy import EffectivePolicy, PolicyOut, PolicyUpdate
from attendance_engine.services import policy_service

router = APIRouter()


@router.get("", response_model=List[PolicyOut])
async def list_policies_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Stored department policies."""
    return [PolicyOut.model_validate(p) for p in policy_service.list_policies(db)]


@router.post("/initialize-defaults", response_model=List[PolicyOut])
async def initialize_defaults_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Seed a policy for each department that has none; returns the created ones."""
    created = policy_service.initialize_default_policies(db, current_user)
    return [PolicyOut.model_validate(p) for p in created]


@router.get("/{department}", response_model=EffectivePolicy)
async def get_policy_endpoint(
    department: Department,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Effective policy for a department (system defaults when none is stored, is_default=true)."""
    return policy_service.resolve_policy(db, department)


@router.put("/{department}", response_model=PolicyOut)
async def upsert_policy_endpoint(
    department: Department,
    payload: PolicyUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Create or partially update a department policy. 403 Forbidden for non master admins."""
    policy = policy_service.upsert_policy(db, department, payload, current_user)
    return PolicyOut.model_validate(policy)
