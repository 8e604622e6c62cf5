"""
Department policy service - per-department attendance and leave rules
"""
import logging
from typing import Any, Dict, List, Optional, Union
from sqlalchemy.orm import Session

from attendance_engine.core.errors import Forbidden, InvalidPolicyValue
from attendance_engine.models.department_policy import DepartmentPolicy
from attendance_engine.models.employee import (
    AccessLevel,
    Department,
    Employee,
    FIELD_DEPARTMENTS,
    OFFICE_CHECKOUT_DEPARTMENTS,
)
from attendance_engine.schemas.policy import EffectivePolicy, PolicyUpdate
from attendance_engine.services.audit_service import log_audit
from attendance_engine.utils.datetime_utils import now_utc, parse_hhmm

logger = logging.getLogger(__name__)

TIME_FIELDS = ("required_check_in_time", "required_check_out_time")
QUOTA_FIELDS = ("max_monthly_permission_hours", "max_monthly_casual_leaves")
FLAG_FIELDS = ("allows_off_site_work", "overtime_allowed")
POLICY_FIELDS = TIME_FIELDS + FLAG_FIELDS + QUOTA_FIELDS


def _initial_values(department: Department) -> Dict[str, Any]:
    """Per-department starting values used when seeding policies."""
    return {
        "required_check_in_time": "10:00" if department == Department.TECHNICAL else "09:30",
        "required_check_out_time": (
            "18:30" if department in OFFICE_CHECKOUT_DEPARTMENTS else "19:30"
        ),
        "allows_off_site_work": department in FIELD_DEPARTMENTS,
        "overtime_allowed": department == Department.TECHNICAL,
        "max_monthly_permission_hours": 2,
        "max_monthly_casual_leaves": 1,
    }


def _require_master_admin(editor: Employee) -> None:
    if editor.access_level != AccessLevel.MASTER_ADMIN:
        raise Forbidden("Only a master administrator can change department policies")


def _validate_values(values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalise supplied policy values

    Raises:
        InvalidPolicyValue: On malformed times, negative quotas or unknown fields
    """
    unknown = set(values) - set(POLICY_FIELDS)
    if unknown:
        raise InvalidPolicyValue(f"Unknown policy field(s): {', '.join(sorted(unknown))}")

    cleaned: Dict[str, Any] = {}
    for field, value in values.items():
        if value is None:
            continue
        if field in TIME_FIELDS:
            try:
                parsed = parse_hhmm(str(value))
            except ValueError as e:
                raise InvalidPolicyValue(f"{field}: {e}") from e
            cleaned[field] = parsed.strftime("%H:%M")
        elif field in QUOTA_FIELDS:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidPolicyValue(f"{field} must be a non-negative whole number")
            cleaned[field] = value
        else:
            cleaned[field] = bool(value)
    return cleaned


def get_policy(db: Session, department: Department) -> Optional[DepartmentPolicy]:
    """Stored policy for a department, or None when the department has none."""
    return db.query(DepartmentPolicy).filter(DepartmentPolicy.department == department).first()


def to_effective(department: Department, policy: Optional[DepartmentPolicy]) -> EffectivePolicy:
    """Fill a possibly-absent stored policy with system defaults."""
    if policy is None:
        return EffectivePolicy(department=department)
    return EffectivePolicy(
        department=department,
        required_check_in_time=policy.required_check_in_time,
        required_check_out_time=policy.required_check_out_time,
        allows_off_site_work=policy.allows_off_site_work,
        overtime_allowed=policy.overtime_allowed,
        max_monthly_permission_hours=policy.max_monthly_permission_hours,
        max_monthly_casual_leaves=policy.max_monthly_casual_leaves,
        is_default=False,
    )


def resolve_policy(db: Session, department: Department) -> EffectivePolicy:
    """Effective policy for a department (system defaults when none is stored)."""
    return to_effective(department, get_policy(db, department))


def list_policies(db: Session) -> List[DepartmentPolicy]:
    return db.query(DepartmentPolicy).order_by(DepartmentPolicy.department).all()


def upsert_policy(
    db: Session,
    department: Department,
    values: Union[PolicyUpdate, Dict[str, Any]],
    editor: Employee
) -> DepartmentPolicy:
    """
    Create or partially update the policy of a department

    Only the supplied fields change on update; on creation the unset fields take the
    system defaults.

    Args:
        db: Database session
        department: Department the policy governs
        values: Fields to set (PolicyUpdate or plain dict)
        editor: Acting employee (must be a master administrator)

    Returns:
        Stored DepartmentPolicy

    Raises:
        Forbidden: If editor is not a master administrator
        InvalidPolicyValue: If a value is malformed
    """
    _require_master_admin(editor)
    if isinstance(values, PolicyUpdate):
        values = values.model_dump(exclude_unset=True)
    cleaned = _validate_values(values)

    policy = get_policy(db, department)
    created = policy is None
    now = now_utc()
    if created:
        defaults = EffectivePolicy(department=department).model_dump(include=set(POLICY_FIELDS))
        policy = DepartmentPolicy(department=department, created_at=now, **{**defaults, **cleaned})
        db.add(policy)
    else:
        for field, value in cleaned.items():
            setattr(policy, field, value)

    policy.updated_by_id = editor.id
    policy.updated_at = now
    db.flush()

    log_audit(
        db=db,
        actor_id=editor.id,
        action="POLICY_CREATE" if created else "POLICY_UPDATE",
        entity_type="department_policy",
        entity_id=policy.id,
        meta={"department": department, "changes": cleaned},
    )
    db.commit()
    db.refresh(policy)

    logger.info(
        "Department policy %s for %s by employee %s: %s",
        "created" if created else "updated", department.value, editor.id, cleaned,
    )
    return policy


def initialize_default_policies(db: Session, editor: Employee) -> List[DepartmentPolicy]:
    """
    Seed a policy for every department that has none

    Existing policies are left untouched.

    Returns:
        The policies that were created
    """
    _require_master_admin(editor)
    now = now_utc()
    created: List[DepartmentPolicy] = []
    for department in Department:
        if get_policy(db, department) is not None:
            continue
        policy = DepartmentPolicy(
            department=department,
            updated_by_id=editor.id,
            created_at=now,
            updated_at=now,
            **_initial_values(department),
        )
        db.add(policy)
        created.append(policy)

    if created:
        db.flush()
        log_audit(
            db=db,
            actor_id=editor.id,
            action="POLICY_INITIALIZE",
            entity_type="department_policy",
            meta={"departments": [p.department for p in created]},
        )
    db.commit()
    for policy in created:
        db.refresh(policy)

    logger.info("Initialized %d default department policies", len(created))
    return created
