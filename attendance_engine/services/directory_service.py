"""
Employee directory lookups used by the approval workflow.

Employees are provisioned by the identity provider; this module only reads them.
"""
from typing import Iterable, Optional
from sqlalchemy.orm import Session

from attendance_engine.models.employee import Employee, EscalationPath, OrgRole


def get_employee(db: Session, employee_id: int) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.id == employee_id).first()


def get_active_employee(db: Session, employee_id: int) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.id == employee_id, Employee.active == True).first()  # noqa: E712


def find_role_holder(
    db: Session,
    role: OrgRole,
    exclude_ids: Iterable[int] = ()
) -> Optional[Employee]:
    """
    Employee who holds a rung of the escalation ladder

    The configured escalation path wins; otherwise the lowest-id active employee with
    that org role. Employees in exclude_ids (typically the requester) are skipped.
    """
    excluded = set(exclude_ids)

    path = db.query(EscalationPath).filter(EscalationPath.role == role).first()
    if path and path.approver_id not in excluded:
        holder = get_active_employee(db, path.approver_id)
        if holder:
            return holder

    query = db.query(Employee).filter(Employee.role == role, Employee.active == True)  # noqa: E712
    if excluded:
        query = query.filter(Employee.id.notin_(excluded))
    return query.order_by(Employee.id).first()


def find_approver_above(
    db: Session,
    role: OrgRole,
    exclude_ids: Iterable[int] = ()
) -> Optional[Employee]:
    """First holder found walking up the ladder from the rung above ``role``."""
    rung = role.next_rung()
    while rung is not None:
        holder = find_role_holder(db, rung, exclude_ids)
        if holder:
            return holder
        rung = rung.next_rung()
    return None
