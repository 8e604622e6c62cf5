"""
Audit logging service
"""
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session

from attendance_engine.models.audit_log import AuditLog
from attendance_engine.utils.datetime_utils import now_utc
from attendance_engine.utils.json_serializer import sanitize_for_json


def log_audit(
    db: Session,
    actor_id: int,
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Add an audit log entry to the current unit of work

    The entry is flushed but not committed; it lands in the same transaction as the
    change it describes, so the caller's commit (or rollback) covers both.

    Args:
        db: Database session
        actor_id: ID of the user performing the action
        action: Action type (e.g., "CHECK_IN", "LEAVE_APPROVED", "POLICY_UPDATE")
        entity_type: Type of entity (e.g., "attendance", "leave", "department_policy")
        entity_id: ID of the affected entity (optional)
        meta: Additional metadata as dictionary (optional)

    Returns:
        Created AuditLog instance
    """
    safe_meta = sanitize_for_json(meta) if meta is not None else None

    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_json=safe_meta,
        created_at=now_utc()
    )
    db.add(audit_log)
    db.flush()
    return audit_log
