"""
Escalation path schemas
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict

from attendance_engine.models.employee import OrgRole


class EscalationPathUpdate(BaseModel):
    approver_id: int


class EscalationPathOut(BaseModel):
    id: int
    role: OrgRole
    approver_id: int
    updated_by_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
