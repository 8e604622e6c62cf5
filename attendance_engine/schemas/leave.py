"""
Leave schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from attendance_engine.models.leave import LeaveType, LeaveStatus, LeaveDecision
from attendance_engine.utils.datetime_utils import iso_local


class LeaveSubmitRequest(BaseModel):
    """Schema for submitting a leave request"""
    leave_type: LeaveType = Field(..., description="Type of leave")
    start_at: datetime = Field(..., description="Start instant (naive values are read as UTC)")
    end_at: datetime = Field(..., description="End instant (naive values are read as UTC)")
    reason: str = Field(..., min_length=1, description="Reason for leave")
    supporting_document_ref: Optional[str] = Field(None, description="Reference to an uploaded document")


class ApproveRequest(BaseModel):
    notes: Optional[str] = Field(None, description="Optional approver notes")


class RejectRequest(BaseModel):
    notes: str = Field("", description="Reason for rejection (required)")


class EscalateRequest(BaseModel):
    target_approver_id: Optional[int] = Field(None, description="Holder of the next rung; resolved automatically when omitted")
    notes: Optional[str] = None


class LeaveHistoryOut(BaseModel):
    id: int
    approver_id: int
    decision: LeaveDecision
    comment: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_local(dt)


class LeaveOut(BaseModel):
    """Schema for leave request output. Datetimes in the business time zone."""
    id: int
    user_id: int
    leave_type: LeaveType
    start_at: datetime
    end_at: datetime
    reason: str
    supporting_document_ref: Optional[str] = None
    status: LeaveStatus
    current_approver_id: Optional[int] = None
    approved_by_id: Optional[int] = None
    approver_notes: Optional[str] = None
    escalated_from_id: Optional[int] = None
    escalated_to_id: Optional[int] = None
    decided_at: Optional[datetime] = None
    created_at: datetime
    history: List[LeaveHistoryOut] = []
    duration: Optional[float] = Field(None, description="Hours for permission, business days otherwise")
    duration_unit: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start_at", "end_at", "decided_at", "created_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_local(dt)


class LeaveListResponse(BaseModel):
    items: List[LeaveOut]
    total: int


class EligibilityOut(BaseModel):
    leave_type: LeaveType
    eligible: bool
    reason: Optional[str] = None


class LeaveBalanceOut(BaseModel):
    """Remaining monthly quotas for the current calendar month"""
    year: int
    month: int
    max_monthly_casual_leaves: int
    remaining_casual_days: int
    max_monthly_permission_hours: int
    remaining_permission_hours: int
    policy_configured: bool
