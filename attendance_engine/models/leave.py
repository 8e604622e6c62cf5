"""
Leave models
"""
from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    ForeignKey,
    String,
    Text,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from attendance_engine.db.base import Base, enum_column_type


class LeaveType(str, enum.Enum):
    CASUAL = "casual"
    PERMISSION = "permission"  # hour-denominated
    SICK = "sick"
    VACATION = "vacation"


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ESCALATED = "escalated"


# Statuses a decision can still be taken from
OPEN_STATUSES = (LeaveStatus.PENDING, LeaveStatus.ESCALATED)

# Statuses that consume the monthly quota
QUOTA_STATUSES = (LeaveStatus.PENDING, LeaveStatus.ESCALATED, LeaveStatus.APPROVED)


class LeaveDecision(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    ESCALATED = "escalated"


class LeaveRequest(Base):
    __tablename__ = "leaves"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(enum_column_type(LeaveType), nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)
    reason = Column(Text, nullable=False)
    supporting_document_ref = Column(String, nullable=True)
    status = Column(enum_column_type(LeaveStatus), nullable=False, default=LeaveStatus.PENDING)

    current_approver_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    approved_by_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    approver_notes = Column(Text, nullable=True)
    escalated_from_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    escalated_to_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    user = relationship("Employee", foreign_keys=[user_id])
    current_approver = relationship("Employee", foreign_keys=[current_approver_id])
    history = relationship(
        "LeaveApprovalEntry",
        back_populates="leave_request",
        order_by="LeaveApprovalEntry.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("start_at <= end_at", name="check_leave_range"),
        Index("ix_leaves_user_type_start", "user_id", "leave_type", "start_at"),
    )


class LeaveApprovalEntry(Base):
    __tablename__ = "leave_approvals"

    id = Column(Integer, primary_key=True, index=True)
    leave_request_id = Column(Integer, ForeignKey("leaves.id"), nullable=False, index=True)
    approver_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    decision = Column(enum_column_type(LeaveDecision), nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    leave_request = relationship("LeaveRequest", back_populates="history")
