"""
Database models
"""
from attendance_engine.models.employee import (
    Employee,
    EscalationPath,
    Department,
    OrgRole,
    AccessLevel,
    ESCALATION_LADDER,
    FIELD_DEPARTMENTS,
    OFFICE_CHECKOUT_DEPARTMENTS,
)
from attendance_engine.models.department_policy import DepartmentPolicy
from attendance_engine.models.attendance import AttendanceRecord, AttendanceStatus, WorkLocation
from attendance_engine.models.leave import (
    LeaveRequest,
    LeaveApprovalEntry,
    LeaveType,
    LeaveStatus,
    LeaveDecision,
    OPEN_STATUSES,
    QUOTA_STATUSES,
)
from attendance_engine.models.holiday import Holiday, CalendarSetting
from attendance_engine.models.office_location import OfficeLocation
from attendance_engine.models.audit_log import AuditLog

__all__ = [
    "Employee",
    "EscalationPath",
    "Department",
    "OrgRole",
    "AccessLevel",
    "ESCALATION_LADDER",
    "FIELD_DEPARTMENTS",
    "OFFICE_CHECKOUT_DEPARTMENTS",
    "DepartmentPolicy",
    "AttendanceRecord",
    "AttendanceStatus",
    "WorkLocation",
    "LeaveRequest",
    "LeaveApprovalEntry",
    "LeaveType",
    "LeaveStatus",
    "LeaveDecision",
    "OPEN_STATUSES",
    "QUOTA_STATUSES",
    "Holiday",
    "CalendarSetting",
    "OfficeLocation",
    "AuditLog",
]
