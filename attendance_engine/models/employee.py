"""
Employee directory and escalation path models.

The identity provider owns these records; the engine only reads them to learn a user's
department, position in the approval hierarchy, and direct approver.
"""
from typing import Optional
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from attendance_engine.db.base import Base, enum_column_type


class Department(str, enum.Enum):
    SALES = "Sales"
    MARKETING = "Marketing"
    CRE = "CRE"
    ACCOUNTS = "Accounts"
    HR = "HR"
    TECHNICAL = "Technical"


# Always allowed off-site, whatever the department policy says
FIELD_DEPARTMENTS = frozenset({Department.SALES, Department.MARKETING})

# Must check out from the office
OFFICE_CHECKOUT_DEPARTMENTS = frozenset({Department.CRE, Department.ACCOUNTS, Department.HR})


class OrgRole(str, enum.Enum):
    EMPLOYEE = "employee"
    TEAM_LEAD = "team_lead"
    HR_MANAGER = "hr_manager"
    GENERAL_MANAGER = "general_manager"
    MANAGING_DIRECTOR = "managing_director"

    @property
    def level(self) -> int:
        """Position on the escalation ladder (0 = lowest)."""
        return ESCALATION_LADDER.index(self)

    def next_rung(self) -> Optional["OrgRole"]:
        """Role a request is escalated to from this role; None at the top."""
        position = self.level + 1
        if position >= len(ESCALATION_LADDER):
            return None
        return ESCALATION_LADDER[position]


ESCALATION_LADDER = (
    OrgRole.EMPLOYEE,
    OrgRole.TEAM_LEAD,
    OrgRole.HR_MANAGER,
    OrgRole.GENERAL_MANAGER,
    OrgRole.MANAGING_DIRECTOR,
)


class AccessLevel(str, enum.Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"
    MASTER_ADMIN = "master_admin"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    department = Column(enum_column_type(Department), nullable=False)
    role = Column(enum_column_type(OrgRole), nullable=False, default=OrgRole.EMPLOYEE)
    access_level = Column(enum_column_type(AccessLevel), nullable=False, default=AccessLevel.EMPLOYEE)
    reporting_manager_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    reporting_manager = relationship("Employee", remote_side=[id], backref="direct_reports")


class EscalationPath(Base):
    """Who holds a rung of the escalation ladder (one row per org role)."""
    __tablename__ = "escalation_paths"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(enum_column_type(OrgRole), nullable=False, unique=True)
    approver_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    updated_by_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    approver = relationship("Employee", foreign_keys=[approver_id])
