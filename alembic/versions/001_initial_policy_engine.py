"""Initial policy engine schema

Revision ID: 001_initial_policy_engine
Revises:
Create Date: 2026-10-16

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_policy_engine'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*, updated: bool = True) -> list:
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]
    if updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False)
        )
    return columns


def upgrade() -> None:
    if 'employees' in sa.inspect(op.get_bind()).get_table_names():
        return

    # Directory the identity provider keeps in sync
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('department', sa.String(32), nullable=False),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('access_level', sa.String(32), nullable=False),
        sa.Column('reporting_manager_id', sa.Integer(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['reporting_manager_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_employees_id'), 'employees', ['id'], unique=False)

    op.create_table(
        'escalation_paths',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('approver_id', sa.Integer(), nullable=False),
        sa.Column('updated_by_id', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['approver_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['updated_by_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role')
    )
    op.create_index(op.f('ix_escalation_paths_id'), 'escalation_paths', ['id'], unique=False)

    op.create_table(
        'department_policies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('department', sa.String(32), nullable=False),
        sa.Column('required_check_in_time', sa.String(5), nullable=False, server_default='09:00'),
        sa.Column('required_check_out_time', sa.String(5), nullable=False, server_default='18:00'),
        sa.Column('allows_off_site_work', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('overtime_allowed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('max_monthly_permission_hours', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('max_monthly_casual_leaves', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('updated_by_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['updated_by_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('department')
    )
    op.create_index(op.f('ix_department_policies_id'), 'department_policies', ['id'], unique=False)

    op.create_table(
        'attendance',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('work_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('check_in_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('check_out_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('work_location', sa.String(32), nullable=False),
        sa.Column('location_details', sa.Text(), nullable=True),
        sa.Column('off_site_reason', sa.Text(), nullable=True),
        sa.Column('customer_details', sa.Text(), nullable=True),
        sa.Column('department', sa.String(32), nullable=False),
        sa.Column('required_check_in_time', sa.String(5), nullable=False),
        sa.Column('required_check_out_time', sa.String(5), nullable=False),
        sa.Column('is_late', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('late_reason', sa.Text(), nullable=True),
        sa.Column('is_late_checkout', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('checkout_late_reason', sa.Text(), nullable=True),
        sa.Column('is_overtime', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('overtime_reason', sa.Text(), nullable=True),
        sa.Column('overtime_hours', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('overtime_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_overtime_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('check_in_latitude', sa.Float(), nullable=True),
        sa.Column('check_in_longitude', sa.Float(), nullable=True),
        sa.Column('check_out_latitude', sa.Float(), nullable=True),
        sa.Column('check_out_longitude', sa.Float(), nullable=True),
        sa.Column('within_geofence', sa.Boolean(), nullable=True),
        sa.Column('needs_review', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'work_date', name='uq_attendance_user_work_date'),
        sa.CheckConstraint('check_out_at IS NULL OR check_out_at >= check_in_at', name='check_attendance_out_after_in')
    )
    op.create_index(op.f('ix_attendance_id'), 'attendance', ['id'], unique=False)
    op.create_index(op.f('ix_attendance_user_id'), 'attendance', ['user_id'], unique=False)
    op.create_index(op.f('ix_attendance_work_date'), 'attendance', ['work_date'], unique=False)

    op.create_table(
        'leaves',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('leave_type', sa.String(32), nullable=False),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('supporting_document_ref', sa.String(), nullable=True),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending'),
        sa.Column('current_approver_id', sa.Integer(), nullable=True),
        sa.Column('approved_by_id', sa.Integer(), nullable=True),
        sa.Column('approver_notes', sa.Text(), nullable=True),
        sa.Column('escalated_from_id', sa.Integer(), nullable=True),
        sa.Column('escalated_to_id', sa.Integer(), nullable=True),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['current_approver_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['approved_by_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['escalated_from_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['escalated_to_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('start_at <= end_at', name='check_leave_range')
    )
    op.create_index(op.f('ix_leaves_id'), 'leaves', ['id'], unique=False)
    op.create_index(op.f('ix_leaves_user_id'), 'leaves', ['user_id'], unique=False)
    op.create_index(op.f('ix_leaves_current_approver_id'), 'leaves', ['current_approver_id'], unique=False)
    op.create_index('ix_leaves_user_type_start', 'leaves', ['user_id', 'leave_type', 'start_at'], unique=False)

    op.create_table(
        'leave_approvals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('leave_request_id', sa.Integer(), nullable=False),
        sa.Column('approver_id', sa.Integer(), nullable=False),
        sa.Column('decision', sa.String(32), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['leave_request_id'], ['leaves.id'], ),
        sa.ForeignKeyConstraint(['approver_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_leave_approvals_id'), 'leave_approvals', ['id'], unique=False)
    op.create_index(op.f('ix_leave_approvals_leave_request_id'), 'leave_approvals', ['leave_request_id'], unique=False)

    op.create_table(
        'holidays',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by_id', sa.Integer(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['created_by_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_holidays_id'), 'holidays', ['id'], unique=False)
    op.create_index(op.f('ix_holidays_date'), 'holidays', ['date'], unique=False)

    op.create_table(
        'calendar_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('weekly_off_day', sa.Integer(), nullable=False, server_default='7'),
        sa.Column('weekly_off_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('updated_by_id', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['updated_by_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('weekly_off_day BETWEEN 1 AND 7', name='check_weekly_off_day')
    )
    op.create_index(op.f('ix_calendar_settings_id'), 'calendar_settings', ['id'], unique=False)

    op.create_table(
        'office_locations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('radius_meters', sa.Float(), nullable=False, server_default='100'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sa.CheckConstraint('radius_meters > 0', name='check_office_radius_positive')
    )
    op.create_index(op.f('ix_office_locations_id'), 'office_locations', ['id'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('meta_json', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)


def downgrade() -> None:
    for table in (
        'audit_logs',
        'office_locations',
        'calendar_settings',
        'holidays',
        'leave_approvals',
        'leaves',
        'attendance',
        'department_policies',
        'escalation_paths',
        'employees',
    ):
        op.drop_table(table)
