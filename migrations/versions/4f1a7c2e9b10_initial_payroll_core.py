"""initial payroll core schema

Revision ID: 4f1a7c2e9b10
Revises:
Create Date: 2025-11-08 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1a7c2e9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=50), nullable=False, unique=True),
    )
    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, unique=True),
        sa.Column('code', sa.String(length=32), nullable=False, unique=True),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80), nullable=True),
        sa.Column('position', sa.String(length=120), nullable=True),
        sa.Column('wage', sa.Numeric(12, 2), nullable=False),
        sa.Column('working_days_per_week', sa.SmallInteger(), nullable=True),
        sa.Column('doj', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'attendance',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('check_in', sa.DateTime(), nullable=True),
        sa.Column('check_out', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('employee_id', 'date', name='uq_attendance_employee_date'),
    )
    op.create_index('ix_attendance_employee_id', 'attendance', ['employee_id'])

    op.create_table(
        'leave_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('leave_type', sa.String(length=20), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('days', sa.Numeric(5, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_leave_requests_employee_id', 'leave_requests', ['employee_id'])

    op.create_table(
        'salary_components',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('kind', sa.Enum('earning', 'deduction', name='component_kind_enum'), nullable=False),
        sa.Column('computation', sa.Enum('fixed', 'percentage', name='component_computation_enum'), nullable=False),
        sa.Column('value', sa.Numeric(12, 2), nullable=False),
        sa.Column('percentage_of', sa.String(length=20), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_salary_components_employee_id', 'salary_components', ['employee_id'])

    op.create_table(
        'payroll',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.SmallInteger(), nullable=False),
        sa.Column('year', sa.SmallInteger(), nullable=False),
        sa.Column('basic_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('allowances', sa.Numeric(12, 2), nullable=False),
        sa.Column('deductions', sa.Numeric(12, 2), nullable=False),
        sa.Column('provident_fund', sa.Numeric(12, 2), nullable=False),
        sa.Column('professional_tax', sa.Numeric(12, 2), nullable=False),
        sa.Column('gross_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('net_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('worked_days', sa.Numeric(10, 2), nullable=True),
        sa.Column('total_days', sa.Numeric(10, 2), nullable=True),
        sa.Column('status', sa.Enum('pending', 'paid', name='payroll_status_enum'), nullable=False),
        sa.Column('locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('processed_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('employee_id', 'month', 'year', name='uq_payroll_employee_period'),
    )
    op.create_index('ix_payroll_employee_id', 'payroll', ['employee_id'])

    op.create_table(
        'payroll_components',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('payroll_id', sa.Integer(), sa.ForeignKey('payroll.id', ondelete='CASCADE'), nullable=False),
        sa.Column('component_name', sa.String(length=120), nullable=False),
        sa.Column('component_type', sa.String(length=20), nullable=False),
        sa.Column('rate_percentage', sa.Numeric(6, 2), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
    )
    op.create_index('ix_payroll_components_payroll_id', 'payroll_components', ['payroll_id'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('user_name', sa.String(length=255), nullable=True),
        sa.Column('user_role', sa.String(length=50), nullable=True),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('module', sa.String(length=50), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_activity_logs_user_id', 'activity_logs', ['user_id'])
    op.create_index('ix_activity_logs_created_at', 'activity_logs', ['created_at'])


def downgrade() -> None:
    for table in (
        'activity_logs', 'payroll_components', 'payroll', 'salary_components',
        'leave_requests', 'attendance', 'employees', 'user_roles', 'roles', 'users',
    ):
        op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum in ('payroll_status_enum', 'component_computation_enum', 'component_kind_enum'):
            op.execute(f'DROP TYPE IF EXISTS {enum}')
