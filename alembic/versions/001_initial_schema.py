"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _enum(name, *values):
    return sa.Enum(*values, name=name)


def upgrade() -> None:
    op.create_table(
        'branches',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('timezone', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', _enum('userrole', 'employee', 'manager', 'admin'), nullable=False),
        sa.Column('position', sa.String(100), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('branches.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('blockchain_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('blockchain_hash', sa.String(64), nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_branch_id', 'users', ['branch_id'])
    op.create_index('idx_users_branch_active', 'users', ['branch_id', 'is_active'])

    op.create_table(
        'sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('ip', sa.String(45), nullable=True),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])

    op.create_table(
        'shifts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('branches.id'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('position', sa.String(100), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recurring_pattern', _enum('recurringpattern', 'weekly', 'biweekly', 'monthly'), nullable=True),
        sa.Column('status', _enum('shiftstatus', 'scheduled', 'in-progress', 'completed', 'missed', 'cancelled'), nullable=False),
        sa.Column('actual_start_time', sa.DateTime(), nullable=True),
        sa.Column('actual_end_time', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_shifts_user_id', 'shifts', ['user_id'])
    op.create_index('ix_shifts_branch_id', 'shifts', ['branch_id'])
    op.create_index('ix_shifts_start_time', 'shifts', ['start_time'])
    op.create_index('idx_shifts_user_start', 'shifts', ['user_id', 'start_time'])
    op.create_index('idx_shifts_branch_start', 'shifts', ['branch_id', 'start_time'])

    op.create_table(
        'shift_trades',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('shift_id', sa.Uuid(), sa.ForeignKey('shifts.id'), nullable=False),
        sa.Column('from_user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('to_user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', _enum('shifttradestatus', 'pending', 'approved', 'rejected', 'completed'), nullable=False),
        sa.Column('urgency', _enum('tradeurgency', 'urgent', 'normal', 'low'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('requested_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('approved_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
    )
    op.create_index('ix_shift_trades_shift_id', 'shift_trades', ['shift_id'])
    op.create_index('ix_shift_trades_from_user_id', 'shift_trades', ['from_user_id'])

    op.create_table(
        'payroll_periods',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('branches.id'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('status', _enum('payrollperiodstatus', 'open', 'closed', 'paid'), nullable=False),
        sa.Column('total_hours', sa.Numeric(12, 4), nullable=True),
        sa.Column('total_pay', sa.Numeric(12, 4), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_payroll_periods_branch_id', 'payroll_periods', ['branch_id'])
    op.create_index('idx_payroll_periods_branch_status', 'payroll_periods', ['branch_id', 'status'])

    op.create_table(
        'payroll_entries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('payroll_period_id', sa.Uuid(), sa.ForeignKey('payroll_periods.id'), nullable=False),
        sa.Column('total_hours', sa.Numeric(12, 4), nullable=False),
        sa.Column('regular_hours', sa.Numeric(12, 4), nullable=False),
        sa.Column('overtime_hours', sa.Numeric(12, 4), nullable=False, server_default='0'),
        sa.Column('gross_pay', sa.Numeric(12, 4), nullable=False),
        sa.Column('deductions', sa.Numeric(12, 4), nullable=False, server_default='0'),
        sa.Column('net_pay', sa.Numeric(12, 4), nullable=False),
        sa.Column('status', _enum('payrollentrystatus', 'pending', 'approved', 'paid'), nullable=False),
        sa.Column('blockchain_hash', sa.String(64), nullable=True),
        sa.Column('block_number', sa.Integer(), nullable=True),
        sa.Column('transaction_hash', sa.String(64), nullable=True),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('payroll_period_id', 'user_id', name='uq_payroll_entry_period_user'),
    )
    op.create_index('ix_payroll_entries_user_id', 'payroll_entries', ['user_id'])
    op.create_index('ix_payroll_entries_payroll_period_id', 'payroll_entries', ['payroll_period_id'])
    op.create_index('ix_payroll_entries_transaction_hash', 'payroll_entries', ['transaction_hash'])

    op.create_table(
        'approvals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('type', _enum('approvaltype', 'shift_trade', 'leave_request', 'time_correction'), nullable=False),
        sa.Column('request_id', sa.Uuid(), nullable=False),
        sa.Column('requested_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('approved_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('status', _enum('approvalstatus', 'pending', 'approved', 'rejected'), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('request_data', sa.JSON(), nullable=True),
        sa.Column('requested_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_approvals_requested_by', 'approvals', ['requested_by'])
    op.create_index('idx_approvals_type_request', 'approvals', ['type', 'request_id'])
    op.create_index('idx_approvals_status', 'approvals', ['status'])

    op.create_table(
        'time_off_requests',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('type', _enum('timeofftype', 'vacation', 'sick', 'personal'), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', _enum('timeoffstatus', 'pending', 'approved', 'rejected'), nullable=False),
        sa.Column('requested_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('approved_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
    )
    op.create_index('ix_time_off_requests_user_id', 'time_off_requests', ['user_id'])
    op.create_index('idx_time_off_requests_user_status', 'time_off_requests', ['user_id', 'status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', _enum('notificationtype', 'payroll', 'schedule', 'announcement', 'system'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('idx_notifications_user_created', 'notifications', ['user_id', 'created_at'])

    op.create_table(
        'setup_status',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('singleton_key', sa.Integer(), nullable=False, server_default='1', unique=True),
        sa.Column('is_setup_complete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('setup_completed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('singleton_key = 1', name='ck_setup_status_singleton'),
    )


def downgrade() -> None:
    for table in (
        'setup_status',
        'notifications',
        'time_off_requests',
        'approvals',
        'payroll_entries',
        'payroll_periods',
        'shift_trades',
        'shifts',
        'sessions',
        'users',
        'branches',
    ):
        op.drop_table(table)
