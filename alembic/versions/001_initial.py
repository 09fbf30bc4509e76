"""Initial migration

Revision ID: 001
Revises: 
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('position', sa.String(100)),
        sa.Column('staff_id', sa.String(20)),
        sa.Column('role', sa.Enum('ADMIN', 'STAFF', name='userrole'), default='STAFF'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create tables (floor plan) table
    op.create_table(
        'tables',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('capacity', sa.Integer(), nullable=False, default=2),
        sa.Column('shape', sa.String(20), default='rectangle'),
        sa.Column('zone', sa.String(50)),
        sa.Column('position_x', sa.Float(), default=0),
        sa.Column('position_y', sa.Float(), default=0),
        sa.Column('width', sa.Float(), default=80),
        sa.Column('height', sa.Float(), default=80),
        sa.Column('is_active', sa.Boolean(), default=True),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('booking_code', sa.String(16), unique=True, nullable=False),
        sa.Column('guest_name', sa.String(255), nullable=False),
        sa.Column('guest_phone', sa.String(20), nullable=False),
        sa.Column('guest_email', sa.String(255)),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('reservation_time', sa.String(8), nullable=False),
        sa.Column('table_number', sa.Integer()),
        sa.Column('status', sa.String(20), default='pending'),
        sa.Column('special_requests', sa.Text()),
        sa.Column('admin_notes', sa.Text()),
        sa.Column('payment_slip_url', sa.String(500)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create settings table
    op.create_table(
        'settings',
        sa.Column('key', sa.String(100), primary_key=True),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create holidays table
    op.create_table(
        'holidays',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('holiday_date', sa.Date(), unique=True, nullable=False),
        sa.Column('description', sa.String(255)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid()),
        sa.Column('actor_name', sa.String(255)),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity', sa.String(50)),
        sa.Column('entity_id', sa.String(64)),
        sa.Column('payload', sa.JSON()),
        sa.Column('ip_address', sa.String(50)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create feedback table
    op.create_table(
        'feedback',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reservation_id', sa.Uuid(), sa.ForeignKey('reservations.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text()),
        sa.Column('customer_name', sa.String(255)),
        sa.Column('customer_phone', sa.String(20)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_reservations_guest_phone', 'reservations', ['guest_phone'])
    op.create_index('ix_reservations_reservation_date', 'reservations', ['reservation_date'])
    op.create_index('ix_reservations_date_status', 'reservations', ['reservation_date', 'status'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])
    op.create_index('ix_feedback_created_at', 'feedback', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_feedback_created_at')
    op.drop_index('ix_audit_logs_created_at')
    op.drop_index('ix_reservations_date_status')
    op.drop_index('ix_reservations_reservation_date')
    op.drop_index('ix_reservations_guest_phone')

    op.drop_table('feedback')
    op.drop_table('audit_logs')
    op.drop_table('holidays')
    op.drop_table('settings')
    op.drop_table('reservations')
    op.drop_table('tables')
    op.drop_table('users')

    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
