"""Create guest house schema

Revision ID: 20261019_0001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '20261019_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

def _has_table(bind, name: str) -> bool:
    try:
        insp = inspect(bind)
        return insp.has_table(name)
    except Exception:
        return False

def upgrade() -> None:
    bind = op.get_bind()

    if not _has_table(bind, 'rooms'):
        op.create_table('rooms',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_number', sa.String(length=20), nullable=False),
            sa.Column('room_type', sa.String(length=20), server_default='Non-AC', nullable=False),
            sa.Column('status', sa.String(length=20), server_default='Available', nullable=False),
            sa.Column('price', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_rooms_id'), 'rooms', ['id'], unique=False)
        op.create_index(op.f('ix_rooms_room_number'), 'rooms', ['room_number'], unique=True)

    if not _has_table(bind, 'guests'):
        op.create_table('guests',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('phone', sa.String(length=50), nullable=False),
            sa.Column('id_proof', sa.String(length=200), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=True),
            sa.Column('room_number', sa.String(length=20), nullable=True),
            sa.Column('check_in', sa.Date(), nullable=False),
            sa.Column('check_out', sa.Date(), nullable=True),
            sa.Column('check_out_time', sa.Time(), nullable=True),
            sa.Column('checked_out_at', sa.DateTime(), nullable=True),
            sa.Column('total_amount', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('paid_amount', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('pending_amount', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('is_frequent', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('payment_mode', sa.String(length=20), nullable=True),
            sa.Column('pay_to_whom', sa.String(length=200), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_guests_id'), 'guests', ['id'], unique=False)
        op.create_index(op.f('ix_guests_room_id'), 'guests', ['room_id'], unique=False)
        op.create_index(op.f('ix_guests_check_in'), 'guests', ['check_in'], unique=False)
        op.create_index(op.f('ix_guests_check_out'), 'guests', ['check_out'], unique=False)
        op.create_index(op.f('ix_guests_checked_out_at'), 'guests', ['checked_out_at'], unique=False)
        op.create_index('ix_guests_open_checkout', 'guests', ['checked_out_at', 'check_out'], unique=False)

    if not _has_table(bind, 'expenses'):
        op.create_table('expenses',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('description', sa.String(length=300), nullable=False),
            sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('category', sa.String(length=100), server_default='General', nullable=False),
            sa.Column('date', sa.Date(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_expenses_id'), 'expenses', ['id'], unique=False)
        op.create_index(op.f('ix_expenses_date'), 'expenses', ['date'], unique=False)

    if not _has_table(bind, 'settings'):
        op.create_table('settings',
            sa.Column('key', sa.String(length=100), nullable=False),
            sa.Column('value', sa.Text(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('key')
        )


def downgrade() -> None:
    op.drop_table('settings')
    op.drop_table('expenses')
    op.drop_table('guests')
    op.drop_table('rooms')
