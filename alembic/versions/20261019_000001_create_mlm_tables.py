"""Create referral commission tables.

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, orders, mlm_settings and mlm_commissions."""

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.String(1024), nullable=True),
        sa.Column('referral_code', sa.String(20), nullable=True),
        sa.Column('referred_by_id', sa.Integer(), nullable=True),
        sa.Column('referred_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('mlm_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['referred_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_referral_code', 'users', ['referral_code'], unique=True)
    op.create_index('ix_users_referred_by_id', 'users', ['referred_by_id'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_number', sa.String(64), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('subtotal', sa.DECIMAL(18, 2), nullable=True),
        sa.Column('total_amount', sa.DECIMAL(18, 2), nullable=True),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])

    op.create_table(
        'mlm_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('levels', sa.JSON(), nullable=False),
        sa.Column('min_order_amount', sa.DECIMAL(18, 2), nullable=False, server_default='0'),
        sa.Column('prevent_self_referral', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('one_commission_per_order', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint('id = 1', name='check_mlm_settings_singleton'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'mlm_commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('earner_id', sa.Integer(), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('base_amount', sa.DECIMAL(18, 2), nullable=False, comment='Eligible base the percent was applied to'),
        sa.Column('percent', sa.DECIMAL(7, 4), nullable=False, comment='Level percent at creation time'),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['earner_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['buyer_id'], ['users.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint('order_id', 'earner_id', name='uq_mlm_commission_order_earner'),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'paid', 'void')",
            name='check_mlm_commission_status'
        ),
        sa.CheckConstraint('level >= 1', name='check_mlm_commission_level'),
        sa.PrimaryKeyConstraint('id')
    )

    # Create indexes
    op.create_index('ix_mlm_commissions_order_id', 'mlm_commissions', ['order_id'])
    op.create_index('ix_mlm_commissions_earner_id', 'mlm_commissions', ['earner_id'])
    op.create_index('ix_mlm_commissions_status', 'mlm_commissions', ['status'])
    op.create_index('ix_mlm_commissions_created_at', 'mlm_commissions', ['created_at'])
    op.create_index('ix_mlm_commissions_earner_status', 'mlm_commissions', ['earner_id', 'status'])


def downgrade() -> None:
    """Drop referral commission tables."""

    # Drop indexes
    op.drop_index('ix_mlm_commissions_earner_status', 'mlm_commissions')
    op.drop_index('ix_mlm_commissions_created_at', 'mlm_commissions')
    op.drop_index('ix_mlm_commissions_status', 'mlm_commissions')
    op.drop_index('ix_mlm_commissions_earner_id', 'mlm_commissions')
    op.drop_index('ix_mlm_commissions_order_id', 'mlm_commissions')

    # Drop tables
    op.drop_table('mlm_commissions')
    op.drop_table('mlm_settings')

    op.drop_index('ix_orders_user_id', 'orders')
    op.drop_index('ix_orders_order_number', 'orders')
    op.drop_table('orders')

    op.drop_index('ix_users_created_at', 'users')
    op.drop_index('ix_users_referred_by_id', 'users')
    op.drop_index('ix_users_referral_code', 'users')
    op.drop_index('ix_users_email', 'users')
    op.drop_table('users')
