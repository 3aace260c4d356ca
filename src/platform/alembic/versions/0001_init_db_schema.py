"""init_db_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Schema:
- user: accounts (buyer/organizer)
- event: organizer-owned events
- ticket_tier: priced tiers with tri-state capacity (limited/unlimited/unset)
- promo_code: per-event discount codes with optional use limit
- order: one checkout attempt (UUID7 primary key)
- payment: processor payment per order; external_reference is the idempotency key
- ticket: issued tickets with signed credential and check-in timestamp
- refund: refunds per order, reserved as pending before the processor call
- payout: transfers of organizer earnings, recorded by settlement
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create all tables with final schema."""

    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    op.create_table(
        'event',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('organizer_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('venue', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('category', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['organizer_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('end_at >= start_at', name='ck_event_end_after_start'),
    )
    op.create_index('ix_event_organizer_id', 'event', ['organizer_id'])
    op.create_index('ix_event_status', 'event', ['status'])
    op.create_index('ix_event_city', 'event', ['city'])
    op.create_index('ix_event_category', 'event', ['category'])

    op.create_table(
        'ticket_tier',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('base_price', sa.Integer(), nullable=False),
        sa.Column('capacity_mode', sa.String(length=20), nullable=False),
        sa.Column('total_quantity', sa.Integer(), nullable=True),
        sa.Column('sold_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sale_start_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sale_end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('base_price >= 0', name='ck_tier_price_non_negative'),
        sa.CheckConstraint('sold_quantity >= 0', name='ck_tier_sold_non_negative'),
        sa.CheckConstraint(
            "(capacity_mode = 'limited' AND total_quantity >= 1 AND sold_quantity <= total_quantity)"
            " OR (capacity_mode IN ('unlimited', 'unset') AND total_quantity IS NULL)",
            name='ck_tier_capacity',
        ),
    )
    op.create_index('ix_ticket_tier_event_id', 'ticket_tier', ['event_id'])

    op.create_table(
        'promo_code',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('discount_type', sa.String(length=20), nullable=False),
        sa.Column('discount_value', sa.Integer(), nullable=False),
        sa.Column('max_uses', sa.Integer(), nullable=True),
        sa.Column('current_uses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('valid_from', sa.DateTime(timezone=True), nullable=False),
        sa.Column('valid_to', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'code', name='uq_promo_code_event_code'),
        sa.CheckConstraint(
            'max_uses IS NULL OR current_uses <= max_uses', name='ck_promo_code_uses_bound'
        ),
        sa.CheckConstraint('valid_to >= valid_from', name='ck_promo_code_validity_window'),
    )
    op.create_index('ix_promo_code_event_id', 'promo_code', ['event_id'])

    op.create_table(
        'order',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('promo_code_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('subtotal_amount', sa.Integer(), nullable=False),
        sa.Column('discount_amount', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('buyer_email', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['buyer_id'], ['user.id']),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.ForeignKeyConstraint(['promo_code_id'], ['promo_code.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_buyer_id', 'order', ['buyer_id'])
    op.create_index('ix_order_event_id', 'order', ['event_id'])
    op.create_index('ix_order_status', 'order', ['status'])

    op.create_table(
        'payment',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('checkout_session_id', sa.String(length=255), nullable=True),
        sa.Column('external_reference', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['order_id'], ['order.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id'),
        sa.UniqueConstraint('checkout_session_id'),
        sa.UniqueConstraint('external_reference'),
    )

    op.create_table(
        'ticket',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('tier_id', sa.Integer(), nullable=False),
        sa.Column('holder_id', sa.Integer(), nullable=False),
        sa.Column('attendee_name', sa.String(length=255), nullable=False),
        sa.Column('attendee_email', sa.String(length=255), nullable=False),
        sa.Column('attendee_phone', sa.String(length=50), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('credential', sa.Text(), nullable=True),
        sa.Column('checked_in_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['order_id'], ['order.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.ForeignKeyConstraint(['tier_id'], ['ticket_tier.id']),
        sa.ForeignKeyConstraint(['holder_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('credential'),
    )
    op.create_index('ix_ticket_order_id', 'ticket', ['order_id'])
    op.create_index('ix_ticket_event_id', 'ticket', ['event_id'])
    op.create_index('ix_ticket_holder_id', 'ticket', ['holder_id'])

    op.create_table(
        'refund',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('external_reference', sa.String(length=255), nullable=True),
        sa.Column('processed_by', sa.Integer(), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['order.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['processed_by'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('external_reference'),
    )
    op.create_index('ix_refund_order_id', 'refund', ['order_id'])

    op.create_table(
        'payout',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('organizer_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('external_reference', sa.String(length=255), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['organizer_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('external_reference'),
    )
    op.create_index('ix_payout_organizer_id', 'payout', ['organizer_id'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_index('ix_payout_organizer_id', table_name='payout')
    op.drop_table('payout')
    op.drop_index('ix_refund_order_id', table_name='refund')
    op.drop_table('refund')
    op.drop_index('ix_ticket_holder_id', table_name='ticket')
    op.drop_index('ix_ticket_event_id', table_name='ticket')
    op.drop_index('ix_ticket_order_id', table_name='ticket')
    op.drop_table('ticket')
    op.drop_table('payment')
    op.drop_index('ix_order_status', table_name='order')
    op.drop_index('ix_order_event_id', table_name='order')
    op.drop_index('ix_order_buyer_id', table_name='order')
    op.drop_table('order')
    op.drop_index('ix_promo_code_event_id', table_name='promo_code')
    op.drop_table('promo_code')
    op.drop_index('ix_ticket_tier_event_id', table_name='ticket_tier')
    op.drop_table('ticket_tier')
    op.drop_index('ix_event_category', table_name='event')
    op.drop_index('ix_event_city', table_name='event')
    op.drop_index('ix_event_status', table_name='event')
    op.drop_index('ix_event_organizer_id', table_name='event')
    op.drop_table('event')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')
