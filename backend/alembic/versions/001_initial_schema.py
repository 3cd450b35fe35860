"""Initial storefront schema: catalog, orders, promo codes, carts, announcements.

Revision ID: 001_initial
Revises:
Create Date: 2025-01-15

"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ### Products table ###
    op.create_table(
        'products',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), server_default=''),
        sa.Column('category', sa.String(100), nullable=False, index=True),
        sa.Column('image', sa.Text(), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('sale_price', sa.Numeric(precision=12, scale=2)),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('featured', sa.Boolean(), server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    # ### Orders table ###
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_number', sa.String(32), unique=True, index=True, nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False, index=True),
        sa.Column('items', postgresql.JSONB(), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=12, scale=2), server_default='0'),
        sa.Column('shipping_cost', sa.Numeric(precision=12, scale=2), server_default='0'),
        sa.Column('tax_amount', sa.Numeric(precision=12, scale=2), server_default='0'),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('promo_code', sa.String(20)),
        sa.Column('shipping_address', postgresql.JSONB(), nullable=False),
        sa.Column('payment_method', sa.String(32), nullable=False),
        sa.Column('transaction_ref', sa.String(255), nullable=False),
        sa.Column('payment_proof_image', sa.Text(), nullable=False),
        sa.Column('payment_status', sa.String(20), server_default='pending', index=True),
        sa.Column('order_status', sa.String(20), server_default='pending', index=True),
        sa.Column('status_history', postgresql.JSONB(), server_default='[]'),
        sa.Column('tracking_number', sa.String(100)),
        sa.Column('deliverer_name', sa.String(100)),
        sa.Column('deliverer_phone', sa.String(32)),
        sa.Column('delivery_otp', sa.String(6)),
        sa.Column('notes', sa.Text()),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    # ### Order number counters ###
    op.create_table(
        'order_sequences',
        sa.Column('day', sa.String(8), primary_key=True),
        sa.Column('last_value', sa.Integer(), nullable=False, server_default='0'),
    )

    # ### Promo codes table ###
    op.create_table(
        'promo_codes',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(20), unique=True, index=True, nullable=False),
        sa.Column('description', sa.String(255), nullable=False),
        sa.Column('discount_percentage', sa.Integer(), nullable=False),
        sa.Column('max_discount', sa.Numeric(precision=12, scale=2)),
        sa.Column('min_purchase', sa.Numeric(precision=12, scale=2)),
        sa.Column('valid_from', sa.DateTime(timezone=True), nullable=False),
        sa.Column('valid_to', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('applicable_categories', postgresql.JSONB()),
        sa.Column('usage_limit', sa.Integer()),
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('valid_from <= valid_to', name='ck_promo_codes_window'),
        sa.CheckConstraint(
            'discount_percentage >= 1 AND discount_percentage <= 100',
            name='ck_promo_codes_percentage',
        ),
        sa.CheckConstraint(
            'usage_limit IS NULL OR usage_count <= usage_limit',
            name='ck_promo_codes_usage',
        ),
    )

    # ### Cart items table ###
    op.create_table(
        'cart_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.String(255), nullable=False, index=True),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('color', sa.String(50), nullable=False, server_default=''),
        sa.Column('size', sa.String(50), nullable=False, server_default=''),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.UniqueConstraint('user_id', 'product_id', 'color', 'size', name='uq_cart_items_user_variant'),
    )

    # ### Announcements table ###
    op.create_table(
        'announcements',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('text', sa.String(500), nullable=False),
        sa.Column('link', sa.Text()),
        sa.Column('active', sa.Boolean(), server_default=sa.true()),
        sa.Column('start_date', sa.DateTime(timezone=True)),
        sa.Column('end_date', sa.DateTime(timezone=True)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('announcements')
    op.drop_table('cart_items')
    op.drop_table('promo_codes')
    op.drop_table('order_sequences')
    op.drop_table('orders')
    op.drop_table('products')
