"""initial checkout schema

Revision ID: 3f2a9c71d0b4
Revises:
Create Date: 2026-10-19 09:12:41.204113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '3f2a9c71d0b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AutoString = sqlmodel.sql.sqltypes.AutoString
Money = sa.Numeric(precision=10, scale=2)


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('external_id', AutoString(), nullable=True),
        sa.Column('first_name', AutoString(), nullable=False),
        sa.Column('last_name', AutoString(), nullable=False),
        sa.Column('email', AutoString(), nullable=False),
        sa.Column('phone_number', AutoString(), nullable=True),
        sa.Column('role', AutoString(), nullable=False),
        sa.Column('can_login', sa.Boolean(), nullable=False),
        sa.Column('wallet_balance', Money, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_external_id', 'user', ['external_id'])
    op.create_index('ix_user_email', 'user', ['email'])

    op.create_table(
        'address',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('full_name', AutoString(), nullable=False),
        sa.Column('phone_number', AutoString(), nullable=False),
        sa.Column('address_line', AutoString(), nullable=False),
        sa.Column('city', AutoString(), nullable=False),
        sa.Column('state', AutoString(), nullable=False),
        sa.Column('postal_code', AutoString(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_address_user_id', 'address', ['user_id'])

    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('name', AutoString(), nullable=False),
        sa.Column('slug', AutoString(), nullable=False),
        sa.Column('category', AutoString(), nullable=False),
        sa.Column('image_url', AutoString(), nullable=True),
        sa.Column('is_bundle', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_product_slug', 'product', ['slug'], unique=True)
    op.create_index('ix_product_category', 'product', ['category'])

    op.create_table(
        'productvariant',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('product.id'), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('price', Money, nullable=False),
        sa.Column('mrp', Money, nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
    )
    op.create_index('ix_productvariant_product_id', 'productvariant', ['product_id'])

    op.create_table(
        'cartitem',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('product.id'), nullable=False),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('productvariant.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('bundle_variant_ids', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_cartitem_user_id', 'cartitem', ['user_id'])

    op.create_table(
        'coupon',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('code', AutoString(), nullable=False),
        sa.Column('description', AutoString(), nullable=False),
        sa.Column('is_automatic', sa.Boolean(), nullable=False),
        sa.Column('discount_type', AutoString(), nullable=False),
        sa.Column('discount_value', Money, nullable=False),
        sa.Column('max_discount_amount', Money, nullable=True),
        sa.Column('min_order_value', Money, nullable=False),
        sa.Column('min_item_count', sa.Integer(), nullable=False),
        sa.Column('first_order_only', sa.Boolean(), nullable=False),
        sa.Column('max_usage_per_user', sa.Integer(), nullable=True),
        sa.Column('valid_from', sa.DateTime(), nullable=True),
        sa.Column('valid_until', sa.DateTime(), nullable=True),
        sa.Column('target_user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('cond_required_category', AutoString(), nullable=True),
        sa.Column('cond_required_size', sa.Integer(), nullable=True),
        sa.Column('action_target_size', sa.Integer(), nullable=True),
        sa.Column('action_target_max_price', Money, nullable=True),
        sa.Column('action_buy_x', sa.Integer(), nullable=True),
        sa.Column('action_get_y', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_coupon_code', 'coupon', ['code'], unique=True)
    op.create_index('ix_coupon_is_automatic', 'coupon', ['is_automatic'])

    op.create_table(
        'couponusage',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('coupon_id', sa.Integer(), sa.ForeignKey('coupon.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('used_count', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('coupon_id', 'user_id'),
    )
    op.create_index('ix_couponusage_coupon_id', 'couponusage', ['coupon_id'])
    op.create_index('ix_couponusage_user_id', 'couponusage', ['user_id'])

    op.create_table(
        'serviceablepincode',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('pincode', AutoString(), nullable=False),
        sa.Column('city', AutoString(), nullable=False),
        sa.Column('state', AutoString(), nullable=False),
        sa.Column('cod_available', sa.Boolean(), nullable=False),
        sa.Column('delivery_charge', Money, nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_serviceablepincode_pincode', 'serviceablepincode', ['pincode'], unique=True)
    op.create_index('ix_serviceablepincode_city', 'serviceablepincode', ['city'])
    op.create_index('ix_serviceablepincode_state', 'serviceablepincode', ['state'])

    op.create_table(
        'order',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('address_id', sa.Integer(), sa.ForeignKey('address.id'), nullable=False),
        sa.Column('shipping_pincode', AutoString(), nullable=False),
        sa.Column('original_total', Money, nullable=False),
        sa.Column('product_total', Money, nullable=False),
        sa.Column('offer_discount', Money, nullable=False),
        sa.Column('discount_amount', Money, nullable=False),
        sa.Column('delivery_charge', Money, nullable=False),
        sa.Column('wallet_used', Money, nullable=False),
        sa.Column('total_amount', Money, nullable=False),
        sa.Column('payable_amount', Money, nullable=False),
        sa.Column('applied_offers', sa.JSON(), nullable=True),
        sa.Column('coupon_id', sa.Integer(), sa.ForeignKey('coupon.id'), nullable=True),
        sa.Column('coupon_code', AutoString(), nullable=True),
        sa.Column('payment_mode', AutoString(), nullable=False),
        sa.Column('payment_status', AutoString(), nullable=False),
        sa.Column('status', AutoString(), nullable=False),
        sa.Column('gateway_order_id', AutoString(), nullable=True),
        sa.Column('refund_id', AutoString(), nullable=True),
        sa.Column('refund_status', AutoString(), nullable=True),
        sa.Column('refund_amount', Money, nullable=True),
        sa.Column('refund_wallet_amount', Money, nullable=True),
        sa.Column('refund_speed', AutoString(), nullable=True),
        sa.Column('refund_initiated_at', sa.DateTime(), nullable=True),
        sa.Column('refund_completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_by', AutoString(), nullable=True),
    )
    op.create_index('ix_order_user_id', 'order', ['user_id'])
    op.create_index('ix_order_status', 'order', ['status'])
    op.create_index('ix_order_gateway_order_id', 'order', ['gateway_order_id'])

    op.create_table(
        'orderitem',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('order.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('product.id'), nullable=False),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('productvariant.id'), nullable=False),
        sa.Column('name', AutoString(), nullable=False),
        sa.Column('image_url', AutoString(), nullable=True),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('price', Money, nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('free_units', sa.Integer(), nullable=False),
        sa.Column('bundle_variant_ids', sa.JSON(), nullable=True),
    )
    op.create_index('ix_orderitem_order_id', 'orderitem', ['order_id'])

    op.create_table(
        'order_timeline',
        sa.Column('id', AutoString(), primary_key=True, nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('order.id'), nullable=False),
        sa.Column('status', AutoString(), nullable=False),
        sa.Column('title', AutoString(), nullable=False),
        sa.Column('description', AutoString(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', AutoString(), nullable=False),
    )
    op.create_index('ix_order_timeline_order_id', 'order_timeline', ['order_id'])
    op.create_index('ix_order_timeline_status', 'order_timeline', ['status'])

    op.create_table(
        'payment',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('txn_id', AutoString(), nullable=True),
        sa.Column('gateway_order_id', AutoString(), nullable=True),
        sa.Column('amount', Money, nullable=False),
        sa.Column('status', AutoString(), nullable=False),
        sa.Column('method', AutoString(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_payment_order_id', 'payment', ['order_id'])
    op.create_index('ix_payment_user_id', 'payment', ['user_id'])
    op.create_index('ix_payment_txn_id', 'payment', ['txn_id'], unique=True)

    op.create_table(
        'wallettransaction',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('order.id'), nullable=True),
        sa.Column('amount', Money, nullable=False),
        sa.Column('reason', AutoString(), nullable=False),
        sa.Column('balance_after', Money, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_wallettransaction_user_id', 'wallettransaction', ['user_id'])

    op.create_table(
        'notification',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('recipient_role', sa.Enum('admin', 'customer', name='recipientrole'), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('trigger_source', AutoString(), nullable=False),
        sa.Column('related_id', sa.Integer(), nullable=True),
        sa.Column('title', AutoString(), nullable=False),
        sa.Column('content', AutoString(), nullable=False),
        sa.Column('channel', sa.Enum('email', 'system', name='notificationchannel'), nullable=False),
        sa.Column('status', sa.Enum('sent', 'failed', name='notificationstatus'), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('notification')
    op.drop_table('wallettransaction')
    op.drop_table('payment')
    op.drop_table('order_timeline')
    op.drop_table('orderitem')
    op.drop_table('order')
    op.drop_table('serviceablepincode')
    op.drop_table('couponusage')
    op.drop_table('coupon')
    op.drop_table('cartitem')
    op.drop_table('productvariant')
    op.drop_table('product')
    op.drop_table('address')
    op.drop_table('user')
    sa.Enum(name='notificationstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='notificationchannel').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='recipientrole').drop(op.get_bind(), checkfirst=True)
