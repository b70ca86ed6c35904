"""initial schema: tenants, staff, catalog, customers, orders

Revision ID: 5f0c2a9d7e41
Revises:
Create Date: 2026-10-19 10:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5f0c2a9d7e41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


tenant_status = sa.Enum('TRIAL', 'ACTIVE', 'SUSPENDED', 'CANCELLED', name='tenantstatus')
user_role = sa.Enum('OWNER', 'MANAGER', 'EMPLOYEE', 'SUPERADMIN', name='userrole')
order_status = sa.Enum('PENDING', 'CONFIRMED', 'PREPARING', 'READY', 'COMPLETED', 'CANCELLED', name='orderstatus')
order_type = sa.Enum('DELIVERY', 'PICKUP', 'DINE_IN', name='ordertype')
order_source = sa.Enum('WEBSITE', 'POS', 'PHONE', name='ordersource')
payment_method = sa.Enum('CASH', 'CARD', 'IDEAL', 'PAYPAL', 'BANCONTACT', name='paymentmethod')
payment_status = sa.Enum('PENDING', 'PROCESSING', 'PAID', 'FAILED', 'REFUNDED', name='paymentstatus')


def upgrade():
    # 1. Tenants
    op.create_table(
        'tenants',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('subdomain', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('status', tenant_status, nullable=False),
        sa.Column('plan', sa.String(), nullable=False),
        sa.Column('trial_ends_at', sa.DateTime(), nullable=True),
        sa.Column('last_order_number', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_tenants_subdomain', 'tenants', ['subdomain'], unique=True)

    op.create_table(
        'tenant_settings',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('tenant_id', sa.String(), sa.ForeignKey('tenants.id'), nullable=False, unique=True),
        sa.Column('currency', sa.String(), nullable=False),
        sa.Column('timezone', sa.String(), nullable=False),
        sa.Column('language', sa.String(), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('free_delivery_threshold', sa.Numeric(10, 2), nullable=True),
        sa.Column('tax_rate', sa.Numeric(5, 4), nullable=False),
        sa.Column('enable_delivery', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_pickup', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_dine_in', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_cash_payment', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_online_payment', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    # 2. Staff users
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('tenant_id', sa.String(), sa.ForeignKey('tenants.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    # 3. Catalog
    op.create_table(
        'categories',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('tenant_id', sa.String(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'slug', name='uq_category_tenant_slug'),
    )
    op.create_index('ix_categories_tenant_id', 'categories', ['tenant_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_popular', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tenant_id', sa.String(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('category_id', sa.String(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('idx_products_tenant', 'products', ['tenant_id'])
    op.create_index('idx_products_tenant_category', 'products', ['tenant_id', 'category_id'])

    # 4. Customers
    op.create_table(
        'customers',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('postal_code', sa.String(), nullable=True),
        sa.Column('tenant_id', sa.String(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_customer_tenant_email'),
    )

    # 5. Orders
    op.create_table(
        'orders',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('order_number', sa.String(), nullable=False),
        sa.Column('tenant_id', sa.String(), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('customer_id', sa.String(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('status', order_status, nullable=False),
        sa.Column('type', order_type, nullable=False),
        sa.Column('source', order_source, nullable=False),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax', sa.Numeric(10, 2), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_email', sa.String(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=False),
        sa.Column('delivery_address', sa.String(), nullable=True),
        sa.Column('delivery_city', sa.String(), nullable=True),
        sa.Column('delivery_postal', sa.String(), nullable=True),
        sa.Column('delivery_notes', sa.Text(), nullable=True),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('payment_status', payment_status, nullable=False),
        sa.Column('cash_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('estimated_time', sa.Integer(), nullable=True),
        sa.Column('scheduled_for', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status_changed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'order_number', name='uq_order_tenant_number'),
    )
    op.create_index('idx_orders_tenant_created', 'orders', ['tenant_id', 'created_at'])
    op.create_index('idx_orders_tenant_status', 'orders', ['tenant_id', 'status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('order_id', sa.String(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(), sa.ForeignKey('products.id'), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )


def downgrade():
    op.drop_table('order_items')
    op.drop_index('idx_orders_tenant_status', table_name='orders')
    op.drop_index('idx_orders_tenant_created', table_name='orders')
    op.drop_table('orders')
    op.drop_table('customers')
    op.drop_index('idx_products_tenant_category', table_name='products')
    op.drop_index('idx_products_tenant', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_categories_tenant_id', table_name='categories')
    op.drop_table('categories')
    op.drop_table('users')
    op.drop_table('tenant_settings')
    op.drop_index('ix_tenants_subdomain', table_name='tenants')
    op.drop_table('tenants')

    bind = op.get_bind()
    for enum in (payment_status, payment_method, order_source, order_type, order_status, user_role, tenant_status):
        enum.drop(bind, checkfirst=True)
