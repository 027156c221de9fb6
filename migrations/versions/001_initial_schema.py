"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(), nullable=True, server_default=sa.func.current_timestamp()),
    ]


def upgrade():
    """Create customers, sessions, catalog, inventory, movement and cart tables."""
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(80), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(150), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('role', sa.Enum('customer', 'admin', name='customerrole'), nullable=False),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_customers_username', 'customers', ['username'], unique=True)

    op.create_table(
        'customer_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('jti', sa.String(64), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        *_timestamps()
    )
    op.create_index('ix_customer_sessions_jti', 'customer_sessions', ['jti'], unique=True)

    op.create_table(
        'categories',
        sa.Column('category_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps()
    )

    op.create_table(
        'products',
        sa.Column('product_id', sa.Integer(), primary_key=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.category_id'), nullable=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('season', sa.Enum('regular', 'halloween', 'dia_muertos', 'navidad', name='season'),
                  nullable=False, server_default='regular'),
        sa.Column('image_url', sa.String(255), nullable=True),
        sa.Column('status', sa.Enum('active', 'archived', name='productstatus'),
                  nullable=False, server_default='active'),
        *_timestamps(),
        sa.CheckConstraint('price >= 0', name='ck_products_price_non_negative')
    )
    op.create_index('ix_products_name', 'products', ['name'])

    op.create_table(
        'inventory',
        sa.Column('inventory_id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.product_id'), nullable=False, unique=True),
        sa.Column('current_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reserved_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_updated', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.CheckConstraint('current_quantity >= 0', name='ck_inventory_current_non_negative'),
        sa.CheckConstraint('reserved_quantity >= 0', name='ck_inventory_reserved_non_negative')
    )

    op.create_table(
        'stock_movements',
        sa.Column('movement_id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.product_id'), nullable=False),
        sa.Column('movement_type', sa.Enum('entry', 'exit', name='movementtype'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('occurred_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('reference', sa.String(255), nullable=True),
        sa.CheckConstraint('quantity > 0', name='ck_stock_movements_quantity_positive')
    )
    op.create_index('ix_stock_movements_product_time', 'stock_movements', ['product_id', 'occurred_at'])

    op.create_table(
        'cart_items',
        sa.Column('cart_item_id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.product_id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.Enum('active', 'removed', 'checked_out', name='cartitemstatus'),
                  nullable=False, server_default='active'),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.CheckConstraint('quantity > 0', name='ck_cart_items_quantity_positive')
    )
    op.create_index('ix_cart_items_customer_status', 'cart_items', ['customer_id', 'status'])


def downgrade():
    """Drop every table in reverse dependency order."""
    op.drop_index('ix_cart_items_customer_status', table_name='cart_items')
    op.drop_table('cart_items')
    op.drop_index('ix_stock_movements_product_time', table_name='stock_movements')
    op.drop_table('stock_movements')
    op.drop_table('inventory')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_index('ix_customer_sessions_jti', table_name='customer_sessions')
    op.drop_table('customer_sessions')
    op.drop_index('ix_customers_username', table_name='customers')
    op.drop_table('customers')
