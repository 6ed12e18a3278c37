"""Initial schema: catalogue, clients, commands, audit log

Revision ID: 3f1c2a9d8e10
Revises: 
Create Date: 2026-10-19 10:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '3f1c2a9d8e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

command_status = sa.Enum('NOT_DELIVERED', 'DELIVERED', 'GOT_PROFIT', name='commandstatus')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_categories_id', 'categories', ['id'])
    op.create_index('ix_categories_name', 'categories', ['name'])
    op.create_index('ix_categories_created_at', 'categories', ['created_at'])

    # Buyers and consignors share the contact columns, co-clients add a RIB
    for table, extra in (('clients', []), ('co_clients', [sa.Column('rib', sa.String(), nullable=False)])):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('first_name', sa.String(), nullable=False),
            sa.Column('last_name', sa.String(), nullable=False),
            sa.Column('address', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('phone_number', sa.String(), nullable=False),
            *extra,
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(f'ix_{table}_id', table, ['id'])
        op.create_index(f'ix_{table}_last_name', table, ['last_name'])
        op.create_index(f'ix_{table}_email', table, ['email'])
        op.create_index(f'ix_{table}_created_at', table, ['created_at'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('sale_price', sa.Float(), sa.CheckConstraint('sale_price >= 0'), nullable=False),
        sa.Column('purchase_price', sa.Float(), sa.CheckConstraint('purchase_price >= 0'), nullable=True),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('is_depot', sa.Boolean(), nullable=False),
        sa.Column('depot_percentage', sa.Float(),
                  sa.CheckConstraint('depot_percentage >= 0 AND depot_percentage <= 100'), nullable=True),
        sa.Column('surcharge', sa.Float(), sa.CheckConstraint('surcharge >= 0'), nullable=False),
        sa.Column('gain', sa.Float(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('co_client_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['co_client_id'], ['co_clients.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_id', 'products', ['id'])
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_is_depot', 'products', ['is_depot'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_co_client_id', 'products', ['co_client_id'])
    op.create_index('ix_products_created_at', 'products', ['created_at'])

    op.create_table(
        'product_photos',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('photo_doc', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_photos_id', 'product_photos', ['id'])
    op.create_index('ix_product_photos_product_id', 'product_photos', ['product_id'])

    op.create_table(
        'commands',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('products_number', sa.Integer(), sa.CheckConstraint('products_number >= 1'), nullable=False),
        sa.Column('sale_price', sa.Float(), sa.CheckConstraint('sale_price >= 0'), nullable=False),
        sa.Column('purchase_price', sa.Float(), sa.CheckConstraint('purchase_price >= 0'), nullable=False),
        sa.Column('status', command_status, nullable=False),
        sa.Column('delivery_address', sa.String(), nullable=False),
        sa.Column('delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_commands_id', 'commands', ['id'])
    op.create_index('ix_commands_status', 'commands', ['status'])
    op.create_index('ix_commands_created_at', 'commands', ['created_at'])

    op.create_table(
        'command_details',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('command_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('co_client_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['command_id'], ['commands.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['co_client_id'], ['co_clients.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_command_details_id', 'command_details', ['id'])
    op.create_index('ix_command_details_command_id', 'command_details', ['command_id'])
    op.create_index('ix_command_details_product_id', 'command_details', ['product_id'])
    op.create_index('ix_command_details_client_id', 'command_details', ['client_id'])

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ts', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=True),
        sa.Column('resource', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_logs_id', 'logs', ['id'])
    op.create_index('ix_logs_ts', 'logs', ['ts'])
    op.create_index('ix_logs_action', 'logs', ['action'])
    op.create_index('ix_logs_resource', 'logs', ['resource'])
    op.create_index('ix_logs_status', 'logs', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('logs')
    op.drop_table('command_details')
    op.drop_table('commands')
    op.drop_table('product_photos')
    op.drop_table('products')
    op.drop_table('co_clients')
    op.drop_table('clients')
    op.drop_table('categories')
    op.drop_table('users')
    command_status.drop(op.get_bind(), checkfirst=True)
