"""initial schema

Revision ID: qm001_initial
Revises:
Create Date: 2026-03-01 00:00:00.000000

This migration creates the complete QR menu schema from scratch, including:
- customer_accounts / plans / customer_subscriptions: billing and the
  owner-area subscription gate
- restaurants: the tenant root
- users / roles / user_roles / user_restaurants: authentication and
  tenant membership
- categories / products / product_approval_logs: menu catalog with the
  publication workflow
- media / qr_codes / restaurant_pages / restaurant_social_links: other
  tenant-owned entities
- default_categories: global templates copied on onboarding
- security_events: audit log
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'qm001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*, updated=False):
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
    ]
    if updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                      server_default=sa.text('CURRENT_TIMESTAMP'))
        )
    return columns


def upgrade():
    # ============================================================================
    # Billing
    # ============================================================================
    op.create_table(
        'customer_accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=180), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(updated=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'plans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('max_restaurants', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('yearly_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # restaurants: Multi-tenant root
    # ============================================================================
    op.create_table(
        'restaurants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('customer_account_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='0'),
        *_timestamps(updated=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['customer_account_id'], ['customer_accounts.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_restaurants_slug', 'restaurants', ['slug'], unique=True)
    op.create_index('ix_restaurants_is_active', 'restaurants', ['is_active'])
    op.create_index('ix_restaurants_customer_account_id', 'restaurants', ['customer_account_id'])

    # ============================================================================
    # users: Authentication and tenant membership
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=180), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('last_name', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('restaurant_id', sa.Integer(), nullable=True),
        sa.Column('customer_account_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['customer_account_id'], ['customer_accounts.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sa.UniqueConstraint('email'),
        sqlite_autoincrement=True
    )
    op.create_index('idx_users_restaurant', 'users', ['restaurant_id'])
    op.create_index('idx_users_customer_account', 'users', ['customer_account_id'])

    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'role_id')
    )

    op.create_table(
        'user_restaurants',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'restaurant_id')
    )

    # ============================================================================
    # customer_subscriptions: Lazily expired by the subscription gate
    # ============================================================================
    op.create_table(
        'customer_subscriptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_account_id', sa.Integer(), nullable=False),
        sa.Column('plan_id', sa.Integer(), nullable=False),
        sa.Column('starts_at', sa.Date(), nullable=False),
        sa.Column('ends_at', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['customer_account_id'], ['customer_accounts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['plan_id'], ['plans.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_customer_subscriptions_customer_account_id', 'customer_subscriptions',
                    ['customer_account_id'])
    op.create_index('ix_customer_subscriptions_account_active', 'customer_subscriptions',
                    ['customer_account_id', 'is_active'])

    # ============================================================================
    # Catalog
    # ============================================================================
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_categories_restaurant_id', 'categories', ['restaurant_id'])

    # WHY status + submitted_at: publication workflow
    # DRAFT -> PENDING_APPROVAL -> APPROVED | REJECTED; only APPROVED is public
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='DRAFT'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(updated=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_restaurant_id', 'products', ['restaurant_id'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_restaurant_status', 'products', ['restaurant_id', 'status'])

    op.create_table(
        'product_approval_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('performed_by_id', sa.Integer(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['performed_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_product_approval_logs_product_id', 'product_approval_logs', ['product_id'])

    op.create_table(
        'default_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sa.UniqueConstraint('name'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # Other tenant-owned entities
    # ============================================================================
    op.create_table(
        'media',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('original_filename', sa.String(length=255), nullable=False),
        sa.Column('storage_path', sa.String(length=512), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_media_restaurant_id', 'media', ['restaurant_id'])

    op.create_table(
        'qr_codes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('label', sa.String(length=120), nullable=False),
        sa.Column('table_number', sa.String(length=32), nullable=True),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_qr_codes_restaurant_id', 'qr_codes', ['restaurant_id'])

    op.create_table(
        'restaurant_pages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('restaurant_id', 'slug', name='uq_restaurant_pages_restaurant_slug'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_restaurant_pages_restaurant_id', 'restaurant_pages', ['restaurant_id'])

    op.create_table(
        'restaurant_social_links',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('platform', sa.String(length=32), nullable=False),
        sa.Column('url', sa.String(length=512), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_restaurant_social_links_restaurant_id', 'restaurant_social_links', ['restaurant_id'])

    # ============================================================================
    # security_events: Append-only audit log (no foreign keys)
    # ============================================================================
    op.create_table(
        'security_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(length=64), nullable=False),
        sa.Column('resource', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_security_events_restaurant_id', 'security_events', ['restaurant_id'])
    op.create_index('ix_security_events_user_id', 'security_events', ['user_id'])
    op.create_index('ix_security_events_event_type', 'security_events', ['event_type'])
    op.create_index('ix_security_events_success', 'security_events', ['success'])
    op.create_index('ix_security_events_occurred_at', 'security_events', ['occurred_at'])
    op.create_index('ix_security_events_user_type', 'security_events', ['user_id', 'event_type'])
    op.create_index('ix_security_events_restaurant_occurred', 'security_events',
                    ['restaurant_id', 'occurred_at'])


def downgrade():
    for table in (
        'security_events',
        'restaurant_social_links',
        'restaurant_pages',
        'qr_codes',
        'media',
        'default_categories',
        'product_approval_logs',
        'products',
        'categories',
        'customer_subscriptions',
        'user_restaurants',
        'user_roles',
        'users',
        'restaurants',
        'roles',
        'plans',
        'customer_accounts',
    ):
        op.drop_table(table)
