"""create users and listings

Revision ID: 1c3f5a7e9b21
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1c3f5a7e9b21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('otp_hash', sa.String(), nullable=True),
        sa.Column('otp_expires', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_phone', 'users', ['phone'], unique=True)

    op.create_table(
        'listings',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('owner_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('bedrooms', sa.Integer(), nullable=False),
        sa.Column('bathrooms', sa.Integer(), nullable=False),
        sa.Column('regular_price', sa.Integer(), nullable=False),
        sa.Column('discount_price', sa.Integer(), nullable=False),
        sa.Column('parking', sa.Boolean(), nullable=False),
        sa.Column('furnished', sa.Boolean(), nullable=False),
        sa.Column('offer', sa.Boolean(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_listings_owner_id', 'listings', ['owner_id'])
    op.create_index('ix_listings_type', 'listings', ['type'])
    op.create_index('idx_listing_created', 'listings', ['created_at'])


def downgrade() -> None:
    op.drop_index('idx_listing_created', table_name='listings')
    op.drop_index('ix_listings_type', table_name='listings')
    op.drop_index('ix_listings_owner_id', table_name='listings')
    op.drop_table('listings')
    op.drop_index('ix_users_phone', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
