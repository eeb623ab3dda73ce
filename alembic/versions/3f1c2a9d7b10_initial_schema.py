"""initial_schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import linkfolio.db.models


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, links, social links and the analytics event tables."""
    op.create_table('users',
        sa.Column('id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('password_salt', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('bio', sa.String(length=500), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('plan', sa.String(length=20), nullable=False),
        sa.Column('theme', sa.String(length=20), nullable=False),
        sa.Column('button_style', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('username')
    )

    op.create_table('links',
        sa.Column('id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('user_id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_links_user_order', 'links', ['user_id', 'order'], unique=False)

    op.create_table('social_links',
        sa.Column('id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('user_id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('platform', sa.String(length=20), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('profile_views',
        sa.Column('id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('user_id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('device', sa.String(length=20), nullable=False),
        sa.Column('browser', sa.String(length=20), nullable=False),
        sa.Column('referrer', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_profile_views_user_created', 'profile_views', ['user_id', 'created_at'], unique=False
    )

    # link_id has no foreign key: clicks outlive deleted links
    op.create_table('link_clicks',
        sa.Column('id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('link_id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('user_id', linkfolio.db.models.GUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('device', sa.String(length=20), nullable=False),
        sa.Column('browser', sa.String(length=20), nullable=False),
        sa.Column('referrer', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_link_clicks_user_created', 'link_clicks', ['user_id', 'created_at'], unique=False
    )
    op.create_index('ix_link_clicks_link', 'link_clicks', ['link_id'], unique=False)


def downgrade() -> None:
    """Drop all LinkFolio tables."""
    op.drop_index('ix_link_clicks_link', table_name='link_clicks')
    op.drop_index('ix_link_clicks_user_created', table_name='link_clicks')
    op.drop_table('link_clicks')
    op.drop_index('ix_profile_views_user_created', table_name='profile_views')
    op.drop_table('profile_views')
    op.drop_table('social_links')
    op.drop_index('ix_links_user_order', table_name='links')
    op.drop_table('links')
    op.drop_table('users')
