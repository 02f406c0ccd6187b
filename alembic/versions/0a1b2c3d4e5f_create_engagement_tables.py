"""create engagement tables

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0a1b2c3d4e5f'
down_revision = None
branch_labels = None
depends_on = None


group_visibility = postgresql.ENUM('public', 'private', 'restricted', name='group_visibility', create_type=False)
member_role = postgresql.ENUM('owner', 'moderator', 'member', name='member_role', create_type=False)
member_status = postgresql.ENUM('active', 'pending', name='member_status', create_type=False)
post_status = postgresql.ENUM('pending', 'published', 'rejected', name='post_status', create_type=False)
target_type = postgresql.ENUM('post', 'comment', name='target_type', create_type=False)
notification_type = postgresql.ENUM(
    'mention', 'reply', 'reaction', 'post_approved', 'post_rejected', 'post_created',
    'group_invite', 'group_join_request', 'moderation_action', 'system_announcement',
    name='notification_type', create_type=False,
)
notification_status = postgresql.ENUM('scheduled', 'delivered', name='notification_status', create_type=False)

ENUMS = (
    group_visibility, member_role, member_status, post_status,
    target_type, notification_type, notification_status,
)


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('handle', sa.String(50), nullable=False),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('notification_settings', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_handle', 'users', ['handle'], unique=True)

    op.create_table(
        'groups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('visibility', group_visibility, nullable=False),
        sa.Column('post_approval_required', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_groups_id', 'groups', ['id'])
    op.create_index('ix_groups_slug', 'groups', ['slug'], unique=True)
    op.create_index('ix_groups_owner_id', 'groups', ['owner_id'])

    op.create_table(
        'group_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', member_role, nullable=False),
        sa.Column('status', member_status, nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('group_id', 'user_id', name='uq_group_members_group_user'),
    )
    op.create_index('ix_group_members_id', 'group_members', ['id'])
    op.create_index('ix_group_members_group_id', 'group_members', ['group_id'])
    op.create_index('ix_group_members_user_id', 'group_members', ['user_id'])

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', post_status, nullable=False),
        sa.Column('reaction_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('comment_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_posts_id', 'posts', ['id'])
    op.create_index('ix_posts_author_id', 'posts', ['author_id'])
    op.create_index('ix_posts_group_id', 'posts', ['group_id'])
    op.create_index('ix_posts_status', 'posts', ['status'])
    op.create_index('ix_posts_reaction_count', 'posts', ['reaction_count'])
    op.create_index('ix_posts_created_at', 'posts', ['created_at'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', post_status, nullable=False),
        sa.Column('reaction_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_comments_id', 'comments', ['id'])
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])
    op.create_index('ix_comments_author_id', 'comments', ['author_id'])

    op.create_table(
        'reactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('target_type', target_type, nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(20), nullable=False, server_default='like'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('target_type', 'target_id', 'user_id', name='uq_reactions_target_user'),
    )
    op.create_index('ix_reactions_id', 'reactions', ['id'])
    op.create_index('ix_reactions_user_id', 'reactions', ['user_id'])
    op.create_index('idx_reactions_target', 'reactions', ['target_type', 'target_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', notification_type, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('status', notification_status, nullable=False),
        sa.Column('scheduled_for', sa.DateTime(timezone=True), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    # Unread-count polling
    op.create_index('idx_notifications_user_read', 'notifications', ['user_id', 'read_at'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('target_type', target_type, nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=False),
        sa.Column('in_app', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('email', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('push', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('user_id', 'target_type', 'target_id', name='uq_subscriptions_user_target'),
    )
    op.create_index('ix_subscriptions_id', 'subscriptions', ['id'])
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])


def downgrade() -> None:
    op.drop_table('subscriptions')
    op.drop_table('notifications')
    op.drop_table('reactions')
    op.drop_table('comments')
    op.drop_table('posts')
    op.drop_table('group_members')
    op.drop_table('groups')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
