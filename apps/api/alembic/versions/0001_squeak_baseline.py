"""Baseline migration - tenants, profiles, questions, replies, topics

Revision ID: 0001_squeak_baseline
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_squeak_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the widget schema."""

    # ==========================================================================
    # Organizations + config
    # ==========================================================================
    op.create_table(
        'squeak_organizations',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'squeak_config',
        sa.Column('id', sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('permalink_base', sa.String(100), server_default=sa.text("'questions'"), nullable=False),
        sa.Column('question_auto_publish', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('company_domain', sa.String(255), nullable=True),
        sa.Column('slack_api_key', sa.Text(), nullable=True),
        sa.Column('slack_question_channel', sa.String(100), nullable=True),
        sa.Column('cloudinary_cloud_name', sa.String(100), nullable=True),
        sa.Column('cloudinary_api_key', sa.String(100), nullable=True),
        sa.Column('cloudinary_api_secret', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['squeak_organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', name='uq_squeak_config_organization_id'),
    )

    # ==========================================================================
    # Profiles
    # ==========================================================================
    op.create_table(
        'squeak_profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('avatar', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'squeak_profiles_readonly',
        sa.Column('id', sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('role', sa.String(20), server_default=sa.text("'user'"), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['profile_id'], ['squeak_profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['organization_id'], ['squeak_organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'user_id', name='uq_profiles_readonly_org_user'),
    )

    # ==========================================================================
    # Questions + replies
    # ==========================================================================
    op.create_table(
        'squeak_messages',
        sa.Column('id', sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column('subject', sa.Text(), nullable=True),
        sa.Column('slug', postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('permalink', sa.String(255), nullable=True),
        sa.Column('published', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('resolved', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('resolved_reply_id', sa.BigInteger(), nullable=True),
        sa.Column('slack_timestamp', sa.String(50), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['squeak_organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['profile_id'], ['squeak_profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'permalink', name='uq_messages_org_permalink'),
    )
    op.create_index('ix_squeak_messages_organization_id', 'squeak_messages', ['organization_id'])
    op.create_index('ix_messages_org_slack_ts', 'squeak_messages', ['organization_id', 'slack_timestamp'])

    op.create_table(
        'squeak_replies',
        sa.Column('id', sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column('message_id', sa.BigInteger(), nullable=False),
        sa.Column('body', sa.Text(), server_default=sa.text("''"), nullable=False),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('published', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['message_id'], ['squeak_messages.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['profile_id'], ['squeak_profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['organization_id'], ['squeak_organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_squeak_replies_message_id', 'squeak_replies', ['message_id'])

    op.create_foreign_key(
        'fk_messages_resolved_reply',
        'squeak_messages', 'squeak_replies',
        ['resolved_reply_id'], ['id'],
        ondelete='SET NULL',
    )

    # ==========================================================================
    # Topics
    # ==========================================================================
    op.create_table(
        'squeak_topic_groups',
        sa.Column('id', sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column('label', sa.String(255), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['squeak_organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_squeak_topic_groups_organization_id', 'squeak_topic_groups', ['organization_id'])

    op.create_table(
        'squeak_topics',
        sa.Column('id', sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column('label', sa.String(255), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('topic_group_id', sa.BigInteger(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['squeak_organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['topic_group_id'], ['squeak_topic_groups.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_squeak_topics_organization_id', 'squeak_topics', ['organization_id'])


def downgrade() -> None:
    op.drop_table('squeak_topics')
    op.drop_table('squeak_topic_groups')
    op.drop_constraint('fk_messages_resolved_reply', 'squeak_messages', type_='foreignkey')
    op.drop_table('squeak_replies')
    op.drop_table('squeak_messages')
    op.drop_table('squeak_profiles_readonly')
    op.drop_table('squeak_profiles')
    op.drop_table('squeak_config')
    op.drop_table('squeak_organizations')
