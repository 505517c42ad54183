"""stardust schema

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 10:12:41.204518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'weekly_points',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('guild_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('week', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('max_possible_points', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_raw_points', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_finalized_points', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_wasted_points', sa.Numeric(14, 2), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('tier_after_week', sa.Integer(), nullable=False),
        sa.Column('override_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('override_finalized_points', sa.Numeric(14, 2), nullable=True),
        sa.Column('override_raw_points', sa.Numeric(14, 2), nullable=True),
        sa.Column('override_details', sa.JSON(), nullable=True),
        sa.Column('override_reason', sa.Text(), nullable=True),
        sa.Column('override_applied_by_id', sa.String(), nullable=True),
        sa.Column('override_applied_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('guild_id', 'user_id', 'week', 'year', name='uq_guild_user_week_year'),
    )
    op.create_index('ix_weekly_points_id', 'weekly_points', ['id'])
    op.create_index('ix_weekly_points_guild_id', 'weekly_points', ['guild_id'])
    op.create_index('ix_weekly_points_user_id', 'weekly_points', ['user_id'])

    op.create_table(
        'moderator_tier_status',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('guild_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('current_tier', sa.Integer(), nullable=False),
        sa.Column('weeks_inactive', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_evaluated_week', sa.Integer(), nullable=True),
        sa.Column('last_evaluated_year', sa.Integer(), nullable=True),
        sa.Column('updated_by_id', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('guild_id', 'user_id', name='uq_tier_guild_user'),
    )
    op.create_index('ix_moderator_tier_status_id', 'moderator_tier_status', ['id'])

    op.create_table(
        'moderator_enrollments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('guild_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('enrolled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('enrolled_by_id', sa.String(), nullable=True),
        sa.Column('deactivated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deactivated_by_id', sa.String(), nullable=True),
        sa.UniqueConstraint('guild_id', 'user_id', name='uq_enrollment_guild_user'),
    )
    op.create_index('ix_moderator_enrollments_id', 'moderator_enrollments', ['id'])

    op.create_table(
        'monthly_points',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('guild_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('mod_chat_messages', sa.Integer()),
        sa.Column('public_chat_messages', sa.Integer()),
        sa.Column('voice_chat_minutes', sa.Integer()),
        sa.Column('mod_actions_taken', sa.Integer()),
        sa.Column('cases_handled', sa.Integer()),
        sa.Column('raw_points', sa.Numeric(14, 2), nullable=False),
        sa.Column('finalized_points', sa.Numeric(14, 2), nullable=False),
        sa.Column('wasted_points', sa.Numeric(14, 2), nullable=False),
        sa.Column('weeks_counted', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('guild_id', 'user_id', 'month', 'year', name='uq_guild_user_month_year'),
    )
    op.create_index('ix_monthly_points_id', 'monthly_points', ['id'])
    op.create_index('ix_monthly_points_guild_id', 'monthly_points', ['guild_id'])


def downgrade() -> None:
    op.drop_table('monthly_points')
    op.drop_table('moderator_enrollments')
    op.drop_table('moderator_tier_status')
    op.drop_table('weekly_points')
