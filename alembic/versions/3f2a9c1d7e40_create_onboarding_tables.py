"""create_onboarding_tables

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2026-10-17 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _user_fk():
    return sa.Column('user_id', sa.String(length=32), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)


def upgrade() -> None:
    """Create users, onboarding progress, step data and subscription tables."""
    op.create_table(
        'user',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('license_number', sa.String(), nullable=True),
        sa.Column('license_state', sa.String(), nullable=True),
        sa.Column('brokerage', sa.String(), nullable=True),
        sa.Column('years_experience', sa.Integer(), nullable=True),
        sa.Column('subscription_tier', sa.String(), nullable=False, server_default='Free'),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'user_onboarding',
        sa.Column('id', sa.String(length=32), primary_key=True),
        _user_fk(),
        sa.Column('core_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('profile_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('market_setup_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('preferences_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('goals_setup_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('agent_intelligence_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('agent_onboarding_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('call_center_onboarding_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_steps', sa.JSON(), nullable=False),
        sa.Column('completion_date', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_onboarding_user_id', 'user_onboarding', ['user_id'], unique=True)

    op.create_table(
        'user_agent_subscription',
        sa.Column('id', sa.String(length=32), primary_key=True),
        _user_fk(),
        sa.Column('status', sa.String(), nullable=False, server_default='inactive'),
        sa.Column('plan_type', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_agent_subscription_user_id', 'user_agent_subscription', ['user_id'], unique=True)

    op.create_table(
        'user_market_config',
        sa.Column('id', sa.String(length=32), primary_key=True),
        _user_fk(),
        sa.Column('primary_territory', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('zip_codes', sa.JSON(), nullable=False),
        sa.Column('price_range_min', sa.Float(), nullable=False, server_default='0'),
        sa.Column('price_range_max', sa.Float(), nullable=False, server_default='0'),
        sa.Column('property_types', sa.JSON(), nullable=False),
        sa.Column('client_types', sa.JSON(), nullable=False),
        sa.Column('experience_level', sa.String(), nullable=False, server_default='mid'),
        sa.Column('years_experience', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('specializations', sa.JSON(), nullable=False),
        sa.Column('average_closings_per_year', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('average_commission', sa.Float(), nullable=False, server_default='0'),
        sa.Column('market_areas', sa.JSON(), nullable=False),
        sa.Column('team_role', sa.String(), nullable=False, server_default='individual'),
        *_timestamps(),
    )
    op.create_index('ix_user_market_config_user_id', 'user_market_config', ['user_id'], unique=True)

    op.create_table(
        'agent_intelligence_profile',
        sa.Column('id', sa.String(length=32), primary_key=True),
        _user_fk(),
        sa.Column('experience_level', sa.String(), nullable=True),
        sa.Column('work_commitment', sa.String(), nullable=True),
        sa.Column('business_structure', sa.String(), nullable=True),
        sa.Column('work_schedule', sa.String(), nullable=True),
        sa.Column('database_size', sa.String(), nullable=True),
        sa.Column('sphere_warmth', sa.String(), nullable=True),
        sa.Column('previous_year_transactions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('previous_year_volume', sa.Float(), nullable=False, server_default='0'),
        sa.Column('average_price_point', sa.Float(), nullable=False, server_default='0'),
        sa.Column('business_consistency', sa.String(), nullable=True),
        sa.Column('biggest_challenges', sa.JSON(), nullable=False),
        sa.Column('growth_timeline', sa.String(), nullable=True),
        sa.Column('learning_preference', sa.String(), nullable=True),
        sa.Column('agent_tier', sa.String(), nullable=True),
        sa.Column('network_strength_score', sa.Float(), nullable=False, server_default='1'),
        sa.Column('capacity_multiplier', sa.Float(), nullable=False, server_default='1'),
        sa.Column('complexity_preference', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('survey_completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_agent_intelligence_profile_user_id', 'agent_intelligence_profile', ['user_id'], unique=True)

    op.create_table(
        'user_preferences',
        sa.Column('id', sa.String(length=32), primary_key=True),
        _user_fk(),
        sa.Column('coaching_style', sa.String(), nullable=False, server_default='balanced'),
        sa.Column('activity_mode', sa.String(), nullable=False, server_default='get_moving'),
        sa.Column('daily_reminders', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('weekly_reports', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('market_updates', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('email_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('timezone', sa.String(), nullable=False, server_default='America/New_York'),
        sa.Column('selected_palette_id', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_preferences_user_id', 'user_preferences', ['user_id'], unique=True)

    op.create_table(
        'user_setting',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'key', name='uq_user_setting_user_key'),
    )
    op.create_index('ix_user_setting_user_id', 'user_setting', ['user_id'])


def downgrade() -> None:
    """Drop all onboarding tables."""
    op.drop_table('user_setting')
    op.drop_table('user_preferences')
    op.drop_table('agent_intelligence_profile')
    op.drop_table('user_market_config')
    op.drop_table('user_agent_subscription')
    op.drop_table('user_onboarding')
    op.drop_table('user')
