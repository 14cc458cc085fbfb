"""create_fitness_tables

Revision ID: 4f1c2a9b7d30
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9b7d30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

relationship_kind_enum = sa.Enum('parent', 'guardian', name='relationship_kind_enum')
adventure_status_enum = sa.Enum(
    'not_started', 'in_progress', 'completed', 'paused', name='adventure_status_enum'
)
achievement_metric_enum = sa.Enum(
    'total_points', 'total_exercises', 'streak_days', 'longest_streak',
    name='achievement_metric_enum',
)
difficulty_modifier_enum = sa.Enum(
    'easier', 'normal', 'harder', name='difficulty_modifier_enum'
)


def upgrade() -> None:
    """Upgrade schema - profiles, family links, activity and progress tables."""

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('auth_user_id', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('is_child', sa.Boolean(), nullable=False),
        sa.Column('parent_consent_given', sa.Boolean(), nullable=False),
        sa.Column('parent_consent_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('privacy_settings', JSONB(), nullable=False),
        sa.Column('preferred_language', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'NOT is_child OR auth_user_id IS NULL',
            name='ck_profiles_child_without_login',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_profiles'),
    )
    op.create_index('ix_profiles_auth_user_id', 'profiles', ['auth_user_id'], unique=True)
    op.create_index('ix_profiles_is_child', 'profiles', ['is_child'])

    op.create_table(
        'parent_child_relationships',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('parent_id', sa.Uuid(), nullable=False),
        sa.Column('child_id', sa.Uuid(), nullable=False),
        sa.Column('relationship_type', relationship_kind_enum, nullable=False),
        sa.Column('consent_given', sa.Boolean(), nullable=False),
        sa.Column('consent_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('deactivated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'parent_id != child_id', name='ck_parent_child_relationships_no_self_link'
        ),
        sa.ForeignKeyConstraint(
            ['parent_id'], ['profiles.id'],
            name='fk_parent_child_relationships_parent_id_profiles',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['child_id'], ['profiles.id'],
            name='fk_parent_child_relationships_child_id_profiles',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_parent_child_relationships'),
        sa.UniqueConstraint('parent_id', 'child_id', name='uq_parent_child_pair'),
    )
    op.create_index(
        'ix_parent_child_relationships_child_id',
        'parent_child_relationships',
        ['child_id'],
    )
    op.create_index(
        'ix_parent_child_active_parent',
        'parent_child_relationships',
        ['parent_id', 'active'],
    )

    op.create_table(
        'exercise_sessions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('profile_id', sa.Uuid(), nullable=False),
        sa.Column('exercise_id', sa.Uuid(), nullable=False),
        sa.Column('adventure_id', sa.Uuid(), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=False),
        sa.Column('sets_completed', sa.Integer(), nullable=True),
        sa.Column('reps_completed', sa.Integer(), nullable=True),
        sa.Column('difficulty_modifier', difficulty_modifier_enum, nullable=True),
        sa.Column('effort_rating', sa.Integer(), nullable=True),
        sa.Column('fun_rating', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('points_earned', sa.Integer(), nullable=False),
        sa.Column('recorded_by_profile_id', sa.Uuid(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'fun_rating BETWEEN 1 AND 5', name='ck_exercise_sessions_fun_rating_range'
        ),
        sa.CheckConstraint(
            'effort_rating IS NULL OR effort_rating BETWEEN 1 AND 5',
            name='ck_exercise_sessions_effort_rating_range',
        ),
        sa.CheckConstraint(
            'points_earned >= 0', name='ck_exercise_sessions_points_non_negative'
        ),
        sa.ForeignKeyConstraint(
            ['profile_id'], ['profiles.id'],
            name='fk_exercise_sessions_profile_id_profiles',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_exercise_sessions'),
    )
    op.create_index(
        'ix_exercise_sessions_exercise_id', 'exercise_sessions', ['exercise_id']
    )
    op.create_index(
        'ix_exercise_sessions_profile_completed',
        'exercise_sessions',
        ['profile_id', 'completed_at'],
    )

    op.create_table(
        'user_adventures',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('profile_id', sa.Uuid(), nullable=False),
        sa.Column('adventure_id', sa.Uuid(), nullable=False),
        sa.Column('status', adventure_status_enum, nullable=False),
        sa.Column('exercises_completed', sa.Integer(), nullable=False),
        sa.Column('total_exercises', sa.Integer(), nullable=True),
        sa.Column('total_points_earned', sa.Integer(), nullable=False),
        sa.Column('progress_percentage', sa.Float(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_activity_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['profile_id'], ['profiles.id'],
            name='fk_user_adventures_profile_id_profiles',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_user_adventures'),
        sa.UniqueConstraint('profile_id', 'adventure_id', name='uq_user_adventure'),
    )
    op.create_index(
        'ix_user_adventures_profile_status', 'user_adventures', ['profile_id', 'status']
    )

    op.create_table(
        'user_progress',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('profile_id', sa.Uuid(), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('total_exercises_completed', sa.Integer(), nullable=False),
        sa.Column('total_minutes', sa.Integer(), nullable=False),
        sa.Column('current_streak_days', sa.Integer(), nullable=False),
        sa.Column('longest_streak_days', sa.Integer(), nullable=False),
        sa.Column('last_activity_date', sa.Date(), nullable=True),
        sa.Column('average_fun_rating', sa.Float(), nullable=False),
        sa.Column('achievements_earned', sa.Integer(), nullable=False),
        sa.Column('adventures_completed', sa.Integer(), nullable=False),
        sa.Column('weekly_points_goal', sa.Integer(), nullable=False),
        sa.Column('monthly_goal_exercises', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['profile_id'], ['profiles.id'],
            name='fk_user_progress_profile_id_profiles',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_user_progress'),
        sa.UniqueConstraint('profile_id', name='uq_user_progress_profile_id'),
    )

    op.create_table(
        'exercise_progress',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('profile_id', sa.Uuid(), nullable=False),
        sa.Column('exercise_id', sa.Uuid(), nullable=False),
        sa.Column('times_completed', sa.Integer(), nullable=False),
        sa.Column('best_fun_rating', sa.Integer(), nullable=False),
        sa.Column('total_time_minutes', sa.Integer(), nullable=False),
        sa.Column('last_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['profile_id'], ['profiles.id'],
            name='fk_exercise_progress_profile_id_profiles',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_exercise_progress'),
        sa.UniqueConstraint('profile_id', 'exercise_id', name='uq_exercise_progress'),
    )

    op.create_table(
        'achievements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('metric', achievement_metric_enum, nullable=False),
        sa.Column('threshold_value', sa.Integer(), nullable=False),
        sa.Column('points_reward', sa.Integer(), nullable=False),
        sa.Column('icon', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_achievements'),
        sa.UniqueConstraint('code', name='uq_achievements_code'),
    )

    op.create_table(
        'user_achievements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('profile_id', sa.Uuid(), nullable=False),
        sa.Column('achievement_id', sa.Uuid(), nullable=False),
        sa.Column('points_awarded', sa.Integer(), nullable=False),
        sa.Column('earned_from_session_id', sa.Uuid(), nullable=True),
        sa.Column('is_new', sa.Boolean(), nullable=False),
        sa.Column('earned_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['profile_id'], ['profiles.id'],
            name='fk_user_achievements_profile_id_profiles',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['achievement_id'], ['achievements.id'],
            name='fk_user_achievements_achievement_id_achievements',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['earned_from_session_id'], ['exercise_sessions.id'],
            name='fk_user_achievements_earned_from_session_id_exercise_sessions',
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_user_achievements'),
        sa.UniqueConstraint('profile_id', 'achievement_id', name='uq_user_achievement'),
    )
    op.create_index(
        'ix_user_achievements_profile_earned',
        'user_achievements',
        ['profile_id', 'earned_at'],
    )


def downgrade() -> None:
    """Downgrade schema - drop fitness tables."""
    op.drop_index('ix_user_achievements_profile_earned', table_name='user_achievements')
    op.drop_table('user_achievements')
    op.drop_table('achievements')
    op.drop_table('exercise_progress')
    op.drop_table('user_progress')
    op.drop_index('ix_user_adventures_profile_status', table_name='user_adventures')
    op.drop_table('user_adventures')
    op.drop_index('ix_exercise_sessions_profile_completed', table_name='exercise_sessions')
    op.drop_index('ix_exercise_sessions_exercise_id', table_name='exercise_sessions')
    op.drop_table('exercise_sessions')
    op.drop_index('ix_parent_child_active_parent', table_name='parent_child_relationships')
    op.drop_index(
        'ix_parent_child_relationships_child_id', table_name='parent_child_relationships'
    )
    op.drop_table('parent_child_relationships')
    op.drop_index('ix_profiles_is_child', table_name='profiles')
    op.drop_index('ix_profiles_auth_user_id', table_name='profiles')
    op.drop_table('profiles')

    bind = op.get_bind()
    difficulty_modifier_enum.drop(bind, checkfirst=True)
    achievement_metric_enum.drop(bind, checkfirst=True)
    adventure_status_enum.drop(bind, checkfirst=True)
    relationship_kind_enum.drop(bind, checkfirst=True)
