"""create profiles, exercise library, routines and history

Revision ID: 4b1d2e7c9a10
Revises:
Create Date: 2026-10-19 17:40:12.118204

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b1d2e7c9a10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1) profiles (rows come from the Supabase signup trigger)
    op.create_table(
        'profiles',
        sa.Column('profile_id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=True, unique=True, index=True),
        sa.Column('username', sa.String(length=120), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )

    # 2) exercise library + muscles
    op.create_table(
        'exercise_library',
        sa.Column('exercise_lib_id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False, unique=True),
        sa.Column('category', sa.String(length=60), nullable=True),
        sa.Column('equipment', sa.String(length=60), nullable=True),
        sa.Column('video_link', sa.Text(), nullable=True),
        sa.Column('image_name', sa.String(length=255), nullable=True),
    )
    op.create_table(
        'muscles',
        sa.Column('muscle_id', sa.String(length=40), primary_key=True),
        sa.Column('name', sa.String(length=80), nullable=False),
    )
    op.create_table(
        'exercise_muscles',
        sa.Column('exercise_lib_id', sa.Integer(), sa.ForeignKey('exercise_library.exercise_lib_id', ondelete='CASCADE'), primary_key=True),
        sa.Column('muscle_id', sa.String(length=40), sa.ForeignKey('muscles.muscle_id', ondelete='CASCADE'), primary_key=True),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    # 3) saved routines
    op.create_table(
        'workouts',
        sa.Column('workout_id', sa.Integer(), primary_key=True),
        sa.Column('profile_id', sa.String(length=36), sa.ForeignKey('profiles.profile_id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('workout_name', sa.String(length=120), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )
    op.create_table(
        'workout_exercises',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('workout_id', sa.Integer(), sa.ForeignKey('workouts.workout_id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('exercise_lib_id', sa.Integer(), sa.ForeignKey('exercise_library.exercise_lib_id'), nullable=False),
        sa.Column('exercise_order', sa.Integer(), nullable=False),
    )

    # 4) performed workouts and their sets
    op.create_table(
        'workout_history',
        sa.Column('workout_history_id', sa.Integer(), primary_key=True),
        sa.Column('profile_id', sa.String(length=36), sa.ForeignKey('profiles.profile_id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('workout_id', sa.Integer(), sa.ForeignKey('workouts.workout_id', ondelete='SET NULL'), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )
    op.create_table(
        'exercise_history',
        sa.Column('exercise_history_id', sa.Integer(), primary_key=True),
        sa.Column('profile_id', sa.String(length=36), sa.ForeignKey('profiles.profile_id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('workout_history_id', sa.Integer(), sa.ForeignKey('workout_history.workout_history_id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('exercise_id', sa.Integer(), sa.ForeignKey('exercise_library.exercise_lib_id'), nullable=False, index=True),
        sa.Column('set_number', sa.Integer(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('weight', sa.Numeric(10, 2), nullable=False, server_default='0'),
    )


def downgrade() -> None:
    # drop child tables in reverse order
    op.drop_table('exercise_history')
    op.drop_table('workout_history')
    op.drop_table('workout_exercises')
    op.drop_table('workouts')
    op.drop_table('exercise_muscles')
    op.drop_table('muscles')
    op.drop_table('exercise_library')
    op.drop_table('profiles')
