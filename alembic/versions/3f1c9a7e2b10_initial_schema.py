"""initial schema

Revision ID: 3f1c9a7e2b10
Revises: 
Create Date: 2025-10-06 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('display_name', sa.String(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('role', sa.String(), nullable=False, server_default='member'),
        sa.Column('session_version', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'])

    op.create_table(
        'guilds',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        *_timestamps(),
    )

    op.create_table(
        'login_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('profile_id', sa.String(36), nullable=False, index=True),
        sa.Column('code_hash', sa.String(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # recipient_id is the single-recipient model; entry_recipients arrives in 8b24d6e0c4f5
    op.create_table(
        'entries',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('week_start', sa.Date(), nullable=False, index=True),
        sa.Column('hours', sa.Float(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('note', sa.Text(), nullable=False, server_default=''),
        sa.Column('contributor_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=False, index=True),
        sa.Column('recipient_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'entries_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entry_id', sa.String(36), nullable=False, index=True),
        sa.Column('actor_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('snapshot', sa.JSON(), nullable=False),
        sa.Column('acted_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'evaluation_axes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('axis_key', sa.String(), nullable=False, unique=True),
        sa.Column('axis_label', sa.String(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'detailed_evaluations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('entry_id', sa.String(36), sa.ForeignKey('entries.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('evaluator_id', sa.String(36), nullable=False),
        sa.Column('evaluated_id', sa.String(36), nullable=False, index=True),
        sa.Column('axis_key', sa.String(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False, server_default=''),
        *_timestamps(),
        sa.CheckConstraint('score BETWEEN 1 AND 5', name='ck_detailed_evaluations_score'),
    )

    op.create_table(
        'monthly_value_scores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=False, index=True),
        sa.Column('display_name', sa.String(), nullable=False, server_default=''),
        sa.Column('month', sa.Date(), nullable=False),
        sa.Column('total_hours', sa.Float(), server_default='0'),
        sa.Column('avg_rating', sa.Float(), server_default='0'),
        sa.Column('feedback_count', sa.Integer(), server_default='0'),
        sa.Column('value_score', sa.Float(), server_default='0'),
        sa.UniqueConstraint('user_id', 'month', name='uq_value_score_user_month'),
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('estimated_hours', sa.Float(), nullable=True),
        sa.Column('requester_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('assignee_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='open'),
        *_timestamps(),
    )

    op.create_table(
        'task_applications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('task_id', sa.String(36), sa.ForeignKey('tasks.id'), nullable=False, index=True),
        sa.Column('applicant_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='applied'),
        *_timestamps(),
    )

    op.create_table(
        'quarterly_reflections',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('profiles.id'), nullable=False, index=True),
        sa.Column('quarter_start', sa.Date(), nullable=False),
        sa.Column('quarter_end', sa.Date(), nullable=False),
        sa.Column('achievement_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('avg_peer_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('avg_goal_rating', sa.Float(), nullable=False, server_default='0'),
        *_timestamps(),
    )

    op.create_table(
        'quarterly_actions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'quarterly_reflection_id', sa.String(36),
            sa.ForeignKey('quarterly_reflections.id', ondelete='CASCADE'), nullable=False, index=True,
        ),
        sa.Column('action_text', sa.Text(), nullable=False),
        sa.Column('deadline', sa.Date(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        'quarterly_actions', 'quarterly_reflections', 'task_applications', 'tasks',
        'monthly_value_scores', 'detailed_evaluations', 'evaluation_axes', 'entries_history',
        'entries', 'login_codes', 'guilds',
    ):
        op.drop_table(table)
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_table('profiles')
