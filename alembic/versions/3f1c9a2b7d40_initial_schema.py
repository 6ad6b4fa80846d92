"""initial schema

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2025-10-02 09:14:51.302117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*names):
    return [sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now()) for name in names]


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('position', sa.String(), nullable=True),
        sa.Column('department', sa.String(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('allow_public_view', sa.Boolean(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False, unique=True),
        sa.Column('role', sa.String(), nullable=False),
        *_timestamps('created_at'),
    )

    op.create_table(
        'assessment_periods',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        *_timestamps('created_at'),
    )

    op.create_table(
        'assessment_assignments',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('assessor_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('assessee_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('period_id', sa.String(length=36), sa.ForeignKey('assessment_periods.id'), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps('created_at'),
        sa.UniqueConstraint('assessor_id', 'assessee_id', 'period_id', name='uq_assignment_pair_period'),
    )
    op.create_index('ix_assessment_assignments_assessor_id', 'assessment_assignments', ['assessor_id'])
    op.create_index('ix_assessment_assignments_assessee_id', 'assessment_assignments', ['assessee_id'])
    op.create_index('ix_assessment_assignments_period_id', 'assessment_assignments', ['period_id'])

    op.create_table(
        'feedback_responses',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('assignment_id', sa.String(length=36), sa.ForeignKey('assessment_assignments.id'), nullable=False),
        sa.Column('aspect', sa.String(), nullable=False),
        sa.Column('indicator', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        *_timestamps('created_at'),
    )
    op.create_index('ix_feedback_responses_assignment_id', 'feedback_responses', ['assignment_id'])

    op.create_table(
        'reminder_logs',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('period_id', sa.String(length=36), sa.ForeignKey('assessment_periods.id'), nullable=False),
        sa.Column('assignment_id', sa.String(length=36), sa.ForeignKey('assessment_assignments.id'), nullable=True),
        sa.Column('reminder_type', sa.String(), nullable=False),
        *_timestamps('sent_at'),
    )

    op.create_table(
        'assessment_history',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('period_id', sa.String(length=36), sa.ForeignKey('assessment_periods.id'), nullable=False),
        sa.Column('final_score', sa.Float(), nullable=True),
        sa.Column('supervisor_average', sa.Float(), nullable=True),
        sa.Column('peer_average', sa.Float(), nullable=True),
        sa.Column('total_assessors', sa.Integer(), nullable=False),
        *_timestamps('created_at'),
        sa.UniqueConstraint('user_id', 'period_id', name='uq_history_user_period'),
    )

    op.create_table(
        'employee_pins',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('giver_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('receiver_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        *_timestamps('given_at'),
        sa.UniqueConstraint('giver_id', 'receiver_id', 'week_number', 'year', name='uq_pin_giver_receiver_week'),
    )
    op.create_index('ix_employee_pins_giver_id', 'employee_pins', ['giver_id'])
    op.create_index('ix_employee_pins_receiver_id', 'employee_pins', ['receiver_id'])

    op.create_table(
        'weekly_pin_allowance',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('pins_remaining', sa.Integer(), nullable=False),
        sa.Column('pins_used', sa.Integer(), nullable=False),
        *_timestamps('created_at', 'updated_at'),
        sa.UniqueConstraint('user_id', 'week_number', 'year', name='uq_allowance_user_week'),
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('priority', sa.String(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('action_url', sa.String(), nullable=True),
        sa.Column('action_label', sa.String(), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    # Triwulan tables are keyed by the quarter id text ("2025-Q3")
    op.create_table(
        'triwulan_monthly_deficiencies',
        sa.Column('period_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('deficiency_hours', sa.Float(), nullable=False),
        sa.Column('filled_by', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=True),
        *_timestamps('created_at', 'updated_at'),
        sa.PrimaryKeyConstraint('period_id', 'user_id', 'year', 'month', name='triwulan_monthly_deficiencies_pkey'),
    )

    op.create_table(
        'triwulan_candidates',
        sa.Column('period_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('source', sa.String(), nullable=False),
        *_timestamps('created_at'),
        sa.PrimaryKeyConstraint('period_id', 'user_id', name='triwulan_candidates_pkey'),
    )

    op.create_table(
        'triwulan_votes',
        sa.Column('period_id', sa.String(), nullable=False),
        sa.Column('voter_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('candidate_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        *_timestamps('created_at'),
        sa.PrimaryKeyConstraint('period_id', 'voter_id', 'candidate_id', name='triwulan_votes_pkey'),
    )

    op.create_table(
        'triwulan_vote_completion',
        sa.Column('period_id', sa.String(), nullable=False),
        sa.Column('voter_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        *_timestamps('completed_at'),
        sa.PrimaryKeyConstraint('period_id', 'voter_id', name='triwulan_vote_completion_pkey'),
    )

    op.create_table(
        'triwulan_ratings',
        sa.Column('period_id', sa.String(), nullable=False),
        sa.Column('rater_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('candidate_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        *[sa.Column(f'c{i}', sa.Integer(), nullable=True) for i in range(1, 14)],
        *_timestamps('created_at', 'updated_at'),
        sa.PrimaryKeyConstraint('period_id', 'rater_id', 'candidate_id', name='triwulan_ratings_pkey'),
    )

    op.create_table(
        'triwulan_winners',
        sa.Column('period_id', sa.String(), primary_key=True),
        sa.Column('winner_id', sa.String(length=36), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('total_score', sa.Float(), nullable=True),
        *_timestamps('created_at'),
    )


def downgrade() -> None:
    for table in (
        'triwulan_winners',
        'triwulan_ratings',
        'triwulan_vote_completion',
        'triwulan_votes',
        'triwulan_candidates',
        'triwulan_monthly_deficiencies',
        'notifications',
        'weekly_pin_allowance',
        'employee_pins',
        'assessment_history',
        'reminder_logs',
        'feedback_responses',
        'assessment_assignments',
        'assessment_periods',
        'user_roles',
        'profiles',
    ):
        op.drop_table(table)
