"""Initial schema - interviewers, interviews, responses, phone numbers, feedback.

Revision ID: 00001
Revises:
Create Date: 2025-03-02

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '00001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # interviewers
    op.create_table(
        'interviewers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('agent_id', sa.String(255), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('audio', sa.String(500), nullable=True),
        sa.Column('rapport', sa.Integer(), nullable=True),
        sa.Column('exploration', sa.Integer(), nullable=True),
        sa.Column('empathy', sa.Integer(), nullable=True),
        sa.Column('speed', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )

    # interviews
    op.create_table(
        'interviews',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('objective', sa.Text(), nullable=True),
        sa.Column('organization_id', sa.String(255), nullable=True),
        sa.Column('user_id', sa.String(255), nullable=True),
        sa.Column('interviewer_id', sa.Integer(), nullable=True),
        sa.Column('agent_id', sa.String(255), nullable=True),
        sa.Column('interview_type', sa.String(10), server_default='web'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('is_anonymous', sa.Boolean(), server_default=sa.false()),
        sa.Column('theme_color', sa.String(20), nullable=True),
        sa.Column('logo_url', sa.String(500), nullable=True),
        sa.Column('url', sa.String(500), nullable=True),
        sa.Column('readable_slug', sa.String(255), nullable=True),
        sa.Column('questions', sa.JSON(), nullable=True),
        sa.Column('metric_weights', sa.JSON(), nullable=True),
        sa.Column('respondents', sa.JSON(), nullable=True),
        sa.Column('question_count', sa.Integer(), nullable=True),
        sa.Column('time_duration', sa.String(10), server_default='10'),
        sa.Column('job_context', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['interviewer_id'], ['interviewers.id']),
    )
    op.create_index('ix_interviews_organization_id', 'interviews', ['organization_id'])

    # responses
    op.create_table(
        'responses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('interview_id', sa.String(36), nullable=False),
        sa.Column('call_id', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('is_ended', sa.Boolean(), server_default=sa.false()),
        sa.Column('is_analysed', sa.Boolean(), server_default=sa.false()),
        sa.Column('is_viewed', sa.Boolean(), server_default=sa.false()),
        sa.Column('candidate_status', sa.String(20), server_default='NO_STATUS'),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('analytics', sa.JSON(), nullable=True),
        sa.Column('tab_switch_count', sa.Integer(), server_default='0'),
        sa.Column('duration', sa.Integer(), server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['interview_id'], ['interviews.id'], ondelete='CASCADE'),
        # One row per provider call; repeated call_started events cannot duplicate it
        sa.UniqueConstraint('call_id', name='uq_responses_call_id'),
    )
    op.create_index('ix_responses_interview_id', 'responses', ['interview_id'])

    # phone_numbers
    op.create_table(
        'phone_numbers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('number', sa.String(32), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('agent_linked', sa.String(255), nullable=True),
        sa.Column('interview_id', sa.String(36), nullable=True),
        sa.Column('organization_id', sa.String(255), nullable=True),
        sa.Column('nickname', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['interview_id'], ['interviews.id']),
        sa.UniqueConstraint('number', name='uq_phone_numbers_number'),
    )
    op.create_index('ix_phone_numbers_agent_linked', 'phone_numbers', ['agent_linked'])
    op.create_index('ix_phone_numbers_organization_id', 'phone_numbers', ['organization_id'])

    # feedback
    op.create_table(
        'feedback',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('interview_id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('satisfaction', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['interview_id'], ['interviews.id']),
    )


def downgrade() -> None:
    op.drop_table('feedback')
    op.drop_index('ix_phone_numbers_organization_id', table_name='phone_numbers')
    op.drop_index('ix_phone_numbers_agent_linked', table_name='phone_numbers')
    op.drop_table('phone_numbers')
    op.drop_index('ix_responses_interview_id', table_name='responses')
    op.drop_table('responses')
    op.drop_index('ix_interviews_organization_id', table_name='interviews')
    op.drop_table('interviews')
    op.drop_table('interviewers')
