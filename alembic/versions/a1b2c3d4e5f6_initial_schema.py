"""initial schema: users, mcq tables, study stats, chat

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-12 10:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), server_default='student', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'mcq_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_name', sa.String(100), nullable=False),
        sa.Column('topic', sa.String(255), nullable=False),
        sa.Column('difficulty', sa.String(10), nullable=False),
        sa.Column('total_questions', sa.Integer(), server_default='0', nullable=False),
        sa.Column('answered', sa.Integer(), server_default='0', nullable=False),
        sa.Column('correct', sa.Integer(), server_default='0', nullable=False),
        sa.Column('wrong', sa.Integer(), server_default='0', nullable=False),
        sa.Column('skipped', sa.Integer(), server_default='0', nullable=False),
        sa.Column('time_taken_seconds', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(20), server_default='in_progress', nullable=False),
        sa.Column('score_percentage', sa.Float(), server_default='0', nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_mcq_sessions_id', 'mcq_sessions', ['id'])
    op.create_index('ix_mcq_sessions_user_id', 'mcq_sessions', ['user_id'])
    op.create_index('ix_mcq_sessions_status', 'mcq_sessions', ['status'])

    op.create_table(
        'mcq_questions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('mcq_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_number', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('option_a', sa.Text(), nullable=False),
        sa.Column('option_b', sa.Text(), nullable=False),
        sa.Column('option_c', sa.Text(), nullable=False),
        sa.Column('option_d', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.String(1), nullable=False),
        sa.Column('explanation', sa.Text(), server_default='', nullable=False),
        sa.Column('difficulty', sa.String(10), nullable=False),
        sa.Column('user_answer', sa.String(1), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=True),
        sa.Column('time_spent_seconds', sa.Integer(), server_default='0', nullable=False),
        sa.Column('answered_at', sa.DateTime(), nullable=True),
        sa.Column('is_bookmarked', sa.Boolean(), server_default='false', nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('session_id', 'question_number', name='uq_mcq_question_number'),
    )
    op.create_index('ix_mcq_questions_id', 'mcq_questions', ['id'])
    op.create_index('ix_mcq_questions_session_id', 'mcq_questions', ['session_id'])

    op.create_table(
        'mcq_performance',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_name', sa.String(100), nullable=False),
        sa.Column('topic', sa.String(255), nullable=False),
        sa.Column('difficulty', sa.String(10), nullable=False),
        sa.Column('total_attempted', sa.Integer(), server_default='0', nullable=False),
        sa.Column('total_correct', sa.Integer(), server_default='0', nullable=False),
        sa.Column('accuracy', sa.Float(), server_default='0', nullable=False),
        sa.Column('best_score', sa.Float(), server_default='0', nullable=False),
        sa.Column('total_time_seconds', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_attempted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'subject_name', 'topic', 'difficulty', name='uq_mcq_performance_key'),
    )
    op.create_index('ix_mcq_performance_id', 'mcq_performance', ['id'])
    op.create_index('ix_mcq_performance_user_id', 'mcq_performance', ['user_id'])

    op.create_table(
        'mcq_bookmarks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('option_a', sa.Text(), nullable=False),
        sa.Column('option_b', sa.Text(), nullable=False),
        sa.Column('option_c', sa.Text(), nullable=False),
        sa.Column('option_d', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.String(1), nullable=False),
        sa.Column('explanation', sa.Text(), server_default='', nullable=False),
        sa.Column('subject_name', sa.String(100), nullable=False),
        sa.Column('topic', sa.String(255), nullable=False),
        sa.Column('difficulty', sa.String(10), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_mcq_bookmarks_id', 'mcq_bookmarks', ['id'])
    op.create_index('ix_mcq_bookmarks_user_id', 'mcq_bookmarks', ['user_id'])
    op.create_index('ix_mcq_bookmarks_subject_name', 'mcq_bookmarks', ['subject_name'])

    op.create_table(
        'study_stats',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_name', sa.String(100), nullable=False),
        sa.Column('session_date', sa.Date(), nullable=False),
        sa.Column('questions_asked', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'subject_name', 'session_date', name='uq_study_stats_day'),
    )
    op.create_index('ix_study_stats_id', 'study_stats', ['id'])
    op.create_index('ix_study_stats_user_id', 'study_stats', ['user_id'])
    op.create_index('ix_study_stats_session_date', 'study_stats', ['session_date'])

    op.create_table(
        'chat_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_name', sa.String(100), server_default='General', nullable=False),
        sa.Column('mode', sa.String(20), server_default='normal', nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_chat_sessions_id', 'chat_sessions', ['id'])
    op.create_index('ix_chat_sessions_user_id', 'chat_sessions', ['user_id'])

    op.create_table(
        'chat_messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('chat_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('tokens_used', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_chat_messages_id', 'chat_messages', ['id'])
    op.create_index('ix_chat_messages_session_id', 'chat_messages', ['session_id'])


def downgrade() -> None:
    op.drop_table('chat_messages')
    op.drop_table('chat_sessions')
    op.drop_table('study_stats')
    op.drop_table('mcq_bookmarks')
    op.drop_table('mcq_performance')
    op.drop_table('mcq_questions')
    op.drop_table('mcq_sessions')
    op.drop_table('users')
