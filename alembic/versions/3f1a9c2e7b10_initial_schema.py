"""initial schema

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '3f1a9c2e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_type = sa.Enum('student', 'instructor', name='user_type')
question_type = sa.Enum('multiple_choice', 'true_false', 'short_answer', name='question_type')
attempt_status = sa.Enum('in_progress', 'completed', 'abandoned', name='attempt_status')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(100), nullable=False),
        sa.Column('user_type', user_type, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_user_type', 'users', ['user_type'])

    op.create_table(
        'quizzes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('instructor_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('passing_score', sa.Integer(), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_quizzes_id', 'quizzes', ['id'])
    op.create_index('ix_quizzes_instructor_id', 'quizzes', ['instructor_id'])
    op.create_index('ix_quizzes_is_published', 'quizzes', ['is_published'])

    op.create_table(
        'questions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('quiz_id', sa.String(36), sa.ForeignKey('quizzes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('question_type', question_type, nullable=False),
        sa.Column('points', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_questions_id', 'questions', ['id'])
    op.create_index('ix_questions_quiz_id', 'questions', ['quiz_id'])

    op.create_table(
        'answer_options',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('question_id', sa.String(36), sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_text', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_answer_options_id', 'answer_options', ['id'])
    op.create_index('ix_answer_options_question_id', 'answer_options', ['question_id'])

    op.create_table(
        'quiz_attempts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('quiz_id', sa.String(36), sa.ForeignKey('quizzes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('total_points', sa.Integer(), nullable=True),
        sa.Column('status', attempt_status, nullable=False, server_default='in_progress'),
    )
    op.create_index('ix_quiz_attempts_id', 'quiz_attempts', ['id'])
    op.create_index('ix_quiz_attempts_quiz_id', 'quiz_attempts', ['quiz_id'])
    op.create_index('ix_quiz_attempts_student_id', 'quiz_attempts', ['student_id'])
    op.create_index('ix_quiz_attempts_started_at', 'quiz_attempts', ['started_at'])
    op.create_index('ix_quiz_attempts_status', 'quiz_attempts', ['status'])

    # At most one in-progress attempt per (quiz, student)
    op.create_index(
        'uq_quiz_attempts_active',
        'quiz_attempts',
        ['quiz_id', 'student_id'],
        unique=True,
        postgresql_where=sa.text("status = 'in_progress'"),
        sqlite_where=sa.text("status = 'in_progress'"),
    )


def downgrade() -> None:
    op.drop_index('uq_quiz_attempts_active', table_name='quiz_attempts')
    op.drop_table('quiz_attempts')
    op.drop_table('answer_options')
    op.drop_table('questions')
    op.drop_table('quizzes')
    op.drop_table('users')

    bind = op.get_bind()
    attempt_status.drop(bind, checkfirst=True)
    question_type.drop(bind, checkfirst=True)
    user_type.drop(bind, checkfirst=True)
