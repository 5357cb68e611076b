"""Create user, quiz, attempt and score tables

Revision ID: 3f9a1c2d7e4b
Revises:
Create Date: 2026-10-18 10:12:03.481022

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = '3f9a1c2d7e4b'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    inspector = inspect(op.get_bind())
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('full_name', sa.String(length=255), nullable=False),
            sa.Column('avatar', sa.String(length=512), nullable=True),
            sa.Column('user_type', sa.String(length=20), nullable=False, server_default='student'),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    if 'quizzes' not in tables:
        op.create_table('quizzes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('duration', sa.Integer(), nullable=False),
            sa.Column('created_by', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quizzes_created_by', 'quizzes', ['created_by'], unique=False)
        op.create_index('ix_quizzes_created_at', 'quizzes', ['created_at'], unique=False)

    if 'quiz_questions' not in tables:
        op.create_table('quiz_questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('correct_answer', sa.Text(), nullable=False),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_questions_quiz_id', 'quiz_questions', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_questions_quiz_order', 'quiz_questions', ['quiz_id', 'order_index'], unique=False)

    if 'quiz_question_options' not in tables:
        op.create_table('quiz_question_options',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=False),
            sa.Column('option_text', sa.Text(), nullable=False),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['question_id'], ['quiz_questions.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_question_options_question_id', 'quiz_question_options', ['question_id'], unique=False)
        op.create_index('ix_question_options_question_order', 'quiz_question_options', ['question_id', 'order_index'], unique=False)

    if 'completed_quizzes' not in tables:
        op.create_table('completed_quizzes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('student_id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=True),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_questions', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('percentage', sa.Float(), nullable=False, server_default='0'),
            sa.Column('completed_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('student_id', 'quiz_id', name='uq_completed_quiz_student_quiz')
        )
        op.create_index('ix_completed_quizzes_student_id', 'completed_quizzes', ['student_id'], unique=False)
        op.create_index('ix_completed_quizzes_quiz_id', 'completed_quizzes', ['quiz_id'], unique=False)
        op.create_index('ix_completed_quizzes_completed_at', 'completed_quizzes', ['completed_at'], unique=False)
        op.create_index('ix_completed_quizzes_student_completed', 'completed_quizzes', ['student_id', 'completed_at'], unique=False)

    if 'completed_quiz_questions' not in tables:
        op.create_table('completed_quiz_questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('completed_quiz_id', sa.Integer(), nullable=False),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('options', sa.JSON(), nullable=False),
            sa.Column('correct_answer', sa.Text(), nullable=True),
            sa.Column('selected_option', sa.Text(), nullable=True),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['completed_quiz_id'], ['completed_quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_completed_quiz_questions_completed_quiz_id', 'completed_quiz_questions', ['completed_quiz_id'], unique=False)

    if 'quiz_scores' not in tables:
        op.create_table('quiz_scores',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=True),
            sa.Column('student_id', sa.Integer(), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_questions', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('percentage', sa.Float(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='SET NULL'),
            sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('quiz_id', 'student_id', name='uq_quiz_scores_quiz_student')
        )
        op.create_index('ix_quiz_scores_quiz_id', 'quiz_scores', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_scores_student_id', 'quiz_scores', ['student_id'], unique=False)
        op.create_index('ix_quiz_scores_quiz_score', 'quiz_scores', ['quiz_id', 'score'], unique=False)


def downgrade():
    op.drop_index('ix_quiz_scores_quiz_score', table_name='quiz_scores')
    op.drop_index('ix_quiz_scores_student_id', table_name='quiz_scores')
    op.drop_index('ix_quiz_scores_quiz_id', table_name='quiz_scores')
    op.drop_table('quiz_scores')

    op.drop_index('ix_completed_quiz_questions_completed_quiz_id', table_name='completed_quiz_questions')
    op.drop_table('completed_quiz_questions')

    op.drop_index('ix_completed_quizzes_student_completed', table_name='completed_quizzes')
    op.drop_index('ix_completed_quizzes_completed_at', table_name='completed_quizzes')
    op.drop_index('ix_completed_quizzes_quiz_id', table_name='completed_quizzes')
    op.drop_index('ix_completed_quizzes_student_id', table_name='completed_quizzes')
    op.drop_table('completed_quizzes')

    op.drop_index('ix_question_options_question_order', table_name='quiz_question_options')
    op.drop_index('ix_quiz_question_options_question_id', table_name='quiz_question_options')
    op.drop_table('quiz_question_options')

    op.drop_index('ix_quiz_questions_quiz_order', table_name='quiz_questions')
    op.drop_index('ix_quiz_questions_quiz_id', table_name='quiz_questions')
    op.drop_table('quiz_questions')

    op.drop_index('ix_quizzes_created_at', table_name='quizzes')
    op.drop_index('ix_quizzes_created_by', table_name='quizzes')
    op.drop_table('quizzes')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
