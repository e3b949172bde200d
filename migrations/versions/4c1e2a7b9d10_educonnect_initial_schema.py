"""educonnect initial schema: users, classrooms, enrollments, assignments,
questions, submissions, resources

Revision ID: 4c1e2a7b9d10
Revises:
Create Date: 2026-10-19 10:00:00
"""
from alembic import op
import sqlalchemy as sa

# IDs
revision = '4c1e2a7b9d10'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('hashed_pw', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('email', name='uq_users_email')
    )

    op.create_table(
        'classrooms',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('teacher_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['teacher_id'], ['users.id'], name='fk_classrooms_teacher', ondelete='CASCADE')
    )
    op.create_index('ix_classrooms_code', 'classrooms', ['code'], unique=True)
    op.create_index('ix_classrooms_teacher_id', 'classrooms', ['teacher_id'])

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('classroom_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['classroom_id'], ['classrooms.id'], name='fk_enrollments_classroom', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], name='fk_enrollments_student', ondelete='CASCADE'),
        sa.UniqueConstraint('classroom_id', 'student_id', name='uq_enrollments_classroom_student')
    )
    op.create_index('ix_enrollments_classroom_id', 'enrollments', ['classroom_id'])
    op.create_index('ix_enrollments_student_id', 'enrollments', ['student_id'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('classroom_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['classroom_id'], ['classrooms.id'], name='fk_assignments_classroom', ondelete='CASCADE')
    )
    op.create_index('ix_assignments_classroom_id', 'assignments', ['classroom_id'])
    op.create_index('ix_assignments_due_date', 'assignments', ['due_date'])

    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('assignment_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('options', sa.JSON(), nullable=True),
        sa.Column('correct_answer', sa.String(length=500), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['assignment_id'], ['assignments.id'], name='fk_questions_assignment', ondelete='CASCADE')
    )
    op.create_index('ix_questions_assignment_id', 'questions', ['assignment_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('assignment_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('file_url', sa.String(length=500), nullable=True),
        sa.Column('answers', sa.JSON(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.Column('grade', sa.Float(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['assignment_id'], ['assignments.id'], name='fk_submissions_assignment', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], name='fk_submissions_student', ondelete='CASCADE'),
        sa.UniqueConstraint('assignment_id', 'student_id', name='uq_submissions_assignment_student')
    )
    op.create_index('ix_submissions_assignment_id', 'submissions', ['assignment_id'])
    op.create_index('ix_submissions_student_id', 'submissions', ['student_id'])

    op.create_table(
        'resources',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('classroom_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('file_url', sa.String(length=500), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['classroom_id'], ['classrooms.id'], name='fk_resources_classroom', ondelete='CASCADE')
    )
    op.create_index('ix_resources_classroom_id', 'resources', ['classroom_id'])

def downgrade():
    op.drop_table('resources')
    op.drop_table('submissions')
    op.drop_table('questions')
    op.drop_table('assignments')
    op.drop_table('enrollments')
    op.drop_table('classrooms')
    op.drop_table('users')
