"""tutor resources, reviews, office-hour messages

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = '20261019_0002'
down_revision = '20261019_0001'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'tutor_resources',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tutor_id', sa.Uuid, sa.ForeignKey('tutor_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('kind', sa.Enum('link', 'file', name='resource_kind_enum'), nullable=False),
        sa.Column('url', sa.String(2048), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_tutor_resources_course_id', 'tutor_resources', ['course_id'])
    op.create_index('ix_tutor_resources_tutor_course', 'tutor_resources', ['tutor_id', 'course_id'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('reviewer_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tutor_id', sa.Uuid, sa.ForeignKey('tutor_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('rating', sa.Integer, nullable=False),
        sa.Column('comment', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('reviewer_id', 'tutor_id', 'course_id', name='uq_review_per_course'),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_review_rating'),
    )
    op.create_index('ix_reviews_reviewer_id', 'reviews', ['reviewer_id'])
    op.create_index('ix_reviews_tutor_id', 'reviews', ['tutor_id'])
    op.create_index('ix_reviews_course_id', 'reviews', ['course_id'])

    op.create_table(
        'office_hour_messages',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tutor_id', sa.Uuid, sa.ForeignKey('tutor_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('reply', sa.Text, nullable=True),
        sa.Column('replied_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_office_hour_messages_tutor_id', 'office_hour_messages', ['tutor_id'])
    op.create_index('ix_office_hour_messages_student_id', 'office_hour_messages', ['student_id'])


def downgrade() -> None:
    for table in ('office_hour_messages', 'reviews', 'tutor_resources'):
        op.drop_table(table)

    if op.get_bind().dialect.name == 'postgresql':
        op.execute('DROP TYPE IF EXISTS resource_kind_enum')
