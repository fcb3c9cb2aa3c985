"""initial schema: catalog, bookings, matching notifications, assignments

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '20261019_0001'
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')

ENUMS = (
    'user_role_enum',
    'course_level_enum',
    'booking_status_enum',
    'payment_status_enum',
    'assignment_status_enum',
    'enrollment_status_enum',
    'notification_type_enum',
    'notification_action_status_enum',
)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', sa.Enum('student', 'tutor', 'admin', name='user_role_enum'), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_categories_name', 'categories', ['name'], unique=True)

    op.create_table(
        'tutor_profiles',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('bio', sa.Text, nullable=True),
        sa.Column('experience_years', sa.Integer, nullable=False),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('cv_reference', sa.String(512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_tutor_profiles_user_id', 'tutor_profiles', ['user_id'], unique=True)

    op.create_table(
        'courses',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('title', sa.String(160), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('category_id', sa.Uuid, sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('level', sa.Enum('beginner', 'intermediate', 'advanced', name='course_level_enum'), nullable=False),
        sa.Column('max_students', sa.Integer, nullable=False),
        sa.Column('instructor_id', sa.Uuid, sa.ForeignKey('tutor_profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_published', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_courses_category_id', 'courses', ['category_id'])
    op.create_index('ix_courses_instructor_id', 'courses', ['instructor_id'])
    op.create_index('ix_courses_is_published', 'courses', ['is_published'])

    op.create_table(
        'course_prerequisites',
        sa.Column('course_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('prerequisite_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'tutor_courses',
        sa.Column('tutor_id', sa.Uuid, sa.ForeignKey('tutor_profiles.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('course_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'tutor_availability',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tutor_id', sa.Uuid, sa.ForeignKey('tutor_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('start_minute', sa.Integer, nullable=False),
        sa.Column('end_minute', sa.Integer, nullable=False),
        sa.CheckConstraint('start_minute < end_minute', name='ck_availability_window'),
    )
    op.create_index('ix_tutor_availability_tutor_id', 'tutor_availability', ['tutor_id'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('student_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tutor_id', sa.Uuid, sa.ForeignKey('tutor_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end', sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            'status',
            sa.Enum(
                'requested', 'awaiting_payment', 'confirmed', 'declined', 'canceled',
                name='booking_status_enum',
            ),
            nullable=False,
        ),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('assignment_attempts', sa.Integer, nullable=False, server_default='0'),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_bookings_student_id', 'bookings', ['student_id'])
    op.create_index('ix_bookings_course_id', 'bookings', ['course_id'])
    op.create_index('ix_bookings_tutor_id', 'bookings', ['tutor_id'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('ix_bookings_start', 'bookings', ['start'])
    op.create_index('ix_bookings_created_at', 'bookings', ['created_at'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('booking_id', sa.Uuid, sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tutor_id', sa.Uuid, sa.ForeignKey('tutor_profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('attempt_number', sa.Integer, nullable=False),
        sa.Column('questions', JSONType, nullable=False),
        sa.Column('student_answers', JSONType, nullable=True),
        sa.Column(
            'status',
            sa.Enum('created', 'submitted', 'graded', name='assignment_status_enum'),
            nullable=False,
        ),
        sa.Column('numeric_grade', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('graded_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('booking_id', 'attempt_number', name='uq_assignment_attempt'),
    )
    op.create_index('ix_assignments_booking_id', 'assignments', ['booking_id'])
    op.create_index('ix_assignments_course_id', 'assignments', ['course_id'])
    op.create_index('ix_assignments_student_id', 'assignments', ['student_id'])
    op.create_index('ix_assignments_status', 'assignments', ['status'])
    op.create_index('ix_assignments_created_at', 'assignments', ['created_at'])

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('student_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Uuid, sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('booking_id', sa.Uuid, sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column(
            'status',
            sa.Enum('active', 'completed', 'dropped', name='enrollment_status_enum'),
            nullable=False,
        ),
        sa.Column('progress', sa.Integer, nullable=False),
        sa.Column('completed_resource_ids', JSONType, nullable=False),
        sa.Column('total_resources', sa.Integer, nullable=False),
        sa.Column('assignment_id', sa.Uuid, sa.ForeignKey('assignments.id', ondelete='SET NULL'), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_enrollments_student_id', 'enrollments', ['student_id'])
    op.create_index('ix_enrollments_course_id', 'enrollments', ['course_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('booking_id', sa.Uuid, sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('enrollment_id', sa.Uuid, sa.ForeignKey('enrollments.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('provider', sa.String(32), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'paid', 'failed', name='payment_status_enum'),
            nullable=False,
        ),
        sa.Column('provider_reference', sa.String(255), nullable=True),
        sa.Column('decline_reason', sa.Text, nullable=True),
        sa.Column('provider_meta', JSONType, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_payments_booking_id', 'payments', ['booking_id'])
    op.create_index('ix_payments_status', 'payments', ['status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column(
            'notification_type',
            sa.Enum(
                'tutor_application', 'tutor_applied', 'course_match', 'course_accepted',
                'course_rejected', 'course_assigned_elsewhere', 'course_assigned_admin',
                name='notification_type_enum',
            ),
            nullable=False,
        ),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text, nullable=True),
        sa.Column('payload', JSONType, nullable=False),
        sa.Column('course_id', sa.Uuid, nullable=True),
        sa.Column('tutor_id', sa.Uuid, nullable=True),
        sa.Column('is_read', sa.Boolean, nullable=False),
        sa.Column(
            'action_status',
            sa.Enum('none', 'applied', 'dismissed', name='notification_action_status_enum'),
            nullable=False,
        ),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_notification_type', 'notifications', ['notification_type'])
    op.create_index('ix_notifications_course_id', 'notifications', ['course_id'])
    op.create_index('ix_notifications_tutor_id', 'notifications', ['tutor_id'])
    op.create_index('ix_notifications_is_read', 'notifications', ['is_read'])
    op.create_index('ix_notifications_action_status', 'notifications', ['action_status'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])


def downgrade() -> None:
    for table in (
        'notifications',
        'payments',
        'enrollments',
        'assignments',
        'bookings',
        'tutor_availability',
        'tutor_courses',
        'course_prerequisites',
        'courses',
        'tutor_profiles',
        'categories',
        'users',
    ):
        op.drop_table(table)

    if op.get_bind().dialect.name == 'postgresql':
        for enum_name in ENUMS:
            op.execute(f'DROP TYPE IF EXISTS {enum_name}')
