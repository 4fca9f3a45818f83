"""Create classes, students and reservations tables

Revision ID: r001_create_reservations
Revises:
Create Date: 2026-10-19

This migration creates tables for the class reservation queue:
- classes: Scheduled class occurrences with an optional capacity
- students: Academy students who book classes
- reservations: Bookings, waitlist positions and confirmation deadlines
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'r001_create_reservations'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create classes table
    op.create_table(
        'classes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('modality', sa.String(50), nullable=True),
        sa.Column('instructor_name', sa.String(), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='60'),

        # NULL capacity means unlimited
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='SCHEDULED'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )

    op.create_check_constraint(
        'check_class_capacity_positive',
        'classes',
        "capacity IS NULL OR capacity >= 0"
    )
    op.create_check_constraint(
        'check_class_status',
        'classes',
        "status IN ('SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')"
    )
    op.create_index('ix_classes_start_time', 'classes', ['start_time'])

    # Create students table
    op.create_table(
        'students',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_students_email', 'students', ['email'])

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),

        # Lifecycle
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('queue_position', sa.Integer(), nullable=True),

        # Timestamps
        sa.Column('reserved_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),

        # Constraints
        sa.UniqueConstraint('class_id', 'student_id', name='unique_class_student_reservation')
    )

    op.create_check_constraint(
        'check_queue_position_only_when_waitlisted',
        'reservations',
        "(status = 'WAITLISTED' AND queue_position IS NOT NULL) "
        "OR (status <> 'WAITLISTED' AND queue_position IS NULL)"
    )
    op.create_check_constraint(
        'check_queue_position_positive',
        'reservations',
        "queue_position IS NULL OR queue_position >= 1"
    )
    op.create_check_constraint(
        'check_reservation_status',
        'reservations',
        "status IN ('CONFIRMED', 'WAITLISTED', 'EXPIRED', 'CANCELLED', 'NO_SHOW')"
    )

    # Create indexes for performance
    op.create_index('ix_reservations_class_id', 'reservations', ['class_id'])
    op.create_index('ix_reservations_student_id', 'reservations', ['student_id'])
    op.create_index('ix_reservations_class_status', 'reservations', ['class_id', 'status'])
    op.create_index(
        'ix_reservations_confirmed_expires',
        'reservations',
        ['expires_at'],
        postgresql_where=sa.text("status = 'CONFIRMED' AND expires_at IS NOT NULL")
    )


def downgrade() -> None:
    op.drop_index('ix_reservations_confirmed_expires', table_name='reservations')
    op.drop_index('ix_reservations_class_status', table_name='reservations')
    op.drop_index('ix_reservations_student_id', table_name='reservations')
    op.drop_index('ix_reservations_class_id', table_name='reservations')
    op.drop_table('reservations')

    op.drop_index('ix_students_email', table_name='students')
    op.drop_table('students')

    op.drop_index('ix_classes_start_time', table_name='classes')
    op.drop_table('classes')
