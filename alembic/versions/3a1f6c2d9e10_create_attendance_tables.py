"""Create users, classes, enrollments, daily class sessions and attendance records

Revision ID: 3a1f6c2d9e10
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3a1f6c2d9e10'
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('updated_by', sa.Uuid(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(12), nullable=False),
        sa.Column('status', sa.String(18), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('last_login', sa.TIMESTAMP(timezone=True)),
        sa.Column('is_first_login', sa.Boolean(), server_default=sa.true()),
        *_audit_columns(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'classes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('teacher_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('status', sa.Enum('scheduled', 'active', 'completed', 'cancelled', 'postponed',
                                    name='class_status'), nullable=False),
        sa.Column('notes', sa.Text()),
        *_audit_columns(),
    )

    op.create_table(
        'class_enrollments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('class_id', sa.Uuid(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('enrollment_date', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column('status', sa.Enum('active', 'paused', 'withdrawn', 'completed',
                                    name='enrollment_status'), nullable=False),
        *_audit_columns(),
        sa.UniqueConstraint('class_id', 'student_id', name='uq_class_student_enrollment'),
    )

    op.create_table(
        'class_sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('class_id', sa.Uuid(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('pin', sa.String(12), nullable=False),
        sa.Column('barcode', sa.String(255), nullable=False),
        sa.Column('secret', sa.String(64), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        *_audit_columns(),
        sa.UniqueConstraint('class_id', 'date_key', name='uq_class_session_day'),
    )

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('class_id', sa.Uuid(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('status', sa.Enum('present', 'absent', 'late', 'excused', name='attendance_status'),
                  nullable=False),
        sa.Column('method', sa.Enum('pin', 'barcode', 'manual', name='attendance_method'), nullable=False),
        sa.Column('recorded_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('recorded_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('late_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text()),
        *_audit_columns(),
        sa.UniqueConstraint('student_id', 'class_id', 'date_key', name='uq_attendance_student_class_day'),
        sa.CheckConstraint('late_minutes >= 0', name='attendance_late_minutes_check'),
    )
    op.create_index('ix_attendance_records_class_day', 'attendance_records', ['class_id', 'date_key'])
    op.create_index('ix_attendance_records_student_day', 'attendance_records', ['student_id', 'date_key'])


def downgrade() -> None:
    op.drop_index('ix_attendance_records_student_day', table_name='attendance_records')
    op.drop_index('ix_attendance_records_class_day', table_name='attendance_records')
    op.drop_table('attendance_records')
    op.drop_table('class_sessions')
    op.drop_table('class_enrollments')
    op.drop_table('classes')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    for enum_name in ('attendance_method', 'attendance_status', 'enrollment_status', 'class_status'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
