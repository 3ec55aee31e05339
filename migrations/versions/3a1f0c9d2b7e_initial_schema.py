"""initial schema

Revision ID: 3a1f0c9d2b7e
Revises: 
Create Date: 2026-10-19 10:12:41.203518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a1f0c9d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

college_course = sa.Enum('ENGINEERING', 'MEDICAL', 'ARTS', 'LAW', name='college_course')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'student',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('phone_number', sa.BigInteger(), nullable=False),
        sa.Column('first_name', sa.String(length=128), nullable=True),
        sa.Column('last_name', sa.String(length=128), nullable=True),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.Column('college_course', college_course, nullable=True),
        sa.Column('signed_up', sa.Boolean(), nullable=False),
        sa.Column('is_verified_user', sa.Boolean(), nullable=False),
        sa.Column('auth_token_hash', sa.String(length=128), nullable=True),
        sa.Column('auth_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refresh_token_hash', sa.String(length=128), nullable=True),
        sa.Column('refresh_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_student_phone_number'), 'student', ['phone_number'], unique=True)
    op.create_index(op.f('ix_student_created_at'), 'student', ['created_at'], unique=False)

    op.create_table(
        'college',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('about', sa.Text(), nullable=True),
        sa.Column('course_and_fees', sa.Text(), nullable=True),
        sa.Column('hostel', sa.Text(), nullable=True),
        sa.Column('placement_and_scholarship', sa.Text(), nullable=True),
        sa.Column('nirf_ranking', sa.Integer(), nullable=True),
        sa.Column('logo', sa.String(length=1024), nullable=True),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('status', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_college_name'), 'college', ['name'], unique=False)
    op.create_index(op.f('ix_college_location'), 'college', ['location'], unique=False)
    op.create_index(op.f('ix_college_created_at'), 'college', ['created_at'], unique=False)

    op.create_table(
        'appliedcollege',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('college_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=True),
        sa.Column('paid', sa.Boolean(), nullable=False),
        sa.Column('sslc_path', sa.String(length=1024), nullable=True),
        sa.Column('hsc_path', sa.String(length=1024), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['college_id'], ['college.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['student.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_appliedcollege_college_id'), 'appliedcollege', ['college_id'], unique=False)
    op.create_index(op.f('ix_appliedcollege_student_id'), 'appliedcollege', ['student_id'], unique=False)
    op.create_index(op.f('ix_appliedcollege_created_at'), 'appliedcollege', ['created_at'], unique=False)

    op.create_table(
        'otpverification',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('mobile', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('send_count', sa.Integer(), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('otp_hash', sa.String(length=128), nullable=True),
        sa.Column('otp_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_otpverification_mobile'), 'otpverification', ['mobile'], unique=True)
    op.create_index(op.f('ix_otpverification_created_at'), 'otpverification', ['created_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('otpverification')
    op.drop_table('appliedcollege')
    op.drop_table('college')
    op.drop_table('student')
    college_course.drop(op.get_bind(), checkfirst=True)
