"""Initial migration - create the students table

Revision ID: 001_create_students
Revises: None
Create Date: 2026-10-19

Creates the single students table with:
- an integer identity primary key (never reused)
- a unique index on the student_id business key
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_create_students'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), sa.Identity(always=False), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('student_id', sa.String(length=64), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(),
                  server_default=sa.func.now(), nullable=False),
        sqlite_autoincrement=True,
    )

    op.create_index('ix_students_student_id', 'students', ['student_id'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_students_student_id', table_name='students')
    op.drop_table('students')
