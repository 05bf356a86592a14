"""create planner tables

Revision ID: 5b1e0c7d9a21
Revises:
Create Date: 2024-04-02 18:20:11.093412

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e0c7d9a21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SESSION_TYPES = ('study', 'pomodoro', 'exam', 'assignment', 'class', 'other')


def upgrade() -> None:
    op.create_table(
        'subjects',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('professor', sa.String(length=255), nullable=True),
        sa.Column('color', sa.String(length=32), nullable=False),
        # Embedded important dates: [{"type", "date", "description"}]
        sa.Column('important_dates', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_subjects_id', 'subjects', ['id'])
    op.create_index('ix_subjects_owner_id', 'subjects', ['owner_id'])

    op.create_table(
        'study_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(length=128), nullable=False),
        sa.Column(
            'subject_id',
            sa.Integer(),
            sa.ForeignKey('subjects.id', ondelete='CASCADE'),
            nullable=True,
        ),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        # Enum names match the Python member names, as SQLAlchemy stores them
        sa.Column(
            'type',
            sa.Enum(*[value.upper() for value in SESSION_TYPES], name='sessiontype'),
            nullable=False,
        ),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('start_time', sa.String(length=5), nullable=True),
        sa.Column('end_time', sa.String(length=5), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_study_sessions_id', 'study_sessions', ['id'])
    op.create_index('ix_study_sessions_owner_id', 'study_sessions', ['owner_id'])
    op.create_index('ix_study_sessions_subject_id', 'study_sessions', ['subject_id'])

    op.create_table(
        'todos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(length=128), nullable=False),
        sa.Column('text', sa.String(length=500), nullable=False),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_todos_id', 'todos', ['id'])
    op.create_index('ix_todos_owner_id', 'todos', ['owner_id'])


def downgrade() -> None:
    op.drop_index('ix_todos_owner_id', table_name='todos')
    op.drop_index('ix_todos_id', table_name='todos')
    op.drop_table('todos')
    op.drop_index('ix_study_sessions_subject_id', table_name='study_sessions')
    op.drop_index('ix_study_sessions_owner_id', table_name='study_sessions')
    op.drop_index('ix_study_sessions_id', table_name='study_sessions')
    op.drop_table('study_sessions')
    sa.Enum(name='sessiontype').drop(op.get_bind(), checkfirst=True)
    op.drop_index('ix_subjects_owner_id', table_name='subjects')
    op.drop_index('ix_subjects_id', table_name='subjects')
    op.drop_table('subjects')
