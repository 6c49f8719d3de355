"""Create users and files tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-12 14:02:51.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(sa.schema.CreateSequence(sa.Sequence('files_seq')))

    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    # parent_id is null for entries at the root
    op.create_table(
        'files',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('parent_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('locator', sa.String(length=64), nullable=True),
        sa.Column('thumbnail_status', sa.String(length=16), nullable=True),
        sa.Column('seq', sa.BigInteger(), server_default=sa.text("nextval('files_seq')"), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['parent_id'], ['files.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('seq')
    )
    op.create_index('ix_files_user_id', 'files', ['user_id'])
    op.create_index('ix_files_parent_id', 'files', ['parent_id'])
    op.create_index('ix_files_created_at', 'files', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_files_created_at', table_name='files')
    op.drop_index('ix_files_parent_id', table_name='files')
    op.drop_index('ix_files_user_id', table_name='files')
    op.drop_table('files')
    op.execute(sa.schema.DropSequence(sa.Sequence('files_seq')))
    op.drop_index('ix_users_created_at', table_name='users')
    op.drop_table('users')
