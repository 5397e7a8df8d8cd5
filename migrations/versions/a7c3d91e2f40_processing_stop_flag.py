"""add stop_requested to processing_sessions

Revision ID: a7c3d91e2f40
Revises: e4f5a6b7c8d9
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a7c3d91e2f40'
down_revision = 'e4f5a6b7c8d9'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('processing_sessions', schema=None) as batch_op:
        batch_op.add_column(sa.Column('stop_requested', sa.Boolean(), nullable=False, server_default=sa.false()))


def downgrade():
    with op.batch_alter_table('processing_sessions', schema=None) as batch_op:
        batch_op.drop_column('stop_requested')
