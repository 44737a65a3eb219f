"""add user admin flag and preferences

Revision ID: b4f08e6a2c31
Revises: 7c1e2a9d4b10
Create Date: 2026-10-19 14:37:02.551847

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b4f08e6a2c31'
down_revision = '7c1e2a9d4b10'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.add_column(sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=True))
        batch_op.add_column(sa.Column('preferences', sa.JSON(), nullable=True))


def downgrade():
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_column('preferences')
        batch_op.drop_column('is_admin')
