"""shared store table

Revision ID: 20261019_000001
Revises: 
Create Date: 2026-10-19 00:00:01.000000

"""
from typing import Sequence, Union

from alembic import op  # type: ignore[attr-defined]
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'shared_store',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('app_group', sa.String(255), nullable=False),
        sa.Column('key', sa.String(64), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('app_group', 'key', name='uq_shared_store_group_key'),
    )
    op.create_index(op.f('ix_shared_store_id'), 'shared_store', ['id'], unique=False)
    op.create_index(op.f('ix_shared_store_app_group'), 'shared_store', ['app_group'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_shared_store_app_group'), table_name='shared_store')
    op.drop_index(op.f('ix_shared_store_id'), table_name='shared_store')
    op.drop_table('shared_store')
