"""create reservation_updates

Revision ID: 3f8b1c2d9a10
Revises:
Create Date: 2025-05-13 13:00:56

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f8b1c2d9a10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'reservation_updates',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('guest_name', sa.String(), nullable=False),
        sa.Column('check_in_date', sa.DateTime(), nullable=False),
        sa.Column('check_out_date', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('listing_id', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reservation_updates_listing_id', 'reservation_updates', ['listing_id'])


def downgrade() -> None:
    op.drop_index('ix_reservation_updates_listing_id', table_name='reservation_updates')
    op.drop_table('reservation_updates')
