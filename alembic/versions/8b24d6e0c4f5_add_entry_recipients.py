"""add entry_recipients (many recipients per entry, users or guilds)

Revision ID: 8b24d6e0c4f5
Revises: 3f1c9a7e2b10
Create Date: 2025-11-14 18:03:09.552871

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b24d6e0c4f5'
down_revision: Union[str, None] = '3f1c9a7e2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'entry_recipients',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('entry_id', sa.String(36), sa.ForeignKey('entries.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('recipient_id', sa.String(36), nullable=False, index=True),
        sa.Column('recipient_type', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("recipient_type IN ('user', 'guild')", name='ck_entry_recipients_type'),
    )

    # Backfill from the legacy single-recipient column. The column stays (read only).
    op.execute(
        "INSERT INTO entry_recipients (id, entry_id, recipient_id, recipient_type) "
        "SELECT gen_random_uuid()::text, id, recipient_id, 'user' "
        "FROM entries WHERE recipient_id IS NOT NULL"
    )


def downgrade() -> None:
    op.drop_table('entry_recipients')
