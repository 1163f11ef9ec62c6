"""soft delete for tasks, one active application per applicant

Revision ID: c5a7e913d2f8
Revises: 8b24d6e0c4f5
Create Date: 2025-12-02 09:41:57.104662

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c5a7e913d2f8'
down_revision: Union[str, None] = '8b24d6e0c4f5'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('tasks', sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True))

    # Withdraw duplicates first so the unique index can be built
    op.execute(
        "UPDATE task_applications SET status = 'withdrawn' "
        "WHERE status = 'applied' AND id NOT IN ("
        "  SELECT DISTINCT ON (task_id, applicant_id) id FROM task_applications "
        "  WHERE status = 'applied' ORDER BY task_id, applicant_id, created_at"
        ")"
    )
    op.create_index(
        'uq_task_applications_active',
        'task_applications',
        ['task_id', 'applicant_id'],
        unique=True,
        postgresql_where=sa.text("status = 'applied'"),
    )


def downgrade() -> None:
    op.drop_index('uq_task_applications_active', table_name='task_applications')
    op.drop_column('tasks', 'deleted_at')
