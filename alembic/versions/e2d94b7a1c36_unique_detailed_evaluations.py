"""one detailed evaluation per evaluator, evaluated user and axis

Revision ID: e2d94b7a1c36
Revises: c5a7e913d2f8
Create Date: 2026-01-14 16:08:12.530218

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'e2d94b7a1c36'
down_revision: Union[str, None] = 'c5a7e913d2f8'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Keep the earliest row of each duplicate group, and drop self-ratings
    op.execute(
        "DELETE FROM detailed_evaluations WHERE id NOT IN ("
        "  SELECT DISTINCT ON (entry_id, evaluator_id, evaluated_id, axis_key) id FROM detailed_evaluations "
        "  ORDER BY entry_id, evaluator_id, evaluated_id, axis_key, created_at"
        ")"
    )
    op.execute("DELETE FROM detailed_evaluations WHERE evaluator_id = evaluated_id")
    op.create_unique_constraint(
        'uq_detailed_evaluations_axis',
        'detailed_evaluations',
        ['entry_id', 'evaluator_id', 'evaluated_id', 'axis_key'],
    )


def downgrade() -> None:
    op.drop_constraint('uq_detailed_evaluations_axis', 'detailed_evaluations', type_='unique')
