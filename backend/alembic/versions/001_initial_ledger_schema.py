"""Initial ledger schema: campaign, projects, investments.

Revision ID: 001_initial_ledger_schema
Revises:
Create Date: 2026-10-17

One campaign row for the scalar state, projects keyed by project_id,
investments keyed by (investor, project_id). Unsigned 128-bit values
stored as NUMERIC(39, 0).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_ledger_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UINT128 = sa.Numeric(39, 0)


def upgrade() -> None:
    op.create_table(
        'campaign',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('administrator', sa.String(128), nullable=False),
        sa.Column('target', UINT128, nullable=False),
        sa.Column('deadline', UINT128, nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('initialized', sa.Boolean(), nullable=False),
        sa.Column('raised', UINT128, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        'projects',
        sa.Column('project_id', UINT128, primary_key=True),
        sa.Column('name', sa.String(64), nullable=False),
        sa.Column('description', sa.String(256), nullable=False),
        sa.Column('target_amount', UINT128, nullable=False),
        sa.Column('current_amount', UINT128, nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
    )
    op.create_table(
        'investments',
        sa.Column('investor', sa.String(128), primary_key=True),
        sa.Column(
            'project_id', UINT128,
            sa.ForeignKey('projects.project_id'), primary_key=True,
        ),
        sa.Column('amount', UINT128, nullable=False),
        sa.Column('investment_date', UINT128, nullable=False),
    )


def downgrade() -> None:
    op.drop_table('investments')
    op.drop_table('projects')
    op.drop_table('campaign')
