"""Project ORM — one row per registered project.

Invariants:
    - project_id is the primary key (never reused, never deleted)
    - current_amount <= target_amount (enforced by the ledger, not the DB)
"""

from decimal import Decimal

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from seedchain.core.domain_types import (
    FUNDING_STATUS, MAX_PROJECT_DESCRIPTION_LENGTH, MAX_PROJECT_NAME_LENGTH,
)
from seedchain.db.base import Base
from seedchain.models.campaign import UINT128


class Project(Base):
    __tablename__ = "projects"

    project_id: Mapped[Decimal] = mapped_column(UINT128, primary_key=True)
    name: Mapped[str] = mapped_column(String(MAX_PROJECT_NAME_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(
        String(MAX_PROJECT_DESCRIPTION_LENGTH), nullable=False,
    )
    target_amount: Mapped[Decimal] = mapped_column(UINT128, nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(UINT128, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FUNDING_STATUS,
    )
