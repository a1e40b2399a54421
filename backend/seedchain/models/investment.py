"""Investment ORM — immutable receipt per (investor, project).

Invariants:
    - Composite primary key (investor, project_id): one record per investor per project
    - Rows are inserted once, never updated or deleted
"""

from decimal import Decimal

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from seedchain.db.base import Base
from seedchain.models.campaign import UINT128


class Investment(Base):
    __tablename__ = "investments"

    investor: Mapped[str] = mapped_column(String(128), primary_key=True)
    project_id: Mapped[Decimal] = mapped_column(
        UINT128, ForeignKey("projects.project_id"), primary_key=True,
    )
    amount: Mapped[Decimal] = mapped_column(UINT128, nullable=False)
    investment_date: Mapped[Decimal] = mapped_column(UINT128, nullable=False)
