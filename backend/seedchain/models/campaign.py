"""Campaign ORM — the single row holding the ledger's scalar state.

Invariants:
    - Exactly one row, id == CAMPAIGN_ROW_ID
    - Mirrors LedgerState scalars: administrator, target, deadline, active, initialized, raised

Design Decisions:
    - Numeric(39, 0) for unsigned 128-bit values: exact, no float coercion
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from seedchain.db.base import Base

CAMPAIGN_ROW_ID = 1
UINT128 = Numeric(39, 0)


class Campaign(Base):
    __tablename__ = "campaign"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=CAMPAIGN_ROW_ID)
    administrator: Mapped[str] = mapped_column(String(128), nullable=False)
    target: Mapped[Decimal] = mapped_column(UINT128, nullable=False, default=0)
    deadline: Mapped[Decimal] = mapped_column(UINT128, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    initialized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    raised: Mapped[Decimal] = mapped_column(UINT128, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
