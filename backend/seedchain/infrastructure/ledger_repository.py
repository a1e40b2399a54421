"""Ledger Repository — SQLAlchemy implementation of the LedgerRepository protocol.

Invariants:
    - load() with an empty database returns a fresh state owned by the deploying identity
    - save() writes the whole snapshot in one transaction (campaign row + all projects
      + all investments); rows are merged, never deleted
    - Numeric columns are converted back to int on load (no Decimal leaks into core)

Design Decisions:
    - Goes through the snapshot dict both ways: one serialization shape for API,
      persistence and reload
    - merge() over diffing: the ledger is small and the write is idempotent
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seedchain.core.ledger_state import LedgerState
from seedchain.core.ledger_state_snapshot import (
    ledger_state_from_snapshot, ledger_state_to_snapshot,
)
from seedchain.models.campaign import CAMPAIGN_ROW_ID, Campaign
from seedchain.models.investment import Investment as InvestmentRow
from seedchain.models.project import Project as ProjectRow


class SqlLedgerRepository:
    """Persists LedgerState into the campaign / projects / investments tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load(self, default_administrator: str) -> LedgerState:
        campaign = await self.db.get(Campaign, CAMPAIGN_ROW_ID)
        if campaign is None:
            return ledger_state_from_snapshot({}, default_administrator)

        projects = (await self.db.execute(select(ProjectRow))).scalars().all()
        investments = (await self.db.execute(select(InvestmentRow))).scalars().all()
        snapshot = {
            "administrator": campaign.administrator,
            "target": int(campaign.target),
            "deadline": int(campaign.deadline),
            "active": campaign.active,
            "initialized": campaign.initialized,
            "raised": int(campaign.raised),
            "projects": {
                str(int(p.project_id)): {
                    "project_id": int(p.project_id),
                    "name": p.name,
                    "description": p.description,
                    "target_amount": int(p.target_amount),
                    "current_amount": int(p.current_amount),
                    "status": p.status,
                }
                for p in projects
            },
            "investments": [
                {
                    "investor": i.investor,
                    "project_id": int(i.project_id),
                    "amount": int(i.amount),
                    "investment_date": int(i.investment_date),
                }
                for i in investments
            ],
        }
        return ledger_state_from_snapshot(snapshot, default_administrator)

    async def save(self, state: LedgerState) -> None:
        await self.save_snapshot(ledger_state_to_snapshot(state))

    async def save_snapshot(self, snapshot: dict) -> None:
        """Write a ledger_state_to_snapshot() dict in one transaction."""
        await self.db.merge(Campaign(
            id=CAMPAIGN_ROW_ID,
            administrator=snapshot["administrator"],
            target=Decimal(snapshot["target"]),
            deadline=Decimal(snapshot["deadline"]),
            active=snapshot["active"],
            initialized=snapshot["initialized"],
            raised=Decimal(snapshot["raised"]),
        ))
        for project in snapshot["projects"].values():
            await self.db.merge(ProjectRow(
                project_id=Decimal(project["project_id"]),
                name=project["name"],
                description=project["description"],
                target_amount=Decimal(project["target_amount"]),
                current_amount=Decimal(project["current_amount"]),
                status=project["status"],
            ))
        # Projects flushed first so investment FKs resolve
        await self.db.flush()
        for record in snapshot["investments"]:
            await self.db.merge(InvestmentRow(
                investor=record["investor"],
                project_id=Decimal(record["project_id"]),
                amount=Decimal(record["amount"]),
                investment_date=Decimal(record["investment_date"]),
            ))
        await self.db.commit()
