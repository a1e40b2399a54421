"""Ledger State — the single state store of the pooled-investment ledger.

Invariants:
    - One LedgerState per ledger; every operation receives it explicitly (no ambient globals)
    - projects keyed by ProjectId, investments keyed by (investor, project_id)
    - Project and InvestmentRecord are frozen: updates replace the entry, never mutate it
    - raised == sum of all record amounts; project.current_amount == sum of its records
    - Nothing is ever deleted

Design Decisions:
    - Dataclass with computed properties: pure, deterministic, testable without mocks
    - `initialized` tracked separately from `active`: distinguishes Uninitialized from Closed
      for status reporting only — no rule reads it
"""

from dataclasses import dataclass, field

from seedchain.core.domain_types import (
    Amount, BlockHeight, CampaignStatus, FUNDING_STATUS, Principal, ProjectId,
)

InvestmentKey = tuple[Principal, ProjectId]


@dataclass(frozen=True)
class Project:
    """An individually fundable initiative with its own target and running total."""
    project_id: ProjectId
    name: str
    description: str
    target_amount: Amount
    current_amount: Amount = Amount(0)
    status: str = FUNDING_STATUS

    @property
    def remaining_capacity(self) -> int:
        return self.target_amount - self.current_amount


@dataclass(frozen=True)
class InvestmentRecord:
    """Immutable receipt of one investor's contribution to one project."""
    investor: Principal
    project_id: ProjectId
    amount: Amount
    investment_date: BlockHeight

    @property
    def key(self) -> InvestmentKey:
        return (self.investor, self.project_id)


@dataclass
class LedgerState:
    """Whole-ledger state — pure dataclass, no IO."""

    # Administrator (defaults to the deploying identity until initialize)
    administrator: Principal

    # Campaign parameters
    target: Amount = Amount(0)
    deadline: BlockHeight = BlockHeight(0)
    active: bool = False
    initialized: bool = False

    # Aggregate raised across all projects
    raised: Amount = Amount(0)

    # Keyed registries
    projects: dict[ProjectId, Project] = field(default_factory=dict)
    investments: dict[InvestmentKey, InvestmentRecord] = field(default_factory=dict)

    @property
    def campaign_status(self) -> CampaignStatus:
        if not self.initialized:
            return CampaignStatus.UNINITIALIZED
        return CampaignStatus.ACTIVE if self.active else CampaignStatus.CLOSED

    def is_administrator(self, caller: Principal) -> bool:
        return caller == self.administrator

    def has_investment(self, investor: Principal, project_id: ProjectId) -> bool:
        return (investor, project_id) in self.investments
