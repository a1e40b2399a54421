"""Ledger Transitions — the state mutations applied after validation passes.

Invariants:
    - Called only after the matching validate_* returned None (never re-checks)
    - Cannot fail: every precondition was established by enforce_ledger
    - apply_investment writes record, project total and raised together
    - Touch only the LedgerState passed in — no IO

Design Decisions:
    - Separated from enforce_ledger: validation is pure, mutation is the shell's
      "apply" step of the impureim sandwich (ADR: responsibility separation)
    - Frozen Project replaced via dataclasses.replace: old values never observed half-updated
"""

from dataclasses import replace

from seedchain.core.domain_types import (
    Amount, BlockHeight, Principal, ProjectId,
)
from seedchain.core.ledger_state import InvestmentRecord, LedgerState, Project


def apply_initialize(
    state: LedgerState,
    new_administrator: Principal,
    target: Amount,
    deadline: BlockHeight,
) -> None:
    """Set administrator and campaign parameters; (re)activate the round.

    Projects, investments and raised are left as they are.
    """
    state.administrator = new_administrator
    state.target = target
    state.deadline = deadline
    state.active = True
    state.initialized = True


def apply_add_project(
    state: LedgerState,
    project_id: ProjectId,
    name: str,
    description: str,
    target_amount: Amount,
) -> Project:
    project = Project(
        project_id=project_id,
        name=name,
        description=description,
        target_amount=target_amount,
    )
    state.projects[project_id] = project
    return project


def apply_investment(
    state: LedgerState,
    investor: Principal,
    project_id: ProjectId,
    amount: Amount,
    height: BlockHeight,
) -> InvestmentRecord:
    """Record the investment and bump both running totals."""
    record = InvestmentRecord(
        investor=investor,
        project_id=project_id,
        amount=amount,
        investment_date=height,
    )
    project = state.projects[project_id]
    updated = replace(project, current_amount=Amount(project.current_amount + amount))

    state.investments[record.key] = record
    state.projects[project_id] = updated
    state.raised = Amount(state.raised + amount)
    return record


def apply_close(state: LedgerState) -> None:
    state.active = False
