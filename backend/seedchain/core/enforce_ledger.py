"""Ledger Rule Enforcement — validates every precondition before a state transition.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return error dict on violation, None on success
    - validate_* chains checks in the documented order — first error wins
    - Capacity boundary is inclusive: current + amount == target passes

Design Decisions:
    - Pure functions over method dispatch: testable without mocks (ADR: Functional Core)
    - Return dicts (not exceptions): callers consume results as JSON dicts,
      keeping error path identical to success path (ADR: uniform result shape)
"""

from seedchain.core.domain_types import LedgerErrorKind, Principal, ProjectId
from seedchain.core.ledger_state import LedgerState


def ledger_error(kind: LedgerErrorKind, message: str) -> dict:
    """Build the uniform failure result for a rule violation."""
    return {
        "status": "error",
        "error_code": kind.value,
        "message": f"ERROR: {message}",
    }


def check_administrator(state: LedgerState, caller: Principal) -> dict | None:
    """Only the current administrator may initialize, add projects, or close."""
    if not state.is_administrator(caller):
        return ledger_error(
            LedgerErrorKind.NOT_AUTHORIZED,
            f"'{caller}' is not the ledger administrator.",
        )
    return None


def check_project_absent(state: LedgerState, project_id: ProjectId) -> dict | None:
    """Project ids are unique; insertion never overwrites."""
    if project_id in state.projects:
        return ledger_error(
            LedgerErrorKind.ALREADY_EXISTS,
            f"Project {project_id} already exists.",
        )
    return None


def check_round_open(state: LedgerState) -> dict | None:
    if not state.active:
        return ledger_error(
            LedgerErrorKind.INVESTMENT_CLOSED,
            "The investment round is not active.",
        )
    return None


def check_positive_amount(amount: int) -> dict | None:
    if amount <= 0:
        return ledger_error(
            LedgerErrorKind.INVALID_AMOUNT,
            f"Investment amount must be greater than zero (got {amount}).",
        )
    return None


def check_project_exists(state: LedgerState, project_id: ProjectId) -> dict | None:
    if project_id not in state.projects:
        return ledger_error(
            LedgerErrorKind.PROJECT_NOT_FOUND,
            f"Project {project_id} does not exist.",
        )
    return None


def check_capacity(
    state: LedgerState, project_id: ProjectId, amount: int,
) -> dict | None:
    """current_amount + amount must not exceed target_amount. Project must exist."""
    project = state.projects[project_id]
    if project.current_amount + amount > project.target_amount:
        return ledger_error(
            LedgerErrorKind.INSUFFICIENT_CAPACITY,
            f"Project {project_id} can accept at most "
            f"{project.remaining_capacity} more (requested {amount}).",
        )
    return None


def check_no_prior_investment(
    state: LedgerState, caller: Principal, project_id: ProjectId,
) -> dict | None:
    """One record per (investor, project). Second investments are rejected, not merged."""
    if state.has_investment(caller, project_id):
        return ledger_error(
            LedgerErrorKind.DUPLICATE_INVESTMENT,
            f"'{caller}' has already invested in project {project_id}.",
        )
    return None


def validate_add_project(
    state: LedgerState, caller: Principal, project_id: ProjectId,
) -> dict | None:
    """Chain add_project checks. Returns first error or None."""
    return (
        check_administrator(state, caller)
        or check_project_absent(state, project_id)
    )


def validate_investment(
    state: LedgerState, caller: Principal, project_id: ProjectId, amount: int,
) -> dict | None:
    """Chain invest checks in order: open, amount, exists, capacity, duplicate."""
    return (
        check_round_open(state)
        or check_positive_amount(amount)
        or check_project_exists(state, project_id)
        or check_capacity(state, project_id, amount)
        or check_no_prior_investment(state, caller, project_id)
    )
