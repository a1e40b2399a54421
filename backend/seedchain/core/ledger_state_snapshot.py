"""Ledger State Snapshot — serialization / deserialization for LedgerState.

Invariants:
    - ledger_state_to_snapshot produces a JSON-safe dict (no tuples as keys, no Enums)
    - ledger_state_from_snapshot reconstructs a LedgerState from any valid snapshot dict
    - Missing keys fall back to LedgerState defaults (forward-compatible)
    - Equal states produce equal snapshots (investments sorted by key)

Design Decisions:
    - JSON keys must be strings: projects keyed by str(project_id), investments as a list
    - Same snapshot shape used for API output, persistence and reload
"""

from seedchain.core.domain_types import (
    Amount, BlockHeight, FUNDING_STATUS, Principal, ProjectId,
)
from seedchain.core.ledger_state import InvestmentRecord, LedgerState, Project


def project_to_dict(project: Project) -> dict:
    return {
        "project_id": project.project_id,
        "name": project.name,
        "description": project.description,
        "target_amount": project.target_amount,
        "current_amount": project.current_amount,
        "status": project.status,
    }


def investment_to_dict(record: InvestmentRecord) -> dict:
    return {
        "investor": record.investor,
        "project_id": record.project_id,
        "amount": record.amount,
        "investment_date": record.investment_date,
    }


def project_from_dict(data: dict) -> Project:
    return Project(
        project_id=ProjectId(int(data["project_id"])),
        name=data.get("name", ""),
        description=data.get("description", ""),
        target_amount=Amount(int(data.get("target_amount", 0))),
        current_amount=Amount(int(data.get("current_amount", 0))),
        status=data.get("status", FUNDING_STATUS),
    )


def investment_from_dict(data: dict) -> InvestmentRecord:
    return InvestmentRecord(
        investor=Principal(data["investor"]),
        project_id=ProjectId(int(data["project_id"])),
        amount=Amount(int(data["amount"])),
        investment_date=BlockHeight(int(data.get("investment_date", 0))),
    )


def ledger_state_to_snapshot(state: LedgerState) -> dict:
    """Serialize LedgerState to JSON-safe dict. Pure, no IO."""
    return {
        "administrator": state.administrator,
        "target": state.target,
        "deadline": state.deadline,
        "active": state.active,
        "initialized": state.initialized,
        "raised": state.raised,
        "projects": {
            str(pid): project_to_dict(project)
            for pid, project in sorted(state.projects.items())
        },
        "investments": [
            investment_to_dict(record)
            for _, record in sorted(state.investments.items())
        ],
    }


def ledger_state_from_snapshot(data: dict, default_administrator: str = "") -> LedgerState:
    """Reconstruct LedgerState from snapshot dict. Pure, no IO.

    Missing keys fall back to LedgerState defaults; the administrator falls back
    to default_administrator (the deploying identity).
    """
    state = LedgerState(administrator=Principal(default_administrator))
    if not data:
        return state

    state.administrator = Principal(data.get("administrator", default_administrator))
    state.target = Amount(int(data.get("target", 0)))
    state.deadline = BlockHeight(int(data.get("deadline", 0)))
    state.active = bool(data.get("active", False))
    state.initialized = bool(data.get("initialized", False))
    state.raised = Amount(int(data.get("raised", 0)))

    for entry in data.get("projects", {}).values():
        project = project_from_dict(entry)
        state.projects[project.project_id] = project
    for entry in data.get("investments", []):
        record = investment_from_dict(entry)
        state.investments[record.key] = record

    return state
