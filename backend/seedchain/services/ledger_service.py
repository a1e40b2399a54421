"""Ledger Service — the single entry point for every ledger operation.

Invariants:
    - Mutating operations are serialized by one coarse asyncio.Lock over the whole state
    - Follows impureim sandwich: pure validate → transfer (invest only) → pure apply
    - The transfer is attempted strictly after validation and strictly before any mutation
    - Any failure returns an error dict and leaves the state untouched
    - The logical clock advances once per committed mutating operation
    - Queries never await, so they never observe a half-applied transition

Design Decisions:
    - asyncio.Lock over per-entity locks: operation rate is low, invest is
      read-check-then-write across an awaited transfer (ADR: correctness over throughput)
    - Queries skip the lock: they see the last committed state while an
      investment is waiting on custody
    - Transfer exceptions converted to TRANSFER_FAILED results: the ledger never retries
      and never lets a collaborator fault escape as a partial commit
    - Committed transitions are never rolled back: once custody moved funds the
      record stays (ADR: custody balance == raised)
    - Queries return None for absence, never an error
"""

import asyncio
import logging

from seedchain.core.domain_types import (
    Amount, BlockHeight, LedgerErrorKind, Principal, ProjectId,
)
from seedchain.core.enforce_ledger import (
    check_administrator, ledger_error, validate_add_project, validate_investment,
)
from seedchain.core.ledger_protocols import AssetTransferService, LogicalClock
from seedchain.core.ledger_state import InvestmentRecord, LedgerState, Project
from seedchain.core.ledger_state_snapshot import (
    investment_to_dict, ledger_state_to_snapshot, project_to_dict,
)
from seedchain.core.ledger_transitions import (
    apply_add_project, apply_close, apply_initialize, apply_investment,
)

logger = logging.getLogger(__name__)


class LedgerService:
    """Owns the LedgerState and serializes every transition against it."""

    def __init__(
        self,
        state: LedgerState,
        transfer_service: AssetTransferService,
        clock: LogicalClock,
        custody_identity: Principal,
    ):
        self._state = state
        self._transfer_service = transfer_service
        self._clock = clock
        self._custody = custody_identity
        self._lock = asyncio.Lock()

    # ─── Mutating operations ─────────────────────────────────────

    async def initialize(
        self,
        caller: Principal,
        new_administrator: Principal,
        target: Amount,
        deadline: BlockHeight,
    ) -> dict:
        """Set administrator and campaign parameters. Admin-only.

        The current administrator may call this again at any time: parameters are
        overwritten and the round reactivated while projects and investments persist.
        """
        async with self._lock:
            error = check_administrator(self._state, caller)
            if error:
                return self._rejected("initialize", caller, error)

            apply_initialize(self._state, new_administrator, target, deadline)
            self._clock.advance()
            logger.info(
                f"Campaign initialized by {caller}",
                extra={"caller": caller, "amount": target},
            )
            return {
                "status": "ok",
                "administrator": self._state.administrator,
                "target": self._state.target,
                "deadline": self._state.deadline,
                "active": self._state.active,
            }

    async def add_project(
        self,
        caller: Principal,
        project_id: ProjectId,
        name: str,
        description: str,
        target_amount: Amount,
    ) -> dict:
        async with self._lock:
            error = validate_add_project(self._state, caller, project_id)
            if error:
                return self._rejected("add_project", caller, error, project_id)

            project = apply_add_project(
                self._state, project_id, name, description, target_amount,
            )
            self._clock.advance()
            logger.info(
                f"Project {project_id} registered",
                extra={"caller": caller, "project_id": project_id},
            )
            return {"status": "ok", "project": project_to_dict(project)}

    async def invest(
        self, caller: Principal, project_id: ProjectId, amount: Amount,
    ) -> dict:
        """Validate, move funds into custody, then record. All or nothing."""
        async with self._lock:
            # ── PURE: validate every precondition ──
            error = validate_investment(self._state, caller, project_id, amount)
            if error:
                return self._rejected("invest", caller, error, project_id)

            # ── IMPURE: external transfer before any local mutation ──
            if not await self._transfer(caller, amount, project_id):
                return self._rejected(
                    "invest", caller,
                    ledger_error(
                        LedgerErrorKind.TRANSFER_FAILED,
                        f"Transfer of {amount} from '{caller}' into custody failed.",
                    ),
                    project_id,
                )

            # ── PURE: apply record + totals together ──
            record = apply_investment(
                self._state, caller, project_id, amount, self._clock.current_height(),
            )
            self._clock.advance()
            logger.info(
                f"Investment of {amount} into project {project_id} committed",
                extra={"caller": caller, "project_id": project_id, "amount": amount},
            )
            return {
                "status": "ok",
                "investment": investment_to_dict(record),
                "project_current_amount": self._state.projects[project_id].current_amount,
                "raised": self._state.raised,
            }

    async def close_investment_round(self, caller: Principal) -> dict:
        """Deactivate the round. Closing an already-closed round is a no-op success."""
        async with self._lock:
            error = check_administrator(self._state, caller)
            if error:
                return self._rejected("close_investment_round", caller, error)

            was_active = self._state.active
            apply_close(self._state)
            if was_active:
                self._clock.advance()
                logger.info(f"Investment round closed by {caller}", extra={"caller": caller})
            return {"status": "ok", "active": self._state.active}

    # ─── Read-only queries ───────────────────────────────────────

    def get_investment(
        self, investor: Principal, project_id: ProjectId,
    ) -> InvestmentRecord | None:
        return self._state.investments.get((investor, project_id))

    def get_project(self, project_id: ProjectId) -> Project | None:
        return self._state.projects.get(project_id)

    def get_administrator(self) -> Principal:
        return self._state.administrator

    def get_target(self) -> Amount:
        return self._state.target

    def get_deadline(self) -> BlockHeight:
        return self._state.deadline

    def get_raised(self) -> Amount:
        return self._state.raised

    def is_active(self) -> bool:
        return self._state.active

    def campaign_summary(self) -> dict:
        return {
            "administrator": self._state.administrator,
            "target": self._state.target,
            "deadline": self._state.deadline,
            "raised": self._state.raised,
            "active": self._state.active,
            "status": self._state.campaign_status.value,
            "project_count": len(self._state.projects),
            "investment_count": len(self._state.investments),
        }

    def snapshot(self) -> dict:
        return ledger_state_to_snapshot(self._state)

    async def aclose(self) -> None:
        """Release the transfer backend (shutdown only)."""
        await self._transfer_service.aclose()

    # ─── Helpers ─────────────────────────────────────────────────

    async def _transfer(
        self, caller: Principal, amount: Amount, project_id: ProjectId,
    ) -> bool:
        try:
            return bool(
                await self._transfer_service.transfer(caller, self._custody, amount),
            )
        except Exception as e:
            logger.warning(
                f"Asset transfer raised: {e}",
                extra={"caller": caller, "project_id": project_id, "amount": amount},
            )
            return False

    def _rejected(
        self,
        operation: str,
        caller: Principal,
        error: dict,
        project_id: ProjectId | None = None,
    ) -> dict:
        logger.info(
            f"{operation} rejected: {error['error_code']}",
            extra={
                "caller": caller,
                "project_id": project_id,
                "error_code": error["error_code"],
            },
        )
        return error
