"""Ledger Routes — HTTP surface over the five mutating operations and the read queries.

Invariants:
    - Caller identity comes from the X-Caller-Identity header (supplied by the host)
    - Mutations run under runtime.lock together with their persistence write
    - A committed operation is never rolled back in memory: a failed persistence
      write answers 503 and the next successful write stores the whole state
    - Failed ledger results surface as LedgerRuleError → structured error envelope
    - Queries never fail: absence is {"project": null} / {"investment": null}

Design Decisions:
    - Routes never contain ledger rules: they delegate to LedgerService
    - Whole-snapshot writes make persistence self-healing: memory stays the
      source of truth, so custody funds always have a matching investment record
    - 200-with-null over 404 for absent read results: reads have no failure kinds
"""

import logging
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seedchain.core.domain_types import Amount, BlockHeight, Principal, ProjectId
from seedchain.core.errors import DatabaseError, ErrorContext, LedgerRuleError
from seedchain.core.ledger_protocols import LedgerRepository
from seedchain.core.ledger_state_snapshot import investment_to_dict, project_to_dict
from seedchain.infrastructure.database import get_db
from seedchain.infrastructure.ledger_repository import SqlLedgerRepository
from seedchain.schemas.ledger import (
    CampaignResponse, InitializeRequest, InvestRequest, ProjectCreate,
)
from seedchain.services.ledger_runtime import LedgerRuntime, get_ledger_runtime

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ledger", tags=["ledger"])

CALLER_HEADER = "X-Caller-Identity"


def caller_identity(
    caller: str = Header(alias=CALLER_HEADER, min_length=1, max_length=128),
) -> Principal:
    return Principal(caller)


async def _run_and_persist(
    runtime: LedgerRuntime,
    db: AsyncSession,
    operation: Callable[[], Awaitable[dict]],
    context: ErrorContext,
) -> dict:
    """Apply one ledger operation, then write the resulting state."""
    repository: LedgerRepository = SqlLedgerRepository(db)
    async with runtime.lock:
        result = await operation()
        if result["status"] != "ok":
            raise LedgerRuleError.from_result(result, context)
        try:
            await repository.save_snapshot(runtime.service.snapshot())
        except (SQLAlchemyError, DatabaseError) as e:
            await db.rollback()
            logger.error(
                f"Persisting {context.operation} failed, committed in memory "
                f"until the next successful write: {e}",
                extra={"caller": context.caller, "project_id": context.project_id},
            )
            raise DatabaseError("Ledger state could not be persisted", "commit", context)
        return result


# ─── Mutating operations ─────────────────────────────────────────

@router.post("/initialize")
async def initialize(
    body: InitializeRequest,
    caller: Principal = Depends(caller_identity),
    runtime: LedgerRuntime = Depends(get_ledger_runtime),
    db: AsyncSession = Depends(get_db),
):
    """Set administrator and campaign parameters (administrator only)."""
    return await _run_and_persist(
        runtime, db,
        lambda: runtime.service.initialize(
            caller,
            Principal(body.new_administrator),
            Amount(body.target),
            BlockHeight(body.deadline),
        ),
        ErrorContext(caller=caller, operation="initialize"),
    )


@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def add_project(
    body: ProjectCreate,
    caller: Principal = Depends(caller_identity),
    runtime: LedgerRuntime = Depends(get_ledger_runtime),
    db: AsyncSession = Depends(get_db),
):
    """Register a new project (administrator only)."""
    return await _run_and_persist(
        runtime, db,
        lambda: runtime.service.add_project(
            caller,
            ProjectId(body.project_id),
            body.name,
            body.description,
            Amount(body.target_amount),
        ),
        ErrorContext(caller=caller, project_id=body.project_id, operation="add_project"),
    )


@router.post(
    "/projects/{project_id}/investments", status_code=status.HTTP_201_CREATED,
)
async def invest(
    project_id: int,
    body: InvestRequest,
    caller: Principal = Depends(caller_identity),
    runtime: LedgerRuntime = Depends(get_ledger_runtime),
    db: AsyncSession = Depends(get_db),
):
    """Invest in a project as the calling identity."""
    return await _run_and_persist(
        runtime, db,
        lambda: runtime.service.invest(caller, ProjectId(project_id), Amount(body.amount)),
        ErrorContext(caller=caller, project_id=project_id, operation="invest"),
    )


@router.post("/close")
async def close_investment_round(
    caller: Principal = Depends(caller_identity),
    runtime: LedgerRuntime = Depends(get_ledger_runtime),
    db: AsyncSession = Depends(get_db),
):
    """Close the investment round (administrator only, idempotent)."""
    return await _run_and_persist(
        runtime, db,
        lambda: runtime.service.close_investment_round(caller),
        ErrorContext(caller=caller, operation="close_investment_round"),
    )


# ─── Read-only queries ───────────────────────────────────────────

@router.get("", response_model=CampaignResponse)
async def get_campaign(runtime: LedgerRuntime = Depends(get_ledger_runtime)):
    """Campaign parameters, raised total and lifecycle status."""
    return runtime.service.campaign_summary()


@router.get("/projects/{project_id}")
async def get_project(
    project_id: int, runtime: LedgerRuntime = Depends(get_ledger_runtime),
):
    project = runtime.service.get_project(ProjectId(project_id))
    return {"project": project_to_dict(project) if project else None}


@router.get("/investments/{investor}/{project_id}")
async def get_investment(
    investor: str,
    project_id: int,
    runtime: LedgerRuntime = Depends(get_ledger_runtime),
):
    record = runtime.service.get_investment(Principal(investor), ProjectId(project_id))
    return {"investment": investment_to_dict(record) if record else None}


@router.get("/snapshot")
async def get_snapshot(runtime: LedgerRuntime = Depends(get_ledger_runtime)):
    """Full JSON-safe state snapshot."""
    return runtime.service.snapshot()
