"""Health & Readiness Probes — liveness and ledger readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness); it never touches
      the ledger lock or the database
    - GET /health/ready returns 200 only when the database answers AND the ledger
      runtime has been loaded; otherwise 503 with the failing checks listed
    - Readiness reports campaign status and raised total when the ledger is up

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
    - db_manager and the ledger runtime are resolved at call time (both are built on startup)
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import seedchain.infrastructure.database as database
from seedchain.core.errors import LedgerUnavailableError
from seedchain.services.ledger_runtime import get_ledger_runtime

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "seedchain-ledger",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe — database connectivity plus a loaded ledger."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    checks = {"database": "healthy" if db_ok else "unavailable"}

    try:
        summary = get_ledger_runtime().service.campaign_summary()
        checks["ledger"] = "healthy"
    except LedgerUnavailableError:
        summary = None
        checks["ledger"] = "unavailable"

    if summary is None or not db_ok:
        logger.warning(f"Readiness failed: {checks}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {
        "status": "ready",
        "checks": checks,
        "campaign": {"status": summary["status"], "raised": summary["raised"]},
    }
