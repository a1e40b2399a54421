"""Ledger Runtime — process-wide wiring of the LedgerService for the HTTP shell.

Invariants:
    - Exactly one LedgerRuntime per process, built on startup by init_ledger_runtime
      and torn down by shutdown_ledger_runtime (transfer client closed)
    - runtime.lock serializes "operation + persistence" across concurrent requests
    - get_ledger_runtime raises LedgerUnavailableError before startup

Design Decisions:
    - Module-level singleton mirrors infrastructure/database.db_manager
      (ADR: lifespan owns lifecycle, no import side effects)
    - asyncio.Lock created inside init (bound to the serving event loop)
"""

import asyncio
import logging
from dataclasses import dataclass, field

from seedchain.config import Settings
from seedchain.core.domain_types import Principal
from seedchain.core.errors import LedgerUnavailableError
from seedchain.core.ledger_protocols import AssetTransferService
from seedchain.core.ledger_state import LedgerState
from seedchain.infrastructure.asset_transfer import (
    HttpAssetTransferService, InMemoryAssetTransferService,
)
from seedchain.infrastructure.clock import SequenceClock
from seedchain.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


@dataclass
class LedgerRuntime:
    service: LedgerService
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


_runtime: LedgerRuntime | None = None


def build_transfer_service(settings: Settings) -> AssetTransferService:
    if settings.transfer_backend == "http":
        return HttpAssetTransferService(
            settings.transfer_service_url,
            timeout_seconds=settings.transfer_timeout_seconds,
        )
    return InMemoryAssetTransferService()


def resume_height(state: LedgerState, genesis_height: int) -> int:
    """First height after everything already recorded (never below genesis)."""
    latest = max(
        (record.investment_date for record in state.investments.values()),
        default=genesis_height - 1,
    )
    return max(genesis_height, latest + 1)


def init_ledger_runtime(
    state: LedgerState,
    settings: Settings,
    transfer_service: AssetTransferService | None = None,
) -> LedgerRuntime:
    global _runtime
    clock = SequenceClock(settings.genesis_height)
    clock.set_height(resume_height(state, settings.genesis_height))
    service = LedgerService(
        state,
        transfer_service or build_transfer_service(settings),
        clock,
        Principal(settings.custody_identity),
    )
    _runtime = LedgerRuntime(service=service)
    logger.info(
        f"Ledger ready at height {clock.current_height()} "
        f"(status={state.campaign_status.value})",
    )
    return _runtime


def get_ledger_runtime() -> LedgerRuntime:
    """FastAPI dependency for the ledger runtime."""
    if _runtime is None:
        raise LedgerUnavailableError()
    return _runtime


async def shutdown_ledger_runtime() -> None:
    """Close the transfer backend and drop the runtime (lifespan shutdown)."""
    global _runtime
    if _runtime is None:
        return
    await _runtime.service.aclose()
    _runtime = None
    logger.info("Ledger runtime closed")
