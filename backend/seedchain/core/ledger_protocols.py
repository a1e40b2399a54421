"""Boundary Protocols — contracts between the ledger core and its collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - AssetTransferService is async: custody is remote IO and must not block the
      event loop; the ledger service awaits it under its own lock, so the
      operation stays indivisible for every other caller
    - LogicalClock is synchronous: it is a local counter
    - LedgerRepository is async because implementations do database IO;
      the shell orchestrates it around the pure logic
"""

from typing import Protocol

from seedchain.core.domain_types import Amount, BlockHeight, Principal
from seedchain.core.ledger_state import LedgerState


class AssetTransferService(Protocol):
    """Moves value into custody. Returns True only if the transfer committed."""
    async def transfer(self, sender: Principal, recipient: Principal, amount: Amount) -> bool: ...

    async def aclose(self) -> None: ...


class LogicalClock(Protocol):
    """Supplies the ledger's current logical time (block height)."""
    def current_height(self) -> BlockHeight: ...

    def advance(self) -> BlockHeight: ...


class LedgerRepository(Protocol):
    """Contract for ledger persistence — implemented by shell."""
    async def load(self, default_administrator: str) -> LedgerState: ...
    async def save(self, state: LedgerState) -> None: ...
    async def save_snapshot(self, snapshot: dict) -> None: ...
