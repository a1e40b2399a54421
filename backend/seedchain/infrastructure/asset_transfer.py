"""Asset Transfer Services — implementations of the AssetTransferService protocol.

Invariants:
    - transfer() returns True only when the value movement committed
    - InMemoryAssetTransferService never debits below zero when balances are tracked
    - HttpAssetTransferService: 2xx → True; any other status, timeout or connection
      failure → TransferServiceError (the ledger service turns it into TRANSFER_FAILED)
    - No retries here — retry policy belongs to the caller of the ledger, not the ledger
    - aclose() releases the outbound connection pool; called once on shutdown

Design Decisions:
    - Wrapper over raw httpx client: isolates error mapping from the ledger service
      (ADR: single responsibility)
    - httpx.AsyncClient, awaited: a slow custody call suspends only the investing
      request, the event loop keeps serving health checks and reads
"""

import logging
from dataclasses import dataclass

import httpx

from seedchain.core.domain_types import Amount, Principal
from seedchain.core.errors import ErrorContext, TransferServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommittedTransfer:
    sender: Principal
    recipient: Principal
    amount: Amount


class InMemoryAssetTransferService:
    """Process-local custody book.

    With balances=None every transfer succeeds (unmetered mode); otherwise a
    sender needs at least `amount` on its balance.
    """

    def __init__(self, balances: dict[str, int] | None = None):
        self._metered = balances is not None
        self._balances: dict[str, int] = dict(balances or {})
        self.transfers: list[CommittedTransfer] = []

    async def transfer(
        self, sender: Principal, recipient: Principal, amount: Amount,
    ) -> bool:
        # No await inside: the debit and credit happen in one event-loop step
        if self._metered:
            available = self._balances.get(sender, 0)
            if available < amount:
                logger.warning(
                    f"Transfer rejected: balance {available} < {amount}",
                    extra={"caller": sender, "amount": amount},
                )
                return False
            self._balances[sender] = available - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self.transfers.append(CommittedTransfer(sender, recipient, amount))
        return True

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    async def aclose(self) -> None:
        pass


class HttpAssetTransferService:
    """Calls an external custody service over HTTP: POST {base_url}/transfers."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout_seconds, transport=transport,
        )

    async def transfer(
        self, sender: Principal, recipient: Principal, amount: Amount,
    ) -> bool:
        context = ErrorContext(caller=sender, operation="transfer")
        try:
            response = await self.client.post(
                "/transfers",
                json={"sender": sender, "recipient": recipient, "amount": str(amount)},
            )
        except httpx.TimeoutException:
            raise TransferServiceError(
                "Transfer service timed out", "timeout", context=context,
            )
        except httpx.HTTPError as e:
            raise TransferServiceError(
                f"Connection error: {e}", "connection_error", context=context,
            )

        if response.is_success:
            return True

        logger.warning(
            f"Transfer service answered {response.status_code}",
            extra={"caller": sender, "amount": amount, "failure_type": "status"},
        )
        raise TransferServiceError(
            f"Transfer rejected with HTTP {response.status_code}",
            "rejected", context=context,
        )

    async def aclose(self) -> None:
        await self.client.aclose()
