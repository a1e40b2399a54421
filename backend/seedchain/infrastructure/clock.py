"""Logical Clock — block-height source for investment dates.

Invariants:
    - Height never decreases
    - advance() moves exactly one step ("one block per committed transaction")

Design Decisions:
    - Counter, not wall clock: the ledger only needs an ordering marker, and the
      deadline is never compared against it
"""

import threading

from seedchain.core.domain_types import BlockHeight


class SequenceClock:
    """Monotonic counter starting at a genesis height."""

    def __init__(self, genesis_height: int = 0):
        self._height = genesis_height
        self._lock = threading.Lock()

    def current_height(self) -> BlockHeight:
        with self._lock:
            return BlockHeight(self._height)

    def advance(self) -> BlockHeight:
        with self._lock:
            self._height += 1
            return BlockHeight(self._height)

    def set_height(self, height: int) -> None:
        """Jump forward to an externally observed height (e.g. after reloading persisted state)."""
        with self._lock:
            if height < self._height:
                raise ValueError(
                    f"Height cannot move backwards ({height} < {self._height})",
                )
            self._height = height
