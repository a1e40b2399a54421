"""Domain Types — rich types that replace bare primitives across the ledger.

Invariants:
    - Principal, ProjectId, Amount, BlockHeight wrap bare values — never pass raw str/int
      through the ledger API without the NewType
    - Amounts and heights are unsigned, bounded by MAX_UINT
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: REST envelope is JSON)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Principal = NewType("Principal", str)
ProjectId = NewType("ProjectId", int)


# ─── Value Types ─────────────────────────────────────────────────

Amount = NewType("Amount", int)              # 0..MAX_UINT
BlockHeight = NewType("BlockHeight", int)    # logical time, 0..MAX_UINT


# ─── Limits ──────────────────────────────────────────────────────

MAX_UINT: int = 2**128 - 1
MAX_PROJECT_NAME_LENGTH: int = 64
MAX_PROJECT_DESCRIPTION_LENGTH: int = 256

FUNDING_STATUS: str = "funding"


# ─── Enums ───────────────────────────────────────────────────────

class CampaignStatus(str, Enum):
    """Campaign lifecycle — derived from (initialized, active), never stored."""
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


class LedgerErrorKind(str, Enum):
    """The fixed failure taxonomy of every mutating ledger operation."""
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    INVESTMENT_CLOSED = "INVESTMENT_CLOSED"
    DUPLICATE_INVESTMENT = "DUPLICATE_INVESTMENT"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    TRANSFER_FAILED = "TRANSFER_FAILED"
