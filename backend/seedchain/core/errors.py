"""Error Hierarchy — typed, categorized exceptions for all Seedchain failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Ledger rule violations (400-level) are recoverable; infrastructure errors are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SeedchainError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - The core never raises these for rule violations — it returns error dicts.
      LedgerRuleError lifts a failed result into the hierarchy at the HTTP boundary.
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from seedchain.core.domain_types import LedgerErrorKind


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_SERVICE = "external_service"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    caller: str | None = None
    project_id: int | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class SeedchainError(Exception):
    """Base exception for all Seedchain errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "caller": self.context.caller,
                    "project_id": self.context.project_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Ledger Rule Errors (400-level) ─────────────────────────────

# kind -> (category, http_status)
_RULE_ERROR_MAPPING: dict[LedgerErrorKind, tuple[ErrorCategory, int]] = {
    LedgerErrorKind.NOT_AUTHORIZED: (ErrorCategory.AUTHORIZATION, 403),
    LedgerErrorKind.ALREADY_EXISTS: (ErrorCategory.CONFLICT, 409),
    LedgerErrorKind.INVALID_AMOUNT: (ErrorCategory.VALIDATION, 400),
    LedgerErrorKind.PROJECT_NOT_FOUND: (ErrorCategory.RESOURCE_NOT_FOUND, 404),
    LedgerErrorKind.INVESTMENT_CLOSED: (ErrorCategory.BUSINESS_RULE, 409),
    LedgerErrorKind.DUPLICATE_INVESTMENT: (ErrorCategory.CONFLICT, 409),
    LedgerErrorKind.INSUFFICIENT_CAPACITY: (ErrorCategory.BUSINESS_RULE, 409),
    LedgerErrorKind.TRANSFER_FAILED: (ErrorCategory.EXTERNAL_SERVICE, 502),
}


class LedgerRuleError(SeedchainError):
    """A ledger operation returned a failure result."""
    def __init__(
        self, kind: LedgerErrorKind, message: str, context: ErrorContext | None = None,
    ):
        category, http_status = _RULE_ERROR_MAPPING[kind]
        super().__init__(
            message, kind.value, category,
            ErrorSeverity.WARNING, context, http_status,
        )
        self.kind = kind

    @classmethod
    def from_result(
        cls, result: dict, context: ErrorContext | None = None,
    ) -> "LedgerRuleError":
        """Build from a {"status": "error", "error_code": ...} ledger result."""
        return cls(LedgerErrorKind(result["error_code"]), result["message"], context)


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(SeedchainError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class TransferServiceError(SeedchainError):
    """Asset transfer service call failed (status, timeout, or connection)."""
    def __init__(
        self, message: str, failure_type: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Asset transfer error ({failure_type}): {message}",
            "TRANSFER_SERVICE_ERROR", ErrorCategory.EXTERNAL_SERVICE,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.failure_type = failure_type


class LedgerUnavailableError(SeedchainError):
    """Ledger service accessed before startup wired it."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Ledger service is not initialized",
            "LEDGER_UNAVAILABLE", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 503,
        )
