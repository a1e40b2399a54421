"""Error Hierarchy — tests for LedgerRuleError mapping and the REST envelope."""

import pytest

from seedchain.core.domain_types import LedgerErrorKind
from seedchain.core.enforce_ledger import ledger_error
from seedchain.core.errors import (
    DatabaseError, ErrorCategory, ErrorContext, LedgerRuleError, TransferServiceError,
)


@pytest.mark.parametrize(
    "kind,http_status",
    [
        (LedgerErrorKind.NOT_AUTHORIZED, 403),
        (LedgerErrorKind.ALREADY_EXISTS, 409),
        (LedgerErrorKind.INVALID_AMOUNT, 400),
        (LedgerErrorKind.PROJECT_NOT_FOUND, 404),
        (LedgerErrorKind.INVESTMENT_CLOSED, 409),
        (LedgerErrorKind.DUPLICATE_INVESTMENT, 409),
        (LedgerErrorKind.INSUFFICIENT_CAPACITY, 409),
        (LedgerErrorKind.TRANSFER_FAILED, 502),
    ],
)
def test_every_kind_has_http_status(kind, http_status):
    assert LedgerRuleError(kind, "msg").http_status == http_status


def test_from_result_carries_kind_and_message():
    result = ledger_error(LedgerErrorKind.PROJECT_NOT_FOUND, "Project 9 does not exist.")
    exc = LedgerRuleError.from_result(result, ErrorContext(caller="u", project_id=9))
    assert exc.kind == LedgerErrorKind.PROJECT_NOT_FOUND
    assert exc.code == "PROJECT_NOT_FOUND"
    assert exc.category == ErrorCategory.RESOURCE_NOT_FOUND
    body = exc.to_response()["error"]
    assert body["message"] == "ERROR: Project 9 does not exist."
    assert body["context"]["project_id"] == 9


def test_infrastructure_errors_are_critical():
    assert DatabaseError("x", "commit").http_status == 503
    exc = TransferServiceError("down", "timeout")
    assert exc.failure_type == "timeout"
    assert exc.to_response()["error"]["severity"] == "critical"
