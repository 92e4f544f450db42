"""Tests for runtime error types and their response bodies."""

import pytest

from fdspec.runtime.errors import (
    ActionError,
    ConflictError,
    ForbiddenError,
    InvariantViolationError,
    NotFoundError,
    RateLimitError,
    TenantMismatchError,
    UnauthorizedError,
    ValidationFailedError,
)


@pytest.mark.parametrize(
    ("error", "code", "status"),
    [
        (ForbiddenError(), "FORBIDDEN", 403),
        (UnauthorizedError(), "UNAUTHORIZED", 401),
        (ConflictError("Order already paid"), "CONFLICT", 409),
        (NotFoundError("Order"), "NOT_FOUND", 404),
        (RateLimitError(30), "RATE_LIMIT_EXCEEDED", 429),
        (TenantMismatchError(), "TENANT_MISMATCH", 403),
        (InvariantViolationError("balanced", "Debits must equal credits"), "INVARIANT_VIOLATION", 400),
    ],
)
def test_codes_and_statuses(error, code, status):
    assert isinstance(error, ActionError)
    assert error.code == code
    assert error.status == status


def test_body_without_details():
    assert ForbiddenError().to_dict() == {"error": {"code": "FORBIDDEN", "message": "Access denied"}}


def test_not_found_message():
    assert NotFoundError("Order", "42").message == "Order with id '42' not found"
    assert str(NotFoundError("Order")) == "Order not found"


def test_invariant_details():
    body = InvariantViolationError("balanced", "Debits must equal credits").to_dict()
    assert body["error"]["details"] == {"invariant": "balanced"}


def test_validation_fields():
    error = ValidationFailedError("Invalid input", {"amount": ["must be positive"]})
    body = error.to_dict()

    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["fields"] == {"amount": ["must be positive"]}
    assert "details" not in body["error"]


def test_rate_limit_retry_after():
    error = RateLimitError(12)
    assert error.retry_after == 12
    assert error.message == "Too many requests"


def test_repr():
    assert repr(ConflictError("x")) == "ConflictError(code='CONFLICT', status=409)"
