"""
Errors raised by request-time code built on the policy engine, rate limiter
and tenant context.

Each error carries a machine-readable ``code`` and the HTTP ``status`` a
calling layer should answer with; ``to_dict()`` is the response body.
"""

from __future__ import annotations

from typing import Any


class ActionError(Exception):
    """Base exception for errors raised while running an action."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int = 400,
        details: Any = None,
    ):
        self.code = code
        self.message = message
        self.status = status
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, status={self.status})"


class ValidationFailedError(ActionError):
    """Input did not validate; ``fields`` maps field name -> messages."""

    def __init__(self, message: str, fields: dict[str, list[str]], details: Any = None):
        super().__init__("VALIDATION_ERROR", message, status=400, details=details)
        self.fields = fields

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["error"]["fields"] = self.fields
        return body


class NotFoundError(ActionError):
    def __init__(self, resource: str, id: str | None = None):
        message = f"{resource} with id '{id}' not found" if id else f"{resource} not found"
        super().__init__("NOT_FOUND", message, status=404)
        self.resource = resource
        self.id = id


class ForbiddenError(ActionError):
    def __init__(self, message: str = "Access denied"):
        super().__init__("FORBIDDEN", message, status=403)


class UnauthorizedError(ActionError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__("UNAUTHORIZED", message, status=401)


class ConflictError(ActionError):
    def __init__(self, message: str):
        super().__init__("CONFLICT", message, status=409)


class RateLimitError(ActionError):
    """Quota exhausted; ``retry_after`` is in seconds, for a Retry-After header."""

    def __init__(self, retry_after: int):
        super().__init__("RATE_LIMIT_EXCEEDED", "Too many requests", status=429)
        self.retry_after = retry_after


class InvariantViolationError(ActionError):
    def __init__(self, invariant: str, message: str):
        super().__init__(
            "INVARIANT_VIOLATION",
            message,
            status=400,
            details={"invariant": invariant},
        )
        self.invariant = invariant


class TenantMismatchError(ActionError):
    """A resource was accessed from outside the tenant that owns it."""

    def __init__(self, message: str = "Resource does not belong to current tenant"):
        super().__init__("TENANT_MISMATCH", message, status=403)
