"""Request-time evaluation: conditions, policies, rate limits and tenant context."""

from .conditions import UNDEFINED, ConditionContext, evaluate_condition, resolve_value
from .errors import (
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
from .policy_engine import PolicyContext, PolicyEngine, PolicyResult
from .rate_limit import RateLimitConfig, RateLimiter, RateLimitResult
from .tenancy import TenantContext, TenantInfo

__all__ = [
    "UNDEFINED",
    "ConditionContext",
    "evaluate_condition",
    "resolve_value",
    "PolicyContext",
    "PolicyEngine",
    "PolicyResult",
    "RateLimitConfig",
    "RateLimiter",
    "RateLimitResult",
    "TenantContext",
    "TenantInfo",
    "ActionError",
    "ValidationFailedError",
    "NotFoundError",
    "ForbiddenError",
    "UnauthorizedError",
    "ConflictError",
    "RateLimitError",
    "InvariantViolationError",
    "TenantMismatchError",
]
