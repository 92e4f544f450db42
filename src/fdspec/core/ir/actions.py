"""
Action types for fdspec IR.

Actions are the commands and queries a product exposes. The spec carries
their auth, rate limit, AI safety and audit configuration; generators and
the policy engine read it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from .base import SPEC_MODEL_CONFIG, SpecModel


class ActionKind(StrEnum):
    """Command (writes) or query (reads)."""

    COMMAND = "command"
    QUERY = "query"


class RateLimitScope(StrEnum):
    """What a rate limit counter is keyed by."""

    USER = "user"
    TENANT = "tenant"
    IP = "ip"
    GLOBAL = "global"


class AuthRequirements(SpecModel):
    required: bool | None = None
    roles: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class ActionRateLimit(SpecModel):
    requests_per_minute: int = 60
    burst: int = 0
    scope: RateLimitScope = RateLimitScope.USER

    model_config = SPEC_MODEL_CONFIG


class ActionAiRules(SpecModel):
    allowed: bool | None = None
    suggest_only: bool | None = None
    max_per_session: int | None = None
    require_confirmation: bool | None = None

    model_config = SPEC_MODEL_CONFIG


class AuditConfig(SpecModel):
    """Audit settings; ``sensitive_fields`` are redacted from logged input/output."""

    enabled: bool | None = None
    include_input: bool = False
    include_output: bool = False
    sensitive_fields: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class ActionMetrics(SpecModel):
    track: bool | None = None
    custom_dimensions: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class ActionHooks(SpecModel):
    before: list[str] = Field(default_factory=list)
    after: list[str] = Field(default_factory=list)
    on_error: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class ActionSpec(SpecModel):
    """
    Specification for a command or query.

    Attributes:
        type: command or query
        entity: Owning entity, if any
        idempotent: Commands should be idempotent in production
        idempotency_key: Expression yielding the idempotency key
        auth: Required roles and permissions
        rate_limit: Per-action rate limit
        triggers_job: Job enqueued after the action succeeds
    """

    type: ActionKind
    description: str | None = None
    entity: str | None = None
    async_: bool | None = Field(default=None, alias="async")
    idempotent: bool = False
    idempotency_key: str | None = None
    input: dict[str, Any] | None = None
    output: dict[str, Any] | None = None
    auth: AuthRequirements | None = None
    rate_limit: ActionRateLimit | None = None
    ai_rules: ActionAiRules | None = None
    audit: AuditConfig | None = None
    metrics: ActionMetrics | None = None
    hooks: ActionHooks | None = None
    triggers_job: str | None = None

    model_config = SPEC_MODEL_CONFIG

    @property
    def is_command(self) -> bool:
        return self.type == ActionKind.COMMAND

    @property
    def required_roles(self) -> list[str]:
        return list(self.auth.roles) if self.auth else []
