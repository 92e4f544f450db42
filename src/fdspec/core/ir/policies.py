"""
Authorization types for fdspec IR.

The policies document (``policies.yml``) declares:
- roles with inheritance and the actions each role may run
- attribute policies: conditions over user/resource/request with an
  allow or deny effect and a priority
- named rate limits
- AI safety rules
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from .actions import RateLimitScope
from .base import SPEC_MODEL_CONFIG, SpecModel


class RoleSpec(SpecModel):
    """
    Role definition.

    Attributes:
        name: Role identifier (optional; the map key is authoritative)
        inherits: Parent roles; their permissions are inherited
        permissions: Permission names granted directly
        can: Action names the role may run
    """

    name: str | None = None
    description: str | None = None
    inherits: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)
    can: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class PermissionSpec(SpecModel):
    name: str | None = None
    description: str | None = None
    resource: str
    actions: list[str] = Field(default_factory=list)  # create, read, update, delete, list, *

    model_config = SPEC_MODEL_CONFIG


class ConditionKind(StrEnum):
    """
    How a condition affects its policy.

    - ALLOW_IF: false disqualifies the policy
    - DENY_IF: true denies the request outright
    - REQUIRE: false denies the request outright
    """

    ALLOW_IF = "allow_if"
    DENY_IF = "deny_if"
    REQUIRE = "require"


class ConditionSpec(SpecModel):
    type: ConditionKind = ConditionKind.ALLOW_IF
    expression: str
    message: str | None = None

    model_config = SPEC_MODEL_CONFIG


class PolicyEffect(StrEnum):
    ALLOW = "allow"
    DENY = "deny"


class PolicySpec(SpecModel):
    """
    Attribute-based policy.

    ``resource`` and ``action`` may be ``*``. ``filter`` is a row filter
    expression handed to the data layer when the policy allows.
    Higher ``priority`` is evaluated first.
    """

    name: str | None = None
    description: str | None = None
    resource: str
    action: str | None = None
    effect: PolicyEffect = PolicyEffect.ALLOW
    conditions: list[ConditionSpec] = Field(default_factory=list)
    filter: str | None = None
    priority: int = 0

    model_config = SPEC_MODEL_CONFIG

    def applies_to(self, resource: str | None, action: str | None) -> bool:
        """Check whether the policy scope covers a resource/action pair."""
        if self.resource != "*" and self.resource != resource:
            return False
        return self.action is None or self.action == "*" or self.action == action


class RateLimitSpec(SpecModel):
    requests_per_minute: int
    burst: int = 0
    scope: RateLimitScope = RateLimitScope.USER
    key: str | None = None
    applies_to: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class AiGlobalRules(SpecModel):
    enabled: bool | None = None
    max_actions_per_session: int | None = None
    require_human_review: bool | None = None
    blocked_actions: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class AiEntityRules(SpecModel):
    readable: bool | None = None
    writable: bool | None = None
    suggest_only: bool | None = None
    require_confirmation: bool | None = None

    model_config = SPEC_MODEL_CONFIG


class AiActionRules(SpecModel):
    allowed: bool | None = None
    suggest_only: bool | None = None
    max_per_session: int | None = None
    require_confirmation: bool | None = None

    model_config = SPEC_MODEL_CONFIG


class AiRules(SpecModel):
    """AI safety rules: a global block list plus per-entity and per-action rules."""

    global_: AiGlobalRules | None = Field(default=None, alias="global")
    entities: dict[str, AiEntityRules] = Field(default_factory=dict)
    actions: dict[str, AiActionRules] = Field(default_factory=dict)

    model_config = SPEC_MODEL_CONFIG


class PoliciesSpec(SpecModel):
    roles: dict[str, RoleSpec] = Field(default_factory=dict)
    permissions: dict[str, PermissionSpec] = Field(default_factory=dict)
    policies: dict[str, PolicySpec] = Field(default_factory=dict)
    rate_limits: dict[str, RateLimitSpec] = Field(default_factory=dict)
    ai_rules: AiRules | None = None

    model_config = SPEC_MODEL_CONFIG
