"""
Policy engine: role-based permissions plus attribute policies.

Decision order for a request:
1. ``admin`` and ``super_admin`` roles are always allowed
2. RBAC gate: the action must be granted by one of the user's roles,
   directly or through inheritance (``*`` grants everything)
3. Attribute policies for the resource/action, highest priority first:
   - ``deny_if`` true or ``require`` false denies immediately
   - ``allow_if`` false skips the policy
   - a passing allow policy contributes its row filter
   - a passing deny policy denies immediately
4. Allowed if any policy allowed, or if no policy applied at all

The engine is built once (``from_spec`` or the constructor plus
``add_policy``/``add_role``) and then only read, so one instance can serve
concurrent requests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fdspec.core.ir import ConditionKind, PoliciesSpec, PolicyEffect, PolicySpec, RoleSpec

from .conditions import ConditionContext, evaluate_condition
from .errors import ForbiddenError

logger = logging.getLogger(__name__)

ADMIN_ROLES = frozenset({"admin", "super_admin"})
WILDCARD = "*"


@dataclass
class PolicyContext:
    """
    Per-request input to the engine.

    Attributes:
        user_id: Current user
        tenant_id: Current tenant
        roles: Role names held by the user
        resource: Entity name being accessed
        action: Action name being run
        resource_data: Record being accessed, visible as ``resource.*``
        request_data: Request payload, visible as ``request.*``
    """

    user_id: str | None = None
    tenant_id: str | None = None
    roles: list[str] = field(default_factory=list)
    resource: str | None = None
    action: str | None = None
    resource_data: Mapping[str, Any] = field(default_factory=dict)
    request_data: Mapping[str, Any] = field(default_factory=dict)

    def condition_context(self) -> ConditionContext:
        return ConditionContext(
            user={"id": self.user_id, "tenant_id": self.tenant_id, "roles": list(self.roles)},
            resource=self.resource_data,
            request=self.request_data,
        )


class PolicyResult(BaseModel):
    """
    A policy decision.

    ``filters`` holds the row filter expressions of every allow policy that
    passed; the data layer ANDs them into its query.
    """

    allowed: bool
    reason: str | None = None
    filters: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def __bool__(self) -> bool:
        return self.allowed


PolicyObserver = Callable[[PolicyContext, PolicyResult], None]


def _policy_name(policy: PolicySpec, fallback: str = "") -> str:
    return policy.name or fallback


class PolicyEngine:
    """Evaluates requests against roles and attribute policies."""

    def __init__(
        self,
        policies: Iterable[PolicySpec] | None = None,
        roles: Mapping[str, RoleSpec] | None = None,
        observer: PolicyObserver | None = None,
    ):
        """
        Initialize the engine.

        Args:
            policies: Attribute policies; each should carry a ``name``
            roles: Role name -> RoleSpec
            observer: Called with every context and its decision
        """
        # sorted() is stable, so equal priorities keep registration order
        self._policies: list[PolicySpec] = sorted(policies or [], key=lambda p: -p.priority)
        self._roles: dict[str, RoleSpec] = dict(roles or {})
        self._observer = observer

    @classmethod
    def from_spec(
        cls,
        spec: PoliciesSpec,
        observer: PolicyObserver | None = None,
    ) -> PolicyEngine:
        """Build an engine from a policies document; map keys become policy names."""
        policies = [
            policy if policy.name else policy.model_copy(update={"name": name})
            for name, policy in spec.policies.items()
        ]
        return cls(policies=policies, roles=spec.roles, observer=observer)

    @property
    def policies(self) -> list[PolicySpec]:
        return list(self._policies)

    @property
    def roles(self) -> dict[str, RoleSpec]:
        return dict(self._roles)

    def add_policy(self, policy: PolicySpec) -> None:
        self._policies.append(policy)
        self._policies.sort(key=lambda p: -p.priority)

    def add_role(self, name: str, role: RoleSpec) -> None:
        self._roles[name] = role

    def get_effective_permissions(self, role_names: Iterable[str]) -> set[str]:
        """
        Union of the permissions and actions granted by ``role_names`` and
        every role they inherit from. Unknown roles grant nothing; cycles are
        visited once.
        """
        permissions: set[str] = set()
        visited: set[str] = set()
        pending = list(role_names)

        while pending:
            role_name = pending.pop()
            if role_name in visited:
                continue
            visited.add(role_name)

            role = self._roles.get(role_name)
            if role is None:
                continue
            permissions.update(role.permissions)
            permissions.update(role.can)
            pending.extend(role.inherits)

        return permissions

    def _has_role_permission(self, context: PolicyContext) -> bool:
        permissions = self.get_effective_permissions(context.roles)
        return context.action in permissions or WILDCARD in permissions

    def _decide(self, context: PolicyContext) -> PolicyResult:
        if ADMIN_ROLES.intersection(context.roles):
            return PolicyResult(allowed=True, reason="Admin role")

        if context.action and not self._has_role_permission(context):
            return PolicyResult(
                allowed=False,
                reason=f"No role permission for action: {context.action}",
            )

        applicable = [p for p in self._policies if p.applies_to(context.resource, context.action)]
        if not applicable:
            # Nothing restricts this resource/action
            return PolicyResult(allowed=True)

        condition_context = context.condition_context()
        filters: list[str] = []
        allowed = False

        for policy in applicable:
            passed = True
            for condition in policy.conditions:
                result = evaluate_condition(condition.expression, condition_context)
                if condition.type == ConditionKind.DENY_IF and result:
                    return PolicyResult(
                        allowed=False,
                        reason=condition.message or _policy_name(policy),
                    )
                if condition.type == ConditionKind.REQUIRE and not result:
                    return PolicyResult(
                        allowed=False,
                        reason=condition.message or f"Requirement not met: {_policy_name(policy)}",
                    )
                if condition.type == ConditionKind.ALLOW_IF and not result:
                    passed = False

            if not passed:
                continue
            if policy.effect == PolicyEffect.DENY:
                return PolicyResult(allowed=False, reason=_policy_name(policy))
            allowed = True
            if policy.filter:
                filters.append(policy.filter)

        if allowed:
            return PolicyResult(allowed=True, filters=filters)
        return PolicyResult(allowed=False, reason="No matching allow policy")

    def evaluate(self, context: PolicyContext) -> PolicyResult:
        """Decide whether the request described by ``context`` is allowed."""
        result = self._decide(context)
        logger.debug(
            "Policy decision for %s on %s: %s (%s)",
            context.action,
            context.resource,
            "allow" if result.allowed else "deny",
            result.reason,
        )
        if self._observer is not None:
            self._observer(context, result)
        return result

    def enforce(self, context: PolicyContext) -> PolicyResult:
        """
        Evaluate and raise on denial.

        Raises:
            ForbiddenError: If the request is denied
        """
        result = self.evaluate(context)
        if not result.allowed:
            raise ForbiddenError(result.reason or "Access denied")
        return result
