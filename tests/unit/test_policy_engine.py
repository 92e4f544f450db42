"""
Tests for the policy engine.

Covers:
- Admin bypass and the RBAC gate
- Role inheritance, including cycles
- Condition kinds (allow_if, deny_if, require) and policy effects
- Priority ordering and deny precedence
- Default-permit when no policy applies
"""

import pytest

from fdspec.core import ir
from fdspec.runtime.errors import ForbiddenError
from fdspec.runtime.policy_engine import PolicyContext, PolicyEngine, PolicyResult


def policy(name: str, resource: str = "Invoice", **kwargs) -> ir.PolicySpec:
    return ir.PolicySpec(name=name, resource=resource, **kwargs)


def cond(expression: str, type: str = "allow_if", message: str | None = None) -> ir.ConditionSpec:
    return ir.ConditionSpec(type=type, expression=expression, message=message)


@pytest.fixture
def roles() -> dict[str, ir.RoleSpec]:
    return {
        "viewer": ir.RoleSpec(can=["list_invoices", "get_invoice"]),
        "accountant": ir.RoleSpec(inherits=["viewer"], can=["post_invoice"]),
        "auditor": ir.RoleSpec(permissions=["invoices.read"]),
        "operator": ir.RoleSpec(permissions=["*"]),
    }


def ctx(**kwargs) -> PolicyContext:
    kwargs.setdefault("user_id", "u1")
    kwargs.setdefault("tenant_id", "t1")
    kwargs.setdefault("resource", "Invoice")
    return PolicyContext(**kwargs)


# =============================================================================
# Admin and RBAC
# =============================================================================


class TestRbac:
    @pytest.mark.parametrize("role", ["admin", "super_admin"])
    def test_admin_bypass(self, role):
        engine = PolicyEngine(
            policies=[policy("deny_all", resource="*", effect="deny")],
        )
        result = engine.evaluate(PolicyContext(roles=[role], action="delete_everything"))

        assert result.allowed
        assert result.reason == "Admin role"

    def test_action_not_granted(self, roles):
        engine = PolicyEngine(roles=roles)
        result = engine.evaluate(ctx(roles=["viewer"], action="post_invoice"))

        assert not result.allowed
        assert result.reason == "No role permission for action: post_invoice"

    def test_inherited_action_granted(self, roles):
        engine = PolicyEngine(roles=roles)
        assert engine.evaluate(ctx(roles=["accountant"], action="list_invoices")).allowed

    def test_wildcard_permission(self, roles):
        engine = PolicyEngine(roles=roles)
        assert engine.evaluate(ctx(roles=["operator"], action="anything")).allowed

    def test_no_action_skips_gate(self, roles):
        engine = PolicyEngine(roles=roles)
        assert engine.evaluate(ctx(roles=[])).allowed

    def test_unknown_role_grants_nothing(self, roles):
        engine = PolicyEngine(roles=roles)
        assert not engine.evaluate(ctx(roles=["ghost"], action="list_invoices")).allowed


class TestEffectivePermissions:
    def test_union_of_permissions_and_can(self, roles):
        engine = PolicyEngine(roles=roles)
        assert engine.get_effective_permissions(["accountant", "auditor"]) == {
            "list_invoices",
            "get_invoice",
            "post_invoice",
            "invoices.read",
        }

    def test_inheritance_cycle_terminates(self):
        engine = PolicyEngine(
            roles={
                "a": ir.RoleSpec(inherits=["b"], permissions=["pa"]),
                "b": ir.RoleSpec(inherits=["a"], permissions=["pb"]),
            }
        )
        assert engine.get_effective_permissions(["a"]) == {"pa", "pb"}
        assert engine.get_effective_permissions(["b", "a"]) == {"pa", "pb"}

    def test_self_inheritance(self):
        engine = PolicyEngine(roles={"a": ir.RoleSpec(inherits=["a"], can=["x"])})
        assert engine.get_effective_permissions(["a"]) == {"x"}

    def test_unknown_parent_ignored(self):
        engine = PolicyEngine(roles={"a": ir.RoleSpec(inherits=["missing"], can=["x"])})
        assert engine.get_effective_permissions(["a"]) == {"x"}

    def test_repeated_calls_are_independent(self, roles):
        engine = PolicyEngine(roles=roles)
        first = engine.get_effective_permissions(["viewer"])
        second = engine.get_effective_permissions(["viewer"])
        assert first == second == {"list_invoices", "get_invoice"}


# =============================================================================
# Attribute policies
# =============================================================================


class TestPolicies:
    def test_allow_policy_contributes_filter(self):
        engine = PolicyEngine(
            policies=[
                policy(
                    "tenant_isolation",
                    conditions=[cond("user.tenant_id = resource.tenant_id")],
                    filter="tenant_id = :tenant_id",
                )
            ]
        )
        result = engine.evaluate(ctx(resource_data={"tenant_id": "t1"}))

        assert result.allowed
        assert result.filters == ["tenant_id = :tenant_id"]
        assert result.reason is None

    def test_failed_allow_if_disqualifies(self):
        engine = PolicyEngine(
            policies=[policy("same_tenant", conditions=[cond("user.tenant_id = resource.tenant_id")])]
        )
        result = engine.evaluate(ctx(resource_data={"tenant_id": "other"}))

        assert not result.allowed
        assert result.reason == "No matching allow policy"

    def test_any_passing_allow_suffices(self):
        engine = PolicyEngine(
            policies=[
                policy("owner", conditions=[cond("user.id = resource.created_by")]),
                policy("small", conditions=[cond("resource.amount < 100")], filter="amount < 100"),
            ]
        )
        result = engine.evaluate(ctx(resource_data={"created_by": "u2", "amount": 50}))

        assert result.allowed
        assert result.filters == ["amount < 100"]

    def test_deny_if_uses_message(self):
        engine = PolicyEngine(
            policies=[
                policy(
                    "locked",
                    conditions=[cond("resource.locked", "deny_if", "Invoice is locked")],
                )
            ]
        )
        result = engine.evaluate(ctx(resource_data={"locked": True}))

        assert not result.allowed
        assert result.reason == "Invoice is locked"

    def test_deny_if_falls_back_to_policy_name(self):
        engine = PolicyEngine(policies=[policy("locked", conditions=[cond("resource.locked", "deny_if")])])
        assert engine.evaluate(ctx(resource_data={"locked": True})).reason == "locked"

    def test_require_failure_denies(self):
        engine = PolicyEngine(
            policies=[policy("approval", conditions=[cond("resource.approved_by IS NOT NULL", "require")])]
        )
        result = engine.evaluate(ctx(resource_data={}))

        assert not result.allowed
        assert result.reason == "Requirement not met: approval"

    def test_require_success_allows(self):
        engine = PolicyEngine(
            policies=[policy("approval", conditions=[cond("resource.approved_by IS NOT NULL", "require")])]
        )
        assert engine.evaluate(ctx(resource_data={"approved_by": "u9"})).allowed

    def test_deny_effect(self):
        engine = PolicyEngine(policies=[policy("frozen", effect="deny")])
        result = engine.evaluate(ctx())

        assert not result.allowed
        assert result.reason == "frozen"

    def test_later_deny_if_after_failed_allow_if(self):
        engine = PolicyEngine(
            policies=[
                policy(
                    "mixed",
                    conditions=[
                        cond("resource.amount > 1000"),
                        cond("resource.locked", "deny_if", "locked"),
                    ],
                )
            ]
        )
        result = engine.evaluate(ctx(resource_data={"amount": 5, "locked": True}))
        assert result.reason == "locked"

    def test_request_data_is_visible(self):
        engine = PolicyEngine(
            policies=[policy("limit", conditions=[cond("request.amount <= 500")])]
        )
        assert engine.evaluate(ctx(request_data={"amount": 400})).allowed
        assert not engine.evaluate(ctx(request_data={"amount": 600})).allowed

    def test_roles_are_visible_to_conditions(self):
        engine = PolicyEngine(
            policies=[policy("managers", conditions=[cond("'manager' IN user.roles")])]
        )
        assert engine.evaluate(ctx(roles=["manager"])).allowed
        assert not engine.evaluate(ctx(roles=["clerk"])).allowed

    def test_malformed_condition_fails_closed(self):
        engine = PolicyEngine(policies=[policy("broken", conditions=[cond("not.a.valid>>expr")])])
        assert not engine.evaluate(ctx()).allowed


class TestPolicyScope:
    def test_other_resource_not_applicable(self):
        engine = PolicyEngine(policies=[policy("frozen", resource="Payment", effect="deny")])
        assert engine.evaluate(ctx()).allowed

    def test_wildcard_resource(self):
        engine = PolicyEngine(policies=[policy("frozen", resource="*", effect="deny")])
        assert not engine.evaluate(ctx()).allowed

    def test_action_scoping(self, roles):
        engine = PolicyEngine(
            policies=[policy("no_posting", action="post_invoice", effect="deny")],
            roles=roles,
        )
        assert engine.evaluate(ctx(roles=["accountant"], action="list_invoices")).allowed
        assert not engine.evaluate(ctx(roles=["accountant"], action="post_invoice")).allowed

    def test_wildcard_action(self, roles):
        engine = PolicyEngine(policies=[policy("frozen", action="*", effect="deny")], roles=roles)
        assert not engine.evaluate(ctx(roles=["viewer"], action="get_invoice")).allowed


# =============================================================================
# Ordering
# =============================================================================


class TestOrdering:
    def test_higher_priority_deny_wins(self):
        engine = PolicyEngine(
            policies=[
                policy("allow_all", priority=0),
                policy("block_locked", priority=10, conditions=[cond("resource.locked", "deny_if")]),
            ]
        )
        result = engine.evaluate(ctx(resource_data={"locked": True}))

        assert not result.allowed
        assert result.reason == "block_locked"

    def test_deny_stops_evaluation_and_drops_filters(self):
        engine = PolicyEngine(
            policies=[
                policy("scoped", priority=10, filter="tenant_id = :tenant_id"),
                policy("frozen", priority=5, effect="deny"),
                policy("never_reached", priority=1, filter="x = 1"),
            ]
        )
        result = engine.evaluate(ctx())

        assert not result.allowed
        assert result.filters == []
        assert result.reason == "frozen"

    def test_ties_keep_registration_order(self):
        engine = PolicyEngine(
            policies=[
                policy("first", filter="a"),
                policy("second", filter="b"),
                policy("third", filter="c"),
            ]
        )
        assert engine.evaluate(ctx()).filters == ["a", "b", "c"]

    def test_add_policy_resorts(self):
        engine = PolicyEngine(policies=[policy("low", priority=1, filter="low")])
        engine.add_policy(policy("high", priority=9, filter="high"))
        engine.add_policy(policy("low_too", priority=1, filter="low_too"))

        assert [p.name for p in engine.policies] == ["high", "low", "low_too"]
        assert engine.evaluate(ctx()).filters == ["high", "low", "low_too"]

    def test_add_role(self):
        engine = PolicyEngine()
        engine.add_role("clerk", ir.RoleSpec(can=["file"]))
        assert engine.evaluate(ctx(roles=["clerk"], action="file")).allowed


# =============================================================================
# Default-permit, observer, enforce
# =============================================================================


class TestDefaultPermit:
    def test_unpoliced_resource_is_allowed(self):
        """
        No policy applies to the resource/action, so the request is allowed.

        This is the documented fail-open behaviour for unconfigured
        resources; a deployment that wants default-deny must register a
        catch-all policy.
        """
        engine = PolicyEngine()
        result = engine.evaluate(ctx())

        assert result.allowed
        assert result.filters == []

    def test_catch_all_policy_turns_default_deny(self):
        engine = PolicyEngine(
            policies=[policy("deny_by_default", resource="*", conditions=[cond("false")])]
        )
        assert not engine.evaluate(ctx()).allowed

    def test_rbac_still_applies(self, roles):
        engine = PolicyEngine(roles=roles)
        assert not engine.evaluate(ctx(roles=["viewer"], action="drop_all")).allowed


class TestObserverAndEnforce:
    def test_observer_sees_every_decision(self, roles):
        seen: list[tuple[PolicyContext, PolicyResult]] = []
        engine = PolicyEngine(roles=roles, observer=lambda c, r: seen.append((c, r)))

        allowed_ctx = ctx(roles=["viewer"], action="list_invoices")
        denied_ctx = ctx(roles=["viewer"], action="post_invoice")
        engine.evaluate(allowed_ctx)
        engine.evaluate(denied_ctx)

        assert [(c, r.allowed) for c, r in seen] == [(allowed_ctx, True), (denied_ctx, False)]

    def test_enforce_returns_allowed_result(self, roles):
        engine = PolicyEngine(roles=roles)
        assert engine.enforce(ctx(roles=["viewer"], action="list_invoices")).allowed

    def test_enforce_raises_forbidden(self, roles):
        engine = PolicyEngine(roles=roles)
        with pytest.raises(ForbiddenError) as exc_info:
            engine.enforce(ctx(roles=["viewer"], action="post_invoice"))

        assert exc_info.value.status == 403
        assert exc_info.value.message == "No role permission for action: post_invoice"

    def test_result_serializes(self):
        result = PolicyResult(allowed=True, filters=["a = 1"])
        assert result.model_dump(mode="json") == {"allowed": True, "reason": None, "filters": ["a = 1"]}


class TestFromSpec:
    def test_map_keys_name_policies(self):
        spec = ir.PoliciesSpec.model_validate(
            {
                "roles": {"viewer": {"can": ["list_invoices"]}},
                "policies": {"frozen": {"resource": "Invoice", "effect": "deny"}},
            }
        )
        engine = PolicyEngine.from_spec(spec)
        result = engine.evaluate(ctx(roles=["viewer"], action="list_invoices"))

        assert not result.allowed
        assert result.reason == "frozen"

    def test_explicit_name_kept(self):
        spec = ir.PoliciesSpec.model_validate(
            {"policies": {"key": {"name": "Display Name", "resource": "Invoice", "effect": "deny"}}}
        )
        assert PolicyEngine.from_spec(spec).evaluate(ctx()).reason == "Display Name"
