"""
fdspec Intermediate Representation (IR) types.

One submodule per spec document. All types are re-exported here.
"""

from .actions import (
    ActionAiRules,
    ActionHooks,
    ActionKind,
    ActionMetrics,
    ActionRateLimit,
    ActionSpec,
    AuditConfig,
    AuthRequirements,
    RateLimitScope,
)
from .entities import (
    ConstraintKind,
    ConstraintSpec,
    EntitySpec,
    FieldSpec,
    FieldTypeKind,
    FieldValidation,
    GeneratedKind,
    IndexSpec,
    OnDelete,
    ReferenceSpec,
    RelationKind,
    RelationSpec,
)
from .flows import (
    FlowAuth,
    FlowSpec,
    GuardSpec,
    OnEnterSpec,
    StepSpec,
    TransitionSpec,
)
from .jobs import (
    DEFAULT_QUEUE,
    JobHooks,
    JobRateLimit,
    JobSpec,
    JobsSpec,
    QueueSpec,
    RetryPolicy,
)
from .metrics import (
    AlertSpec,
    DashboardSpec,
    EventSpec,
    KpiSpec,
    MetricsSpec,
)
from .policies import (
    AiActionRules,
    AiEntityRules,
    AiGlobalRules,
    AiRules,
    ConditionKind,
    ConditionSpec,
    PermissionSpec,
    PoliciesSpec,
    PolicyEffect,
    PolicySpec,
    RateLimitSpec,
    RoleSpec,
)
from .product import (
    AuditLevel,
    AuthConfig,
    FeatureFlags,
    ProductDefaults,
    ProductSpec,
    Profile,
    ProfileConfig,
    TenancyConfig,
    TenancyMode,
    TenantIsolation,
)
from .spec import BundleMeta, Spec, SpecBundle
from .ui import (
    LayoutSpec,
    NavItemSpec,
    ScreenActionSpec,
    ScreenLayoutType,
    ScreenSpec,
    ThemeSpec,
    UiSpec,
)

__all__ = [
    # Actions
    "ActionAiRules",
    "ActionHooks",
    "ActionKind",
    "ActionMetrics",
    "ActionRateLimit",
    "ActionSpec",
    "AuditConfig",
    "AuthRequirements",
    "RateLimitScope",
    # Entities
    "ConstraintKind",
    "ConstraintSpec",
    "EntitySpec",
    "FieldSpec",
    "FieldTypeKind",
    "FieldValidation",
    "GeneratedKind",
    "IndexSpec",
    "OnDelete",
    "ReferenceSpec",
    "RelationKind",
    "RelationSpec",
    # Flows
    "FlowAuth",
    "FlowSpec",
    "GuardSpec",
    "OnEnterSpec",
    "StepSpec",
    "TransitionSpec",
    # Jobs
    "DEFAULT_QUEUE",
    "JobHooks",
    "JobRateLimit",
    "JobSpec",
    "JobsSpec",
    "QueueSpec",
    "RetryPolicy",
    # Metrics
    "AlertSpec",
    "DashboardSpec",
    "EventSpec",
    "KpiSpec",
    "MetricsSpec",
    # Policies
    "AiActionRules",
    "AiEntityRules",
    "AiGlobalRules",
    "AiRules",
    "ConditionKind",
    "ConditionSpec",
    "PermissionSpec",
    "PoliciesSpec",
    "PolicyEffect",
    "PolicySpec",
    "RateLimitSpec",
    "RoleSpec",
    # Product
    "AuditLevel",
    "AuthConfig",
    "FeatureFlags",
    "ProductDefaults",
    "ProductSpec",
    "Profile",
    "ProfileConfig",
    "TenancyConfig",
    "TenancyMode",
    "TenantIsolation",
    # Spec
    "BundleMeta",
    "Spec",
    "SpecBundle",
    # UI
    "LayoutSpec",
    "NavItemSpec",
    "ScreenActionSpec",
    "ScreenLayoutType",
    "ScreenSpec",
    "ThemeSpec",
    "UiSpec",
]
