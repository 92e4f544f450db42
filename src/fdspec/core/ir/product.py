"""
Product-level types for fdspec IR.

The product document (``product.yml``) names the product, its version,
tenancy mode and the active profile. Profile blocks relax or tighten the
production rules applied by the validator.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from .base import SPEC_MODEL_CONFIG, SpecModel


class TenancyMode(StrEnum):
    """Single- or multi-tenant deployment."""

    SINGLE = "single"
    MULTI = "multi"


class TenantIsolation(StrEnum):
    """How tenant data is separated."""

    ROW = "row"
    SCHEMA = "schema"
    DATABASE = "database"


class Profile(StrEnum):
    """
    Build profile.

    - DEV: local development, production rules are skipped
    - PROD: production, idempotency/rate limit/tenancy rules are enforced
    """

    DEV = "dev"
    PROD = "prod"


class AuditLevel(StrEnum):
    NONE = "none"
    COMMANDS = "commands"
    ALL = "all"


class TenancyConfig(SpecModel):
    """Tenancy settings for the product."""

    mode: TenancyMode = TenancyMode.SINGLE
    isolation: TenantIsolation = TenantIsolation.ROW
    tenant_id_column: str | None = None

    model_config = SPEC_MODEL_CONFIG


class ProfileConfig(SpecModel):
    """
    Per-profile rule switches.

    A rule is relaxed only when its flag is explicitly ``False``; ``None``
    (absent) keeps the rule active.
    """

    require_idempotency: bool | None = None
    require_rate_limits: bool | None = None
    strict_tenancy: bool | None = None
    audit_level: AuditLevel | None = None

    model_config = SPEC_MODEL_CONFIG


class AuthConfig(SpecModel):
    provider: str | None = None  # demo, clerk, auth0, supabase, custom
    session_duration: str | None = None
    require_mfa: bool | None = None

    model_config = SPEC_MODEL_CONFIG


class PaginationDefaults(SpecModel):
    page_size: int | None = None
    max_page_size: int | None = None

    model_config = SPEC_MODEL_CONFIG


class RateLimitDefaults(SpecModel):
    default_rpm: int | None = None
    default_burst: int | None = None

    model_config = SPEC_MODEL_CONFIG


class AuditDefaults(SpecModel):
    enabled: bool | None = None
    retention_days: int | None = None

    model_config = SPEC_MODEL_CONFIG


class ProductDefaults(SpecModel):
    """Defaults applied by generators when a document leaves them unset."""

    pagination: PaginationDefaults | None = None
    rate_limits: RateLimitDefaults | None = None
    audit: AuditDefaults | None = None

    model_config = SPEC_MODEL_CONFIG


class FeatureFlags(SpecModel):
    ai_suggestions: bool | None = None
    file_uploads: bool | None = None
    background_jobs: bool | None = None
    real_time: bool | None = None

    model_config = SPEC_MODEL_CONFIG


class ProductSpec(SpecModel):
    """
    Top-level product definition.

    Attributes:
        name: Product identifier
        version: Product version, copied into the bundle metadata
        tenancy: Tenancy mode and isolation
        profile: Active profile (dev or prod)
        profiles: Optional per-profile rule switches
    """

    name: str
    version: str = "0.1.0"
    description: str | None = None
    tenancy: TenancyConfig = Field(default_factory=TenancyConfig)
    profile: Profile = Profile.DEV
    profiles: dict[str, ProfileConfig] = Field(default_factory=dict)
    auth: AuthConfig | None = None
    defaults: ProductDefaults | None = None
    features: FeatureFlags | None = None

    model_config = SPEC_MODEL_CONFIG

    @property
    def is_multi_tenant(self) -> bool:
        return self.tenancy.mode == TenancyMode.MULTI

    def profile_config(self, profile: str | None = None) -> ProfileConfig | None:
        """Get the rule switches for a profile (the active one by default)."""
        return self.profiles.get(str(profile or self.profile))
