"""
Request-scoped tenant context.

The current tenant lives in a ContextVar, so each thread and each asyncio
task sees the tenant its own request set.

Usage:
    with TenantContext.scope(TenantInfo(id="acme")):
        filters = TenantContext.create_filter()
        TenantContext.assert_ownership(record)
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import TenantMismatchError

DEFAULT_TENANT_COLUMN = "tenant_id"


class TenantInfo(BaseModel):
    id: str
    name: str | None = None
    plan: str | None = None
    settings: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


_current_tenant: ContextVar[TenantInfo | None] = ContextVar("current_tenant", default=None)


class TenantContext:
    """Accessors for the current request's tenant."""

    @staticmethod
    def set_tenant(tenant: TenantInfo | None) -> None:
        _current_tenant.set(tenant)

    @staticmethod
    def get_tenant() -> TenantInfo | None:
        return _current_tenant.get()

    @staticmethod
    def tenant_id() -> str | None:
        tenant = _current_tenant.get()
        return tenant.id if tenant else None

    @staticmethod
    def require_tenant() -> TenantInfo:
        """
        Get the current tenant.

        Raises:
            LookupError: If no tenant is set
        """
        tenant = _current_tenant.get()
        if tenant is None:
            raise LookupError("Tenant context not set")
        return tenant

    @staticmethod
    def clear() -> None:
        _current_tenant.set(None)

    @staticmethod
    def create_filter(column: str = DEFAULT_TENANT_COLUMN) -> dict[str, str]:
        """
        Query filter restricting rows to the current tenant.

        Raises:
            LookupError: If no tenant is set
        """
        return {column: TenantContext.require_tenant().id}

    @staticmethod
    def validate_ownership(resource: Mapping[str, Any], field: str = DEFAULT_TENANT_COLUMN) -> bool:
        """Check whether ``resource`` belongs to the current tenant; False when none is set."""
        tenant_id = TenantContext.tenant_id()
        if not tenant_id:
            return False
        return resource.get(field) == tenant_id

    @staticmethod
    def assert_ownership(resource: Mapping[str, Any], field: str = DEFAULT_TENANT_COLUMN) -> None:
        """
        Raises:
            TenantMismatchError: If ``resource`` does not belong to the current tenant
        """
        if not TenantContext.validate_ownership(resource, field):
            raise TenantMismatchError()

    @staticmethod
    @contextmanager
    def scope(tenant: TenantInfo) -> Iterator[TenantInfo]:
        """Set ``tenant`` for the duration of the block, restoring the previous one after."""
        token = _current_tenant.set(tenant)
        try:
            yield tenant
        finally:
            _current_tenant.reset(token)
