"""
Metrics types for fdspec IR.

Events, KPIs, dashboards and alerts. The linker does not resolve these;
they are carried into the bundle for the metrics generator.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .base import SPEC_MODEL_CONFIG, SpecModel


class EventSpec(SpecModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None  # user, system, business, error
    triggered_by: list[str] = Field(default_factory=list)
    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)
    retention_days: int | None = None

    model_config = SPEC_MODEL_CONFIG


class KpiSpec(SpecModel):
    name: str | None = None
    description: str | None = None
    type: str  # count, sum, average, ratio, percentile, unique
    source: dict[str, str] | None = None
    filter: str | None = None
    group_by: list[str] = Field(default_factory=list)
    time_window: str | None = None
    format: str | None = None
    target: dict[str, Any] | None = None

    model_config = SPEC_MODEL_CONFIG


class DashboardSpec(SpecModel):
    name: str | None = None
    description: str | None = None
    access: dict[str, list[str]] | None = None
    widgets: list[dict[str, Any]] = Field(default_factory=list)
    refresh_interval: int | None = None

    model_config = SPEC_MODEL_CONFIG


class AlertSpec(SpecModel):
    name: str | None = None
    kpi: str
    condition: dict[str, Any] = Field(default_factory=dict)
    severity: str | None = None
    channels: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class MetricsSpec(SpecModel):
    events: dict[str, EventSpec] = Field(default_factory=dict)
    kpis: dict[str, KpiSpec] = Field(default_factory=dict)
    dashboards: dict[str, DashboardSpec] = Field(default_factory=dict)
    alerts: dict[str, AlertSpec] = Field(default_factory=dict)

    model_config = SPEC_MODEL_CONFIG
