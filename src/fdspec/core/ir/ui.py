"""
UI types for fdspec IR.

Only the parts of screens that other documents point at are modelled in
detail (entity, load/submit actions). Section, table, form and detail
configuration is kept as plain data for the UI generator.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from .base import SPEC_MODEL_CONFIG, SpecModel


class ScreenLayoutType(StrEnum):
    FORM = "form"
    LIST = "list"
    DETAIL = "detail"
    DASHBOARD = "dashboard"
    WIZARD = "wizard"
    CUSTOM = "custom"


class ThemeSpec(SpecModel):
    primary_color: str | None = None
    font_family: str | None = None
    border_radius: str | None = None
    spacing_unit: float | None = None

    model_config = SPEC_MODEL_CONFIG


class NavItemSpec(SpecModel):
    label: str
    flow: str
    icon: str | None = None
    badge: str | None = None

    model_config = SPEC_MODEL_CONFIG


class LayoutSpec(SpecModel):
    type: str = "dashboard"  # dashboard, auth, blank, sidebar, full
    sidebar: dict[str, list[NavItemSpec]] | None = None
    header: dict[str, Any] | None = None

    model_config = SPEC_MODEL_CONFIG


class ScreenActionSpec(SpecModel):
    label: str
    action: str | None = None
    flow: str | None = None
    icon: str | None = None
    variant: str | None = None
    position: str | None = None

    model_config = SPEC_MODEL_CONFIG


class ScreenSpec(SpecModel):
    """
    Specification for a UI screen.

    Attributes:
        entity: Entity the screen displays or edits
        load_action: Query run to load the screen's data
        submit_action: Command run when the screen's form is submitted
    """

    title: str | None = None
    description: str | None = None
    layout_type: ScreenLayoutType = ScreenLayoutType.CUSTOM
    layout: str | None = None
    entity: str | None = None
    load_action: str | None = None
    submit_action: str | None = None
    sections: list[dict[str, Any]] = Field(default_factory=list)
    table: dict[str, Any] | None = None
    form: dict[str, Any] | None = None
    detail: dict[str, Any] | None = None
    actions: list[ScreenActionSpec] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class UiSpec(SpecModel):
    theme: ThemeSpec | None = None
    layouts: dict[str, LayoutSpec] = Field(default_factory=dict)
    screens: dict[str, ScreenSpec] = Field(default_factory=dict)
    components: dict[str, dict[str, Any]] = Field(default_factory=dict)

    model_config = SPEC_MODEL_CONFIG
