"""
Flow types for fdspec IR.

A flow is a small state machine over UI screens: each step shows a screen
and names the transitions that lead to other steps of the same flow.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .base import SPEC_MODEL_CONFIG, SpecModel


class GuardSpec(SpecModel):
    condition: str
    redirect: str | None = None
    message: str | None = None

    model_config = SPEC_MODEL_CONFIG


class TransitionSpec(SpecModel):
    """Transition to ``target`` (a step of the same flow), optionally running ``action``."""

    target: str
    action: str | None = None
    condition: str | None = None
    label: str | None = None

    model_config = SPEC_MODEL_CONFIG


class OnEnterSpec(SpecModel):
    action: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)

    model_config = SPEC_MODEL_CONFIG


class StepSpec(SpecModel):
    screen: str
    title: str | None = None
    transitions: dict[str, TransitionSpec] = Field(default_factory=dict)
    on_enter: OnEnterSpec | None = None
    guards: list[GuardSpec] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class FlowAuth(SpecModel):
    required: bool | None = None
    roles: list[str] = Field(default_factory=list)

    model_config = SPEC_MODEL_CONFIG


class FlowSpec(SpecModel):
    """
    Specification for a user flow.

    Attributes:
        name: Flow identifier (optional; the map key is authoritative)
        entry_point: Whether the flow is reachable from navigation
        steps: Step name -> StepSpec
        initial_step: First step; must be a key of ``steps``
    """

    name: str | None = None
    description: str | None = None
    entry_point: bool = False
    icon: str | None = None
    auth: FlowAuth | None = None
    steps: dict[str, StepSpec] = Field(default_factory=dict)
    initial_step: str | None = None

    model_config = SPEC_MODEL_CONFIG

    @property
    def screens(self) -> set[str]:
        """Names of every screen shown by this flow."""
        return {step.screen for step in self.steps.values()}
