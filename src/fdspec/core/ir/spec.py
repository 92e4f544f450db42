"""
Top-level spec types for fdspec IR.

``Spec`` is the unlinked set of documents as loaded. ``SpecBundle`` is the
same content after a successful link, stamped with version, timestamp and
content hash.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field

from .actions import ActionSpec
from .base import SPEC_MODEL_CONFIG, SpecModel
from .entities import EntitySpec
from .flows import FlowSpec
from .jobs import JobsSpec
from .metrics import MetricsSpec
from .policies import PoliciesSpec
from .product import ProductSpec
from .ui import UiSpec


class Spec(SpecModel):
    """
    Complete, unlinked product specification.

    Named documents live in maps keyed by their name; the key is the
    authoritative name even when a document also carries a ``name`` field.

    Attributes:
        product: Product document
        entities: Entity name -> EntitySpec
        actions: Action name -> ActionSpec
        flows: Flow name -> FlowSpec
        policies: Roles, policies, rate limits and AI rules
        ui: Screens, layouts and theme
        metrics: Events, KPIs, dashboards and alerts
        jobs: Background jobs and queues
    """

    product: ProductSpec
    entities: dict[str, EntitySpec] = Field(default_factory=dict)
    actions: dict[str, ActionSpec] = Field(default_factory=dict)
    flows: dict[str, FlowSpec] = Field(default_factory=dict)
    policies: PoliciesSpec = Field(default_factory=PoliciesSpec)
    ui: UiSpec = Field(default_factory=UiSpec)
    metrics: MetricsSpec = Field(default_factory=MetricsSpec)
    jobs: JobsSpec = Field(default_factory=JobsSpec)

    model_config = SPEC_MODEL_CONFIG

    @classmethod
    def from_documents(cls, documents: Mapping[str, Any]) -> Spec:
        """
        Build a Spec from raw parsed documents.

        Documents that are present but empty (``null`` in YAML) are treated
        as absent.

        Raises:
            pydantic.ValidationError: If a document does not fit the model
        """
        return cls.model_validate({k: v for k, v in documents.items() if v is not None})

    def to_document(self) -> dict[str, Any]:
        """Plain JSON-compatible form, using document key names (``async``, ``global``)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BundleMeta(SpecModel):
    version: str
    generated_at: str
    hash: str

    model_config = SPEC_MODEL_CONFIG


class SpecBundle(Spec):
    """
    Linked spec plus metadata.

    Produced only by the linker. The hash covers the spec content, not the
    metadata, so two links of the same content agree on it.
    """

    meta: BundleMeta = Field(alias="_meta")

    @classmethod
    def from_spec(cls, spec: Spec, meta: BundleMeta) -> SpecBundle:
        content = dict(spec)
        content.pop("meta", None)
        return cls(**content, meta=meta)

    @property
    def hash(self) -> str:
        return self.meta.hash
