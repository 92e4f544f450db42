"""
Validation of fdspec Specs beyond what the spec model enforces.

Three layers:
- document shape, checked against named JSON schemas
- profile business rules (prod, or any profile with a config block)
- strict-mode hygiene warnings

Errors block; warnings are reported but never block.
"""

import logging
from collections.abc import Iterable
from typing import Any

from . import ir
from .diagnostics import ValidationMessage, ValidationResult
from .schemas import SchemaRegistry

logger = logging.getLogger(__name__)

# Substrings that mark an entity as financial
FINANCIAL_NAME_MARKERS = ("journal", "ledger", "entry", "posting")


def _document(model: Any) -> dict[str, Any]:
    """Document form of a model as written, without filled-in defaults."""
    return model.model_dump(mode="json", by_alias=True, exclude_unset=True)


def _join_path(parts: Iterable[Any]) -> str:
    return ".".join(str(part) for part in parts)


def _schema_errors(
    schemas: SchemaRegistry, name: str, data: Any, prefix: str = ""
) -> list[ValidationMessage]:
    errors = []
    for error in schemas.iter_errors(name, data):
        path = _join_path(error.absolute_path)
        if prefix:
            path = f"{prefix}.{path}" if path else prefix
        errors.append(
            ValidationMessage(
                path=path,
                message=error.message,
                schema_path="/".join(str(part) for part in error.absolute_schema_path),
            )
        )
    return errors


def validate_schemas(spec: ir.Spec, schemas: SchemaRegistry) -> list[ValidationMessage]:
    """
    Check every document against its schema.

    Named documents are checked one at a time, wrapped as
    ``{"entities": {name: doc}}`` so the reported path starts at the
    collection. Documents without a registered schema are skipped.

    Returns:
        List of errors
    """
    errors = _schema_errors(schemas, "product", _document(spec.product), "product")

    for kind, collection in (
        ("entities", spec.entities),
        ("actions", spec.actions),
        ("flows", spec.flows),
    ):
        for name, doc in collection.items():
            errors.extend(_schema_errors(schemas, kind, {kind: {name: _document(doc)}}))

    for kind, model in (
        ("policies", spec.policies),
        ("ui", spec.ui),
        ("metrics", spec.metrics),
        ("jobs", spec.jobs),
    ):
        errors.extend(_schema_errors(schemas, kind, _document(model), kind))

    return errors


def validate_production_rules(
    spec: ir.Spec, profile_config: ir.ProfileConfig | None = None
) -> tuple[list[ValidationMessage], list[ValidationMessage]]:
    """
    Business rules for production-grade profiles.

    Checks:
    - Commands are idempotent (error)
    - Commands declare a rate limit (warning)
    - Entities stay tenant-scoped under multi-tenancy (warning)
    - Financial-sounding entities are AI suggest-only (warning)

    Each of the first three is relaxed only by setting its profile flag to
    ``false`` explicitly.

    Returns:
        Tuple of (errors, warnings)
    """
    cfg = profile_config or ir.ProfileConfig()
    errors: list[ValidationMessage] = []
    warnings: list[ValidationMessage] = []

    if cfg.require_idempotency is not False:
        for name, action in spec.actions.items():
            if action.is_command and not action.idempotent:
                errors.append(
                    ValidationMessage(
                        path=f"actions.{name}",
                        message="Commands must be idempotent in production profile",
                    )
                )

    if cfg.require_rate_limits is not False:
        for name, action in spec.actions.items():
            if action.is_command and action.rate_limit is None:
                warnings.append(
                    ValidationMessage(
                        path=f"actions.{name}",
                        message="Command should have rate limit defined for production",
                        suggestion="Add rate_limit configuration",
                    )
                )

    if cfg.strict_tenancy is not False and spec.product.is_multi_tenant:
        for name, entity in spec.entities.items():
            if entity.tenant_scoped is False:
                warnings.append(
                    ValidationMessage(
                        path=f"entities.{name}",
                        message="Entity is not tenant-scoped in multi-tenant mode",
                        suggestion="Set tenant_scoped: true or explicitly document why this is global",
                    )
                )

    for name, entity in spec.entities.items():
        lowered = name.lower()
        if any(marker in lowered for marker in FINANCIAL_NAME_MARKERS) and not entity.ai_suggest_only:
            warnings.append(
                ValidationMessage(
                    path=f"entities.{name}",
                    message="Financial entity should be ai_suggest_only for safety",
                    suggestion="Set ai_suggest_only: true",
                )
            )

    return errors, warnings


def validate_strict_rules(spec: ir.Spec) -> list[ValidationMessage]:
    """
    Hygiene checks enabled by strict mode.

    Checks:
    - Entities and actions have descriptions
    - Every screen is shown by some flow step

    Returns:
        List of warnings
    """
    warnings = []

    for name, entity in spec.entities.items():
        if not entity.description:
            warnings.append(
                ValidationMessage(path=f"entities.{name}", message="Entity should have a description")
            )

    for name, action in spec.actions.items():
        if not action.description:
            warnings.append(
                ValidationMessage(path=f"actions.{name}", message="Action should have a description")
            )

    shown_screens: set[str] = set()
    for flow in spec.flows.values():
        shown_screens |= flow.screens

    for screen_name in spec.ui.screens:
        if screen_name not in shown_screens:
            warnings.append(
                ValidationMessage(
                    path=f"ui.screens.{screen_name}",
                    message="Screen is not referenced by any flow",
                )
            )

    return warnings


def validate_spec(
    spec: ir.Spec,
    *,
    strict: bool = False,
    profile: str | None = None,
    schemas: SchemaRegistry | None = None,
) -> ValidationResult:
    """
    Validate a Spec.

    Args:
        spec: Spec to validate
        strict: Add hygiene warnings
        profile: Profile to validate for; defaults to ``spec.product.profile``
        schemas: JSON schemas to check documents against; None skips shape checks

    Returns:
        ValidationResult; ``valid`` is False when there is at least one error
    """
    errors: list[ValidationMessage] = []
    warnings: list[ValidationMessage] = []

    if schemas is not None:
        errors.extend(validate_schemas(spec, schemas))

    active_profile = str(profile or spec.product.profile)
    profile_config = spec.product.profile_config(active_profile)
    if active_profile == ir.Profile.PROD or profile_config is not None:
        rule_errors, rule_warnings = validate_production_rules(spec, profile_config)
        errors.extend(rule_errors)
        warnings.extend(rule_warnings)

    if strict:
        warnings.extend(validate_strict_rules(spec))

    logger.debug(
        "Validated spec %s (profile %s): %d errors, %d warnings",
        spec.product.name,
        active_profile,
        len(errors),
        len(warnings),
    )
    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
