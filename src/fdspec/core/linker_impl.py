"""
Linker implementation for fdspec.

Cross-reference checks, unused-definition detection, domain invariants and
content hashing. Every check is a pure function of the Spec returning the
problems it found.
"""

from __future__ import annotations

import hashlib
import json

from . import ir
from .diagnostics import LinkError, LinkErrorKind, LinkWarning, LinkWarningKind

HASH_LENGTH = 16

JOURNAL_ENTRY_NAMES = frozenset({"journalentry", "journal_entry"})
JOURNAL_LINE_NAMES = frozenset({"journalline", "journal_line"})
DEBIT_FIELDS = ("debit", "debit_amount")
CREDIT_FIELDS = ("credit", "credit_amount")


def _missing(message: str, source: str, target: str) -> LinkError:
    return LinkError(
        kind=LinkErrorKind.MISSING_REFERENCE,
        message=message,
        source=source,
        target=target,
    )


# =============================================================================
# Cross-reference validation
# =============================================================================


def validate_entity_references(spec: ir.Spec) -> list[LinkError]:
    """Check field references and relation targets between entities."""
    errors: list[LinkError] = []

    for entity_name, entity in spec.entities.items():
        for field_name, field_spec in entity.fields.items():
            ref = field_spec.reference
            if ref is None:
                continue
            source = f"entities.{entity_name}.fields.{field_name}"
            target_entity = spec.entities.get(ref.entity)
            if target_entity is None:
                errors.append(
                    _missing(
                        f'Entity "{ref.entity}" referenced by field "{field_name}" does not exist',
                        source,
                        f"entities.{ref.entity}",
                    )
                )
            elif ref.target_field not in target_entity.fields:
                errors.append(
                    _missing(
                        f'Field "{ref.target_field}" in entity "{ref.entity}" does not exist',
                        source,
                        f"entities.{ref.entity}.fields.{ref.target_field}",
                    )
                )

        for rel_name, relation in entity.relations.items():
            source = f"entities.{entity_name}.relations.{rel_name}"
            if relation.target not in spec.entities:
                errors.append(
                    _missing(
                        f'Relation target "{relation.target}" does not exist',
                        source,
                        f"entities.{relation.target}",
                    )
                )
            if relation.through and relation.through not in spec.entities:
                errors.append(
                    _missing(
                        f'Through table "{relation.through}" does not exist',
                        source,
                        f"entities.{relation.through}",
                    )
                )

    return errors


def validate_action_references(spec: ir.Spec) -> list[LinkError]:
    """Check each action's entity, triggered job and required roles."""
    errors: list[LinkError] = []

    for action_name, action in spec.actions.items():
        source = f"actions.{action_name}"

        if action.entity and action.entity not in spec.entities:
            errors.append(
                _missing(
                    f'Entity "{action.entity}" referenced by action does not exist',
                    source,
                    f"entities.{action.entity}",
                )
            )

        if action.triggers_job and action.triggers_job not in spec.jobs.jobs:
            errors.append(
                _missing(
                    f'Job "{action.triggers_job}" triggered by action does not exist',
                    source,
                    f"jobs.{action.triggers_job}",
                )
            )

        for role in action.required_roles:
            if role not in spec.policies.roles:
                errors.append(
                    _missing(
                        f'Role "{role}" required by action does not exist',
                        source,
                        f"policies.roles.{role}",
                    )
                )

    return errors


def validate_flow_references(spec: ir.Spec) -> list[LinkError]:
    """Check step screens, transitions and on_enter actions of every flow."""
    errors: list[LinkError] = []

    for flow_name, flow in spec.flows.items():
        for step_name, step in flow.steps.items():
            step_path = f"flows.{flow_name}.steps.{step_name}"

            if step.screen not in spec.ui.screens:
                errors.append(
                    _missing(
                        f'Screen "{step.screen}" referenced by flow step does not exist',
                        step_path,
                        f"ui.screens.{step.screen}",
                    )
                )

            for trans_name, transition in step.transitions.items():
                trans_path = f"{step_path}.transitions.{trans_name}"
                # Transitions never leave their flow
                if transition.target not in flow.steps:
                    errors.append(
                        _missing(
                            f'Step "{transition.target}" referenced by transition does not exist',
                            trans_path,
                            f"flows.{flow_name}.steps.{transition.target}",
                        )
                    )
                if transition.action and transition.action not in spec.actions:
                    errors.append(
                        _missing(
                            f'Action "{transition.action}" referenced by transition does not exist',
                            trans_path,
                            f"actions.{transition.action}",
                        )
                    )

            on_enter_action = step.on_enter.action if step.on_enter else None
            if on_enter_action and on_enter_action not in spec.actions:
                errors.append(
                    _missing(
                        f'Action "{on_enter_action}" referenced by on_enter does not exist',
                        f"{step_path}.on_enter",
                        f"actions.{on_enter_action}",
                    )
                )

        if flow.initial_step and flow.initial_step not in flow.steps:
            errors.append(
                _missing(
                    f'Initial step "{flow.initial_step}" does not exist',
                    f"flows.{flow_name}",
                    f"flows.{flow_name}.steps.{flow.initial_step}",
                )
            )

    return errors


def validate_policy_references(spec: ir.Spec) -> list[LinkError]:
    """Check role inheritance, role actions, policy resources and AI rule targets."""
    errors: list[LinkError] = []
    policies = spec.policies

    for role_name, role in policies.roles.items():
        source = f"policies.roles.{role_name}"
        for parent in role.inherits:
            if parent not in policies.roles:
                errors.append(
                    _missing(
                        f'Parent role "{parent}" does not exist',
                        source,
                        f"policies.roles.{parent}",
                    )
                )
        for action_name in role.can:
            if action_name not in spec.actions:
                errors.append(
                    _missing(
                        f'Action "{action_name}" referenced in role.can does not exist',
                        source,
                        f"actions.{action_name}",
                    )
                )

    for policy_name, policy in policies.policies.items():
        if policy.resource not in spec.entities:
            errors.append(
                _missing(
                    f'Entity "{policy.resource}" referenced by policy does not exist',
                    f"policies.policies.{policy_name}",
                    f"entities.{policy.resource}",
                )
            )

    ai_rules = policies.ai_rules
    if ai_rules is not None:
        for entity_name in ai_rules.entities:
            if entity_name not in spec.entities:
                errors.append(
                    _missing(
                        f'Entity "{entity_name}" in AI rules does not exist',
                        f"policies.ai_rules.entities.{entity_name}",
                        f"entities.{entity_name}",
                    )
                )
        for action_name in ai_rules.actions:
            if action_name not in spec.actions:
                errors.append(
                    _missing(
                        f'Action "{action_name}" in AI rules does not exist',
                        f"policies.ai_rules.actions.{action_name}",
                        f"actions.{action_name}",
                    )
                )

    return errors


def validate_ui_references(spec: ir.Spec) -> list[LinkError]:
    """Check each screen's entity and load/submit actions."""
    errors: list[LinkError] = []

    for screen_name, screen in spec.ui.screens.items():
        source = f"ui.screens.{screen_name}"
        if screen.entity and screen.entity not in spec.entities:
            errors.append(
                _missing(
                    f'Entity "{screen.entity}" referenced by screen does not exist',
                    source,
                    f"entities.{screen.entity}",
                )
            )
        for label, action_name in (
            ("load_action", screen.load_action),
            ("submit_action", screen.submit_action),
        ):
            if action_name and action_name not in spec.actions:
                errors.append(
                    _missing(
                        f'Action "{action_name}" referenced by screen {label} does not exist',
                        source,
                        f"actions.{action_name}",
                    )
                )

    return errors


def validate_job_references(spec: ir.Spec) -> list[LinkError]:
    """Check job queues, dead letter queues and trigger actions."""
    errors: list[LinkError] = []
    queues = spec.jobs.queues

    for job_name, job in spec.jobs.jobs.items():
        source = f"jobs.{job_name}"

        if job.queue and job.queue != ir.DEFAULT_QUEUE and job.queue not in queues:
            errors.append(
                _missing(
                    f'Queue "{job.queue}" referenced by job does not exist',
                    source,
                    f"jobs.queues.{job.queue}",
                )
            )

        dlq = job.dead_letter_queue
        if dlq and dlq != ir.DEFAULT_QUEUE and dlq not in queues:
            errors.append(
                _missing(
                    f'Dead letter queue "{dlq}" does not exist',
                    source,
                    f"jobs.queues.{dlq}",
                )
            )

        for trigger in job.triggers:
            if trigger not in spec.actions:
                errors.append(
                    _missing(
                        f'Trigger action "{trigger}" does not exist',
                        source,
                        f"actions.{trigger}",
                    )
                )

    return errors


def validate_references(spec: ir.Spec) -> list[LinkError]:
    """Run every cross-reference check, in document order."""
    return [
        *validate_entity_references(spec),
        *validate_action_references(spec),
        *validate_flow_references(spec),
        *validate_policy_references(spec),
        *validate_ui_references(spec),
        *validate_job_references(spec),
    ]


# =============================================================================
# Unused definitions
# =============================================================================


def collect_used_entities(spec: ir.Spec) -> set[str]:
    """Names of entities referenced by actions, screens, field references or relations."""
    used: set[str] = set()
    for action in spec.actions.values():
        if action.entity:
            used.add(action.entity)
    for screen in spec.ui.screens.values():
        if screen.entity:
            used.add(screen.entity)
    for entity in spec.entities.values():
        for field_spec in entity.fields.values():
            if field_spec.reference:
                used.add(field_spec.reference.entity)
        for relation in entity.relations.values():
            used.add(relation.target)
            if relation.through:
                used.add(relation.through)
    return used


def check_unused(spec: ir.Spec) -> list[LinkWarning]:
    used = collect_used_entities(spec)
    return [
        LinkWarning(
            kind=LinkWarningKind.UNUSED,
            message=f'Entity "{name}" is not referenced by any action, screen, or relation',
            path=f"entities.{name}",
        )
        for name in spec.entities
        if name not in used
    ]


# =============================================================================
# Domain invariants
# =============================================================================


def _find_entity(spec: ir.Spec, names: frozenset[str]) -> tuple[str, ir.EntitySpec] | None:
    for name, entity in spec.entities.items():
        if name.lower() in names:
            return name, entity
    return None


def check_invariants(spec: ir.Spec, profile: str | None = None) -> list[LinkError]:
    """
    Check ledger invariants.

    Applies only when both a journal entry and a journal line entity exist:
    lines need debit and credit fields, and entries must be immutable under
    the prod profile.
    """
    errors: list[LinkError] = []
    entry = _find_entity(spec, JOURNAL_ENTRY_NAMES)
    line = _find_entity(spec, JOURNAL_LINE_NAMES)
    if entry is None or line is None:
        return errors

    entry_name, entry_entity = entry
    line_name, line_entity = line

    if not line_entity.has_field(*DEBIT_FIELDS) or not line_entity.has_field(*CREDIT_FIELDS):
        errors.append(
            LinkError(
                kind=LinkErrorKind.INVARIANT_VIOLATION,
                message=f"{line_name} must have both debit and credit fields for balance invariant",
                source=f"entities.{line_name}",
            )
        )

    active_profile = str(profile or spec.product.profile)
    if not entry_entity.immutable and active_profile == ir.Profile.PROD:
        errors.append(
            LinkError(
                kind=LinkErrorKind.INVARIANT_VIOLATION,
                message=f"{entry_name} should be immutable in production for audit compliance",
                source=f"entities.{entry_name}",
            )
        )

    return errors


# =============================================================================
# Hashing
# =============================================================================


def canonical_json(spec: ir.Spec) -> str:
    """
    Serialize the spec content with recursively sorted keys.

    Bundle metadata is left out so the result depends on content only.
    """
    document = spec.to_document()
    document.pop("_meta", None)
    return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_spec_hash(spec: ir.Spec) -> str:
    """First 16 hex characters of the SHA-256 of the canonical spec JSON."""
    digest = hashlib.sha256(canonical_json(spec).encode("utf-8")).hexdigest()
    return digest[:HASH_LENGTH]
