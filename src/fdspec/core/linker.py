import logging
from datetime import UTC, datetime

from . import ir
from .diagnostics import LinkResult
from .linker_impl import (
    check_invariants,
    check_unused,
    compute_spec_hash,
    validate_references,
)

logger = logging.getLogger(__name__)


def link(
    spec: ir.Spec,
    *,
    profile: str | None = None,
    now: datetime | None = None,
) -> LinkResult:
    """
    Cross-link a loaded Spec into a SpecBundle.

    Performs:
    1. Cross-reference validation (entities, actions, flows, policies, UI, jobs)
    2. Unused entity detection (warnings only)
    3. Domain invariant checks
    4. Bundle construction with version, timestamp and content hash

    The input is never modified. The bundle is produced only when there are
    no errors.

    Args:
        spec: Spec to link
        profile: Active profile; defaults to ``spec.product.profile``
        now: Timestamp for the bundle metadata; defaults to the current UTC time

    Returns:
        LinkResult with errors, warnings and the bundle (None on errors)
    """
    errors = validate_references(spec)
    warnings = check_unused(spec)
    errors.extend(check_invariants(spec, profile))

    if errors:
        logger.debug("Link failed with %d errors, %d warnings", len(errors), len(warnings))
        return LinkResult(valid=False, errors=errors, warnings=warnings, bundle=None)

    generated_at = (now or datetime.now(UTC)).isoformat(timespec="milliseconds")
    meta = ir.BundleMeta(
        version=spec.product.version,
        generated_at=generated_at.replace("+00:00", "Z"),
        hash=compute_spec_hash(spec),
    )
    bundle = ir.SpecBundle.from_spec(spec, meta)

    logger.debug("Linked spec %s (hash %s)", spec.product.name, meta.hash)
    return LinkResult(valid=True, errors=[], warnings=warnings, bundle=bundle)
