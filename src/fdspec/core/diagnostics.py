"""
Diagnostic records produced by the linker and validator.

These are plain data, never raised. Every record serializes to JSON with
``model_dump(mode="json")`` so a calling layer can ship it as-is.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .ir import SpecBundle


class LinkErrorKind(StrEnum):
    """Blocking linker problems."""

    MISSING_REFERENCE = "missing_reference"
    CIRCULAR_REFERENCE = "circular_reference"
    INVALID_RELATION = "invalid_relation"
    INVARIANT_VIOLATION = "invariant_violation"


class LinkWarningKind(StrEnum):
    """Informational linker findings."""

    UNUSED = "unused"
    SHADOWED = "shadowed"
    DEPRECATED = "deprecated"


class LinkError(BaseModel):
    """
    A blocking linker problem.

    Attributes:
        kind: What went wrong
        message: Human-readable description
        source: Dotted path of the referring definition (e.g. actions.create_order)
        target: Dotted path of the missing definition, if any
    """

    kind: LinkErrorKind
    message: str
    source: str
    target: str | None = None

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


class LinkWarning(BaseModel):
    kind: LinkWarningKind
    message: str
    path: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class LinkResult(BaseModel):
    """Outcome of linking; ``bundle`` is set only when there are no errors."""

    valid: bool
    errors: list[LinkError] = Field(default_factory=list)
    warnings: list[LinkWarning] = Field(default_factory=list)
    bundle: SpecBundle | None = None

    model_config = ConfigDict(frozen=True)


class ValidationMessage(BaseModel):
    """
    A validator finding, used for both errors and warnings.

    Attributes:
        path: Dotted path of the offending definition
        message: Human-readable description
        schema_path: JSON schema location that failed (schema errors only)
        suggestion: How to fix it (warnings only)
    """

    path: str
    message: str
    schema_path: str | None = None
    suggestion: str | None = None

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationResult(BaseModel):
    valid: bool
    errors: list[ValidationMessage] = Field(default_factory=list)
    warnings: list[ValidationMessage] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
