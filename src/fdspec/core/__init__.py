"""Core fdspec functionality: IR, loader, schema registry, validator, linker, manifest."""

from . import ir
from .diagnostics import (
    LinkError,
    LinkErrorKind,
    LinkResult,
    LinkWarning,
    LinkWarningKind,
    ValidationMessage,
    ValidationResult,
)
from .errors import ErrorContext, FdError, ManifestError, SchemaError, SpecLoadError
from .linker import link
from .linker_impl import compute_spec_hash
from .manifest import ProjectManifest, load_manifest
from .schemas import SchemaRegistry
from .spec_loader import load_documents, load_spec
from .validator import validate_spec

__all__ = [
    "ir",
    "FdError",
    "SpecLoadError",
    "SchemaError",
    "ManifestError",
    "ErrorContext",
    "LinkError",
    "LinkErrorKind",
    "LinkWarning",
    "LinkWarningKind",
    "LinkResult",
    "ValidationMessage",
    "ValidationResult",
    "link",
    "compute_spec_hash",
    "validate_spec",
    "load_spec",
    "load_documents",
    "load_manifest",
    "ProjectManifest",
    "SchemaRegistry",
]
