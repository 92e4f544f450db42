"""
fdspec - spec resolution and policy evaluation.

Validates and links declarative product specs into a content-hashed bundle,
and evaluates runtime authorization decisions against it.
"""

from __future__ import annotations

from ._version import __version__
from .core import ir
from .core.errors import FdError, ManifestError, SchemaError, SpecLoadError

__all__ = [
    "__version__",
    "ir",
    "FdError",
    "SpecLoadError",
    "SchemaError",
    "ManifestError",
]
