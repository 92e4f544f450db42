"""
Error types for fdspec loading and configuration.

Validation and linking problems are reported as data (see
``fdspec.core.linker`` and ``fdspec.core.validator``); exceptions are only
raised when the input cannot be read at all.
"""

from dataclasses import dataclass
from pathlib import Path


class FdError(Exception):
    """Base exception for all fdspec errors."""

    def __init__(self, message: str, context: "ErrorContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class SpecLoadError(FdError):
    """
    Raised when spec documents cannot be loaded.

    Examples:
    - Missing spec directory or product.yml
    - Malformed YAML
    - A document that does not fit the spec model
    """

    pass


class SchemaError(FdError):
    """
    Raised when a JSON schema cannot be registered.

    Examples:
    - Schema file is not valid JSON
    - Schema is not a valid JSON Schema document
    """

    pass


class ManifestError(FdError):
    """Raised when fd.toml is malformed."""

    pass


@dataclass
class ErrorContext:
    """
    Where an error occurred.

    Attributes:
        file: Source file
        path: Optional dotted path inside the document (e.g. entities.Order.fields)
    """

    file: Path
    path: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "spec/entities.yml (entities.Order)"
        """
        if self.path:
            return f"{self.file} ({self.path})"
        return str(self.file)


def make_load_error(message: str, file: Path, path: str | None = None) -> SpecLoadError:
    """
    Helper to create a SpecLoadError with context.

    Args:
        message: Error description
        file: Source file path
        path: Optional dotted path inside the document

    Returns:
        SpecLoadError with context attached
    """
    return SpecLoadError(message, ErrorContext(file=file, path=path))
