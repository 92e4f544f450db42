"""
JSON Schema registry for spec document shape checks.

Schemas are supplied from outside (usually a directory of
``<name>.schema.json`` files). The validator looks a schema up by name and
reports every mismatch it finds; a name with no schema is skipped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema import ValidationError as JsonSchemaValidationError
from jsonschema.exceptions import SchemaError as JsonSchemaError

from .errors import ErrorContext, SchemaError

logger = logging.getLogger(__name__)

SCHEMA_SUFFIX = ".schema.json"


class SchemaRegistry:
    """Named JSON schemas with compiled validators."""

    def __init__(self) -> None:
        self._validators: dict[str, Draft202012Validator] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._validators

    def __len__(self) -> int:
        return len(self._validators)

    @property
    def names(self) -> list[str]:
        return sorted(self._validators)

    def add(self, name: str, schema: dict[str, Any]) -> None:
        """
        Register a schema under ``name``.

        Raises:
            SchemaError: If ``schema`` is not a valid JSON Schema
        """
        try:
            Draft202012Validator.check_schema(schema)
        except JsonSchemaError as e:
            raise SchemaError(f"Invalid schema '{name}': {e.message}") from e
        self._validators[name] = Draft202012Validator(schema)

    def get(self, name: str) -> Draft202012Validator | None:
        return self._validators.get(name)

    def iter_errors(self, name: str, data: Any) -> Iterator[JsonSchemaValidationError]:
        """Yield every mismatch of ``data`` against schema ``name`` (none if unregistered)."""
        validator = self._validators.get(name)
        if validator is None:
            return
        yield from sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])

    def load_dir(self, directory: Path) -> int:
        """
        Register every ``<name>.schema.json`` file in ``directory``.

        Returns:
            Number of schemas registered

        Raises:
            SchemaError: If ``directory`` does not exist or a file is not a valid schema
        """
        if not directory.is_dir():
            raise SchemaError(f"Schema directory not found: {directory}")

        count = 0
        for path in sorted(directory.glob(f"*{SCHEMA_SUFFIX}")):
            name = path.name[: -len(SCHEMA_SUFFIX)]
            try:
                schema = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise SchemaError(f"Invalid JSON: {e}", ErrorContext(file=path)) from e
            self.add(name, schema)
            count += 1
        logger.debug("Registered %d schemas from %s", count, directory)
        return count

    @classmethod
    def from_dir(cls, directory: Path) -> SchemaRegistry:
        registry = cls()
        registry.load_dir(directory)
        return registry
