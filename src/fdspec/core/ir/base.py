"""
Shared model configuration for fdspec IR types.

Spec documents are frozen once built. Unknown keys are kept so that the
bundle hash covers everything the author wrote, not only the modelled keys.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

SPEC_MODEL_CONFIG = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class SpecModel(BaseModel):
    """Base for IR types."""

    model_config = SPEC_MODEL_CONFIG

    @field_validator("*", mode="before")
    @classmethod
    def _null_section_is_empty(cls, value: Any, info: ValidationInfo) -> Any:
        # YAML reads a section with nothing under it (``roles:``) as null
        if value is None and info.field_name is not None:
            field = cls.model_fields[info.field_name]
            if field.default_factory is not None:
                return field.default_factory()
        return value
