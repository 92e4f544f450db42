"""
Entity and field types for fdspec IR.

An entity describes one table: its fields, indexes, constraints and
relations to other entities. References between entities are plain names
here; the linker resolves them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field, model_validator

from .base import SPEC_MODEL_CONFIG, SpecModel


class FieldTypeKind(StrEnum):
    """Enumeration of supported field types."""

    UUID = "uuid"
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    BIGINT = "bigint"
    DECIMAL = "decimal"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    JSON = "json"
    JSONB = "jsonb"
    ENUM = "enum"
    ARRAY = "array"


class GeneratedKind(StrEnum):
    """Value generation rule for a field."""

    UUID = "uuid"
    NOW = "now"
    AUTO_INCREMENT = "auto_increment"


class OnDelete(StrEnum):
    CASCADE = "cascade"
    RESTRICT = "restrict"
    SET_NULL = "set_null"
    NO_ACTION = "no_action"


class ReferenceSpec(SpecModel):
    """
    Foreign-key reference to another entity.

    ``field`` defaults to ``id`` on the target entity when omitted.
    """

    entity: str
    field: str | None = None
    on_delete: OnDelete | None = None

    model_config = SPEC_MODEL_CONFIG

    @property
    def target_field(self) -> str:
        return self.field or "id"


class FieldValidation(SpecModel):
    min: float | None = None
    max: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    format: str | None = None  # email, url, phone, currency, percentage

    model_config = SPEC_MODEL_CONFIG


class FieldSpec(SpecModel):
    """
    Specification for a single entity field.

    Examples:
        - id: FieldSpec(type="uuid", primary=True, generated="uuid")
        - status: FieldSpec(type="enum", enum_values=["draft", "paid"])
        - customer_id: FieldSpec(type="uuid", reference=ReferenceSpec(entity="Customer"))
    """

    type: FieldTypeKind
    description: str | None = None
    required: bool = False
    unique: bool = False
    primary: bool = False
    nullable: bool | None = None
    default: Any = None
    generated: GeneratedKind | None = None
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    enum_values: list[str] | None = None
    array_of: str | None = None
    reference: ReferenceSpec | None = None
    validation: FieldValidation | None = None

    model_config = SPEC_MODEL_CONFIG

    @model_validator(mode="after")
    def _enum_needs_values(self) -> FieldSpec:
        if self.type == FieldTypeKind.ENUM and not self.enum_values:
            raise ValueError("enum fields must declare enum_values")
        return self


class IndexSpec(SpecModel):
    name: str | None = None
    fields: list[str]
    unique: bool = False
    where: str | None = None

    model_config = SPEC_MODEL_CONFIG


class ConstraintKind(StrEnum):
    CHECK = "check"
    UNIQUE = "unique"
    EXCLUDE = "exclude"


class ConstraintSpec(SpecModel):
    name: str | None = None
    type: ConstraintKind
    expression: str

    model_config = SPEC_MODEL_CONFIG


class RelationKind(StrEnum):
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"
    MANY_TO_MANY = "many_to_many"


class RelationSpec(SpecModel):
    """
    Relation to another entity.

    ``through`` names the join entity of a many-to-many relation.
    """

    type: RelationKind
    target: str
    through: str | None = None
    foreign_key: str | None = None
    inverse: str | None = None

    model_config = SPEC_MODEL_CONFIG


class EntitySpec(SpecModel):
    """
    Specification for a domain entity.

    Attributes:
        name: Entity identifier (optional; the map key is authoritative)
        table: Table name override
        tenant_scoped: False opts the entity out of tenant isolation
        immutable: Rows cannot be updated once written
        fields: Field name -> FieldSpec
        relations: Relation name -> RelationSpec
    """

    name: str | None = None
    description: str | None = None
    table: str | None = None
    tenant_scoped: bool | None = None
    auditable: bool = False
    immutable: bool = False
    soft_delete: bool = False
    ai_writable: bool | None = None
    ai_suggest_only: bool = False
    fields: dict[str, FieldSpec] = Field(default_factory=dict)
    indexes: list[IndexSpec] = Field(default_factory=list)
    constraints: list[ConstraintSpec] = Field(default_factory=list)
    relations: dict[str, RelationSpec] = Field(default_factory=dict)

    model_config = SPEC_MODEL_CONFIG

    def has_field(self, *names: str) -> bool:
        """Check whether any of ``names`` is a field of this entity."""
        return any(name in self.fields for name in names)
