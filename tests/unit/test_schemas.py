"""Tests for the JSON schema registry."""

import json

import pytest

from fdspec.core.errors import SchemaError
from fdspec.core.schemas import SchemaRegistry

ORDER_SCHEMA = {
    "type": "object",
    "required": ["name"],
    "properties": {"name": {"type": "string"}, "version": {"type": "string"}},
}


def test_add_and_lookup():
    registry = SchemaRegistry()
    registry.add("product", ORDER_SCHEMA)

    assert "product" in registry
    assert len(registry) == 1
    assert registry.names == ["product"]
    assert registry.get("ui") is None


def test_invalid_schema_rejected():
    registry = SchemaRegistry()
    with pytest.raises(SchemaError, match="Invalid schema 'product'"):
        registry.add("product", {"type": "not-a-type"})
    assert "product" not in registry


def test_iter_errors_sorted_by_path():
    registry = SchemaRegistry()
    registry.add("product", ORDER_SCHEMA)

    errors = list(registry.iter_errors("product", {"version": 2, "name": 1}))
    assert [list(e.absolute_path) for e in errors] == [["name"], ["version"]]


def test_iter_errors_unregistered_name():
    assert list(SchemaRegistry().iter_errors("product", {})) == []


def test_load_dir(tmp_path):
    (tmp_path / "product.schema.json").write_text(json.dumps(ORDER_SCHEMA), encoding="utf-8")
    (tmp_path / "entities.schema.json").write_text(json.dumps({"type": "object"}), encoding="utf-8")
    (tmp_path / "README.md").write_text("not a schema", encoding="utf-8")

    registry = SchemaRegistry.from_dir(tmp_path)
    assert registry.names == ["entities", "product"]


def test_load_dir_bad_json(tmp_path):
    path = tmp_path / "ui.schema.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SchemaError, match="Invalid JSON") as exc_info:
        SchemaRegistry().load_dir(tmp_path)
    assert exc_info.value.context.file == path


def test_load_dir_missing_directory(tmp_path):
    with pytest.raises(SchemaError, match="Schema directory not found"):
        SchemaRegistry.from_dir(tmp_path / "schemas")
