"""Shared pytest fixtures for fdspec tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from fdspec.core import ir


def order_documents() -> dict[str, Any]:
    """Raw documents for a one-entity spec: Order, list_orders, viewer."""
    return {
        "product": {"name": "shop", "version": "1.2.0"},
        "entities": {
            "Order": {
                "fields": {
                    "id": {"type": "uuid", "primary": True},
                    "status": {"type": "enum", "enum_values": ["draft", "paid"]},
                },
            },
        },
        "actions": {
            "list_orders": {
                "type": "query",
                "entity": "Order",
                "auth": {"required": False},
            },
        },
        "policies": {
            "roles": {"viewer": {"can": ["list_orders"]}},
        },
    }


@pytest.fixture
def order_docs() -> dict[str, Any]:
    return order_documents()


@pytest.fixture
def order_spec() -> ir.Spec:
    return ir.Spec.from_documents(order_documents())


@pytest.fixture
def make_spec() -> Callable[..., ir.Spec]:
    """
    Build a Spec from document overrides on top of the Order spec.

    Top-level keys replace the base documents wholesale.
    """

    def _make(**documents: Any) -> ir.Spec:
        base = order_documents()
        base.update(documents)
        return ir.Spec.from_documents(base)

    return _make


@pytest.fixture
def write_project(tmp_path: Path) -> Callable[..., Path]:
    """Write documents as YAML files under ``<tmp>/spec`` and return the project root."""

    def _write(documents: dict[str, Any] | None = None, manifest: str | None = None) -> Path:
        spec_dir = tmp_path / "spec"
        spec_dir.mkdir(exist_ok=True)
        for name, content in (documents or order_documents()).items():
            if name in ("entities", "actions", "flows"):
                content = {name: content}
            (spec_dir / f"{name}.yml").write_text(yaml.safe_dump(content), encoding="utf-8")
        if manifest is not None:
            (tmp_path / "fd.toml").write_text(manifest, encoding="utf-8")
        return tmp_path

    return _write
