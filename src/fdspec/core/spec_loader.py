"""
YAML spec loader for fdspec.

Loads the product specification from a ``spec/`` directory:

    spec/
      product.yml          required
      entities.yml         or entities/*.yml
      actions.yml          or actions/*.yml
      flows.yml            or flows/*.yml
      policies.yml         optional
      ui.yml               optional
      metrics.yml          optional
      jobs.yml             optional

A collection file either wraps its documents under a top-level key
(``entities: {Order: {...}}``) or, inside a collection directory, holds a
single document named after the file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .errors import SpecLoadError, make_load_error
from .ir import Spec

logger = logging.getLogger(__name__)

DEFAULT_SPEC_DIR = "spec"
COLLECTIONS = ("entities", "actions", "flows")
OPTIONAL_DOCUMENTS = {
    "policies": {"roles": {}, "permissions": {}, "policies": {}, "rate_limits": {}},
    "ui": {"screens": {}, "layouts": {}},
    "metrics": {"events": {}, "kpis": {}},
    "jobs": {"jobs": {}, "queues": {}},
}


def get_spec_dir(project_root: Path, spec_dir: str = DEFAULT_SPEC_DIR) -> Path:
    """Get the spec directory for a project."""
    return project_root / spec_dir


def load_spec(project_root: Path, spec_dir: str = DEFAULT_SPEC_DIR) -> Spec:
    """
    Load and build the Spec for a project.

    Args:
        project_root: Project root directory
        spec_dir: Spec directory name, relative to the project root

    Returns:
        The unlinked Spec

    Raises:
        SpecLoadError: If the directory or product.yml is missing, a file is
            not valid YAML, or a document does not fit the spec model
    """
    directory = get_spec_dir(project_root, spec_dir)
    documents = load_documents(directory)
    try:
        spec = Spec.from_documents(documents)
    except ValidationError as e:
        raise SpecLoadError(_format_validation_error(e)) from e

    logger.info(
        "Loaded spec %s: %d entities, %d actions, %d flows",
        spec.product.name,
        len(spec.entities),
        len(spec.actions),
        len(spec.flows),
    )
    return spec


def load_documents(directory: Path) -> dict[str, Any]:
    """
    Load the raw documents of a spec directory without building models.

    Returns:
        Mapping with keys product, entities, actions, flows, policies, ui,
        metrics and jobs
    """
    if not directory.is_dir():
        raise SpecLoadError(f"Spec directory not found: {directory}")

    product = _load_yaml(directory / "product.yml")
    if not product:
        raise make_load_error("product.yml is required", directory / "product.yml")

    documents: dict[str, Any] = {"product": product}
    for kind in COLLECTIONS:
        documents[kind] = _load_collection(directory, kind)
    for kind, default in OPTIONAL_DOCUMENTS.items():
        content = _load_yaml(directory / f"{kind}.yml", required=False)
        documents[kind] = content if content else default
    return documents


def _load_yaml(path: Path, required: bool = True) -> Any:
    """Load one YAML file; a missing optional file yields None."""
    if not path.exists():
        if required:
            raise make_load_error("File not found", path)
        return None
    try:
        with path.open(encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise make_load_error(f"Invalid YAML: {e}", path) from e
    except UnicodeDecodeError as e:
        raise make_load_error(f"File is not valid UTF-8: {e}", path) from e
    except OSError as e:
        raise make_load_error(f"Cannot read file: {e}", path) from e
    logger.debug("Loaded %s", path)
    return content


def _load_collection(directory: Path, kind: str) -> dict[str, Any]:
    """Load ``<kind>.yml`` or, failing that, every file in ``<kind>/``."""
    single = _load_yaml(directory / f"{kind}.yml", required=False)
    if isinstance(single, dict) and isinstance(single.get(kind), dict):
        return dict(single[kind])

    result: dict[str, Any] = {}
    collection_dir = directory / kind
    if not collection_dir.is_dir():
        return result

    files = sorted([*collection_dir.glob("*.yml"), *collection_dir.glob("*.yaml")])
    for path in files:
        content = _load_yaml(path, required=False)
        if not content:
            continue
        if not isinstance(content, dict):
            raise make_load_error(f"Expected a mapping, got {type(content).__name__}", path)
        if isinstance(content.get(kind), dict):
            result.update(content[kind])
        else:
            result[path.stem] = content
    return result


def _format_validation_error(error: ValidationError) -> str:
    """Render pydantic errors as one line per dotted document path."""
    lines = ["Spec documents do not match the spec model:"]
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"])
        lines.append(f"  - {path}: {item['msg']}")
    return "\n".join(lines)
