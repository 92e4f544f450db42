"""Tests for fd.toml parsing."""

import pytest

from fdspec.core.errors import ManifestError
from fdspec.core.manifest import load_manifest


def _manifest(tmp_path, text: str):
    path = tmp_path / "fd.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_yields_defaults(tmp_path):
    manifest = load_manifest(tmp_path / "fd.toml")

    assert manifest.root == tmp_path.resolve()
    assert manifest.spec_path == tmp_path.resolve() / "spec"
    assert manifest.schemas_path is None
    assert manifest.validate.strict is False
    assert manifest.validate.profile is None
    assert manifest.bundle_path == tmp_path.resolve() / ".fd" / "cache" / "spec.bundle.json"


def test_full_manifest(tmp_path):
    path = _manifest(
        tmp_path,
        """
[project]
name = "shop"
version = "2.0.0"

[spec]
dir = "docs/spec"
schemas = "docs/schemas"

[validate]
strict = true
profile = "prod"

[cache]
dir = "build"
bundle_file = "bundle.json"
""",
    )
    manifest = load_manifest(path)

    assert manifest.name == "shop"
    assert manifest.version == "2.0.0"
    assert manifest.spec_path == tmp_path.resolve() / "docs" / "spec"
    assert manifest.schemas_path == tmp_path.resolve() / "docs" / "schemas"
    assert manifest.validate.strict is True
    assert manifest.validate.profile == "prod"
    assert manifest.bundle_path == tmp_path.resolve() / "build" / "bundle.json"


def test_project_name_defaults_to_directory(tmp_path):
    manifest = load_manifest(_manifest(tmp_path, "[validate]\nstrict = false\n"))
    assert manifest.name == tmp_path.resolve().name


def test_invalid_toml(tmp_path):
    with pytest.raises(ManifestError, match="Invalid TOML"):
        load_manifest(_manifest(tmp_path, "[project\nname = 1"))


@pytest.mark.parametrize(
    ("text", "key"),
    [
        ("[spec]\ndir = 3\n", "spec.dir"),
        ("[spec]\nschemas = true\n", "spec.schemas"),
        ('[validate]\nstrict = "yes"\n', "validate.strict"),
        ("[cache]\ndir = []\n", "cache.dir"),
        ("[cache]\nbundle_file = 1\n", "cache.bundle_file"),
        ("[project]\nname = 42\n", "project.name"),
        ("[project]\nversion = 1.0\n", "project.version"),
    ],
)
def test_wrong_value_types(tmp_path, text, key):
    with pytest.raises(ManifestError, match=f"'{key}' must be") as exc_info:
        load_manifest(_manifest(tmp_path, text))
    assert exc_info.value.context.path == key


def test_unknown_profile(tmp_path):
    with pytest.raises(ManifestError, match="must be one of dev, prod"):
        load_manifest(_manifest(tmp_path, '[validate]\nprofile = "staging"\n'))


@pytest.mark.parametrize("section", ["project", "spec", "validate", "cache"])
def test_section_must_be_table(tmp_path, section):
    with pytest.raises(ManifestError, match=f"'{section}' must be dict, got str"):
        load_manifest(_manifest(tmp_path, f'{section} = "custom"\n'))
