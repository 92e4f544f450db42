import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ErrorContext, ManifestError

MANIFEST_FILE = "fd.toml"
PROFILES = ("dev", "prod")


@dataclass
class SpecConfig:
    """Where spec documents and their schemas live."""

    dir: str = "spec"
    schemas: str | None = None  # directory of *.schema.json files


@dataclass
class ValidateConfig:
    """Defaults for `fd validate`."""

    strict: bool = False
    profile: str | None = None  # "dev" | "prod"; None = product.profile


@dataclass
class CacheConfig:
    dir: str = ".fd/cache"
    bundle_file: str = "spec.bundle.json"


@dataclass
class ProjectManifest:
    name: str = ""
    version: str = "0.1.0"
    spec: SpecConfig = field(default_factory=SpecConfig)
    validate: ValidateConfig = field(default_factory=ValidateConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    root: Path = field(default_factory=Path.cwd)

    @property
    def spec_path(self) -> Path:
        return self.root / self.spec.dir

    @property
    def schemas_path(self) -> Path | None:
        return self.root / self.spec.schemas if self.spec.schemas else None

    @property
    def bundle_path(self) -> Path:
        return self.root / self.cache.dir / self.cache.bundle_file


def _expect(value: object, kind: type, key: str, path: Path) -> None:
    if value is not None and not isinstance(value, kind):
        raise ManifestError(
            f"'{key}' must be {kind.__name__}, got {type(value).__name__}",
            ErrorContext(file=path, path=key),
        )


def load_manifest(path: Path) -> ProjectManifest:
    """
    Load fd.toml. A missing file yields the defaults rooted at its directory.

    Raises:
        ManifestError: If the file is not valid TOML or a value has the wrong type
    """
    root = path.parent.resolve()
    if not path.exists():
        return ProjectManifest(root=root)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid TOML: {e}", ErrorContext(file=path)) from e

    sections = {}
    for section in ("project", "spec", "validate", "cache"):
        _expect(data.get(section), dict, section, path)
        sections[section] = data.get(section, {})
    project = sections["project"]
    spec_data = sections["spec"]
    validate_data = sections["validate"]
    cache_data = sections["cache"]

    _expect(project.get("name"), str, "project.name", path)
    _expect(project.get("version"), str, "project.version", path)
    _expect(spec_data.get("dir"), str, "spec.dir", path)
    _expect(spec_data.get("schemas"), str, "spec.schemas", path)
    _expect(validate_data.get("strict"), bool, "validate.strict", path)
    _expect(cache_data.get("dir"), str, "cache.dir", path)
    _expect(cache_data.get("bundle_file"), str, "cache.bundle_file", path)

    profile = validate_data.get("profile")
    if profile is not None and profile not in PROFILES:
        raise ManifestError(
            f"'validate.profile' must be one of {', '.join(PROFILES)}, got {profile!r}",
            ErrorContext(file=path, path="validate.profile"),
        )

    return ProjectManifest(
        name=project.get("name", root.name),
        version=project.get("version", "0.1.0"),
        spec=SpecConfig(
            dir=spec_data.get("dir", "spec"),
            schemas=spec_data.get("schemas"),
        ),
        validate=ValidateConfig(
            strict=validate_data.get("strict", False),
            profile=profile,
        ),
        cache=CacheConfig(
            dir=cache_data.get("dir", ".fd/cache"),
            bundle_file=cache_data.get("bundle_file", "spec.bundle.json"),
        ),
        root=root,
    )
