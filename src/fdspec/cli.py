"""
fd command line interface.

Commands:
- validate: load, validate and link the spec; cache the linked bundle
- authorize: evaluate one policy decision against the linked spec
"""

from __future__ import annotations

import json
import logging
import platform
from pathlib import Path

import typer
from rich.console import Console

from fdspec._version import __version__
from fdspec.core import FdError, SchemaRegistry, link, load_manifest, load_spec, validate_spec
from fdspec.core.manifest import MANIFEST_FILE, ProjectManifest
from fdspec.runtime import PolicyContext, PolicyEngine

console = Console()
err_console = Console(stderr=True)

EXIT_ERRORS = 1
EXIT_DENIED = 2

app = typer.Typer(
    help="""fd - spec validation and policy evaluation

Commands operate on a project directory holding fd.toml (optional) and a
spec/ directory of YAML documents.
""",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"fd {__version__}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """fd CLI main callback for global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_project(project: Path) -> ProjectManifest:
    return load_manifest(project / MANIFEST_FILE)


def _print_messages(title: str, style: str, messages: list[tuple[str, str, str | None]]) -> None:
    if not messages:
        return
    console.print(f"[bold {style}]{len(messages)} {title}:[/bold {style}]")
    for path, message, suggestion in messages:
        console.print(f"  [{style}]- {path}: {message}[/{style}]", highlight=False)
        if suggestion:
            console.print(f"    [dim]Suggestion: {suggestion}[/dim]", highlight=False)


@app.command()
def validate(
    project: Path = typer.Option(Path("."), "--project", "-p", help="Project directory"),
    strict: bool = typer.Option(False, "--strict", help="Enable strict validation"),
    profile: str | None = typer.Option(None, "--profile", help="Validate for a profile (dev, prod)"),
    schemas: Path | None = typer.Option(None, "--schemas", help="Directory of *.schema.json files"),
    write_bundle: bool = typer.Option(
        True, "--write-bundle/--no-write-bundle", help="Cache the linked bundle"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """
    Validate and link the spec documents.

    Exits 1 when there is at least one error.
    """
    try:
        manifest = _load_project(project)
        spec = load_spec(manifest.root, manifest.spec.dir)
        schemas_dir = schemas or manifest.schemas_path
        registry = SchemaRegistry.from_dir(schemas_dir) if schemas_dir else None
    except FdError as e:
        err_console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(code=EXIT_ERRORS)

    active_profile = profile or manifest.validate.profile
    validation = validate_spec(
        spec,
        strict=strict or manifest.validate.strict,
        profile=active_profile,
        schemas=registry,
    )
    linked = link(spec, profile=active_profile)

    errors = [(e.path, e.message, None) for e in validation.errors]
    errors += [(e.source, e.message, None) for e in linked.errors]
    warnings = [(w.path, w.message, w.suggestion) for w in validation.warnings]
    warnings += [(w.path, w.message, None) for w in linked.warnings]

    bundle = linked.bundle if not errors else None
    if bundle is not None and write_bundle:
        manifest.bundle_path.parent.mkdir(parents=True, exist_ok=True)
        manifest.bundle_path.write_text(json.dumps(bundle.to_document(), indent=2), encoding="utf-8")

    if as_json:
        payload = {
            "valid": not errors,
            "errors": [{"path": p, "message": m} for p, m, _ in errors],
            "warnings": [{"path": p, "message": m, "suggestion": s} for p, m, s in warnings],
            "hash": bundle.hash if bundle else None,
        }
        typer.echo(json.dumps(payload, indent=2))
    elif errors:
        console.print("[red]Validation failed[/red]\n")
        _print_messages("error(s) found", "red", errors)
        _print_messages("warning(s)", "yellow", warnings)
    else:
        console.print("[green]Validation passed[/green]")
        _print_messages("warning(s)", "yellow", warnings)
        if bundle is not None:
            if write_bundle:
                console.print(f"[dim]Spec bundle cached at {manifest.bundle_path}[/dim]", highlight=False)
            console.print(f"[dim]Spec hash: {bundle.hash}[/dim]", highlight=False)

    if errors:
        raise typer.Exit(code=EXIT_ERRORS)


@app.command()
def authorize(
    action: str | None = typer.Option(None, "--action", "-a", help="Action being run"),
    resource: str | None = typer.Option(None, "--resource", "-r", help="Entity being accessed"),
    role: list[str] = typer.Option([], "--role", help="Role held by the user (repeatable)"),
    user_id: str | None = typer.Option(None, "--user-id", help="Current user id"),
    tenant_id: str | None = typer.Option(None, "--tenant-id", help="Current tenant id"),
    project: Path = typer.Option(Path("."), "--project", "-p", help="Project directory"),
) -> None:
    """
    Evaluate a policy decision against the linked spec.

    Exits 0 when allowed, 2 when denied, 1 when the spec does not link.
    """
    try:
        manifest = _load_project(project)
        spec = load_spec(manifest.root, manifest.spec.dir)
    except FdError as e:
        err_console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(code=EXIT_ERRORS)

    linked = link(spec)
    if linked.bundle is None:
        err_console.print("[red]Spec does not link:[/red]")
        for error in linked.errors:
            err_console.print(f"  - {error}", highlight=False)
        raise typer.Exit(code=EXIT_ERRORS)

    engine = PolicyEngine.from_spec(linked.bundle.policies)
    result = engine.evaluate(
        PolicyContext(
            user_id=user_id,
            tenant_id=tenant_id,
            roles=list(role),
            resource=resource,
            action=action,
        )
    )

    if result.allowed:
        console.print("[green]ALLOW[/green]", end="")
    else:
        console.print("[red]DENY[/red]", end="")
    console.print(f" {result.reason}" if result.reason else "", highlight=False)
    for row_filter in result.filters:
        console.print(f"  filter: {row_filter}", highlight=False)

    if not result.allowed:
        raise typer.Exit(code=EXIT_DENIED)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
