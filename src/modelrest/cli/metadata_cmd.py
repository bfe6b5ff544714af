"""Metadata CLI commands — validate and list."""

from pathlib import Path

import click

from modelrest.cli.paths import resolve_metadata_path
from modelrest.errors import MetadataError
from modelrest.metadata.loader import MetadataLoader
from modelrest.metadata.validator import kind_for_path, validate_metadata_dir, validate_yaml_file
from modelrest.views.loader import ViewConfigLoader


@click.group()
def metadata():
    """Metadata commands."""
    pass


@metadata.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Validate a single YAML file instead of the whole metadata directory.",
)
def validate(strict: bool, target_path: Path | None):
    """Validate metadata YAML files against JSON Schemas."""
    metadata_path = resolve_metadata_path()

    # ── Schema (JSON Schema) validation ─────────────────────────────────────
    if target_path is not None:
        kind = kind_for_path(target_path)
        if kind is None:
            click.echo(
                f"Warning: cannot determine schema for directory '{target_path.parent.name}'. "
                "Expected one of: entities, views.",
                err=True,
            )
            schema_issues = []
        else:
            schema_issues = validate_yaml_file(target_path, kind.schema)
    else:
        if not metadata_path.exists():
            click.echo(f"Error: Metadata directory not found at {metadata_path}", err=True)
            raise SystemExit(1)
        schema_issues = validate_metadata_dir(metadata_path, strict=strict)

    errors = [i for i in schema_issues if i.severity == "error"]
    warnings = [i for i in schema_issues if i.severity == "warning"]

    for issue in schema_issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # ── Semantic (loader) validation ─────────────────────────────────────────
    # Only runs when validating the full directory
    if target_path is None:
        try:
            loader = MetadataLoader(metadata_path)
            loader.load_all()
            views = ViewConfigLoader(metadata_path / "views")
            views.load_all()
        except (MetadataError, KeyError) as e:
            click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
            raise SystemExit(1)

        entities = loader.list_entities()
        click.echo(f"\nLoaded {len(entities)} entities:")
        for name in sorted(entities):
            schema = loader.get_entity(name)
            click.echo(
                f"  ✓ {name} ({len(schema.fields)} fields, {len(schema.relations)} relations)"
            )
        for view in views.list_views():
            if view.entity not in entities:
                click.echo(
                    click.style(f"\nView for unknown entity '{view.entity}'", fg="red"), err=True
                )
                raise SystemExit(1)

    click.echo(click.style("\nAll metadata is valid.", fg="green", bold=True))


@metadata.command("list")
def list_cmd():
    """List entities with their tables and relations."""
    metadata_path = resolve_metadata_path()
    loader = MetadataLoader(metadata_path)
    loader.load_all()

    for name in sorted(loader.list_entities()):
        schema = loader.get_entity(name)
        soft = f", soft delete: {schema.soft_delete}" if schema.soft_delete else ""
        click.echo(f"{name} (table: {schema.table}, pk: {schema.primary_key}{soft})")
        for relation in schema.relations:
            click.echo(f"  {relation.kind} {relation.name} -> {relation.entity}")
