"""Query CLI commands — render statements without a database."""

import click

from modelrest.cli.paths import resolve_metadata_path
from modelrest.errors import ModelRestError
from modelrest.metadata.loader import MetadataLoader
from modelrest.metadata.registry import SchemaRegistry
from modelrest.query.quoting import MYSQL, POSTGRESQL, SQLITE
from modelrest.rest.context import RequestContext
from modelrest.rest.request import RequestParams

DIALECTS = {d.name: d for d in (SQLITE, MYSQL, POSTGRESQL)}


@click.group()
def query():
    """Query commands."""
    pass


@query.command()
@click.argument("entity")
@click.argument("query_string", default="")
@click.option(
    "--dialect",
    type=click.Choice(sorted(DIALECTS)),
    default="sqlite",
    show_default=True,
    help="SQL dialect to render for.",
)
def explain(entity: str, query_string: str, dialect: str):
    """Show the statements a listing request would run.

    ENTITY is an entity or table name; QUERY_STRING is the request's
    query string, e.g. 'status[eq]=published&order=title asc'.
    """
    loader = MetadataLoader(resolve_metadata_path())
    loader.load_all()
    registry = SchemaRegistry.from_loader(loader)

    schema = registry.get(entity) or registry.find(entity)
    if schema is None:
        click.echo(f"Error: unknown entity '{entity}'", err=True)
        raise SystemExit(1)

    context = RequestContext(
        RequestParams(query_string.lstrip("?")), schema, registry, DIALECTS[dialect]
    )
    try:
        built = context.apply_filters(context.new_query())
    except ModelRestError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    for label, statement in (("count", built.render_count()), ("data", built.render_data())):
        click.echo(click.style(f"{label}:", bold=True))
        click.echo(f"  {statement.sql}")
        if statement.params:
            click.echo(f"  params: {list(statement.params)}")

    preloads = context.preload_paths(built)
    if preloads:
        click.echo(click.style("preload:", bold=True))
        for path in preloads:
            click.echo(f"  {path}")
