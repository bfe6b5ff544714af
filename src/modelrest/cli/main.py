"""modelrest CLI entry point."""

import click


@click.group()
def cli():
    """modelrest — metadata-driven REST listing CLI."""
    pass


# Register subcommand groups
from modelrest.cli.metadata_cmd import metadata  # noqa: E402
from modelrest.cli.query_cmd import query  # noqa: E402

cli.add_command(metadata)
cli.add_command(query)
