"""CLI entry point for raml-parser."""

import logging
from pathlib import Path

import click

from raml_parser.errors import NotFoundError, RamlError
from raml_parser.loader import load_api_definition
from raml_parser.logging_utils import configure_split_stream_logging
from raml_parser.model.api_definition import ApiDefinition

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _load(doc_path: Path) -> ApiDefinition:
    """Parse a RAML document, turning parse failures into CLI errors."""
    try:
        return load_api_definition(doc_path)
    except RamlError as e:
        raise click.ClickException(f"{doc_path}: {e}") from e


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    envvar="RAML_PARSER_LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging verbosity.",
)
def main(log_level: str):
    """raml-parser: inspect RAML API definitions."""
    configure_split_stream_logging(level=getattr(logging, log_level.upper()))


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
def routes(doc_path: Path):
    """List every route as VERB /path."""
    api = _load(doc_path)
    for key in api.get_routes():
        click.echo(key)


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.argument("uri")
def resource(doc_path: Path, uri: str):
    """Show the resource a concrete URI resolves to."""
    api = _load(doc_path)
    try:
        found = api.get_resource_by_uri(uri)
    except NotFoundError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"{found.uri} ({found.display_name})")
    for verb in found.methods:
        click.echo(f"  {verb}")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
def types(doc_path: Path):
    """List the declared types and their kinds."""
    api = _load(doc_path)
    for name, type_ in api.types.items():
        suffix = f" (extends {type_.parent})" if type_.parent else ""
        click.echo(f"{name}: {type_.kind}{suffix}")
