"""blar CLI entry point."""

import importlib
import logging

import click
import yaml

from blar.api.app import App
from blar.api.config import AppConfig
from blar.api.routes import entity_routes
from blar.errors import ParseError
from blar.metadata.export import describe_entity
from blar.metadata.registry import EntityRegistry
from blar.persistence.config import DatabaseConfig


def load_model(reference: str) -> type:
    """Import a model from a "package.module:ClassName" reference."""
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(
            f"'{reference}' is not of the form module:ClassName", param_hint="MODELS"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import '{module_name}': {e}", param_hint="MODELS")
    try:
        return getattr(module, attr)
    except AttributeError:
        raise click.BadParameter(
            f"module '{module_name}' has no attribute '{attr}'", param_hint="MODELS"
        )


def _parse_all(references: tuple[str, ...]):
    registry = EntityRegistry()
    descriptors = []
    for reference in references:
        try:
            descriptors.append(registry.parse(load_model(reference)))
        except ParseError as e:
            raise click.BadParameter(str(e), param_hint="MODELS")
    return descriptors


@click.group()
def cli():
    """blar: REST APIs from annotated dataclasses."""
    pass


@cli.command()
@click.argument("models", nargs=-1, required=True)
def describe(models: tuple[str, ...]):
    """Print the parsed metadata of MODELS as YAML."""
    for descriptor in _parse_all(models):
        click.echo("---")
        click.echo(yaml.safe_dump(describe_entity(descriptor), sort_keys=False), nl=False)


@cli.command()
@click.argument("models", nargs=-1, required=True)
def routes(models: tuple[str, ...]):
    """List the REST routes generated for MODELS."""
    for descriptor in _parse_all(models):
        for method, path in entity_routes(descriptor):
            click.echo(f"{method:<7}{path}")


@cli.command()
@click.argument("models", nargs=-1, required=True)
@click.option("--host", default=None, help="Interface to bind (default BLAR_HOST or 127.0.0.1).")
@click.option("--port", default=None, type=int, help="Port (default BLAR_PORT or 8080).")
@click.option("--database-url", default=None, help="Database URL (default DATABASE_URL).")
def serve(models: tuple[str, ...], host: str | None, port: int | None, database_url: str | None):
    """Register MODELS and serve their routes."""
    config = AppConfig.from_env()
    if host:
        config.host = host
    if port:
        config.port = port
    if database_url:
        config.database = DatabaseConfig(url=database_url)

    logging.basicConfig(level=config.log_level.upper())
    model_types = [load_model(reference) for reference in models]
    app = App.from_config(config)
    try:
        app.register(*model_types)
    except ParseError as e:
        raise click.BadParameter(str(e), param_hint="MODELS")

    click.echo(f"Serving {len(app.entities)} entities on http://{config.host}:{config.port}")
    app.start()
