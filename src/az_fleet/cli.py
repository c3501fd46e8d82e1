"""Command line interface for az-fleet.

Provides three subcommands:
    az-fleet helpers  – list the registered builders
    az-fleet build    – build (and render) one entity from a JSON config
    az-fleet peering  – peering-count arithmetic for mesh / hub-spoke layouts
"""

import json
import logging
from typing import Any

import click

from az_fleet import __version__
from az_fleet.errors import FleetValidationError
from az_fleet.registry import create_registry
from az_fleet.services.peering import peering_count
from az_fleet.settings import FleetSettings, get_settings

logger = logging.getLogger(__name__)


def _setup_logging(level: int = logging.WARNING) -> None:
    """Configure the root ``az_fleet`` logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s - %(message)s"))
    app_logger = logging.getLogger("az_fleet")
    app_logger.handlers = [handler]
    app_logger.setLevel(level)
    app_logger.propagate = False


def _to_jsonable(result: Any) -> Any:
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    if hasattr(result, "model_dump"):
        return result.model_dump(mode="json")
    return result


@click.group()
@click.version_option(version=__version__, prog_name="az-fleet")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Azure Fleet – elastic compute topology builders."""
    settings = get_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    _setup_logging(level=level)
    ctx.obj = {"settings": settings, "registry": create_registry(settings)}


@cli.command()
@click.pass_obj
def helpers(obj: dict[str, Any]) -> None:
    """List registered builders."""
    registry = obj["registry"]
    for name in registry.names():
        click.echo(f"{click.style(name, fg='cyan')}  {registry.get(name).summary}")


@cli.command()
@click.argument("name")
@click.argument("config_file", type=click.File("r"))
@click.option(
    "--raw",
    is_flag=True,
    default=False,
    help="Emit the validated domain entity instead of the rendered resource.",
)
@click.option(
    "--output",
    "-o",
    type=click.File("w"),
    default="-",
    show_default=True,
    help="File to write the JSON document to.",
)
@click.pass_obj
def build(obj: dict[str, Any], name: str, config_file: Any, raw: bool, output: Any) -> None:
    """Build NAME from the JSON CONFIG_FILE ('-' reads stdin)."""
    registry = obj["registry"]
    settings: FleetSettings = obj["settings"]

    if name not in registry.entries:
        raise click.BadParameter(
            f"unknown builder '{name}' (see 'az-fleet helpers')", param_hint="NAME"
        )
    try:
        config = json.load(config_file)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON config: {exc}") from exc

    try:
        if raw:
            result = _to_jsonable(registry.build(name, config))
        else:
            result = registry.render(name, config)
    except FleetValidationError as exc:
        logger.debug("%s failed with %s", name, exc.category)
        raise click.ClickException(exc.message) from exc

    output.write(json.dumps(result, indent=settings.json_indent or None))
    output.write("\n")


@cli.command()
@click.argument("topology", type=click.Choice(["mesh", "hub-spoke"]))
@click.argument("count", type=int)
def peering(topology: str, count: int) -> None:
    """Print peering connections needed for COUNT VNets (mesh) or spokes (hub-spoke)."""
    try:
        click.echo(peering_count(topology, count))
    except FleetValidationError as exc:
        raise click.ClickException(exc.message) from exc
