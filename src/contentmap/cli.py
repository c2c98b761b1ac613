"""CLI interface for contentmap.

Command-line tool for serving a content repository and inspecting how
request URLs resolve.
"""

import logging
import sys
from pathlib import Path

import click
from yarl import URL

from contentmap.config import Config
from contentmap.core.context import RequestContext
from contentmap.core.path import Path as NodePath
from contentmap.core.store import FileSystemWorkspaceRegistry
from contentmap.errors import ContentmapError
from contentmap.mapper import ContentMapper

_CONFIG_HELP = "Path to configuration file (default: auto-discover contentmap.toml)"


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def cli(verbose: bool) -> None:
    """contentmap - workspace-aware content request mapping."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=_CONFIG_HELP,
)
@click.option(
    "--root-dir",
    "-r",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Content root directory, one subdirectory per workspace (overrides config)",
)
@click.option(
    "--default-workspace",
    "-w",
    default=None,
    help="Workspace used when a request selects none (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
def serve(
    config_path: Path | None,
    root_dir: Path | None,
    default_workspace: str | None,
    host: str | None,
    port: int | None,
) -> None:
    """Start the content server."""
    from contentmap.server import run_server

    config = Config.load(config_path).with_overrides(
        host=host,
        port=port,
        root_dir=root_dir,
        default_workspace=default_workspace,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Content root: {config.content.root_dir}")
    if config.content.default_workspace:
        click.echo(f"Default workspace: {config.content.default_workspace}")
    else:
        click.echo("Default workspace: none (requests must select one)")

    run_server(config)


@cli.command()
@click.argument("url")
@click.option(
    "--workspace",
    "-w",
    default=None,
    help="Select a workspace explicitly, as the query parameter would",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=_CONFIG_HELP,
)
def resolve(url: str, workspace: str | None, config_path: Path | None) -> None:
    """Show which content node a URL resolves to."""
    config = Config.load(config_path)
    mapper = ContentMapper.from_config(config)

    request_url = URL(url)
    if workspace is not None:
        request_url = request_url.update_query({config.workspace.param_name: workspace})
    ctx = RequestContext.for_url(request_url)

    if mapper.resolver.is_reserved(ctx.url):
        click.echo(click.style(f"Reserved path, not resolved: {ctx.url.path}", fg="yellow"))
        sys.exit(1)

    try:
        node = mapper.resolver.locate(NodePath.parse(ctx.url.path), ctx)
    except ContentmapError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    if node is None:
        click.echo(click.style(f"No node found for {ctx.url.path}", fg="red"), err=True)
        sys.exit(1)

    click.echo(f"Workspace: {node.workspace}")
    click.echo(f"Node: {node.path}")
    click.echo(f"Type: {node.node_type.value}")
    click.echo(f"URI: {mapper.translator.path_for_node(node)}")


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=_CONFIG_HELP,
)
def workspaces(config_path: Path | None) -> None:
    """List the workspaces below the content root."""
    config = Config.load(config_path)
    names = FileSystemWorkspaceRegistry(config.content.root_dir).workspaces()

    if not names:
        click.echo(f"No workspaces in {config.content.root_dir}", err=True)
        sys.exit(1)

    for name in names:
        marker = " (default)" if name == config.content.default_workspace else ""
        click.echo(f"{name}{marker}")
