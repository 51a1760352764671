"""Quarry CLI -- Explore a dependency graph resolved on demand.

Entry point for the ``quarry`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    sample -- Resolve the demo inbox response for a request.
    graph  -- Show the demo graph's factories and edges.

Usage::

    quarry sample
    quarry sample --no-unread --format json
    quarry -v sample --timeout 0.5
    quarry --config quarry.yaml graph
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from quarry import __version__
from quarry.cli.graph_cmd import graph_command
from quarry.cli.sample_cmd import sample_command
from quarry.config import load_settings
from quarry.exceptions import ConfigError

_VERBOSITY_LEVELS = ("WARNING", "INFO", "DEBUG")


def configure_logging(level: str) -> None:
    """Send log records at ``level`` and above to stderr."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file.",
)
@click.option(
    "-v", "--verbose",
    count=True,
    help="Increase log verbosity (-v info, -vv debug).",
)
@click.pass_context
def cli(click_ctx: click.Context, config_path: Path | None, verbose: int) -> None:
    """Quarry: resolve named values through a dependency graph."""
    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    level = settings.log_level
    if verbose:
        level = _VERBOSITY_LEVELS[min(verbose, len(_VERBOSITY_LEVELS) - 1)]
    configure_logging(level)
    click_ctx.obj = {"settings": settings}


cli.add_command(sample_command)
cli.add_command(graph_command)
