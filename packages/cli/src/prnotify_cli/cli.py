"""CLI entry point for prnotify.

Commands:
  notify      mention the humans attached to a bot-authored PR
  candidates  show who would be mentioned, and why the others are not
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from prnotify_cli.commands.candidates import candidates_cmd
from prnotify_cli.commands.notify import notify_cmd


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )
    # PyGithub logs every request at DEBUG.
    logging.getLogger("github").setLevel(logging.INFO if verbose else logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("prnotify"),
    prog_name="prnotify",
)
@click.option(
    "--config",
    "config_path",
    default=".prnotify.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRNOTIFY_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Mention the humans behind bot-authored GitHub pull requests."""
    setup_logging(verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(notify_cmd)
main.add_command(candidates_cmd)
