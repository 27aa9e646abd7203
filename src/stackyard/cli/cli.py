import logging
import os

import click

from stackyard import __version__
from stackyard.cli.commands.chain import chain_cmd
from stackyard.cli.commands.config import config_group
from stackyard.cli.commands.create import create_cmd
from stackyard.cli.commands.graph import graph_cmd
from stackyard.cli.commands.list import list_cmd
from stackyard.cli.commands.rebase import rebase_cmd
from stackyard.cli.commands.remove import remove_cmd
from stackyard.cli.commands.retarget import retarget_cmd
from stackyard.cli.commands.sync import sync_cmd
from stackyard.cli.commands.targets import targets_cmd
from stackyard.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


def _configure_logging() -> None:
    if os.getenv("STACKYARD_DEBUG"):
        logging.basicConfig(
            level=logging.DEBUG,
            format="[DEBUG %(name)s:%(lineno)d] %(message)s",
        )


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, prog_name="stackyard")
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print rebases, worktree changes and record updates instead of performing them.",
)
@click.pass_context
def cli(ctx: click.Context, dry_run: bool) -> None:
    """Manage stacked workspaces: worktrees that target each other's branches."""
    _configure_logging()
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(dry_run=dry_run)


cli.add_command(chain_cmd)
cli.add_command(config_group)
cli.add_command(create_cmd)
cli.add_command(graph_cmd)
cli.add_command(list_cmd)
cli.add_command(rebase_cmd)
cli.add_command(remove_cmd)
cli.add_command(retarget_cmd)
cli.add_command(sync_cmd)
cli.add_command(targets_cmd)


def main() -> None:
    """CLI entry point used by the `stackyard` console script."""
    cli()
