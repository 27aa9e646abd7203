import click

from stackyard.cli.core import discover_repo_context, fail, require_coordinator, resolve_workspace
from stackyard.cli.rendering import raise_for_failure, render_rebase_result
from stackyard.core.context import StackyardContext
from stackyard.core.errors import RebaseFailure


@click.command("rebase")
@click.argument("name", metavar="WORKSPACE", required=False)
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Rebase even if the target has not moved since the last rebase.",
)
@click.pass_obj
def rebase_cmd(ctx: StackyardContext, name: str | None, force: bool) -> None:
    """Rebase WORKSPACE onto the current tip of its target.

    Workspaces without a target are rebased onto the default branch.
    """
    repo = discover_repo_context(ctx)
    coordinator = require_coordinator(ctx)
    workspace = resolve_workspace(ctx, name)

    result = coordinator.check_and_rebase(
        repo.root, workspace.id, workspace.target_branch, force=force
    )
    render_rebase_result(workspace.branch_name, result)
    try:
        raise_for_failure(workspace.branch_name, result)
    except RebaseFailure as e:
        fail(str(e))
