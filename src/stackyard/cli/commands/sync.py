import click

from stackyard.cli.core import discover_repo_context, fail, require_coordinator, require_store
from stackyard.cli.output import user_output
from stackyard.cli.rendering import render_rebase_result
from stackyard.core.context import StackyardContext


@click.command("sync")
@click.argument("branch", metavar="BRANCH", required=False)
@click.pass_obj
def sync_cmd(ctx: StackyardContext, branch: str | None) -> None:
    """Bring stacked workspaces up to date with their targets.

    With BRANCH, only workspaces stacked directly on BRANCH are rebased (use
    after BRANCH moved). Without it, every workspace with a target is checked.
    Workspaces whose target has not moved are left alone.
    """
    repo = discover_repo_context(ctx)
    store = require_store(ctx)
    coordinator = require_coordinator(ctx)

    if branch is not None:
        results = coordinator.rebase_dependents(repo.root, branch)
    else:
        results = coordinator.check_and_rebase_all(repo.root)

    if not results:
        user_output("No stacked workspaces to sync")
        return

    branches = {ws.id: ws.branch_name for ws in store.list_workspaces()}
    for result in results:
        render_rebase_result(branches.get(result.workspace_id, str(result.workspace_id)), result)

    failed = [r for r in results if r.status == "failed"]
    conflicted = [r for r in results if r.status == "conflicts"]
    if conflicted:
        user_output(
            click.style("⚠ ", fg="yellow")
            + f"{len(conflicted)} workspace(s) have conflicts to resolve"
        )
    if failed:
        fail(f"{len(failed)} of {len(results)} workspace(s) could not be rebased")
