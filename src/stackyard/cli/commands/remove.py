import click

from stackyard.cli.core import discover_repo_context, fail, require_store, resolve_workspace
from stackyard.cli.output import user_output
from stackyard.core.context import StackyardContext
from stackyard.core.workspace_graph import WorkspaceGraph


@click.command("remove")
@click.argument("name", metavar="WORKSPACE")
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Remove even if other workspaces target it or the worktree has changes.",
)
@click.option(
    "--keep-worktree",
    is_flag=True,
    help="Only forget the workspace record, leave the directory in place.",
)
@click.pass_obj
def remove_cmd(ctx: StackyardContext, name: str, force: bool, keep_worktree: bool) -> None:
    """Remove the workspace WORKSPACE (branch name or id).

    The branch itself is kept, so workspaces stacked on it keep a valid target.
    """
    repo = discover_repo_context(ctx)
    store = require_store(ctx)
    workspace = resolve_workspace(ctx, name)

    dependents = WorkspaceGraph(store.list_workspaces()).dependents_of(workspace.branch_name)
    if dependents and not force:
        names = ", ".join(dependents)
        fail(
            f"Workspaces stacked on {workspace.branch_name}: {names}\n"
            f"Retarget them first, or pass --force."
        )

    if workspace.has_conflicts:
        detail = "left in place" if keep_worktree else "discarded with the worktree"
        user_output(
            click.style("⚠ ", fg="yellow")
            + f"{workspace.branch_name} has unresolved rebase conflicts ({detail})"
        )

    if not keep_worktree:
        try:
            ctx.vcs.remove_worktree(repo.root, workspace.workspace_path, force=force)
        except RuntimeError as e:
            fail(str(e))

    store.delete_workspace(workspace.id)
    user_output(f"✓ Removed workspace {workspace.branch_name}")

    for dependent in dependents:
        user_output(
            click.style("  ⚠ ", fg="yellow")
            + f"{dependent} still targets branch {workspace.branch_name}"
        )
