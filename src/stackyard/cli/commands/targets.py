import click

from stackyard.cli.core import discover_repo_context, require_store, resolve_workspace
from stackyard.cli.json_output import emit_json
from stackyard.cli.output import machine_output
from stackyard.core.context import StackyardContext
from stackyard.core.target_validator import get_valid_targets


@click.command("targets")
@click.argument("name", metavar="BRANCH", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output the candidates as JSON.")
@click.pass_obj
def targets_cmd(ctx: StackyardContext, name: str | None, as_json: bool) -> None:
    """List branches BRANCH may target without creating a cycle.

    BRANCH may be a workspace branch or a branch that has no workspace yet.
    Defaults to the workspace containing the current directory.
    """
    repo = discover_repo_context(ctx)
    store = require_store(ctx)

    if name is None or store.find_by_branch(name) is not None:
        branch = resolve_workspace(ctx, name).branch_name
    else:
        branch = name

    candidates = get_valid_targets(
        branch, store.list_workspaces(), ctx.vcs.list_branches(repo.root)
    )

    if as_json:
        emit_json({"branch": branch, "targets": candidates})
        return

    for candidate in candidates:
        machine_output(candidate)
