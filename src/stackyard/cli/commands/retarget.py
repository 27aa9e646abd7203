import click

from stackyard.cli.core import fail, require_coordinator, resolve_workspace
from stackyard.cli.output import user_output
from stackyard.cli.rendering import raise_for_failure, render_rebase_result
from stackyard.core.context import StackyardContext
from stackyard.core.errors import CycleDetectedError, RebaseFailure


@click.command("retarget")
@click.argument("name", metavar="WORKSPACE")
@click.argument("target", metavar="TARGET")
@click.pass_obj
def retarget_cmd(ctx: StackyardContext, name: str, target: str) -> None:
    """Stack WORKSPACE on TARGET, rebasing it onto TARGET's tip.

    The new target is recorded only when the rebase goes through. A rebase
    that stops on conflicts still counts: resolve them in the workspace.
    """
    coordinator = require_coordinator(ctx)
    workspace = resolve_workspace(ctx, name)

    if workspace.target_branch == target:
        user_output(f"{workspace.branch_name} already targets {target}")
        return

    try:
        result = coordinator.set_target(workspace, target)
    except CycleDetectedError as e:
        fail(str(e))

    render_rebase_result(workspace.branch_name, result)
    try:
        raise_for_failure(workspace.branch_name, result)
    except RebaseFailure as e:
        previous = workspace.target_branch or "(none)"
        fail(f"Retarget aborted, target left as {previous}: {e}")

    user_output(f"✓ {workspace.branch_name} now targets {target}")
