import logging

import click

from stackyard.cli.core import (
    discover_repo_context,
    fail,
    require_store,
    styled_branch,
    worktree_path_for,
)
from stackyard.cli.output import user_output
from stackyard.core.context import StackyardContext
from stackyard.core.errors import CycleDetectedError
from stackyard.core.target_validator import validate_target
from stackyard.core.workspace_types import INTENT_KEY, LAST_REBASED_KEY

logger = logging.getLogger(__name__)


@click.command("create")
@click.argument("branch", metavar="BRANCH")
@click.option(
    "-t",
    "--target",
    type=str,
    default=None,
    help="Branch to stack the workspace on (default: configured default target, then trunk).",
)
@click.option("-m", "--intent", type=str, default=None, help="Short description of the work.")
@click.pass_obj
def create_cmd(ctx: StackyardContext, branch: str, target: str | None, intent: str | None) -> None:
    """Create a workspace on a new BRANCH stacked on a target branch."""
    repo = discover_repo_context(ctx)
    store = require_store(ctx)

    if store.find_by_branch(branch) is not None:
        fail(f"Workspace for branch '{branch}' already exists")

    effective_target = target or ctx.local_config.default_target or ctx.trunk_branch
    if effective_target is None:
        fail("Could not determine a target branch. Pass --target.")

    try:
        validate_target(branch, effective_target, store.list_workspaces())
    except CycleDetectedError as e:
        fail(str(e))

    workspace_path = worktree_path_for(repo.worktrees_dir, branch)
    if workspace_path.exists():
        fail(f"Path already exists: {workspace_path}")

    try:
        ctx.vcs.add_worktree(repo.root, workspace_path, branch=branch, base=effective_target)
    except RuntimeError as e:
        fail(str(e))

    metadata: dict[str, str] = {}
    if intent:
        metadata[INTENT_KEY] = intent
    # The new branch starts at the target's tip, so it is already reconciled
    tip = ctx.vcs.get_branch_head(repo.root, effective_target)
    if tip is not None:
        metadata[LAST_REBASED_KEY] = tip

    workspace = store.create_workspace(
        workspace_path=workspace_path,
        branch_name=branch,
        target_branch=effective_target,
        metadata=metadata,
    )
    logger.debug("Created workspace %s (id=%s)", workspace.branch_name, workspace.id)

    user_output(
        f"Created workspace {styled_branch(branch)} "
        f"on {effective_target} at {workspace_path}"
    )
