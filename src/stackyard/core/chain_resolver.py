"""Resolve the chain of target branches from a workspace up to its root branch."""

import logging
from collections.abc import Sequence

from stackyard.core.errors import CycleDetectedError
from stackyard.core.workspace_graph import WorkspaceGraph
from stackyard.core.workspace_types import Workspace, WorkspaceChainItem

logger = logging.getLogger(__name__)


def build_chain(
    workspace: Workspace, all_workspaces: Sequence[Workspace]
) -> list[WorkspaceChainItem]:
    """Build the ordered chain of branches the workspace is stacked on.

    Walks target edges upward starting at the workspace's target branch. Each
    branch owned by another workspace becomes an intermediate item; the first
    branch with no workspace behind it is the root and ends the walk.

    Args:
        workspace: Workspace to resolve the chain for
        all_workspaces: Every workspace record in the repository

    Returns:
        Chain items ordered root-to-leaf (the last item is the immediate
        target). Empty when the workspace has no target or targets itself.

    Raises:
        CycleDetectedError: If the walk revisits a branch

    Example:
        main <- feat-a (workspace) <- feat-b (workspace, subject)
        build_chain(feat_b, all) == [
            WorkspaceChainItem("main", "", is_target=True),
            WorkspaceChainItem("feat-a", "/wt/feat-a", is_target=False),
        ]
    """
    target = workspace.target_branch
    if not target or target == workspace.branch_name:
        return []

    graph = WorkspaceGraph(all_workspaces)
    chain: list[WorkspaceChainItem] = []
    visited: list[str] = [workspace.branch_name]
    current: str | None = target

    while current:
        if current in visited:
            logger.debug("Cycle while resolving chain for %s at %s", workspace.branch_name, current)
            raise CycleDetectedError(current, visited)
        visited.append(current)

        owner = graph.owner_of(current, exclude_id=workspace.id)
        if owner is None:
            chain.insert(0, WorkspaceChainItem(branch=current, path="", is_target=True))
            break

        chain.insert(
            0,
            WorkspaceChainItem(branch=current, path=str(owner.workspace_path), is_target=False),
        )
        if owner.target_branch == current:
            # Self-targeting workspace is a root context
            break
        current = owner.target_branch

    return chain


def get_ancestor_chain(workspaces: Sequence[Workspace], branch_name: str) -> list[str]:
    """List the target branches above branch_name, immediate parent first.

    Unlike build_chain this never raises: a cycle simply stops the walk, which
    is what listing and display code wants.
    """
    graph = WorkspaceGraph(workspaces)
    ancestors: list[str] = []
    visited = {branch_name}

    current = graph.target_of(branch_name)
    while current and current not in visited:
        ancestors.append(current)
        visited.add(current)
        current = graph.target_of(current)

    return ancestors
