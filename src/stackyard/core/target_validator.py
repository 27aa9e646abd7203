"""Compute legal target branches for a workspace.

A branch may target anything except itself and the branches stacked on top of
it: pointing at a descendant would close a loop in the target graph.
"""

from collections.abc import Iterable, Sequence

from stackyard.core.errors import CycleDetectedError
from stackyard.core.workspace_graph import WorkspaceGraph
from stackyard.core.workspace_types import Workspace


def get_valid_targets(
    branch_name: str,
    workspaces: Sequence[Workspace],
    branches: Iterable[str] = (),
) -> list[str]:
    """Return every known branch that branch_name may target.

    Args:
        branch_name: Branch whose target is being chosen
        workspaces: All workspace records in the repository
        branches: Additional branch names (e.g. from the VCS branch listing)

    Returns:
        Sorted list of legal targets: known branches minus branch_name and
        minus every descendant of branch_name

    Example:
        A (no target) <- B <- C
        get_valid_targets("B", ws) == ["A"]
        get_valid_targets("C", ws) == ["A", "B"]
    """
    graph = WorkspaceGraph(workspaces)
    excluded = graph.descendants_of(branch_name)
    excluded.add(branch_name)
    return sorted(graph.known_branches(branches) - excluded)


def would_create_cycle(branch_name: str, new_target: str, workspaces: Sequence[Workspace]) -> bool:
    """Check whether pointing branch_name at new_target would close a loop."""
    if new_target == branch_name:
        return True
    return new_target in WorkspaceGraph(workspaces).descendants_of(branch_name)


def validate_target(branch_name: str, new_target: str, workspaces: Sequence[Workspace]) -> None:
    """Raise CycleDetectedError if new_target is not a legal target for branch_name."""
    if not would_create_cycle(branch_name, new_target, workspaces):
        return

    # Reconstruct the loop the retarget would close, e.g. A -> C -> B -> A
    graph = WorkspaceGraph(workspaces)
    path = [branch_name]
    current: str | None = new_target
    while current and current != branch_name and current not in path:
        path.append(current)
        current = graph.target_of(current)
    raise CycleDetectedError(branch_name, path)
