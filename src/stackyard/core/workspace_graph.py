"""In-memory graph over workspace records.

Nodes are branches; each workspace contributes an edge from its branch to its
target branch. The graph is rebuilt from the flat workspace list whenever that
list changes, so deletions and retargets are reflected by recomputation.
"""

from collections.abc import Iterable

from stackyard.core.workspace_types import Workspace


class WorkspaceGraph:
    """Read-only index of workspaces by branch, with forward and reverse edges."""

    def __init__(self, workspaces: Iterable[Workspace]) -> None:
        self._workspaces = list(workspaces)
        self._by_branch: dict[str, list[Workspace]] = {}
        self._dependents: dict[str, list[str]] = {}

        for ws in self._workspaces:
            self._by_branch.setdefault(ws.branch_name, []).append(ws)

        for ws in self._workspaces:
            target = ws.target_branch
            if target is None or target == ws.branch_name:
                continue
            self._dependents.setdefault(target, []).append(ws.branch_name)

    @property
    def workspaces(self) -> list[Workspace]:
        return list(self._workspaces)

    def owner_of(self, branch: str, *, exclude_id: int | None = None) -> Workspace | None:
        """Find the workspace that has branch checked out.

        Args:
            branch: Branch name to look up
            exclude_id: Workspace id to ignore (the subject of a chain walk)

        Returns:
            The owning workspace, or None when branch is a plain branch
        """
        for ws in self._by_branch.get(branch, []):
            if ws.id != exclude_id:
                return ws
        return None

    def target_of(self, branch: str) -> str | None:
        owner = self.owner_of(branch)
        if owner is None:
            return None
        return owner.target_branch

    def dependents_of(self, branch: str) -> list[str]:
        """Branches whose workspace targets branch directly."""
        return list(self._dependents.get(branch, []))

    def descendants_of(self, branch: str) -> set[str]:
        """All branches stacked (directly or transitively) on branch.

        Traversal is iterative and tracks visited branches, so a corrupted graph
        containing a cycle still terminates. branch itself is only included when
        it sits on such a cycle.
        """
        descendants: set[str] = set()
        stack = self.dependents_of(branch)
        while stack:
            current = stack.pop()
            if current in descendants:
                continue
            descendants.add(current)
            stack.extend(self.dependents_of(current))
        return descendants

    def known_branches(self, extra: Iterable[str] = ()) -> set[str]:
        """Every branch the graph knows about: owned, targeted, or supplied."""
        branches = set(extra)
        for ws in self._workspaces:
            branches.add(ws.branch_name)
            if ws.target_branch:
                branches.add(ws.target_branch)
        return branches

    def roots(self) -> list[Workspace]:
        """Workspaces whose target is missing or is not owned by another workspace."""
        roots = []
        for ws in self._workspaces:
            target = ws.target_branch
            if target is None or self.owner_of(target, exclude_id=ws.id) is None:
                roots.append(ws)
        return roots
