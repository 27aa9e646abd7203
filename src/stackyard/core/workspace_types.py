"""Workspace data types."""

from dataclasses import dataclass, field, replace
from pathlib import Path

# Metadata keys stored alongside each workspace record
INTENT_KEY = "intent"
LAST_REBASED_KEY = "last_rebased_target_commit"
HAS_CONFLICTS_KEY = "has_conflicts"


@dataclass(frozen=True)
class Workspace:
    """An isolated working copy bound to a branch.

    target_branch is the branch this workspace is stacked on. It is either
    another workspace's branch or a plain repository branch (e.g. trunk).
    """

    id: int
    repo_path: Path
    workspace_path: Path
    branch_name: str
    target_branch: str | None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def title(self) -> str:
        """Display title: the recorded intent, falling back to the branch name."""
        return self.metadata.get(INTENT_KEY) or self.branch_name

    @property
    def last_rebased_target_commit(self) -> str | None:
        return self.metadata.get(LAST_REBASED_KEY)

    @property
    def has_conflicts(self) -> bool:
        """True while the last rebase stopped on conflicts the user has not cleared."""
        return self.metadata.get(HAS_CONFLICTS_KEY) == "true"

    def with_target(self, target_branch: str | None) -> "Workspace":
        """Return a copy pointing at a different target (immutable)."""
        return replace(self, target_branch=target_branch)

    def with_metadata(self, **updates: str) -> "Workspace":
        """Return a copy with metadata keys added or overwritten (immutable)."""
        merged = dict(self.metadata)
        merged.update(updates)
        return replace(self, metadata=merged)

    def without_metadata(self, *keys: str) -> "Workspace":
        """Return a copy with the given metadata keys removed (immutable)."""
        return replace(self, metadata={k: v for k, v in self.metadata.items() if k not in keys})


@dataclass(frozen=True)
class WorkspaceChainItem:
    """One step on the path from the root branch down to a workspace.

    is_target marks a plain branch with no workspace behind it; its path is empty.
    """

    branch: str
    path: str
    is_target: bool
