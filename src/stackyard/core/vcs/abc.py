"""Version-control operations interface.

This module provides a clean abstraction over the version-control backend,
making the graph and rebase logic testable without a real repository.

Architecture:
- Vcs: Abstract base class defining the interface
- RealVcs: Production implementation using git via subprocess
- NoopVcs: Dry-run wrapper that delegates reads and skips writes
- FakeVcs: In-memory implementation for tests
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Commit:
    """A single commit as returned by a commit log query.

    bookmarks are the local branch names pointing at this commit.
    """

    id: str
    short_id: str
    parent_ids: list[str]
    bookmarks: list[str]
    author: str
    timestamp: str  # ISO 8601 format
    is_working_copy: bool
    description: str = ""


@dataclass(frozen=True)
class RebaseOutcome:
    """Raw result of the rebase primitive.

    A rebase that stops on conflicts reports success=True with has_conflicts=True:
    the working copy was moved onto the target and the conflicts are left for
    the user to resolve.
    """

    success: bool
    has_conflicts: bool
    conflicted_files: list[str] = field(default_factory=list)
    message: str = ""


class Vcs(ABC):
    """Abstract interface for version-control operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the root of the main repository containing cwd, or None."""
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch (None when detached)."""
        ...

    @abstractmethod
    def get_default_branch(self, repo_root: Path) -> str:
        """Get the repository's default (trunk) branch name."""
        ...

    @abstractmethod
    def list_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        ...

    @abstractmethod
    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        """Get the commit id the branch currently points at, or None if missing."""
        ...

    @abstractmethod
    def get_commit_log(
        self, workspace_path: Path, target_branch: str, *, limit: int
    ) -> list[Commit]:
        """Get the commit window for a workspace and its target branch.

        Args:
            workspace_path: Working copy whose history is queried
            target_branch: Branch whose history is unioned with the workspace's
            limit: Maximum number of commits to return

        Returns:
            Commits ordered most-recent-first

        Raises:
            RuntimeError: If the backend query fails
        """
        ...

    @abstractmethod
    def rebase_onto(self, workspace_path: Path, target_branch: str) -> RebaseOutcome:
        """Rebase the working copy at workspace_path onto target_branch's tip.

        Raises:
            RuntimeError: If the backend could not be invoked at all
        """
        ...

    @abstractmethod
    def add_worktree(self, repo_root: Path, path: Path, *, branch: str, base: str | None) -> None:
        """Create a working copy at path on a new branch started from base."""
        ...

    @abstractmethod
    def remove_worktree(self, repo_root: Path, path: Path, *, force: bool) -> None:
        """Remove the working copy at path."""
        ...
