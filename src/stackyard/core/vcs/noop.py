"""No-op Vcs wrapper for dry-run mode.

This module provides a Vcs wrapper that prevents execution of destructive
operations while delegating read-only operations to the wrapped implementation.
"""

from pathlib import Path

from stackyard.cli.output import user_output
from stackyard.core.vcs.abc import Commit, RebaseOutcome, Vcs


class NoopVcs(Vcs):
    """No-op wrapper that prevents execution of destructive operations.

    Usage:
        real_ops = RealVcs()
        noop_ops = NoopVcs(real_ops)

        # Prints message instead of rebasing
        noop_ops.rebase_onto(workspace_path, "main")
    """

    def __init__(self, wrapped: Vcs) -> None:
        """Create a dry-run wrapper around a Vcs implementation.

        Args:
            wrapped: The Vcs implementation to wrap (usually RealVcs or FakeVcs)
        """
        self._wrapped = wrapped

    # Read-only operations: delegate to wrapped implementation

    def get_repository_root(self, cwd: Path) -> Path | None:
        return self._wrapped.get_repository_root(cwd)

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._wrapped.get_current_branch(cwd)

    def get_default_branch(self, repo_root: Path) -> str:
        return self._wrapped.get_default_branch(repo_root)

    def list_branches(self, repo_root: Path) -> list[str]:
        return self._wrapped.list_branches(repo_root)

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        return self._wrapped.get_branch_head(repo_root, branch)

    def get_commit_log(
        self, workspace_path: Path, target_branch: str, *, limit: int
    ) -> list[Commit]:
        return self._wrapped.get_commit_log(workspace_path, target_branch, limit=limit)

    # Destructive operations: print what would happen

    def rebase_onto(self, workspace_path: Path, target_branch: str) -> RebaseOutcome:
        """Print dry-run message and report a clean rebase."""
        user_output(f"[DRY RUN] Would rebase {workspace_path} onto {target_branch}")
        return RebaseOutcome(success=True, has_conflicts=False, message="dry run")

    def add_worktree(self, repo_root: Path, path: Path, *, branch: str, base: str | None) -> None:
        """Print dry-run message instead of adding worktree."""
        base_str = f" from {base}" if base else ""
        user_output(f"[DRY RUN] Would run: git worktree add -b {branch} {path}{base_str}")

    def remove_worktree(self, repo_root: Path, path: Path, *, force: bool) -> None:
        """Print dry-run message instead of removing worktree."""
        force_str = "--force " if force else ""
        user_output(f"[DRY RUN] Would run: git worktree remove {force_str}{path}")
