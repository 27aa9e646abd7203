"""Fake Vcs implementation for testing.

FakeVcs is an in-memory implementation configured entirely through its
constructor. Mutating operations are recorded for assertions.
"""

from pathlib import Path

from stackyard.core.vcs.abc import Commit, RebaseOutcome, Vcs


class FakeVcs(Vcs):
    """In-memory Vcs for tests.

    This class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(
        self,
        *,
        repository_roots: dict[Path, Path] | None = None,
        current_branches: dict[Path, str] | None = None,
        default_branches: dict[Path, str] | None = None,
        branches: dict[Path, list[str]] | None = None,
        branch_heads: dict[str, str] | None = None,
        commit_logs: dict[Path, list[Commit]] | None = None,
        rebase_outcomes: dict[Path, RebaseOutcome] | None = None,
        log_errors: dict[Path, str] | None = None,
        rebase_errors: dict[Path, str] | None = None,
    ) -> None:
        """Create FakeVcs with pre-configured state.

        Args:
            repository_roots: Mapping of cwd -> repository root
            current_branches: Mapping of working copy path -> checked-out branch
            default_branches: Mapping of repository root -> default branch
            branches: Mapping of repository root -> local branch names
            branch_heads: Mapping of branch name -> commit id
            commit_logs: Mapping of workspace path -> commits (most-recent-first)
            rebase_outcomes: Mapping of workspace path -> outcome (default: clean)
            log_errors: Mapping of workspace path -> message raised by get_commit_log
            rebase_errors: Mapping of workspace path -> message raised by rebase_onto
        """
        self._repository_roots = repository_roots or {}
        self._current_branches = current_branches or {}
        self._default_branches = default_branches or {}
        self._branches = branches or {}
        self._branch_heads = branch_heads or {}
        self._commit_logs = commit_logs or {}
        self._rebase_outcomes = rebase_outcomes or {}
        self._log_errors = log_errors or {}
        self._rebase_errors = rebase_errors or {}

        self._rebase_calls: list[tuple[Path, str]] = []
        self._log_calls: list[tuple[Path, str, int]] = []
        self._added_worktrees: list[tuple[Path, str, str | None]] = []
        self._removed_worktrees: list[Path] = []

    def get_repository_root(self, cwd: Path) -> Path | None:
        for path, root in self._repository_roots.items():
            if cwd == path or path in cwd.parents:
                return root
        return None

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._current_branches.get(cwd)

    def get_default_branch(self, repo_root: Path) -> str:
        return self._default_branches.get(repo_root, "main")

    def list_branches(self, repo_root: Path) -> list[str]:
        return list(self._branches.get(repo_root, []))

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        return self._branch_heads.get(branch)

    def get_commit_log(
        self, workspace_path: Path, target_branch: str, *, limit: int
    ) -> list[Commit]:
        self._log_calls.append((workspace_path, target_branch, limit))
        if workspace_path in self._log_errors:
            raise RuntimeError(self._log_errors[workspace_path])
        return list(self._commit_logs.get(workspace_path, []))[:limit]

    def rebase_onto(self, workspace_path: Path, target_branch: str) -> RebaseOutcome:
        self._rebase_calls.append((workspace_path, target_branch))
        if workspace_path in self._rebase_errors:
            raise RuntimeError(self._rebase_errors[workspace_path])
        return self._rebase_outcomes.get(
            workspace_path, RebaseOutcome(success=True, has_conflicts=False)
        )

    def add_worktree(self, repo_root: Path, path: Path, *, branch: str, base: str | None) -> None:
        self._added_worktrees.append((path, branch, base))

    def remove_worktree(self, repo_root: Path, path: Path, *, force: bool) -> None:
        self._removed_worktrees.append(path)

    @property
    def rebase_calls(self) -> list[tuple[Path, str]]:
        """Read-only access to (workspace_path, target_branch) rebase calls."""
        return list(self._rebase_calls)

    @property
    def log_calls(self) -> list[tuple[Path, str, int]]:
        """Read-only access to (workspace_path, target_branch, limit) log queries."""
        return list(self._log_calls)

    @property
    def added_worktrees(self) -> list[tuple[Path, str, str | None]]:
        """Read-only access to (path, branch, base) worktree creations."""
        return list(self._added_worktrees)

    @property
    def removed_worktrees(self) -> list[Path]:
        return list(self._removed_worktrees)
