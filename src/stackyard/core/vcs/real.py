"""Production Vcs implementation using git subprocess calls."""

import logging
import subprocess
from pathlib import Path

from stackyard.core.subprocess import run_subprocess_with_context
from stackyard.core.vcs.abc import Commit, RebaseOutcome, Vcs

logger = logging.getLogger(__name__)

# Tab-separated fields; the subject goes last because it may itself contain tabs
LOG_FORMAT = "%H%x09%h%x09%P%x09%an%x09%aI%x09%D%x09%s"


def parse_decorations(decorations: str) -> list[str]:
    """Extract local branch names from a %D decoration string.

    Example:
        >>> parse_decorations("HEAD -> feature, main, tag: v1.0")
        ['feature', 'main']
    """
    names: list[str] = []
    for raw in decorations.split(","):
        ref = raw.strip()
        if not ref or ref == "HEAD" or ref.startswith("tag: "):
            continue
        if ref.startswith("HEAD -> "):
            ref = ref[len("HEAD -> ") :]
        names.append(ref)
    return names


def parse_commit_log(output: str, head_id: str | None) -> list[Commit]:
    """Parse `git log --format=LOG_FORMAT` output into Commit records.

    Args:
        output: Raw stdout from git log
        head_id: Full id of the working copy's HEAD commit, if known

    Returns:
        Commits in the order git printed them (most-recent-first).
        Malformed lines are skipped.
    """
    commits: list[Commit] = []
    for line in output.splitlines():
        if not line.strip():
            continue

        parts = line.split("\t", 6)
        if len(parts) < 7:
            logger.debug("Skipping malformed log line: %r", line)
            continue

        commit_id, short_id, parents, author, timestamp, decorations, subject = parts
        commits.append(
            Commit(
                id=commit_id,
                short_id=short_id,
                parent_ids=parents.split() if parents else [],
                bookmarks=parse_decorations(decorations),
                author=author,
                timestamp=timestamp,
                is_working_copy=commit_id == head_id,
                description=subject or "(no description)",
            )
        )
    return commits


class RealVcs(Vcs):
    """Production implementation using subprocess.

    All operations execute actual git commands via subprocess.
    """

    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the main repository root (the parent of the common git dir)."""
        result = subprocess.run(
            ["git", "rev-parse", "--path-format=absolute", "--git-common-dir"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip()).parent

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        branch = result.stdout.strip()
        if branch == "HEAD":
            return None

        return branch

    def get_default_branch(self, repo_root: Path) -> str:
        """Get the default branch name for the repository.

        Detects the default branch by checking git's remote HEAD reference. Falls
        back to checking for existence of common trunk branch names.
        """
        # 1. Try git symbolic-ref to detect default branch
        result = subprocess.run(
            ["git", "symbolic-ref", "refs/remotes/origin/HEAD"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode == 0:
            # Parse "refs/remotes/origin/master" -> "master"
            ref = result.stdout.strip()
            if ref.startswith("refs/remotes/origin/"):
                return ref.replace("refs/remotes/origin/", "")

        # 2. Fallback: try 'main' then 'master', use first that exists
        for candidate in ["main", "master"]:
            result = subprocess.run(
                ["git", "show-ref", "--verify", f"refs/heads/{candidate}"],
                cwd=repo_root,
                capture_output=True,
                check=False,
            )
            if result.returncode == 0:
                return candidate

        # 3. Final fallback: 'main'
        return "main"

    def list_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        result = run_subprocess_with_context(
            ["git", "branch", "--format=%(refname:short)"],
            operation_context="list local branches",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        """Get the commit id the branch points at."""
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{branch}^{{commit}}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def get_commit_log(
        self, workspace_path: Path, target_branch: str, *, limit: int
    ) -> list[Commit]:
        """Get the union of HEAD's and target_branch's history, newest first."""
        head_id = self.get_branch_head(workspace_path, "HEAD")
        result = run_subprocess_with_context(
            [
                "git",
                "log",
                "--topo-order",
                "--decorate-refs=refs/heads/",
                f"--format={LOG_FORMAT}",
                "-n",
                str(limit),
                "HEAD",
                target_branch,
                "--",
            ],
            operation_context=f"read commit log for '{workspace_path}' against '{target_branch}'",
            cwd=workspace_path,
        )
        return parse_commit_log(result.stdout, head_id)

    def rebase_onto(self, workspace_path: Path, target_branch: str) -> RebaseOutcome:
        """Rebase HEAD onto target_branch.

        On conflicts the rebase is left in progress so the user can resolve it.
        Any other failure is aborted so the working copy is left as it was.
        A workspace already stopped in an earlier rebase is refused untouched.
        """
        if self._rebase_in_progress(workspace_path):
            return RebaseOutcome(
                success=False,
                has_conflicts=False,
                message=(
                    "A previous rebase is still in progress in this workspace. "
                    "Resolve it (git rebase --continue) or abort it (git rebase --abort) first."
                ),
            )

        result = run_subprocess_with_context(
            ["git", "rebase", target_branch],
            operation_context=f"rebase '{workspace_path}' onto '{target_branch}'",
            cwd=workspace_path,
            check=False,
        )
        message = (result.stdout + result.stderr).strip()

        if result.returncode == 0:
            return RebaseOutcome(success=True, has_conflicts=False, message=message)

        # Nothing was in progress before, so a stopped rebase now is this one
        if self._rebase_in_progress(workspace_path):
            conflicted = self._get_conflicted_files(workspace_path)
            if conflicted:
                return RebaseOutcome(
                    success=True,
                    has_conflicts=True,
                    conflicted_files=conflicted,
                    message=message,
                )

        logger.debug("Rebase of %s failed without conflicts, aborting", workspace_path)
        subprocess.run(
            ["git", "rebase", "--abort"],
            cwd=workspace_path,
            capture_output=True,
            check=False,
        )
        return RebaseOutcome(success=False, has_conflicts=False, message=message)

    def _rebase_in_progress(self, workspace_path: Path) -> bool:
        """Check for git's rebase state directories (rebase-merge or rebase-apply)."""
        result = subprocess.run(
            ["git", "rev-parse", "--git-path", "rebase-merge", "--git-path", "rebase-apply"],
            cwd=workspace_path,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return False
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            state_dir = Path(line.strip())
            if not state_dir.is_absolute():
                state_dir = workspace_path / state_dir
            if state_dir.exists():
                return True
        return False

    def _get_conflicted_files(self, workspace_path: Path) -> list[str]:
        result = subprocess.run(
            ["git", "diff", "--name-only", "--diff-filter=U"],
            cwd=workspace_path,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def add_worktree(self, repo_root: Path, path: Path, *, branch: str, base: str | None) -> None:
        """Create a worktree at path on a new branch."""
        cmd = ["git", "worktree", "add", "-b", branch, str(path)]
        if base is not None:
            cmd.append(base)
        run_subprocess_with_context(
            cmd,
            operation_context=f"add worktree for branch '{branch}' at {path}",
            cwd=repo_root,
        )

    def remove_worktree(self, repo_root: Path, path: Path, *, force: bool) -> None:
        """Remove a worktree."""
        cmd = ["git", "worktree", "remove"]
        if force:
            cmd.append("--force")
        cmd.append(str(path))
        run_subprocess_with_context(
            cmd,
            operation_context=f"remove worktree at {path}",
            cwd=repo_root,
        )
