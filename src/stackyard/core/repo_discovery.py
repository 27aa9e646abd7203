"""Repository discovery functionality.

Discovers repository information from a given path without requiring
full StackyardContext (enables config loading before context creation).
"""

from dataclasses import dataclass
from pathlib import Path

from stackyard.cli.config import STATE_DIR_NAME
from stackyard.core.vcs.abc import Vcs


@dataclass(frozen=True)
class RepoContext:
    """Represents a repo root and where stackyard keeps its state for it."""

    root: Path
    repo_name: str
    state_dir: Path  # <root>/.stackyard
    worktrees_dir: Path  # default: <root>/../<repo-name>-worktrees


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a repository.

    Commands that require repo context check for this sentinel and fail fast.
    """

    message: str = "Not inside a git repository"


def discover_repo_or_sentinel(cwd: Path, vcs: Vcs) -> RepoContext | NoRepoSentinel:
    """Find the main repository containing `cwd`.

    Works from inside any workspace: the root is always the main repository,
    not the linked worktree.

    Args:
        cwd: Current working directory to start search from
        vcs: Version-control operations used to locate the root
    """
    if not cwd.exists():
        return NoRepoSentinel(message=f"Start path '{cwd}' does not exist")

    root = vcs.get_repository_root(cwd.resolve())
    if root is None:
        return NoRepoSentinel()

    return RepoContext(
        root=root,
        repo_name=root.name,
        state_dir=root / STATE_DIR_NAME,
        worktrees_dir=resolve_worktrees_dir(root, None),
    )


def resolve_worktrees_dir(root: Path, configured: str | None) -> Path:
    """Absolute worktrees directory; relative configured paths are taken from the root."""
    if configured is None:
        return root.parent / f"{root.name}-worktrees"
    path = Path(configured).expanduser()
    if not path.is_absolute():
        path = root / path
    return path
