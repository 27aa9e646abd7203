"""Shared helpers for CLI commands: repo scoping and workspace lookup."""

import re
from pathlib import Path
from typing import NoReturn

import click

from stackyard.cli.output import error_prefix, user_output
from stackyard.core.context import StackyardContext
from stackyard.core.rebase_coordinator import RebaseCoordinator
from stackyard.core.repo_discovery import NoRepoSentinel, RepoContext
from stackyard.core.workspace_store import WorkspaceStore
from stackyard.core.workspace_types import Workspace


def fail(message: str) -> NoReturn:
    """Print a red-prefixed error and exit 1."""
    user_output(error_prefix() + message)
    raise SystemExit(1)


def discover_repo_context(ctx: StackyardContext) -> RepoContext:
    """Return the repository the command runs in, or exit with the sentinel's message."""
    if isinstance(ctx.repo, NoRepoSentinel):
        fail(ctx.repo.message)
    return ctx.repo


def require_store(ctx: StackyardContext) -> WorkspaceStore:
    discover_repo_context(ctx)
    if ctx.store is None:
        fail("Workspace store is not available outside a repository")
    return ctx.store


def require_coordinator(ctx: StackyardContext) -> RebaseCoordinator:
    discover_repo_context(ctx)
    if ctx.rebase_coordinator is None:
        fail("Rebase is not available outside a repository")
    return ctx.rebase_coordinator


def resolve_workspace(ctx: StackyardContext, name: str | None) -> Workspace:
    """Find a workspace by branch name, by numeric id, or by the current directory.

    Exits with an error when nothing matches.
    """
    store = require_store(ctx)
    workspaces = store.list_workspaces()

    if name is None:
        current = ctx.cwd.resolve() if ctx.cwd.exists() else ctx.cwd
        for ws in workspaces:
            if current == ws.workspace_path or ws.workspace_path in current.parents:
                return ws
        fail("Not inside a workspace. Pass a workspace branch name.")

    for ws in workspaces:
        if ws.branch_name == name:
            return ws

    if name.isdigit():
        found = store.get_workspace(int(name))
        if found is not None:
            return found

    fail(f"Workspace '{name}' not found")


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_worktree_name(branch: str) -> str:
    """Turn a branch name into a directory name (feature/login -> feature-login)."""
    cleaned = _UNSAFE_CHARS.sub("-", branch).strip("-")
    return cleaned or "workspace"


def worktree_path_for(worktrees_dir: Path, branch: str) -> Path:
    return worktrees_dir / sanitize_worktree_name(branch)


def styled_branch(branch: str) -> str:
    return click.style(branch, fg="cyan", bold=True)
