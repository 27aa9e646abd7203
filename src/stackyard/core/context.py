"""Application context with dependency injection."""

from dataclasses import dataclass, replace
from pathlib import Path

from stackyard.cli.config import LoadedConfig, load_config, read_trunk_from_pyproject
from stackyard.core.global_config import (
    FilesystemGlobalConfigOps,
    GlobalConfig,
    GlobalConfigOps,
    InMemoryGlobalConfigOps,
)
from stackyard.core.rebase_coordinator import RebaseCoordinator
from stackyard.core.repo_discovery import (
    NoRepoSentinel,
    RepoContext,
    discover_repo_or_sentinel,
    resolve_worktrees_dir,
)
from stackyard.core.vcs.abc import Vcs
from stackyard.core.vcs.noop import NoopVcs
from stackyard.core.vcs.real import RealVcs
from stackyard.core.workspace_store import NoopWorkspaceStore, RealWorkspaceStore, WorkspaceStore


@dataclass(frozen=True)
class StackyardContext:
    """Immutable context holding all dependencies for stackyard operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.

    Note: store is None only when running outside a repository (repo is a
    NoRepoSentinel); commands that need workspaces check repo first.
    """

    vcs: Vcs
    store: WorkspaceStore | None
    rebase_coordinator: RebaseCoordinator | None
    config_ops: GlobalConfigOps
    cwd: Path  # Current working directory at CLI invocation
    global_config: GlobalConfig
    local_config: LoadedConfig
    repo: RepoContext | NoRepoSentinel
    dry_run: bool

    @property
    def trunk_branch(self) -> str | None:
        """Trunk branch: [tool.stackyard] override first, then the backend's default.

        Returns None if not in a repository.
        """
        if isinstance(self.repo, NoRepoSentinel):
            return None
        configured = read_trunk_from_pyproject(self.repo.root)
        if configured is not None:
            return configured
        return self.vcs.get_default_branch(self.repo.root)

    @staticmethod
    def for_test(
        vcs: Vcs | None = None,
        store: WorkspaceStore | None = None,
        config_ops: GlobalConfigOps | None = None,
        global_config: GlobalConfig | None = None,
        local_config: LoadedConfig | None = None,
        cwd: Path | None = None,
        repo: RepoContext | NoRepoSentinel | None = None,
        dry_run: bool = False,
    ) -> "StackyardContext":
        """Create test context with optional pre-configured fakes.

        Anything not provided gets a standard test default: an empty FakeVcs,
        an empty FakeWorkspaceStore rooted at /repo, in-memory global config,
        and a RepoContext for /repo.

        Example:
            >>> vcs = FakeVcs(branch_heads={"main": "abc123"})
            >>> store = FakeWorkspaceStore([ws])
            >>> ctx = StackyardContext.for_test(vcs=vcs, store=store)
        """
        from stackyard.core.vcs.fake import FakeVcs
        from stackyard.core.workspace_store import FakeWorkspaceStore

        if vcs is None:
            vcs = FakeVcs()

        if store is None:
            store = FakeWorkspaceStore()

        if global_config is None:
            global_config = GlobalConfig.defaults()

        if config_ops is None:
            config_ops = InMemoryGlobalConfigOps(config=global_config)

        if local_config is None:
            local_config = LoadedConfig.empty()

        if cwd is None:
            cwd = Path("/repo")

        if repo is None:
            root = Path("/repo")
            repo = RepoContext(
                root=root,
                repo_name=root.name,
                state_dir=root / ".stackyard",
                worktrees_dir=Path("/repo-worktrees"),
            )

        if dry_run:
            vcs = NoopVcs(vcs)
            store = NoopWorkspaceStore(store, Path("/repo"))

        return StackyardContext(
            vcs=vcs,
            store=store,
            rebase_coordinator=RebaseCoordinator(vcs, store),
            config_ops=config_ops,
            cwd=cwd,
            global_config=global_config,
            local_config=local_config,
            repo=repo,
            dry_run=dry_run,
        )


def create_context(*, dry_run: bool) -> StackyardContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        dry_run: If True, wrap the Vcs and workspace store in no-op wrappers that
                 print intended writes instead of executing them

    Returns:
        StackyardContext with real implementations
    """
    # 1. Capture cwd (no deps)
    cwd = Path.cwd()

    # 2. Load global config, defaults when the file does not exist yet
    config_ops = FilesystemGlobalConfigOps()
    global_config = config_ops.load_or_defaults()

    # 3. Create vcs (needed for repo discovery)
    vcs: Vcs = RealVcs()

    # 4. Discover repo and load its config
    repo = discover_repo_or_sentinel(cwd, vcs)
    store: WorkspaceStore | None = None
    if isinstance(repo, NoRepoSentinel):
        local_config = LoadedConfig.empty()
    else:
        local_config = load_config(repo.state_dir)
        if local_config.worktrees_dir is not None:
            repo = replace(
                repo, worktrees_dir=resolve_worktrees_dir(repo.root, local_config.worktrees_dir)
            )
        store = RealWorkspaceStore(repo.root, repo.state_dir)

    # 5. Apply dry-run wrappers if needed
    if dry_run:
        vcs = NoopVcs(vcs)
        if store is not None and not isinstance(repo, NoRepoSentinel):
            store = NoopWorkspaceStore(store, repo.root)

    coordinator = RebaseCoordinator(vcs, store) if store is not None else None

    return StackyardContext(
        vcs=vcs,
        store=store,
        rebase_coordinator=coordinator,
        config_ops=config_ops,
        cwd=cwd,
        global_config=global_config,
        local_config=local_config,
        repo=repo,
        dry_run=dry_run,
    )
