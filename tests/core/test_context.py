from pathlib import Path

from stackyard.core.context import StackyardContext
from stackyard.core.repo_discovery import NoRepoSentinel, RepoContext
from stackyard.core.vcs.fake import FakeVcs
from stackyard.core.vcs.noop import NoopVcs
from stackyard.core.workspace_store import NoopWorkspaceStore


def test_for_test_defaults() -> None:
    ctx = StackyardContext.for_test()

    assert isinstance(ctx.repo, RepoContext)
    assert ctx.repo.root == Path("/repo")
    assert ctx.store is not None
    assert ctx.rebase_coordinator is not None
    assert ctx.global_config.commit_window == 50
    assert ctx.dry_run is False


def test_trunk_branch_falls_back_to_default_branch() -> None:
    vcs = FakeVcs(default_branches={Path("/repo"): "trunk"})

    assert StackyardContext.for_test(vcs=vcs).trunk_branch == "trunk"


def test_trunk_branch_prefers_pyproject_setting(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.stackyard]\ntrunk_branch = "develop"\n', encoding="utf-8"
    )
    repo = RepoContext(
        root=tmp_path,
        repo_name=tmp_path.name,
        state_dir=tmp_path / ".stackyard",
        worktrees_dir=tmp_path / "wt",
    )

    assert StackyardContext.for_test(repo=repo).trunk_branch == "develop"


def test_trunk_branch_outside_repo_is_none() -> None:
    assert StackyardContext.for_test(repo=NoRepoSentinel()).trunk_branch is None


def test_dry_run_wraps_vcs_and_store() -> None:
    ctx = StackyardContext.for_test(dry_run=True)

    assert isinstance(ctx.vcs, NoopVcs)
    assert isinstance(ctx.store, NoopWorkspaceStore)
