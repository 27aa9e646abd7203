from pathlib import Path

from click.testing import CliRunner

from stackyard.cli.cli import cli
from stackyard.core.context import StackyardContext
from stackyard.core.vcs.fake import FakeVcs
from stackyard.core.workspace_store import FakeWorkspaceStore
from stackyard.core.workspace_types import HAS_CONFLICTS_KEY
from tests.test_utils.builders import make_workspace


def _store() -> FakeWorkspaceStore:
    return FakeWorkspaceStore(
        [
            make_workspace(1, "feat-a", "main"),
            make_workspace(2, "feat-b", "feat-a"),
        ]
    )


def test_remove_leaf_workspace() -> None:
    vcs = FakeVcs()
    store = _store()
    ctx = StackyardContext.for_test(vcs=vcs, store=store)

    result = CliRunner().invoke(cli, ["remove", "feat-b"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Removed workspace feat-b" in result.output
    assert vcs.removed_worktrees == [Path("/repo-worktrees/feat-b")]
    assert store.find_by_branch("feat-b") is None


def test_remove_refuses_when_workspaces_are_stacked_on_it() -> None:
    vcs = FakeVcs()
    store = _store()
    ctx = StackyardContext.for_test(vcs=vcs, store=store)

    result = CliRunner().invoke(cli, ["remove", "feat-a"], obj=ctx)

    assert result.exit_code == 1
    assert "Workspaces stacked on feat-a: feat-b" in result.output
    assert vcs.removed_worktrees == []
    assert store.find_by_branch("feat-a") is not None


def test_remove_force_warns_about_dependents() -> None:
    vcs = FakeVcs()
    store = _store()
    ctx = StackyardContext.for_test(vcs=vcs, store=store)

    result = CliRunner().invoke(cli, ["remove", "feat-a", "--force"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "feat-b still targets branch feat-a" in result.output
    assert store.find_by_branch("feat-a") is None
    # The dependent keeps its target; the branch still exists
    remaining = store.find_by_branch("feat-b")
    assert remaining is not None
    assert remaining.target_branch == "feat-a"


def test_remove_keep_worktree_only_forgets_record() -> None:
    vcs = FakeVcs()
    store = _store()
    ctx = StackyardContext.for_test(vcs=vcs, store=store)

    result = CliRunner().invoke(cli, ["remove", "2", "--keep-worktree"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert vcs.removed_worktrees == []
    assert store.get_workspace(2) is None


def test_remove_unknown_workspace() -> None:
    ctx = StackyardContext.for_test(store=_store())

    result = CliRunner().invoke(cli, ["remove", "nope"], obj=ctx)

    assert result.exit_code == 1
    assert "Workspace 'nope' not found" in result.output


def test_remove_warns_about_unresolved_conflicts() -> None:
    vcs = FakeVcs()
    store = FakeWorkspaceStore(
        [make_workspace(1, "feat-a", "main", metadata={HAS_CONFLICTS_KEY: "true"})]
    )
    ctx = StackyardContext.for_test(vcs=vcs, store=store)

    result = CliRunner().invoke(cli, ["remove", "feat-a"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "feat-a has unresolved rebase conflicts (discarded with the worktree)" in result.output
    assert store.find_by_branch("feat-a") is None


def test_remove_without_conflicts_has_no_conflict_warning() -> None:
    ctx = StackyardContext.for_test(store=_store())

    result = CliRunner().invoke(cli, ["remove", "feat-b"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "unresolved rebase conflicts" not in result.output
