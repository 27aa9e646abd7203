import json

from click.testing import CliRunner

from stackyard.cli.cli import cli
from stackyard.core.context import StackyardContext
from stackyard.core.workspace_store import FakeWorkspaceStore
from tests.test_utils.builders import WORKTREES_DIR, make_workspace


def _store() -> FakeWorkspaceStore:
    return FakeWorkspaceStore(
        [
            make_workspace(1, "feat-a", "main"),
            make_workspace(2, "feat-b", "feat-a"),
            make_workspace(3, "feat-c", "feat-b"),
        ]
    )


def test_chain_text() -> None:
    ctx = StackyardContext.for_test(store=_store())

    result = CliRunner().invoke(cli, ["chain", "feat-c"], obj=ctx)

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "main (branch)"
    assert lines[1] == f"  feat-a {WORKTREES_DIR / 'feat-a'}"
    assert lines[2] == f"    feat-b {WORKTREES_DIR / 'feat-b'}"
    assert lines[3] == "      feat-c ◀"


def test_chain_json() -> None:
    ctx = StackyardContext.for_test(store=_store())

    result = CliRunner().invoke(cli, ["chain", "feat-b", "--json"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "workspace": "feat-b",
        "chain": [
            {"branch": "main", "path": None, "is_target": True},
            {"branch": "feat-a", "path": str(WORKTREES_DIR / "feat-a"), "is_target": False},
        ],
    }


def test_chain_from_current_directory() -> None:
    ctx = StackyardContext.for_test(store=_store(), cwd=WORKTREES_DIR / "feat-a" / "src")

    result = CliRunner().invoke(cli, ["chain"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "feat-a ◀" in result.output


def test_chain_outside_workspace_fails() -> None:
    ctx = StackyardContext.for_test(store=_store())

    result = CliRunner().invoke(cli, ["chain"], obj=ctx)

    assert result.exit_code == 1
    assert "Not inside a workspace" in result.output


def test_chain_cycle_fails() -> None:
    store = FakeWorkspaceStore(
        [make_workspace(1, "a", "b"), make_workspace(2, "b", "a")]
    )
    ctx = StackyardContext.for_test(store=store)

    result = CliRunner().invoke(cli, ["chain", "a"], obj=ctx)

    assert result.exit_code == 1
    assert "Target cycle detected" in result.output
