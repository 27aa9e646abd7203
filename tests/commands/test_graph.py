"""Tests for the graph command: lane text rendering and the JSON scene."""

import json

from click.testing import CliRunner

from stackyard.cli.cli import cli
from stackyard.core.context import StackyardContext
from stackyard.core.global_config import GlobalConfig
from stackyard.core.vcs.fake import FakeVcs
from stackyard.core.workspace_store import FakeWorkspaceStore
from stackyard.core.workspace_types import LAST_REBASED_KEY
from tests.test_utils.builders import WORKTREES_DIR, make_commit, make_workspace

FEAT_PATH = WORKTREES_DIR / "feat"


def _log() -> list:
    return [
        make_commit("c4aaaaaaaa", ["c2aaaaaaaa"], ["feat"], working_copy=True),
        make_commit("c3aaaaaaaa", ["c2aaaaaaaa"], ["main"]),
        make_commit("c2aaaaaaaa", ["c1aaaaaaaa"]),
        make_commit("c1aaaaaaaa"),
    ]


def _ctx(**vcs_kwargs) -> tuple[StackyardContext, FakeVcs]:
    # Up to date with main, so opening the graph does not rebase
    store = FakeWorkspaceStore(
        [make_workspace(1, "feat", "main", metadata={LAST_REBASED_KEY: "c3aaaaaaaa"})]
    )
    vcs_kwargs.setdefault("commit_logs", {FEAT_PATH: _log()})
    vcs = FakeVcs(branch_heads={"main": "c3aaaaaaaa"}, **vcs_kwargs)
    return StackyardContext.for_test(vcs=vcs, store=store), vcs


def test_graph_text_draws_both_lanes() -> None:
    ctx, vcs = _ctx()

    result = CliRunner().invoke(cli, ["graph", "feat"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "main → feat" in result.output
    assert "@" in result.output
    assert vcs.rebase_calls == []


def test_graph_json_scene() -> None:
    ctx, _ = _ctx()

    result = CliRunner().invoke(
        cli, ["graph", "feat", "--json", "--width", "400", "--height", "100"], obj=ctx
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["workspace"] == "feat"
    assert data["target_branch"] == "main"
    assert data["chain"] == [{"branch": "main", "path": None, "is_target": True}]
    assert data["target_head_found"] is True
    assert data["truncated"] is False
    assert data["width"] == 400.0
    assert data["height"] == 100.0
    assert {node["id"] for node in data["nodes"]} == {
        "c1aaaaaaaa",
        "c2aaaaaaaa",
        "c3aaaaaaaa",
        "c4aaaaaaaa",
    }
    assert len(data["connectors"]) == 1
    assert data["highlighted"] is None
    for node in data["nodes"]:
        assert 0.0 <= node["x"] <= 400.0
        assert 0.0 <= node["y"] <= 100.0


def test_graph_highlight_by_prefix() -> None:
    ctx, _ = _ctx()

    result = CliRunner().invoke(cli, ["graph", "feat", "--json", "--highlight", "c3a"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["highlighted"] == "c3aaaaaaaa"


def test_graph_window_limits_fetch() -> None:
    ctx, vcs = _ctx()

    result = CliRunner().invoke(cli, ["graph", "feat", "--json", "-n", "2"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert vcs.log_calls == [(FEAT_PATH, "main", 3)]
    data = json.loads(result.output)
    assert data["truncated"] is True


def test_graph_fetch_error_json() -> None:
    ctx, _ = _ctx(log_errors={FEAT_PATH: "bad revision"})

    result = CliRunner().invoke(cli, ["graph", "feat", "--json"], obj=ctx)

    assert result.exit_code == 1
    data = json.loads(result.output)
    assert data["error_type"] == "GraphLoadError"
    assert "bad revision" in data["error"]


def test_graph_fetch_error_text() -> None:
    ctx, _ = _ctx(log_errors={FEAT_PATH: "bad revision"})

    result = CliRunner().invoke(cli, ["graph", "feat"], obj=ctx)

    assert result.exit_code == 1
    assert "Failed to fetch commits" in result.output


def test_graph_rebases_stale_workspace_on_open() -> None:
    store = FakeWorkspaceStore(
        [make_workspace(1, "feat", "main", metadata={LAST_REBASED_KEY: "old"})]
    )
    vcs = FakeVcs(branch_heads={"main": "c3aaaaaaaa"}, commit_logs={FEAT_PATH: _log()})
    ctx = StackyardContext.for_test(vcs=vcs, store=store)

    result = CliRunner().invoke(cli, ["graph", "feat"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "feat rebased onto main" in result.output
    assert vcs.rebase_calls == [(FEAT_PATH, "main")]


def test_graph_skips_rebase_when_disabled() -> None:
    store = FakeWorkspaceStore(
        [make_workspace(1, "feat", "main", metadata={LAST_REBASED_KEY: "old"})]
    )
    vcs = FakeVcs(branch_heads={"main": "c3aaaaaaaa"}, commit_logs={FEAT_PATH: _log()})
    config = GlobalConfig(commit_window=50, rebase_on_open=False, show_intent=True)
    ctx = StackyardContext.for_test(vcs=vcs, store=store, global_config=config)

    result = CliRunner().invoke(cli, ["graph", "feat"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert vcs.rebase_calls == []
