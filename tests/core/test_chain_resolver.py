import pytest

from stackyard.core.chain_resolver import build_chain, get_ancestor_chain
from stackyard.core.errors import CycleDetectedError
from stackyard.core.workspace_types import WorkspaceChainItem
from tests.test_utils.builders import WORKTREES_DIR, make_workspace


def test_no_target_gives_empty_chain() -> None:
    ws = make_workspace(1, "feat-a")
    assert build_chain(ws, [ws]) == []


def test_self_target_gives_empty_chain() -> None:
    ws = make_workspace(1, "feat-a", "feat-a")
    assert build_chain(ws, [ws]) == []


def test_plain_branch_target_is_single_root_item() -> None:
    ws = make_workspace(1, "feat-a", "main")

    assert build_chain(ws, [ws]) == [WorkspaceChainItem(branch="main", path="", is_target=True)]


def test_chain_through_intermediate_workspaces_is_root_to_leaf() -> None:
    a = make_workspace(1, "feat-a", "main")
    b = make_workspace(2, "feat-b", "feat-a")
    c = make_workspace(3, "feat-c", "feat-b")

    chain = build_chain(c, [a, b, c])

    assert chain == [
        WorkspaceChainItem(branch="main", path="", is_target=True),
        WorkspaceChainItem(branch="feat-a", path=str(WORKTREES_DIR / "feat-a"), is_target=False),
        WorkspaceChainItem(branch="feat-b", path=str(WORKTREES_DIR / "feat-b"), is_target=False),
    ]
    assert chain[-1].branch == c.target_branch


def test_intermediate_workspace_without_target_is_root() -> None:
    a = make_workspace(1, "feat-a")
    b = make_workspace(2, "feat-b", "feat-a")

    chain = build_chain(b, [a, b])

    assert [item.branch for item in chain] == ["feat-a"]
    assert chain[0].is_target is False


def test_intermediate_self_targeting_workspace_ends_walk() -> None:
    a = make_workspace(1, "feat-a", "feat-a")
    b = make_workspace(2, "feat-b", "feat-a")

    assert [item.branch for item in build_chain(b, [a, b])] == ["feat-a"]


def test_two_cycle_terminates_with_error() -> None:
    """A targets B and B targets A: the walk must stop, not loop."""
    a = make_workspace(1, "a", "b")
    b = make_workspace(2, "b", "a")

    with pytest.raises(CycleDetectedError) as exc_info:
        build_chain(a, [a, b])

    assert exc_info.value.branch == "a"
    assert exc_info.value.path == ["a", "b"]


def test_longer_cycle_above_subject_is_detected() -> None:
    x = make_workspace(1, "x", "a")
    a = make_workspace(2, "a", "b")
    b = make_workspace(3, "b", "a")

    with pytest.raises(CycleDetectedError):
        build_chain(x, [x, a, b])


def test_ancestor_chain_is_parent_first() -> None:
    workspaces = [
        make_workspace(1, "a", "main"),
        make_workspace(2, "b", "a"),
        make_workspace(3, "c", "b"),
    ]

    assert get_ancestor_chain(workspaces, "c") == ["b", "a", "main"]
    assert get_ancestor_chain(workspaces, "main") == []


def test_ancestor_chain_stops_on_cycle() -> None:
    workspaces = [make_workspace(1, "a", "b"), make_workspace(2, "b", "a")]

    assert get_ancestor_chain(workspaces, "a") == ["b"]
