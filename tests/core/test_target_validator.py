import pytest

from stackyard.core.errors import CycleDetectedError
from stackyard.core.target_validator import get_valid_targets, validate_target, would_create_cycle
from tests.test_utils.builders import make_workspace


def _abc_stack() -> list:
    """A (no target) <- B <- C."""
    return [
        make_workspace(1, "A"),
        make_workspace(2, "B", "A"),
        make_workspace(3, "C", "B"),
    ]


def test_valid_targets_exclude_self_and_descendants() -> None:
    workspaces = _abc_stack()

    assert get_valid_targets("A", workspaces) == []
    assert get_valid_targets("B", workspaces) == ["A"]
    assert get_valid_targets("C", workspaces) == ["A", "B"]


def test_valid_targets_include_listed_branches_sorted() -> None:
    workspaces = _abc_stack()

    assert get_valid_targets("B", workspaces, ["main", "develop", "C"]) == ["A", "develop", "main"]


def test_valid_targets_for_branch_without_workspace() -> None:
    workspaces = _abc_stack()

    assert get_valid_targets("new", workspaces, ["main"]) == ["A", "B", "C", "main"]


def test_would_create_cycle() -> None:
    workspaces = _abc_stack()

    assert would_create_cycle("A", "C", workspaces)
    assert would_create_cycle("A", "A", workspaces)
    assert not would_create_cycle("C", "A", workspaces)
    assert not would_create_cycle("B", "main", workspaces)


def test_validate_target_reports_loop_path() -> None:
    with pytest.raises(CycleDetectedError) as exc_info:
        validate_target("A", "C", _abc_stack())

    assert exc_info.value.path == ["A", "C", "B"]
    assert "A -> C -> B -> A" in str(exc_info.value)


def test_validate_target_accepts_legal_target() -> None:
    validate_target("C", "A", _abc_stack())
