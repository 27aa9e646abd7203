from stackyard.core.workspace_tree import (
    build_workspace_tree,
    flatten_workspace_tree,
    format_workspace_tree,
)
from stackyard.core.workspace_types import HAS_CONFLICTS_KEY, INTENT_KEY
from tests.test_utils.builders import make_workspace


def test_tree_nests_dependents_under_targets() -> None:
    workspaces = [
        make_workspace(1, "feat-a", "main"),
        make_workspace(2, "feat-c", "feat-a"),
        make_workspace(3, "feat-b", "feat-a"),
        make_workspace(4, "feat-d", "feat-c"),
    ]

    roots = build_workspace_tree(workspaces)

    assert [r.branch_name for r in roots] == ["feat-a"]
    assert [c.branch_name for c in roots[0].children] == ["feat-b", "feat-c"]
    flat = flatten_workspace_tree(roots)
    assert [(n.workspace.branch_name, n.depth) for n in flat] == [
        ("feat-a", 0),
        ("feat-b", 1),
        ("feat-c", 1),
        ("feat-d", 2),
    ]


def test_format_tree() -> None:
    workspaces = [
        make_workspace(1, "feat-a", "main"),
        make_workspace(2, "feat-b", "feat-a"),
        make_workspace(3, "feat-c", "feat-a"),
        make_workspace(4, "feat-d", "feat-c"),
    ]

    output = format_workspace_tree(build_workspace_tree(workspaces), show_intent=False)

    assert output == "\n".join(
        [
            "feat-a [main]",
            "├─ feat-b",
            "└─ feat-c",
            "   └─ feat-d",
        ]
    )


def test_format_tree_shows_intent() -> None:
    ws = make_workspace(1, "feat-a", "main", metadata={INTENT_KEY: "Parser rewrite"})

    assert format_workspace_tree(build_workspace_tree([ws]), show_intent=True) == (
        'feat-a [main] "Parser rewrite"'
    )
    assert format_workspace_tree(build_workspace_tree([ws]), show_intent=False) == "feat-a [main]"


def test_cycle_members_stay_visible_as_roots() -> None:
    workspaces = [make_workspace(1, "a", "b"), make_workspace(2, "b", "a")]

    roots = build_workspace_tree(workspaces)

    assert sorted(r.branch_name for r in roots) == ["a", "b"]
    assert all(not r.children for r in roots)


def test_empty_tree() -> None:
    assert format_workspace_tree([], show_intent=True) == "No workspaces found"


def test_format_tree_marks_conflicted_workspaces() -> None:
    workspaces = [
        make_workspace(1, "feat-a", "main"),
        make_workspace(2, "feat-b", "feat-a", metadata={HAS_CONFLICTS_KEY: "true"}),
    ]

    output = format_workspace_tree(build_workspace_tree(workspaces), show_intent=False)

    assert output.splitlines() == ["feat-a [main]", "└─ feat-b (conflicts)"]
