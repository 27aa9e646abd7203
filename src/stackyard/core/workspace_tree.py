"""Tree view of workspaces stacked on each other.

Pure business logic used by `stackyard list` to show workspaces as a forest:
roots are workspaces whose target is not another workspace (trunk, a remote
branch, or nothing); children are the workspaces targeting them.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from stackyard.core.workspace_graph import WorkspaceGraph
from stackyard.core.workspace_types import Workspace


@dataclass
class WorkspaceTreeNode:
    workspace: Workspace
    children: list["WorkspaceTreeNode"] = field(default_factory=list)
    depth: int = 0

    @property
    def branch_name(self) -> str:
        return self.workspace.branch_name


@dataclass(frozen=True)
class FlattenedWorkspaceNode:
    workspace: Workspace
    depth: int
    has_children: bool
    is_last: bool


def build_workspace_tree(workspaces: Sequence[Workspace]) -> list[WorkspaceTreeNode]:
    """Build a forest from the flat workspace list.

    Roots and children are sorted alphabetically by branch at every level.
    Workspaces caught in a target cycle have no root to hang from and are
    attached as roots themselves so they stay visible.
    """
    graph = WorkspaceGraph(workspaces)
    node_by_branch = {ws.branch_name: WorkspaceTreeNode(workspace=ws) for ws in workspaces}

    roots: list[WorkspaceTreeNode] = []
    for ws in workspaces:
        node = node_by_branch[ws.branch_name]
        parent_ws = (
            graph.owner_of(ws.target_branch, exclude_id=ws.id) if ws.target_branch else None
        )
        if parent_ws is None:
            roots.append(node)
        else:
            node_by_branch[parent_ws.branch_name].children.append(node)

    reached: set[str] = set()
    for root in roots:
        _assign_depths(root, 0, reached)

    # Anything unreached sits on a cycle
    for ws in workspaces:
        if ws.branch_name not in reached:
            node = node_by_branch[ws.branch_name]
            node.children = []
            roots.append(node)
            reached.add(ws.branch_name)

    _sort_alphabetically(roots)
    return roots


def _assign_depths(node: WorkspaceTreeNode, depth: int, reached: set[str]) -> None:
    stack = [(node, depth)]
    while stack:
        current, current_depth = stack.pop()
        if current.branch_name in reached:
            continue
        reached.add(current.branch_name)
        current.depth = current_depth
        for child in current.children:
            stack.append((child, current_depth + 1))


def _sort_alphabetically(nodes: list[WorkspaceTreeNode]) -> None:
    nodes.sort(key=lambda n: n.branch_name)
    for node in nodes:
        _sort_alphabetically(node.children)


def flatten_workspace_tree(roots: list[WorkspaceTreeNode]) -> list[FlattenedWorkspaceNode]:
    """Flatten the forest depth-first in display order."""
    result: list[FlattenedWorkspaceNode] = []
    seen: set[str] = set()

    def traverse(node: WorkspaceTreeNode, is_last: bool) -> None:
        if node.branch_name in seen:
            return
        seen.add(node.branch_name)
        result.append(
            FlattenedWorkspaceNode(
                workspace=node.workspace,
                depth=node.depth,
                has_children=bool(node.children),
                is_last=is_last,
            )
        )
        for i, child in enumerate(node.children):
            traverse(child, i == len(node.children) - 1)

    for i, root in enumerate(roots):
        traverse(root, i == len(roots) - 1)
    return result


def format_workspace_tree(roots: list[WorkspaceTreeNode], *, show_intent: bool) -> str:
    """Render the forest as box-drawing lines.

    Example:
        feat-a [main]
        ├─ feat-b
        └─ feat-c (conflicts)
           └─ feat-d
    """
    if not roots:
        return "No workspaces found"

    lines: list[str] = []
    for root in roots:
        _format_node(root, lines, prefix="", is_last=True, is_root=True, show_intent=show_intent)
    return "\n".join(lines)


def _format_node(
    node: WorkspaceTreeNode,
    lines: list[str],
    prefix: str,
    is_last: bool,
    is_root: bool,
    show_intent: bool,
) -> None:
    ws = node.workspace
    info = ws.branch_name
    if is_root and ws.target_branch:
        info += f" [{ws.target_branch}]"
    if show_intent and ws.title != ws.branch_name:
        info += f' "{ws.title}"'
    if ws.has_conflicts:
        info += " (conflicts)"

    if is_root:
        lines.append(info)
        child_prefix = ""
    else:
        connector = "└─" if is_last else "├─"
        lines.append(f"{prefix}{connector} {info}")
        child_prefix = prefix + ("   " if is_last else "│  ")

    for i, child in enumerate(node.children):
        _format_node(
            child,
            lines,
            prefix=child_prefix,
            is_last=i == len(node.children) - 1,
            is_root=False,
            show_intent=show_intent,
        )
