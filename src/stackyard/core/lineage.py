"""Partition a commit window into per-branch lanes.

Given the commit log for a workspace unioned with its immediate target branch,
each commit is assigned to the target lane (ancestors of the target's head) or
the workspace lane (everything else), and each point where the workspace
lane diverges from the target lane becomes a LaneConnection.

Ancestry is only known inside the window. Commits whose ancestry reaches past
the oldest window commit are classified on what the window shows; callers can
check LanePartition.truncated to know that older history was dropped.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from stackyard.core.vcs.abc import Commit
from stackyard.core.workspace_types import WorkspaceChainItem

# Fixed vertical offsets per lane; the workspace lane sits below its target
TARGET_LANE_OFFSET = 1
WORKSPACE_LANE_OFFSET = 2
SINGLE_LANE_OFFSET = 1


@dataclass(frozen=True)
class ChartCommitNode:
    """A commit projected onto a lane at a position along that lane."""

    sequence_index: int
    lane: str
    lane_offset: int
    commit: Commit


@dataclass(frozen=True)
class LaneConnection:
    """Divergence point: source is in one lane, dest is its child in another."""

    source: ChartCommitNode
    dest: ChartCommitNode


@dataclass(frozen=True)
class LanePartition:
    """Result of partitioning a commit window.

    lanes maps lane name to its nodes, oldest first. target_branch is None in
    single-lane mode.
    """

    lanes: dict[str, list[ChartCommitNode]]
    connectors: list[LaneConnection]
    target_branch: str | None
    target_head_found: bool
    truncated: bool = False
    dropped_count: int = 0
    nodes: list[ChartCommitNode] = field(default_factory=list)

    def node_for(self, commit_id: str) -> ChartCommitNode | None:
        for node in self.nodes:
            if node.commit.id == commit_id:
                return node
        return None


def find_target_head(commits_newest_first: Sequence[Commit], target_branch: str) -> Commit | None:
    """Find the newest commit carrying target_branch's bookmark."""
    for commit in commits_newest_first:
        if target_branch in commit.bookmarks:
            return commit
    return None


def collect_ancestors(head: Commit, lookup: dict[str, Commit]) -> set[str]:
    """Collect head and all of its ancestors that are present in lookup.

    Iterative traversal; parents outside lookup are not followed.
    """
    ancestors: set[str] = set()
    stack = [head.id]
    while stack:
        commit_id = stack.pop()
        if commit_id in ancestors:
            continue
        commit = lookup.get(commit_id)
        if commit is None:
            continue
        ancestors.add(commit_id)
        stack.extend(commit.parent_ids)
    return ancestors


def partition_commits(
    commits: Sequence[Commit],
    workspace_branch: str,
    chain: Sequence[WorkspaceChainItem],
    window_size: int | None = None,
) -> LanePartition:
    """Assign each commit in the window to a lane and find divergence points.

    Args:
        commits: Commit log, most-recent-first
        workspace_branch: Branch of the workspace being visualized
        chain: Chain from build_chain; its last item is the immediate target.
            An empty chain means single-lane mode.
        window_size: Keep only the most recent window_size commits

    Returns:
        LanePartition with lanes, connectors, and truncation info

    Example:
        c1 <- c2 <- c3 (main)
               \\
                c4 (workspace head)

        Target lane: c1, c2, c3. Workspace lane: c4.
        One connector: c2 -> c4.
    """
    oldest_first = list(reversed(commits))
    dropped = 0
    if window_size is not None and len(oldest_first) > window_size:
        dropped = len(oldest_first) - window_size
        oldest_first = oldest_first[dropped:]

    if not chain:
        return _single_lane(oldest_first, workspace_branch, dropped)

    target_branch = chain[-1].branch
    lookup = {commit.id: commit for commit in oldest_first}

    head = find_target_head(list(reversed(oldest_first)), target_branch)
    ancestors = collect_ancestors(head, lookup) if head is not None else set()

    lanes: dict[str, list[ChartCommitNode]] = {target_branch: [], workspace_branch: []}
    node_by_id: dict[str, ChartCommitNode] = {}
    nodes: list[ChartCommitNode] = []

    for commit in oldest_first:
        if commit.id in ancestors:
            is_target = True
        elif not ancestors:
            # Head not in window: fall back to bookmark-only classification
            is_target = target_branch in commit.bookmarks
        else:
            is_target = False

        if is_target:
            lane, offset = target_branch, TARGET_LANE_OFFSET
        else:
            lane, offset = workspace_branch, WORKSPACE_LANE_OFFSET

        node = ChartCommitNode(
            sequence_index=len(lanes[lane]),
            lane=lane,
            lane_offset=offset,
            commit=commit,
        )
        lanes[lane].append(node)
        node_by_id[commit.id] = node
        nodes.append(node)

    connectors = _find_divergences(lanes[workspace_branch], node_by_id)

    return LanePartition(
        lanes=lanes,
        connectors=connectors,
        target_branch=target_branch,
        target_head_found=head is not None,
        truncated=dropped > 0,
        dropped_count=dropped,
        nodes=nodes,
    )


def _single_lane(
    oldest_first: list[Commit], workspace_branch: str, dropped: int
) -> LanePartition:
    nodes = [
        ChartCommitNode(
            sequence_index=i,
            lane=workspace_branch,
            lane_offset=SINGLE_LANE_OFFSET,
            commit=commit,
        )
        for i, commit in enumerate(oldest_first)
    ]
    return LanePartition(
        lanes={workspace_branch: nodes},
        connectors=[],
        target_branch=None,
        target_head_found=False,
        truncated=dropped > 0,
        dropped_count=dropped,
        nodes=list(nodes),
    )


def _find_divergences(
    workspace_nodes: list[ChartCommitNode], node_by_id: dict[str, ChartCommitNode]
) -> list[LaneConnection]:
    connectors = []
    for node in workspace_nodes:
        for parent_id in node.commit.parent_ids:
            parent = node_by_id.get(parent_id)
            if parent is not None and parent.lane != node.lane:
                connectors.append(LaneConnection(source=parent, dest=node))
                break
    return connectors
