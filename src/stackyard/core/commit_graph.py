"""Commit graph pipeline for a single workspace.

The pipeline runs in a fixed order:

    chain resolution -> commit fetch -> partitioning -> (layout, by the caller)

Fetching is the only I/O step. Every load is tagged with a RequestToken; when
the subject workspace changes while a load is in flight, the result of the
older request is discarded on completion instead of overwriting the view.
"""

import itertools
import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from stackyard.core.chain_resolver import build_chain
from stackyard.core.errors import CycleDetectedError, FetchError
from stackyard.core.lineage import LanePartition, partition_commits
from stackyard.core.vcs.abc import Commit, Vcs
from stackyard.core.workspace_types import Workspace, WorkspaceChainItem

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_WINDOW = 50


@dataclass(frozen=True)
class RequestToken:
    workspace_id: int
    serial: int


class RequestTracker:
    """Issues monotonically increasing tokens and remembers the latest one."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._current: RequestToken | None = None

    def begin(self, workspace_id: int) -> RequestToken:
        with self._lock:
            token = RequestToken(workspace_id=workspace_id, serial=next(self._counter))
            self._current = token
            return token

    def is_current(self, token: RequestToken) -> bool:
        with self._lock:
            return token == self._current


@dataclass(frozen=True)
class GraphLoadResult:
    """Outcome of one pipeline run.

    Exactly one of partition or error is set. error is a user-facing message;
    no partial graph is produced alongside it.
    """

    token: RequestToken
    workspace_id: int
    chain: list[WorkspaceChainItem] = field(default_factory=list)
    partition: LanePartition | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class GraphViewState:
    """Presentation-owned state for the graph view.

    Holds the workspace currently on display, the node under the pointer,
    and the last result that was accepted.
    """

    current_workspace_id: int | None = None
    hovered_node_id: str | None = None
    result: GraphLoadResult | None = None


class CommitGraphLoader:
    """Runs the chain -> fetch -> partition pipeline and guards against stale results."""

    def __init__(self, vcs: Vcs, window_size: int = DEFAULT_COMMIT_WINDOW) -> None:
        self._vcs = vcs
        self._window_size = window_size
        self._tracker = RequestTracker()

    def begin(self, state: GraphViewState, workspace_id: int) -> RequestToken:
        """Switch the view to workspace_id and issue a token for the load."""
        state.current_workspace_id = workspace_id
        state.hovered_node_id = None
        return self._tracker.begin(workspace_id)

    def load(
        self,
        token: RequestToken,
        workspace: Workspace,
        all_workspaces: Sequence[Workspace],
    ) -> GraphLoadResult:
        """Run the pipeline for workspace. Failures become error results."""
        try:
            chain = build_chain(workspace, all_workspaces)
        except CycleDetectedError as e:
            logger.debug("Chain resolution failed: %s", e)
            return GraphLoadResult(token=token, workspace_id=workspace.id, error=str(e))

        effective_target = workspace.target_branch or workspace.branch_name
        try:
            commits = self._fetch(workspace, effective_target)
        except FetchError as e:
            return GraphLoadResult(
                token=token, workspace_id=workspace.id, chain=chain, error=str(e)
            )

        partition = partition_commits(
            commits, workspace.branch_name, chain, window_size=self._window_size
        )
        logger.debug(
            "Partitioned %d commits into %d lanes (%d connectors)",
            len(partition.nodes),
            len(partition.lanes),
            len(partition.connectors),
        )
        return GraphLoadResult(
            token=token, workspace_id=workspace.id, chain=chain, partition=partition
        )

    def complete(self, state: GraphViewState, result: GraphLoadResult) -> bool:
        """Accept result into state unless it is stale.

        A result is stale when a newer request was issued or the view moved to a
        different workspace while it was loading.

        Returns:
            True if the result was accepted
        """
        if not self._tracker.is_current(result.token):
            logger.debug("Discarding stale graph result %s", result.token)
            return False
        if state.current_workspace_id != result.workspace_id:
            logger.debug("Discarding graph result for workspace %s", result.workspace_id)
            return False
        state.result = result
        return True

    def refresh(
        self,
        state: GraphViewState,
        workspace: Workspace,
        all_workspaces: Sequence[Workspace],
    ) -> GraphLoadResult:
        """begin + load + complete for callers that run the pipeline inline."""
        token = self.begin(state, workspace.id)
        result = self.load(token, workspace, all_workspaces)
        self.complete(state, result)
        return result

    def _fetch(self, workspace: Workspace, target_branch: str) -> list[Commit]:
        # One extra commit so the partitioner can tell the window was truncated
        limit = self._window_size + 1
        try:
            return self._vcs.get_commit_log(workspace.workspace_path, target_branch, limit=limit)
        except RuntimeError as e:
            raise FetchError(f"Failed to fetch commits: {e}") from e
