"""Reconcile workspaces with their target branches via rebase.

The coordinator decides *when* a workspace needs rebasing and *onto what*,
invokes the rebase primitive, classifies the outcome, and persists the
workspace's target branch after an explicit retarget. The rebase mechanics
themselves belong to the Vcs implementation.

Per-workspace lifecycle:

    idle -> checking -> {rebased | conflicts | failed | noop} -> idle

At most one rebase is in flight per workspace. A trigger arriving while one is
pending is ignored (status "ignored"), never queued.
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from stackyard.core.target_validator import validate_target
from stackyard.core.vcs.abc import RebaseOutcome, Vcs
from stackyard.core.workspace_store import WorkspaceStore
from stackyard.core.workspace_types import HAS_CONFLICTS_KEY, LAST_REBASED_KEY, Workspace

logger = logging.getLogger(__name__)

RebaseStatus = Literal["noop", "rebased", "conflicts", "failed", "ignored"]
RebaseState = Literal["idle", "checking"]


@dataclass(frozen=True)
class RebaseResult:
    """Classified result of a reconciliation attempt.

    status is the classification callers branch on:
    - noop: target tip unchanged since the last reconciliation, nothing done
    - rebased: clean rebase
    - conflicts: rebase completed with conflicts; surface conflicted_files as a warning
    - failed: rebase rejected; surface message as an error
    - ignored: another rebase for this workspace was already in flight
    """

    status: RebaseStatus
    workspace_id: int
    target_branch: str
    rebased: bool
    success: bool
    has_conflicts: bool
    conflicted_files: list[str] = field(default_factory=list)
    message: str = ""

    @property
    def applied(self) -> bool:
        """True when the working copy now sits on the target (with or without conflicts)."""
        return self.status in ("rebased", "conflicts")


def classify_outcome(outcome: RebaseOutcome) -> RebaseStatus:
    """Map a raw primitive outcome to a result status.

    Conflicts take precedence over the success flag: a conflicted rebase is
    never treated as fatal.
    """
    if outcome.has_conflicts:
        return "conflicts"
    if not outcome.success:
        return "failed"
    return "rebased"


class RebaseCoordinator:
    """Orchestrates staleness checks, rebases, and retargets for workspaces."""

    def __init__(self, vcs: Vcs, store: WorkspaceStore) -> None:
        self._vcs = vcs
        self._store = store
        self._lock = threading.Lock()
        self._in_flight: set[int] = set()
        self._last_results: dict[int, RebaseResult] = {}

    def state(self, workspace_id: int) -> RebaseState:
        with self._lock:
            return "checking" if workspace_id in self._in_flight else "idle"

    def last_result(self, workspace_id: int) -> RebaseResult | None:
        """Most recent completed (not ignored) result for the workspace."""
        return self._last_results.get(workspace_id)

    def check_and_rebase(
        self,
        repo_path: Path,
        workspace_id: int,
        target_branch: str | None,
        force: bool = False,
    ) -> RebaseResult:
        """Rebase a workspace onto its target's current tip if needed.

        Args:
            repo_path: Repository root
            workspace_id: Workspace to reconcile
            target_branch: Branch to rebase onto; None means the default branch
            force: Rebase even when the tip is unchanged since the last reconciliation

        Returns:
            Classified RebaseResult. Backend failures are reported as status
            "failed" rather than raised.
        """
        effective_target = target_branch or self._vcs.get_default_branch(repo_path)

        if not self._try_begin(workspace_id):
            logger.debug("Rebase already in flight for workspace %s, ignoring", workspace_id)
            return RebaseResult(
                status="ignored",
                workspace_id=workspace_id,
                target_branch=effective_target,
                rebased=False,
                success=False,
                has_conflicts=False,
                message="A rebase is already in progress for this workspace",
            )

        try:
            result = self._reconcile(repo_path, workspace_id, effective_target, force)
        finally:
            self._finish(workspace_id)

        self._last_results[workspace_id] = result
        return result

    def set_target(self, workspace: Workspace, new_target: str) -> RebaseResult:
        """Retarget a workspace, rebasing it onto new_target first.

        The new target is persisted only when the rebase applied (cleanly or with
        conflicts). On failure the previous target is kept.

        Raises:
            CycleDetectedError: If new_target is the workspace's own branch or one
                of its descendants; nothing is rebased in that case
        """
        validate_target(workspace.branch_name, new_target, self._store.list_workspaces())

        result = self.check_and_rebase(workspace.repo_path, workspace.id, new_target, force=True)
        if not result.applied:
            logger.debug(
                "Retarget of %s to %s not applied (%s)",
                workspace.branch_name,
                new_target,
                result.status,
            )
            return result

        current = self._store.get_workspace(workspace.id) or workspace
        self._store.update_workspace(current.with_target(new_target))
        return result

    def rebase_dependents(self, repo_path: Path, branch: str) -> list[RebaseResult]:
        """Reconcile every workspace stacked directly on branch.

        Used after branch moves (e.g. a commit landed on it); unchanged
        dependents come back as no-ops.
        """
        results = []
        for ws in self._store.list_workspaces():
            if ws.target_branch == branch and ws.branch_name != branch:
                results.append(self.check_and_rebase(repo_path, ws.id, branch, force=False))
        return results

    def check_and_rebase_all(self, repo_path: Path) -> list[RebaseResult]:
        """Reconcile every workspace that declares a target, grouped by target."""
        grouped: dict[str, list[Workspace]] = {}
        for ws in self._store.list_workspaces():
            if ws.target_branch and ws.target_branch != ws.branch_name:
                grouped.setdefault(ws.target_branch, []).append(ws)

        results = []
        for target, workspaces in grouped.items():
            for ws in workspaces:
                results.append(self.check_and_rebase(repo_path, ws.id, target, force=False))
        return results

    def _try_begin(self, workspace_id: int) -> bool:
        with self._lock:
            if workspace_id in self._in_flight:
                return False
            self._in_flight.add(workspace_id)
            return True

    def _finish(self, workspace_id: int) -> None:
        with self._lock:
            self._in_flight.discard(workspace_id)

    def _record_reconciled(
        self, workspace: Workspace, tip: str | None, *, has_conflicts: bool
    ) -> None:
        updated = workspace
        if tip is not None:
            updated = updated.with_metadata(**{LAST_REBASED_KEY: tip})
        if has_conflicts:
            updated = updated.with_metadata(**{HAS_CONFLICTS_KEY: "true"})
        else:
            updated = updated.without_metadata(HAS_CONFLICTS_KEY)
        if updated != workspace:
            self._store.update_workspace(updated)

    def _reconcile(
        self, repo_path: Path, workspace_id: int, target: str, force: bool
    ) -> RebaseResult:
        workspace = self._store.get_workspace(workspace_id)
        if workspace is None:
            return RebaseResult(
                status="failed",
                workspace_id=workspace_id,
                target_branch=target,
                rebased=False,
                success=False,
                has_conflicts=False,
                message=f"Workspace {workspace_id} not found",
            )

        tip = self._vcs.get_branch_head(repo_path, target)
        if not force and tip is not None and tip == workspace.last_rebased_target_commit:
            logger.debug("%s already on %s@%s", workspace.branch_name, target, tip)
            return RebaseResult(
                status="noop",
                workspace_id=workspace_id,
                target_branch=target,
                rebased=False,
                success=True,
                has_conflicts=False,
                message=f"Already up to date with {target}",
            )

        logger.debug("Rebasing %s onto %s (force=%s)", workspace.branch_name, target, force)
        try:
            outcome = self._vcs.rebase_onto(workspace.workspace_path, target)
        except RuntimeError as e:
            logger.debug("Rebase primitive raised: %s", e)
            outcome = RebaseOutcome(success=False, has_conflicts=False, message=str(e))

        status = classify_outcome(outcome)
        if status != "failed":
            self._record_reconciled(workspace, tip, has_conflicts=status == "conflicts")

        return RebaseResult(
            status=status,
            workspace_id=workspace_id,
            target_branch=target,
            rebased=True,
            success=outcome.success or outcome.has_conflicts,
            has_conflicts=outcome.has_conflicts,
            conflicted_files=list(outcome.conflicted_files),
            message=outcome.message,
        )
