"""Workspace persistence interface and implementations."""

import tomllib
from abc import ABC, abstractmethod
from pathlib import Path

import tomli_w

from stackyard.cli.output import user_output
from stackyard.core.errors import WorkspaceNotFoundError
from stackyard.core.workspace_types import Workspace


class WorkspaceStore(ABC):
    """Interface for workspace record storage."""

    @abstractmethod
    def list_workspaces(self) -> list[Workspace]:
        """Load all workspace records, ordered by id."""
        pass

    @abstractmethod
    def create_workspace(
        self,
        *,
        workspace_path: Path,
        branch_name: str,
        target_branch: str | None,
        metadata: dict[str, str] | None = None,
    ) -> Workspace:
        """Persist a new workspace record and return it with its assigned id."""
        pass

    @abstractmethod
    def update_workspace(self, workspace: Workspace) -> None:
        """Replace the stored record with the same id.

        Raises:
            WorkspaceNotFoundError: If no record has workspace.id
        """
        pass

    @abstractmethod
    def delete_workspace(self, workspace_id: int) -> None:
        """Remove a workspace record.

        Raises:
            WorkspaceNotFoundError: If no record has workspace_id
        """
        pass

    def get_workspace(self, workspace_id: int) -> Workspace | None:
        """Find a workspace by id."""
        for ws in self.list_workspaces():
            if ws.id == workspace_id:
                return ws
        return None

    def find_by_branch(self, branch_name: str) -> Workspace | None:
        """Find the workspace that owns branch_name."""
        for ws in self.list_workspaces():
            if ws.branch_name == branch_name:
                return ws
        return None


class RealWorkspaceStore(WorkspaceStore):
    """TOML-file backed workspace storage.

    Records live in <state_dir>/workspaces.toml; repo_path is not stored per
    record since a store always belongs to exactly one repository.
    """

    def __init__(self, repo_root: Path, state_dir: Path) -> None:
        """Initialize with repository root and the directory holding workspaces.toml."""
        self.repo_root = repo_root
        self.workspaces_path = state_dir / "workspaces.toml"

    def list_workspaces(self) -> list[Workspace]:
        """Load workspace records from TOML file."""
        workspaces, _ = self._load()
        return workspaces

    def create_workspace(
        self,
        *,
        workspace_path: Path,
        branch_name: str,
        target_branch: str | None,
        metadata: dict[str, str] | None = None,
    ) -> Workspace:
        workspaces, next_id = self._load()
        workspace = Workspace(
            id=next_id,
            repo_path=self.repo_root,
            workspace_path=workspace_path,
            branch_name=branch_name,
            target_branch=target_branch,
            metadata=dict(metadata or {}),
        )
        workspaces.append(workspace)
        self._save(workspaces, next_id + 1)
        return workspace

    def update_workspace(self, workspace: Workspace) -> None:
        workspaces, next_id = self._load()
        index = _index_of(workspaces, workspace.id)
        workspaces[index] = workspace
        self._save(workspaces, next_id)

    def delete_workspace(self, workspace_id: int) -> None:
        workspaces, next_id = self._load()
        index = _index_of(workspaces, workspace_id)
        del workspaces[index]
        self._save(workspaces, next_id)

    def _load(self) -> tuple[list[Workspace], int]:
        if not self.workspaces_path.exists():
            return [], 1

        with open(self.workspaces_path, "rb") as f:
            data = tomllib.load(f)

        workspaces = []
        for entry in data.get("workspaces", []):
            workspaces.append(
                Workspace(
                    id=int(entry["id"]),
                    repo_path=self.repo_root,
                    workspace_path=Path(entry["workspace_path"]),
                    branch_name=entry["branch_name"],
                    target_branch=entry.get("target_branch"),
                    metadata={str(k): str(v) for k, v in entry.get("metadata", {}).items()},
                )
            )
        workspaces.sort(key=lambda ws: ws.id)

        highest = max((ws.id for ws in workspaces), default=0)
        next_id = max(int(data.get("next_id", 1)), highest + 1)
        return workspaces, next_id

    def _save(self, workspaces: list[Workspace], next_id: int) -> None:
        entries = []
        for ws in workspaces:
            entry: dict[str, object] = {
                "id": ws.id,
                "workspace_path": str(ws.workspace_path),
                "branch_name": ws.branch_name,
            }
            # TOML has no null; a missing key means "no target"
            if ws.target_branch is not None:
                entry["target_branch"] = ws.target_branch
            if ws.metadata:
                entry["metadata"] = dict(ws.metadata)
            entries.append(entry)

        # Ensure parent directory exists
        if not self.workspaces_path.parent.exists():
            self.workspaces_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.workspaces_path, "wb") as f:
            tomli_w.dump({"next_id": next_id, "workspaces": entries}, f)


class FakeWorkspaceStore(WorkspaceStore):
    """In-memory workspace storage for testing."""

    def __init__(
        self, workspaces: list[Workspace] | None = None, repo_root: Path = Path("/repo")
    ) -> None:
        """Initialize with pre-existing workspace records."""
        self.repo_root = repo_root
        self._workspaces: dict[int, Workspace] = {ws.id: ws for ws in workspaces or []}
        self._next_id = max(self._workspaces, default=0) + 1

    def list_workspaces(self) -> list[Workspace]:
        return [self._workspaces[key] for key in sorted(self._workspaces)]

    def create_workspace(
        self,
        *,
        workspace_path: Path,
        branch_name: str,
        target_branch: str | None,
        metadata: dict[str, str] | None = None,
    ) -> Workspace:
        workspace = Workspace(
            id=self._next_id,
            repo_path=self.repo_root,
            workspace_path=workspace_path,
            branch_name=branch_name,
            target_branch=target_branch,
            metadata=dict(metadata or {}),
        )
        self._workspaces[workspace.id] = workspace
        self._next_id += 1
        return workspace

    def update_workspace(self, workspace: Workspace) -> None:
        if workspace.id not in self._workspaces:
            raise WorkspaceNotFoundError(f"Workspace {workspace.id} not found")
        self._workspaces[workspace.id] = workspace

    def delete_workspace(self, workspace_id: int) -> None:
        if workspace_id not in self._workspaces:
            raise WorkspaceNotFoundError(f"Workspace {workspace_id} not found")
        del self._workspaces[workspace_id]


class NoopWorkspaceStore(WorkspaceStore):
    """Dry-run wrapper: reads delegate, writes are printed and dropped."""

    def __init__(self, wrapped: WorkspaceStore, repo_root: Path) -> None:
        self._wrapped = wrapped
        self.repo_root = repo_root

    def list_workspaces(self) -> list[Workspace]:
        return self._wrapped.list_workspaces()

    def create_workspace(
        self,
        *,
        workspace_path: Path,
        branch_name: str,
        target_branch: str | None,
        metadata: dict[str, str] | None = None,
    ) -> Workspace:
        user_output(f"[DRY RUN] Would record workspace {branch_name} at {workspace_path}")
        existing = self._wrapped.list_workspaces()
        next_id = max((ws.id for ws in existing), default=0) + 1
        return Workspace(
            id=next_id,
            repo_path=self.repo_root,
            workspace_path=workspace_path,
            branch_name=branch_name,
            target_branch=target_branch,
            metadata=dict(metadata or {}),
        )

    def update_workspace(self, workspace: Workspace) -> None:
        user_output(f"[DRY RUN] Would update workspace {workspace.branch_name}")

    def delete_workspace(self, workspace_id: int) -> None:
        user_output(f"[DRY RUN] Would delete workspace {workspace_id}")


def _index_of(workspaces: list[Workspace], workspace_id: int) -> int:
    for i, ws in enumerate(workspaces):
        if ws.id == workspace_id:
            return i
    raise WorkspaceNotFoundError(f"Workspace {workspace_id} not found")
