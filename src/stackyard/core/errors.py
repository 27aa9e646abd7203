"""Error taxonomy for workspace graph, commit fetching, and rebase operations.

Rebase conflicts are deliberately absent: a rebase that stops on conflicts is
a successful outcome carrying a file list (see RebaseResult), not an error.
"""


class StackyardError(Exception):
    """Base class for domain errors raised by stackyard."""


class WorkspaceNotFoundError(StackyardError):
    """No workspace record matches the requested id or branch."""


class CycleDetectedError(StackyardError):
    """Target edges loop back onto a branch already on the path.

    Attributes:
        branch: Branch whose walk (or proposed retarget) hit the cycle
        path: Branches visited before the loop was detected, leaf first
    """

    def __init__(self, branch: str, path: list[str]) -> None:
        self.branch = branch
        self.path = list(path)
        loop = " -> ".join([*self.path, branch])
        super().__init__(f"Target cycle detected for '{branch}': {loop}")


class FetchError(StackyardError):
    """Commit or branch query against the version-control backend failed."""


class RebaseFailure(StackyardError):
    """Rebase was rejected by the version-control backend.

    Attributes:
        workspace_branch: Branch of the workspace being rebased
        target_branch: Branch it was being rebased onto
    """

    def __init__(self, workspace_branch: str, target_branch: str, message: str) -> None:
        self.workspace_branch = workspace_branch
        self.target_branch = target_branch
        super().__init__(message)
