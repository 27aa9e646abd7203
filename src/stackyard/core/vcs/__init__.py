"""Version-control operations subpackage.

This subpackage provides abstractions over the version-control backend with
support for testing via fakes and dry-run via wrappers.
"""

from stackyard.core.vcs.abc import Commit, RebaseOutcome, Vcs
from stackyard.core.vcs.fake import FakeVcs
from stackyard.core.vcs.noop import NoopVcs
from stackyard.core.vcs.real import RealVcs

__all__ = [
    "Commit",
    "FakeVcs",
    "NoopVcs",
    "RealVcs",
    "RebaseOutcome",
    "Vcs",
]
