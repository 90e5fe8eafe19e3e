"""git-session - a repository-management façade over GitPython."""

from .cli import main
from .configuration import AuthType, Configuration, NoAuth, PasswordAuth
from .facade import GitFacade
from .git import PullKind, PullResult, RepositorySession, StatusSummary, TrackedBranch

__all__ = [
    "AuthType",
    "Configuration",
    "GitFacade",
    "NoAuth",
    "PasswordAuth",
    "PullKind",
    "PullResult",
    "RepositorySession",
    "StatusSummary",
    "TrackedBranch",
    "main",
]
