"""Constants module for git-session.

Constants are grouped in small classes so related values stay together and
can be imported by name:

    >>> from git_session.constants import DisplayText, RemoteDefaults
    >>> DisplayText.INVALID_UTF8
    'INVALID UTF-8'
    >>> RemoteDefaults.REMOTE_NAME
    'origin'
"""

from typing import Final


class DisplayText:
    """Literal strings that appear in rendered results."""

    INVALID_UTF8: Final[str] = "INVALID UTF-8"
    DETACHED_HEAD: Final[str] = "HEAD"
    NO_UPSTREAM: Final[str] = "[No upstream branch tracked]"
    CLEAN_TREE: Final[str] = "nothing to commit, working tree clean"
    STAGED_HEADER: Final[str] = "Changes to be committed:"
    NOT_STAGED_HEADER: Final[str] = "Changes not staged for commit:"
    UNTRACKED_HEADER: Final[str] = "Untracked files:"


class RemoteDefaults:
    """Defaults for operations that talk to a remote."""

    REMOTE_NAME: Final[str] = "origin"
    FETCH_PRUNE: Final[bool] = True


class EnvironmentKeys:
    """Environment variables read by the configuration layer."""

    REPOSITORY: Final[str] = "GIT_SESSION_REPOSITORY"
    REPOSITORY_ROOT: Final[str] = "GIT_SESSION_REPOSITORY_ROOT"
    REPOSITORY_NAME: Final[str] = "GIT_SESSION_REPOSITORY_NAME"
    USERNAME: Final[str] = "GIT_SESSION_USERNAME"
    EMAIL: Final[str] = "GIT_SESSION_EMAIL"
    PASSWORD: Final[str] = "GIT_SESSION_PASSWORD"
    LOG_LEVEL: Final[str] = "LOG_LEVEL"


class CredentialEnvironment:
    """Variables injected into a single git network call."""

    USERNAME: Final[str] = "GIT_SESSION_CREDENTIAL_USERNAME"
    PASSWORD: Final[str] = "GIT_SESSION_CREDENTIAL_PASSWORD"
    # Answers only "get" requests; "store" and "erase" are ignored.
    HELPER: Final[str] = (
        "!f() { test \"$1\" = get || return 0; "
        "echo \"username=$GIT_SESSION_CREDENTIAL_USERNAME\"; "
        "echo \"password=$GIT_SESSION_CREDENTIAL_PASSWORD\"; }; f"
    )


__all__ = [
    "DisplayText",
    "RemoteDefaults",
    "EnvironmentKeys",
    "CredentialEnvironment",
]
