"""Error taxonomy and error-to-message flattening for git-session."""

import functools
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, Optional

from git.exc import (
    GitCommandError,
    GitError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

logger = logging.getLogger(__name__)

_AUTH_MARKERS = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "permission denied",
    "401",
    "403",
)


class ErrorCategory(Enum):
    """Classification of errors raised by repository operations."""

    REPOSITORY_STATE = "repository_state"  # HEAD, branch or remote lookup failed
    TRANSPORT = "transport"  # Network or authentication failure
    DECODING = "decoding"  # A name could not be decoded as UTF-8
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class GitSessionError(Exception):
    """Base class for every error raised by git-session."""

    category = ErrorCategory.UNKNOWN

    def __init__(self, message: str, operation: str = ""):
        super().__init__(message)
        self.message = message
        self.operation = operation


class ConfigurationError(GitSessionError):
    category = ErrorCategory.CONFIGURATION


class RepositoryStateError(GitSessionError):
    category = ErrorCategory.REPOSITORY_STATE


class RepositoryOpenError(RepositoryStateError):
    pass


class BranchNotFoundError(RepositoryStateError):
    pass


class UnbornBranchError(RepositoryStateError):
    pass


class NoUpstreamError(RepositoryStateError):
    pass


class RemoteNotFoundError(RepositoryStateError):
    pass


class DetachedHeadError(RepositoryStateError):
    pass


class CommandError(RepositoryStateError):
    """A local git command exited with a non-zero status."""


class TransportError(GitSessionError):
    category = ErrorCategory.TRANSPORT


class AuthenticationError(TransportError):
    pass


class PushRejectedError(TransportError):
    pass


class NameDecodeError(GitSessionError):
    category = ErrorCategory.DECODING


class ErrorContext:
    """Context information about an error, used for logging."""

    def __init__(
        self,
        error: BaseException,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        operation: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.error = error
        self.category = category
        self.operation = operation
        self.metadata = metadata or {}

    @property
    def message(self) -> str:
        return error_message(self.error)


def _is_auth_failure(error: GitCommandError) -> bool:
    text = f"{error.stderr or ''} {error.stdout or ''}".lower()
    return any(marker in text for marker in _AUTH_MARKERS)


def classify_error(error: BaseException, operation: str = "") -> ErrorContext:
    """
    Classify an error and create an appropriate ErrorContext.

    Args:
        error: The exception that occurred
        operation: The operation during which the error occurred

    Returns:
        ErrorContext with the category used for logging
    """
    if isinstance(error, GitSessionError):
        return ErrorContext(
            error=error,
            category=error.category,
            operation=error.operation or operation,
        )

    if isinstance(error, (InvalidGitRepositoryError, NoSuchPathError)):
        return ErrorContext(
            error=error,
            category=ErrorCategory.REPOSITORY_STATE,
            operation=operation,
        )

    if isinstance(error, GitCommandError):
        return ErrorContext(
            error=error,
            category=ErrorCategory.TRANSPORT,
            operation=operation,
            metadata={"command": error.command, "status": error.status},
        )

    if isinstance(error, UnicodeError):
        return ErrorContext(
            error=error, category=ErrorCategory.DECODING, operation=operation
        )

    return ErrorContext(error=error, operation=operation)


def _captured_output(value: Optional[str], label: str) -> str:
    # GitPython stores captured output as "\n  stderr: '...'"
    text = (value or "").strip()
    prefix = f"{label}: "
    if text.startswith(prefix):
        text = text[len(prefix) :].strip("'")
    return text.strip()


def error_message(error: BaseException) -> str:
    """Flatten any error into a single display line."""
    if isinstance(error, GitSessionError):
        text = error.message
    elif isinstance(error, GitCommandError):
        text = (
            _captured_output(error.stderr, "stderr")
            or _captured_output(error.stdout, "stdout")
            or f"git command failed with exit code {error.status}"
        )
    else:
        text = str(error) or type(error).__name__

    return " ".join(text.split())


@contextmanager
def translate_git_errors(operation: str, network: bool = False) -> Iterator[None]:
    """Convert GitPython exceptions raised inside the block to GitSessionError.

    Failed git commands become TransportError (or AuthenticationError) when
    ``network`` is set, and CommandError otherwise.
    """
    try:
        yield
    except GitSessionError as e:
        if not e.operation:
            e.operation = operation
        raise
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise RepositoryOpenError(
            f"could not open repository at '{e}'", operation
        ) from e
    except GitCommandError as e:
        logger.debug(f"git command failed during {operation}: {e.command} (exit {e.status})")
        if not network:
            raise CommandError(error_message(e), operation) from e
        if _is_auth_failure(e):
            raise AuthenticationError(error_message(e), operation) from e
        raise TransportError(error_message(e), operation) from e
    except GitError as e:
        raise GitSessionError(error_message(e), operation) from e


def git_operation(operation: str, network: bool = False):
    """Decorator applying translate_git_errors to a whole method."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            with translate_git_errors(operation, network):
                return func(*args, **kwargs)

        return wrapper

    return decorator
