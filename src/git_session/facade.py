"""String façade over RepositorySession.

Every method returns text for both success and failure so that hosts which
only exchange strings (plugins, scripting bridges, the CLI) can render any
outcome. Each call opens its own repository handle.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional, TypeVar

from .configuration import Configuration, NoAuth, PasswordAuth
from .error_handling import GitSessionError, classify_error
from .git import RepositorySession

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GitFacade:
    """Named operations and properties exposed to an embedding host."""

    def __init__(self, config: Optional[Configuration] = None):
        self.config = config if config is not None else Configuration()

    # Properties

    @property
    def login(self) -> str:
        return self.config.username

    @login.setter
    def login(self, value: str) -> None:
        self.config.username = value

    @property
    def password(self) -> str:
        return self.config.password or ""

    @password.setter
    def password(self, value: str) -> None:
        self.config.auth = PasswordAuth(password=value) if value else NoAuth()

    @property
    def email(self) -> str:
        return self.config.email

    @email.setter
    def email(self, value: str) -> None:
        self.config.email = value

    @property
    def catalog(self) -> str:
        return "" if self.config.path is None else str(self.config.path)

    @catalog.setter
    def catalog(self, value: str) -> None:
        self.config.path = Path(value) if value else None

    # Operations

    def _failure(self, operation: str, error: BaseException) -> str:
        context = classify_error(error, operation)
        logger.warning(
            f"{operation} failed ({context.category.value}): {context.message}",
            extra={"operation": operation, "repository": self.catalog},
        )
        return context.message

    def _with_session(
        self,
        operation: str,
        action: Callable[[RepositorySession], T],
        render: Callable[[T], str] = str,
    ) -> str:
        logger.debug(f"{operation}()")
        start = time.perf_counter()
        try:
            with RepositorySession.open(self.config) as session:
                text = render(action(session))
        except (GitSessionError, OSError) as e:
            return self._failure(operation, e)

        logger.debug(
            f"{operation} completed",
            extra={
                "operation": operation,
                "repository": self.catalog,
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return text

    def clone_repo(self, url: str) -> str:
        logger.debug(f"clone_repo({url!r})")
        try:
            RepositorySession.clone_from(url, self.config).close()
        except (GitSessionError, OSError) as e:
            return self._failure("clone", e)
        return "Repository cloned"

    def branches(self) -> str:
        return self._with_session(
            "branches",
            lambda session: session.branches(),
            lambda entries: "\n".join(str(entry) for entry in entries),
        )

    def current_branch(self) -> str:
        return self._with_session("current_branch", lambda session: session.current_branch())

    def status(self) -> str:
        return self._with_session("status", lambda session: session.status())

    def add_all(self) -> str:
        return self._with_session(
            "add_all",
            lambda session: session.add_all(),
            lambda snapshot: f"{len(snapshot)} files to be committed",
        )

    def add(self, paths: list[str]) -> str:
        return self._with_session(
            "add",
            lambda session: session.add(paths),
            lambda snapshot: f"{len(snapshot)} files to be committed",
        )

    def commit(self, message: str) -> str:
        return self._with_session("commit", lambda session: session.commit(message))

    def checkout(self, branch_name: str) -> str:
        return self._with_session(
            "checkout",
            lambda session: session.checkout(branch_name),
            lambda _: f"Switched to branch {branch_name}",
        )

    def push(self) -> str:
        return self._with_session(
            "push",
            lambda session: session.push(),
            lambda _: "Successfully pushed the branch",
        )

    def pull(self, branch_name: str) -> str:
        return self._with_session("pull", lambda session: session.pull(branch_name))

    def merge(self) -> str:
        return self._with_session(
            "merge",
            lambda session: session.merge(),
            lambda _: "Successfully merged the branch",
        )
