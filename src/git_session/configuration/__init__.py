"""Configuration module for git-session.

A ``Configuration`` describes who is acting on which working directory and
how remote operations authenticate. It is a mutable pydantic model: the
caller owns it, repository sessions keep a reference to it, and every network
call derives credentials from its current state.

Usage examples:
    >>> from git_session.configuration import Configuration, PasswordAuth
    >>>
    >>> config = Configuration(username="dev", email="dev@example.com", path="/tmp/repo")
    >>> config.auth
    NoAuth(kind='none')
    >>> config.auth = PasswordAuth(password="s3cret")
    >>>
    >>> # Or from the environment (.env files are loaded first)
    >>> config = Configuration.from_environment()

Environment variable binding:
    ```bash
    export GIT_SESSION_REPOSITORY_ROOT=/home/dev/projects
    export GIT_SESSION_REPOSITORY_NAME=my-repo
    export GIT_SESSION_USERNAME=dev
    export GIT_SESSION_EMAIL=dev@example.com
    export GIT_SESSION_PASSWORD=s3cret   # optional, enables password auth
    ```
"""

import logging
import os
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ..constants import EnvironmentKeys
from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)


class NoAuth(BaseModel):
    """Anonymous access: no credential is ever supplied."""

    kind: Literal["none"] = "none"


class PasswordAuth(BaseModel):
    """Username/password access; the username comes from the configuration."""

    kind: Literal["password"] = "password"
    password: SecretStr

    def __init__(self, password: Union[str, SecretStr], **data):
        super().__init__(password=password, **data)


AuthType = Annotated[Union[NoAuth, PasswordAuth], Field(discriminator="kind")]


class Configuration(BaseModel):
    """Identity, authentication and working directory for a repository session."""

    model_config = ConfigDict(validate_assignment=True)

    username: str = ""
    auth: AuthType = Field(default_factory=NoAuth)
    email: str = ""
    path: Optional[Path] = None

    @property
    def password(self) -> Optional[str]:
        """The plain-text password, or None for anonymous access."""
        if isinstance(self.auth, PasswordAuth):
            return self.auth.password.get_secret_value()
        return None

    @classmethod
    def from_environment(cls, repository: Optional[Path] = None) -> "Configuration":
        """Build a configuration from environment variables.

        ``.env`` files are loaded first (see ``load_environment_variables``).
        The working directory is ``repository`` when given, otherwise
        ``GIT_SESSION_REPOSITORY`` or ``GIT_SESSION_REPOSITORY_ROOT`` joined
        with ``GIT_SESSION_REPOSITORY_NAME``.

        Raises:
            ConfigurationError: If no working directory can be determined.
        """
        load_environment_variables(repository)

        path = repository or repository_path_from_environment()
        if path is None:
            raise ConfigurationError(
                "repository path is not configured; set "
                f"{EnvironmentKeys.REPOSITORY} or "
                f"{EnvironmentKeys.REPOSITORY_ROOT} and {EnvironmentKeys.REPOSITORY_NAME}",
                "configure",
            )

        password = os.getenv(EnvironmentKeys.PASSWORD)
        auth: Union[NoAuth, PasswordAuth] = (
            PasswordAuth(password=password) if password else NoAuth()
        )

        return cls(
            username=os.getenv(EnvironmentKeys.USERNAME, ""),
            email=os.getenv(EnvironmentKeys.EMAIL, ""),
            auth=auth,
            path=path,
        )


def repository_path_from_environment() -> Optional[Path]:
    """Resolve the working directory from environment variables, if set."""
    explicit = os.getenv(EnvironmentKeys.REPOSITORY)
    if explicit:
        return Path(explicit)

    root = os.getenv(EnvironmentKeys.REPOSITORY_ROOT)
    name = os.getenv(EnvironmentKeys.REPOSITORY_NAME)
    if root and name:
        return Path(root) / name

    return None


def load_environment_variables(repository_path: Optional[Path] = None) -> list[Path]:
    """Load environment variables from .env files.

    Order of precedence:
    1. System environment variables (never overridden)
    2. Project-specific .env file (current working directory)
    3. Repository-specific .env file (if repository path provided)

    Args:
        repository_path: Optional path to the repository being used

    Returns:
        The .env files that were loaded
    """
    candidates = [Path.cwd() / ".env"]
    if repository_path:
        candidates.append(Path(repository_path) / ".env")

    loaded: list[Path] = []
    for env_file in candidates:
        if env_file in loaded or not env_file.is_file():
            continue
        load_dotenv(env_file, override=False)
        loaded.append(env_file)
        logger.info(f"Loaded environment variables from {env_file}")

    return loaded


__all__ = [
    "AuthType",
    "Configuration",
    "NoAuth",
    "PasswordAuth",
    "load_environment_variables",
    "repository_path_from_environment",
]
