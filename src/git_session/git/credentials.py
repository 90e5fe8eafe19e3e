"""Credential provider for fetch, push and clone.

Credentials are derived from the live configuration for exactly one network
call. Nothing is written to git config files and nothing outlives the
``with`` block that performed the call.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterator

from git import Repo

from ..configuration import Configuration, PasswordAuth
from ..constants import CredentialEnvironment

logger = logging.getLogger(__name__)

_NON_INTERACTIVE = {
    # Fail instead of prompting when the remote wants credentials we lack.
    "GIT_TERMINAL_PROMPT": "0",
    "GCM_INTERACTIVE": "never",
}


def _config_entries(*entries: tuple[str, str]) -> Dict[str, str]:
    env = {"GIT_CONFIG_COUNT": str(len(entries))}
    for i, (key, value) in enumerate(entries):
        env[f"GIT_CONFIG_KEY_{i}"] = key
        env[f"GIT_CONFIG_VALUE_{i}"] = value
    return env


@contextmanager
def credential_environment(config: Configuration) -> Iterator[Dict[str, str]]:
    """Yield the git environment for a single network call.

    With password auth, a one-shot credential helper answers every request
    with ``config.username`` and the password. Without auth the helper list
    is reset so that no credential is supplied at all.
    """
    env = dict(_NON_INTERACTIVE)
    # An empty helper value clears helpers inherited from system/global config.
    if isinstance(config.auth, PasswordAuth):
        env.update(
            _config_entries(
                ("credential.helper", ""),
                ("credential.helper", CredentialEnvironment.HELPER),
            )
        )
        env[CredentialEnvironment.USERNAME] = config.username
        env[CredentialEnvironment.PASSWORD] = config.auth.password.get_secret_value()
        logger.debug(f"Using password credentials for user '{config.username}'")
    else:
        env.update(_config_entries(("credential.helper", "")))
        logger.debug("Using anonymous access")

    try:
        yield env
    finally:
        env.clear()


@contextmanager
def authenticated(repo: Repo, config: Configuration) -> Iterator[None]:
    """Run the enclosed git commands of ``repo`` with derived credentials."""
    with credential_environment(config) as env:
        with repo.git.custom_environment(**env):
            yield
