"""Branch catalog: fetch, enumerate and resolve branches."""

import logging
from typing import List, Optional

from git import Head, RemoteReference, Repo

from ..configuration import Configuration
from ..constants import DisplayText, RemoteDefaults
from ..error_handling import BranchNotFoundError
from .credentials import authenticated
from .models import BranchEntry, BranchKind, TrackedBranch

logger = logging.getLogger(__name__)


def fetch_all(repo: Repo, config: Configuration) -> None:
    """Fetch every configured remote, pruning vanished remote branches."""
    with authenticated(repo, config):
        for remote in repo.remotes:
            logger.debug(f"Fetching remote '{remote.name}'")
            remote.fetch(prune=RemoteDefaults.FETCH_PRUNE)


def list_branches(repo: Repo) -> List[BranchEntry]:
    """Local branches followed by remote-tracking branches."""
    entries = [BranchEntry(head, BranchKind.LOCAL) for head in repo.heads]
    entries.extend(
        BranchEntry(ref, BranchKind.REMOTE) for ref in RemoteReference.iter_items(repo)
    )
    return entries


def find_local_branch(repo: Repo, name: str) -> Optional[Head]:
    return next((head for head in repo.heads if head.name == name), None)


def current_branch(repo: Repo) -> TrackedBranch:
    """Resolve HEAD's branch and the upstream it tracks, if any.

    Raises:
        BranchNotFoundError: If HEAD does not name an existing local branch
            (detached HEAD or a branch without commits).
    """
    if repo.head.is_detached:
        name = DisplayText.DETACHED_HEAD
    else:
        name = repo.head.ref.name

    local = find_local_branch(repo, name)
    if local is None:
        raise BranchNotFoundError(
            f"cannot locate local branch '{name}'", "current_branch"
        )

    return TrackedBranch(local=local, upstream=local.tracking_branch())
