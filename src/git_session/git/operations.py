"""Repository session: the single public surface for repository operations.

A RepositorySession owns one open ``git.Repo`` handle and a reference to the
caller's Configuration. Operations that talk to a remote (branches,
checkout, push, pull) fetch every remote first, with credentials derived
from the configuration as it is at call time.

Usage:
    config = Configuration(username="dev", email="dev@example.com", path=path)
    with RepositorySession.open(config) as session:
        session.add_all()
        commit_id = session.commit("Update docs")
        print(session.status())
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from git import Actor, Commit, Head, PushInfo, Remote, Repo

from ..configuration import Configuration
from ..constants import RemoteDefaults
from ..error_handling import (
    BranchNotFoundError,
    DetachedHeadError,
    NoUpstreamError,
    PushRejectedError,
    RemoteNotFoundError,
    RepositoryOpenError,
    RepositoryStateError,
    UnbornBranchError,
    git_operation,
    translate_git_errors,
)
from .branches import current_branch, fetch_all, find_local_branch, list_branches
from .credentials import authenticated, credential_environment
from .models import (
    BranchEntry,
    BranchKind,
    IndexSnapshot,
    MergeAnalysis,
    PullKind,
    PullResult,
    StatusSummary,
    TrackedBranch,
)
from .status import head_branch_name, status_entries, summarize

logger = logging.getLogger(__name__)


def _repository_path(config: Configuration, operation: str) -> Path:
    if config.path is None:
        raise RepositoryOpenError("repository path is not configured", operation)
    return config.path


def analyze_merge(repo: Repo, local: Head, upstream_commit: Commit) -> MergeAnalysis:
    """Compare a local branch tip with its upstream tip.

    Exactly one flag is set in the returned value.
    """
    if not local.is_valid():
        return MergeAnalysis.UNBORN

    local_commit = local.commit
    if local_commit == upstream_commit or repo.is_ancestor(upstream_commit, local_commit):
        return MergeAnalysis.UP_TO_DATE
    if not repo.merge_base(local_commit, upstream_commit):
        return MergeAnalysis.NONE
    if repo.is_ancestor(local_commit, upstream_commit):
        return MergeAnalysis.FASTFORWARD
    return MergeAnalysis.NORMAL


class RepositorySession:
    """An open repository bound to a Configuration."""

    def __init__(self, repo: Repo, config: Configuration):
        self.repo = repo
        self.config = config

    @classmethod
    @git_operation("open")
    def open(cls, config: Configuration) -> "RepositorySession":
        """Open the repository at ``config.path``.

        Raises:
            RepositoryOpenError: If the path is unset, does not exist or is
                not a repository.
        """
        return cls(Repo(_repository_path(config, "open")), config)

    @classmethod
    def clone_from(cls, url: str, config: Configuration) -> "RepositorySession":
        """Clone ``url`` into ``config.path`` and open the result."""
        destination = _repository_path(config, "clone")
        if destination.exists() and any(destination.iterdir()):
            raise RepositoryStateError(
                f"destination path '{destination}' already exists and is not an empty directory",
                "clone",
            )

        with translate_git_errors("clone", network=True):
            with credential_environment(config) as env:
                repo = Repo.clone_from(url, destination, env=env)

        logger.info(f"Cloned {url} into {destination}")
        return cls(repo, config)

    def close(self) -> None:
        self.repo.close()

    def __enter__(self) -> "RepositorySession":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _fetch_all(self, operation: str) -> None:
        with translate_git_errors(operation, network=True):
            fetch_all(self.repo, self.config)

    @git_operation("branches")
    def branches(self) -> List[BranchEntry]:
        """Fetch all remotes, then list local and remote branches."""
        self._fetch_all("branches")
        return list_branches(self.repo)

    @git_operation("current_branch")
    def current_branch(self) -> TrackedBranch:
        return current_branch(self.repo)

    @git_operation("status")
    def status(self) -> StatusSummary:
        return summarize(self.repo)

    @git_operation("add")
    def add(self, pathspecs: Iterable[str]) -> IndexSnapshot:
        """Stage the paths matching ``pathspecs`` and write the index.

        New, modified and deleted files are staged; ignored files are not.

        Returns:
            IndexSnapshot whose length is the number of paths staged
            relative to HEAD.
        """
        specs = list(pathspecs)
        if not specs:
            raise RepositoryStateError("at least one pathspec is required", "add")

        self.repo.git.add("--all", "--", *specs)

        staged = tuple(
            entry.path for entry in status_entries(self.repo) if entry.head_to_index
        )
        snapshot = IndexSnapshot(
            staged_paths=staged, entry_count=len(self.repo.index.entries)
        )
        logger.info(f"Staged {len(snapshot)} path(s) matching {specs}")
        return snapshot

    def add_all(self) -> IndexSnapshot:
        """Stage every path under the working directory."""
        return self.add(["."])

    @git_operation("commit")
    def commit(self, message: str) -> str:
        """Commit the index on top of HEAD and return the new commit id.

        Raises:
            UnbornBranchError: If HEAD does not resolve to a commit.
        """
        try:
            parent = self.repo.head.commit
        except ValueError as e:
            raise UnbornBranchError("Couldn't find last commit", "commit") from e

        signature = Actor(self.config.username, self.config.email)
        commit = self.repo.index.commit(
            message,
            parent_commits=[parent],
            author=signature,
            committer=signature,
            head=True,
        )
        logger.info(f"Created commit {commit.hexsha[:8]}")
        return commit.hexsha

    @git_operation("checkout")
    def checkout(self, branch_name: str) -> None:
        """Switch to ``branch_name``, creating it from ``origin`` if needed.

        The working tree is forced to match the branch: uncommitted changes
        that conflict with it are discarded.

        Raises:
            BranchNotFoundError: If neither a local branch nor
                ``origin/<branch_name>`` exists.
        """
        self._fetch_all("checkout")

        remote_name = f"{RemoteDefaults.REMOTE_NAME}/{branch_name}"
        match = next(
            (
                entry
                for entry in list_branches(self.repo)
                if (entry.kind is BranchKind.LOCAL and entry.reference.name == branch_name)
                or (entry.kind is BranchKind.REMOTE and entry.reference.name == remote_name)
            ),
            None,
        )
        if match is None:
            raise BranchNotFoundError("no branch with this name", "checkout")

        if match.kind is BranchKind.REMOTE:
            local = self.repo.create_head(branch_name, match.reference.commit)
            local.set_tracking_branch(match.reference)
            logger.info(f"Created branch '{branch_name}' tracking '{remote_name}'")
        else:
            local = match.reference

        local.checkout(force=True)
        logger.info(f"Switched to branch '{branch_name}'")

    def _origin(self) -> Remote:
        try:
            return self.repo.remote(RemoteDefaults.REMOTE_NAME)
        except ValueError as e:
            raise RemoteNotFoundError(
                f"remote '{RemoteDefaults.REMOTE_NAME}' does not exist", "push"
            ) from e

    @git_operation("push", network=True)
    def push(self) -> None:
        """Fetch all remotes, then push the branch HEAD points to to ``origin``."""
        self._fetch_all("push")
        if self.repo.head.is_detached:
            raise DetachedHeadError("no branch name", "push")
        refspec = self.repo.head.ref.path
        origin = self._origin()

        with authenticated(self.repo, self.config):
            results = origin.push(refspec=refspec)
        results.raise_if_error()

        rejected = [info for info in results if info.flags & PushInfo.ERROR]
        if rejected:
            raise PushRejectedError(
                "; ".join(f"{info.remote_ref_string}: {info.summary.strip()}" for info in rejected),
                "push",
            )
        logger.info(f"Pushed {refspec} to {origin.name}")

    def _local_branch_for_pull(self, branch_name: str) -> Head:
        local = find_local_branch(self.repo, branch_name)
        if local is not None:
            return local

        # A branch without commits only exists as HEAD's symbolic target
        head = self.repo.head
        if not head.is_detached and head.ref.name == branch_name:
            return head.ref

        raise BranchNotFoundError(f"cannot locate local branch '{branch_name}'", "pull")

    @git_operation("pull")
    def pull(self, branch_name: str) -> PullResult:
        """Bring ``branch_name`` up to date with its upstream if that is a fast-forward.

        Diverged histories are reported as NORMAL and left untouched.

        Raises:
            NoUpstreamError: If the branch does not track a remote branch.
        """
        self._fetch_all("pull")

        local = self._local_branch_for_pull(branch_name)
        upstream = local.tracking_branch()
        if upstream is None:
            raise NoUpstreamError(
                f"branch '{branch_name}' has no upstream branch", "pull"
            )
        if not upstream.is_valid():
            raise BranchNotFoundError(
                f"upstream branch '{upstream.name}' does not exist", "pull"
            )

        upstream_commit = upstream.commit
        analysis = analyze_merge(self.repo, local, upstream_commit)
        logger.debug(f"Pull analysis for '{branch_name}': {analysis}")

        if analysis == MergeAnalysis.NONE:
            return PullResult(PullKind.NONE)
        if MergeAnalysis.NORMAL in analysis:
            return PullResult(PullKind.NORMAL)
        if MergeAnalysis.UP_TO_DATE in analysis:
            return PullResult(PullKind.UP_TO_DATE)
        if MergeAnalysis.FASTFORWARD in analysis:
            return self._fast_forward(local, upstream_commit)
        if MergeAnalysis.UNBORN in analysis:
            return PullResult(PullKind.UNBORN)

        raise AssertionError(f"Invalid pull analysis value {analysis.value:b}")

    def _fast_forward(self, local: Head, target: Commit) -> PullResult:
        old_id = local.commit.hexsha
        head = self.repo.head
        if not head.is_detached and head.ref == local:
            # Checked out: move the working tree along with the branch
            self.repo.git.merge("--ff-only", target.hexsha)
        else:
            local.set_commit(target, logmsg=f"fast forward branch '{local.name}' tip")
        new_id = local.commit.hexsha
        logger.info(f"Fast-forwarded '{local.name}' {old_id[:8]}..{new_id[:8]}")
        return PullResult.fast_forwarded(old_id, new_id)

    def merge(self, branch_from: Optional[str] = None, branch_to: Optional[str] = None) -> str:
        """Placeholder for merging; performs no work.

        Returns:
            The name of the current branch.
        """
        logger.debug(f"merge({branch_from!r}, {branch_to!r}) is not implemented")
        with translate_git_errors("merge"):
            return head_branch_name(self.repo)
