"""Result types returned by repository operations."""

from dataclasses import dataclass, field
from enum import Enum, Flag
from typing import List, Optional

from git import Head, RemoteReference

from ..constants import DisplayText


def branch_name(reference: Head | RemoteReference) -> str:
    """Display name of a branch; never empty and never raises.

    Names that are empty or not valid UTF-8 become ``INVALID UTF-8``; if the
    name cannot be resolved at all, the error text is returned instead.
    """
    try:
        name = reference.name
    except Exception as e:
        return str(e) or type(e).__name__

    if not name:
        return DisplayText.INVALID_UTF8
    try:
        # Undecodable bytes surface as lone surrogates
        name.encode("utf-8")
    except UnicodeEncodeError:
        return DisplayText.INVALID_UTF8
    return name


class ChangeKind(Enum):
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    TYPECHANGE = "typechange"
    UNTRACKED = "untracked"
    CONFLICTED = "conflicted"


class BranchKind(Enum):
    LOCAL = "Local"
    REMOTE = "Remote"


@dataclass(frozen=True)
class FileStatus:
    status: ChangeKind
    old_file: str
    new_file: str

    def __str__(self) -> str:
        if self.status is ChangeKind.RENAMED:
            return f"{self.status.value}: {self.old_file} --> {self.new_file}"
        return f"{self.status.value}: {self.old_file}"


@dataclass(frozen=True)
class StatusEntry:
    """Both deltas recorded for one path; either may be missing."""

    path: str
    head_to_index: Optional[FileStatus] = None
    index_to_workdir: Optional[FileStatus] = None


@dataclass
class StatusSummary:
    """Three-way classification of the working tree.

    ``staged`` holds HEAD to index differences, ``not_staged`` index to
    working tree differences and ``untracked`` paths unknown to the index.
    """

    branch_name: str
    staged: List[FileStatus] = field(default_factory=list)
    not_staged: List[FileStatus] = field(default_factory=list)
    untracked: List[FileStatus] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.not_staged or self.untracked)

    def add_entry(self, entry: StatusEntry) -> "StatusSummary":
        if entry.head_to_index is not None:
            self.staged.append(entry.head_to_index)

        delta = entry.index_to_workdir
        if delta is not None:
            if delta.status is ChangeKind.UNTRACKED:
                self.untracked.append(delta)
            else:
                self.not_staged.append(delta)

        return self

    def __str__(self) -> str:
        text = f"on branch {self.branch_name}"
        if self.is_clean:
            return f"{text}\n{DisplayText.CLEAN_TREE}"

        for header, contents in (
            (DisplayText.STAGED_HEADER, self.staged),
            (DisplayText.NOT_STAGED_HEADER, self.not_staged),
            (DisplayText.UNTRACKED_HEADER, self.untracked),
        ):
            if contents:
                text += f"\n{header}\n\t" + "\n\t".join(str(s) for s in contents)

        return text


@dataclass(frozen=True)
class BranchEntry:
    """A local or remote-tracking branch as returned by ``branches()``."""

    reference: Head | RemoteReference
    kind: BranchKind

    @property
    def name(self) -> str:
        return branch_name(self.reference)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.name}"


@dataclass(frozen=True)
class TrackedBranch:
    local: Head
    upstream: Optional[RemoteReference] = None

    @property
    def local_name(self) -> str:
        return branch_name(self.local)

    @property
    def upstream_name(self) -> Optional[str]:
        if self.upstream is None:
            return None
        return branch_name(self.upstream)

    def __str__(self) -> str:
        return f"{self.local_name}:{self.upstream_name or DisplayText.NO_UPSTREAM}"


@dataclass(frozen=True)
class IndexSnapshot:
    """State of the index after staging."""

    staged_paths: tuple[str, ...]
    entry_count: int

    def __len__(self) -> int:
        return len(self.staged_paths)


class MergeAnalysis(Flag):
    """Outcome of comparing a local branch tip with its upstream tip."""

    NONE = 0
    NORMAL = 1
    UP_TO_DATE = 2
    FASTFORWARD = 4
    UNBORN = 8


class PullKind(Enum):
    NONE = "none"
    NORMAL = "normal"
    UP_TO_DATE = "up_to_date"
    FAST_FORWARDED = "fast_forwarded"
    UNBORN = "unborn"


@dataclass(frozen=True)
class PullResult:
    """Result of ``pull``; ids are only set for FAST_FORWARDED."""

    kind: PullKind
    old_id: Optional[str] = None
    new_id: Optional[str] = None

    @classmethod
    def fast_forwarded(cls, old_id: str, new_id: str) -> "PullResult":
        return cls(PullKind.FAST_FORWARDED, old_id, new_id)

    def __str__(self) -> str:
        if self.kind is PullKind.FAST_FORWARDED:
            return f"Fast-forwarded {self.old_id[:8]}..{self.new_id[:8]}"
        return _PULL_MESSAGES[self.kind]


_PULL_MESSAGES = {
    PullKind.NONE: "No merge is possible",
    PullKind.NORMAL: "Branches have diverged, a merge is required",
    PullKind.UP_TO_DATE: "Already up to date",
    PullKind.UNBORN: "Branch has no commits yet",
}


__all__ = [
    "branch_name",
    "BranchEntry",
    "BranchKind",
    "ChangeKind",
    "FileStatus",
    "IndexSnapshot",
    "MergeAnalysis",
    "PullKind",
    "PullResult",
    "StatusEntry",
    "StatusSummary",
    "TrackedBranch",
]
