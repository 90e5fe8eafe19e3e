"""Status summarizer.

Runs a single ``git status --porcelain=v1 -z`` query and folds every entry
into a StatusSummary. Git detects renames between HEAD and the index;
renames between the index and the working tree are found by pairing
deleted files with untracked files of identical content. Untracked files
are included. Paths are decoded strictly so that undecodable names can be
replaced with the ``INVALID UTF-8`` marker instead of failing the query.
"""

import logging
from dataclasses import replace
from functools import reduce
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from git import Repo

from ..constants import DisplayText
from ..error_handling import NameDecodeError
from .models import ChangeKind, FileStatus, StatusEntry, StatusSummary

logger = logging.getLogger(__name__)

_UNMERGED = {b"DD", b"AU", b"UD", b"UA", b"DU", b"AA", b"UU"}
_UNTRACKED = b"??"
_IGNORED = b"!!"
_CHANGE_CODES = {
    ord("A"): ChangeKind.ADDED,
    ord("D"): ChangeKind.DELETED,
    ord("M"): ChangeKind.MODIFIED,
    ord("R"): ChangeKind.RENAMED,
    ord("C"): ChangeKind.COPIED,
    ord("T"): ChangeKind.TYPECHANGE,
}
_COPY_OR_RENAME = {ord("R"), ord("C")}


def decode_path(raw: Optional[bytes]) -> str:
    """Decode a path reported by git; undecodable names become the marker."""
    if not raw:
        return DisplayText.INVALID_UTF8
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return DisplayText.INVALID_UTF8


def head_branch_name(repo: Repo) -> str:
    """Short name of the branch HEAD points to, ``HEAD`` when detached.

    Raises:
        NameDecodeError: If the branch name is not valid UTF-8.
    """
    try:
        if repo.head.is_detached:
            return DisplayText.DETACHED_HEAD
        name = repo.head.ref.name
        name.encode("utf-8")
    except UnicodeError as e:
        raise NameDecodeError(
            f"Current branch name is {DisplayText.INVALID_UTF8}", "status"
        ) from e
    return name


def _delta(code: int, old_path: bytes, new_path: bytes) -> Optional[FileStatus]:
    kind = _CHANGE_CODES.get(code)
    if kind is None:
        return None
    return FileStatus(kind, decode_path(old_path), decode_path(new_path))


def parse_porcelain(output: bytes) -> Iterator[StatusEntry]:
    """Parse NUL separated ``--porcelain=v1`` output into StatusEntry values.

    Renamed and copied entries are followed by their original path.
    """
    records = output.split(b"\0")
    i = 0
    while i < len(records):
        record = records[i]
        i += 1
        if len(record) < 4:
            continue

        xy, path = record[:2], record[3:]
        if xy == _IGNORED:
            continue

        if xy == _UNTRACKED:
            yield StatusEntry(
                path=decode_path(path),
                index_to_workdir=FileStatus(
                    ChangeKind.UNTRACKED, decode_path(path), decode_path(path)
                ),
            )
            continue

        if xy in _UNMERGED:
            yield StatusEntry(
                path=decode_path(path),
                index_to_workdir=FileStatus(
                    ChangeKind.CONFLICTED, decode_path(path), decode_path(path)
                ),
            )
            continue

        original = path
        if xy[0] in _COPY_OR_RENAME or xy[1] in _COPY_OR_RENAME:
            original = records[i] if i < len(records) else path
            i += 1

        staged_from = original if xy[0] in _COPY_OR_RENAME else path
        # Y is compared against the index, which already holds the new path
        # unless the rename itself is unstaged.
        workdir_from = original if xy[1] in _COPY_OR_RENAME else path

        yield StatusEntry(
            path=decode_path(path),
            head_to_index=_delta(xy[0], staged_from, path),
            index_to_workdir=_delta(xy[1], workdir_from, path),
        )


def status_entries(repo: Repo) -> List[StatusEntry]:
    output = repo.git.status(
        "--porcelain=v1",
        "-z",
        "--untracked-files=normal",
        "--renames",
        stdout_as_string=False,
    )
    return list(parse_porcelain(output))


def _is_untracked(entry: StatusEntry) -> bool:
    delta = entry.index_to_workdir
    return delta is not None and delta.status is ChangeKind.UNTRACKED


def _is_deleted_in_workdir(entry: StatusEntry) -> bool:
    delta = entry.index_to_workdir
    return delta is not None and delta.status is ChangeKind.DELETED


def detect_workdir_renames(repo: Repo, entries: List[StatusEntry]) -> List[StatusEntry]:
    """Pair working tree deletions with untracked files of identical content.

    Each pair becomes one RENAMED index to working tree delta recorded on the
    deleted entry; the untracked entry is dropped. Untracked directories and
    undecodable paths never take part.
    """
    deleted = [
        e.path for e in entries if _is_deleted_in_workdir(e) and e.path != DisplayText.INVALID_UTF8
    ]
    if not deleted:
        return entries

    workdir = Path(repo.working_tree_dir)
    candidates = [
        e.path
        for e in entries
        if _is_untracked(e)
        and e.path != DisplayText.INVALID_UTF8
        and not e.path.endswith("/")
        and (workdir / e.path).is_file()
    ]
    if not candidates:
        return entries

    by_content: Dict[str, List[str]] = {}
    hashes = repo.git.hash_object("--", *candidates).splitlines()
    for path, hexsha in zip(candidates, hashes):
        by_content.setdefault(hexsha, []).append(path)

    index = repo.index.entries
    renamed: Dict[str, str] = {}
    for old_path in deleted:
        staged = index.get((old_path, 0))
        matches = by_content.get(staged.hexsha) if staged is not None else None
        if matches:
            renamed[old_path] = matches.pop(0)

    if not renamed:
        return entries
    logger.debug(f"Detected working tree renames: {renamed}")

    paired = set(renamed.values())
    result = []
    for entry in entries:
        if _is_untracked(entry) and entry.path in paired:
            continue
        if entry.path in renamed and _is_deleted_in_workdir(entry):
            entry = replace(
                entry,
                index_to_workdir=FileStatus(ChangeKind.RENAMED, entry.path, renamed[entry.path]),
            )
        result.append(entry)
    return result


def summarize(repo: Repo) -> StatusSummary:
    """Build the StatusSummary for the working tree of ``repo``."""
    branch = head_branch_name(repo)
    entries = detect_workdir_renames(repo, status_entries(repo))
    logger.debug(f"Status of '{branch}': {len(entries)} entries")
    return reduce(
        lambda summary, entry: summary.add_entry(entry),
        entries,
        StatusSummary(branch),
    )
