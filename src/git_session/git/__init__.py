"""Repository operations for git-session"""

from .branches import current_branch, fetch_all, find_local_branch, list_branches
from .credentials import authenticated, credential_environment
from .models import *
from .operations import RepositorySession, analyze_merge
from .status import (
    decode_path,
    detect_workdir_renames,
    head_branch_name,
    parse_porcelain,
    summarize,
)

__all__ = [
    # Session
    "RepositorySession",
    "analyze_merge",
    # Branch catalog
    "current_branch",
    "fetch_all",
    "find_local_branch",
    "list_branches",
    # Credentials
    "authenticated",
    "credential_environment",
    # Status
    "decode_path",
    "detect_workdir_renames",
    "head_branch_name",
    "parse_porcelain",
    "summarize",
    # Result types
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
