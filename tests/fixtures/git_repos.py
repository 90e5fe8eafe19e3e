"""
Git repository fixtures for testing.

Provides factory functions for creating test git repositories with various
states: clean working trees, bare remotes, clones that track a remote, and
divergent or unborn branches for pull analysis.
"""

import subprocess
from pathlib import Path
from typing import List, Optional


def git(path: Path, *args: str) -> str:
    """Run git in ``path`` and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args], cwd=path, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


class GitRepositoryFactory:
    """Factory for creating test git repositories."""

    @staticmethod
    def init(path: Path, bare: bool = False) -> Path:
        """Initialize an empty repository whose HEAD points to ``main``."""
        path.mkdir(parents=True, exist_ok=True)
        if bare:
            git(path, "init", "--bare")
        else:
            git(path, "init")
        git(path, "symbolic-ref", "HEAD", "refs/heads/main")
        return path

    @staticmethod
    def commit_file(path: Path, name: str, content: str, message: Optional[str] = None) -> str:
        """Write, stage and commit one file; return the new commit id."""
        file_path = path / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        git(path, "add", name)
        git(path, "commit", "-m", message or f"Update {name}")
        return git(path, "rev-parse", "HEAD")

    @staticmethod
    def create_clean_repo(path: Path, commit_count: int = 2) -> Path:
        """Create a repository on ``main`` with ``commit_count`` commits."""
        GitRepositoryFactory.init(path)
        GitRepositoryFactory.commit_file(path, "README.md", "# Test Repository", "Initial commit")
        for i in range(1, commit_count):
            GitRepositoryFactory.commit_file(path, f"file_{i}.txt", f"Content for commit {i}", f"Commit {i}")
        return path

    @staticmethod
    def create_remote(path: Path, branches: Optional[List[str]] = None) -> Path:
        """Create a bare repository with ``main`` plus optional extra branches."""
        GitRepositoryFactory.init(path, bare=True)

        seed = path.parent / f"{path.name}-seed"
        GitRepositoryFactory.create_clean_repo(seed)
        git(seed, "remote", "add", "origin", str(path))
        git(seed, "push", "origin", "main")

        for branch in branches or []:
            git(seed, "checkout", "-b", branch, "main")
            GitRepositoryFactory.commit_file(seed, f"{branch}_file.txt", f"Content from {branch} branch")
            git(seed, "push", "origin", branch)
        git(seed, "checkout", "main")
        return path

    @staticmethod
    def clone(remote: Path, path: Path) -> Path:
        """Clone ``remote``; ``main`` tracks ``origin/main``."""
        git(remote.parent, "clone", str(remote), str(path))
        return path

    @staticmethod
    def push_new_commit(remote: Path, name: str, content: str) -> str:
        """Add a commit to ``main`` on ``remote`` through a scratch clone."""
        scratch = remote.parent / f"{remote.name}-scratch-{name.replace('/', '_')}"
        if not scratch.exists():
            GitRepositoryFactory.clone(remote, scratch)
        else:
            git(scratch, "pull", "--ff-only", "origin", "main")
        commit_id = GitRepositoryFactory.commit_file(scratch, name, content)
        git(scratch, "push", "origin", "main")
        return commit_id
