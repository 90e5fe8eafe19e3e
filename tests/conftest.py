"""
Global pytest configuration and fixtures.

Every test runs with an isolated git environment: HOME points at a temporary
directory, system config is ignored, author identity is fixed and prompts are
disabled.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from fixtures.git_repos import GitRepositoryFactory, git
from git_session.configuration import Configuration


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_git_environment(monkeypatch, tmp_path_factory):
    """Keep user and system git configuration out of the tests.

    The process environment is restored afterwards because .env loading
    writes to it directly.
    """
    saved_environ = dict(os.environ)
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_CONFIG_GLOBAL", raising=False)
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    for key in (
        "GIT_SESSION_REPOSITORY",
        "GIT_SESSION_REPOSITORY_ROOT",
        "GIT_SESSION_REPOSITORY_NAME",
        "GIT_SESSION_USERNAME",
        "GIT_SESSION_EMAIL",
        "GIT_SESSION_PASSWORD",
    ):
        monkeypatch.delenv(key, raising=False)
    yield
    os.environ.clear()
    os.environ.update(saved_environ)


@pytest.fixture
def git_repo_factory():
    """Provide access to GitRepositoryFactory."""
    return GitRepositoryFactory


@pytest.fixture
def clean_git_repo(temp_dir: Path) -> Path:
    """A repository on ``main`` with two commits and no remotes."""
    return GitRepositoryFactory.create_clean_repo(temp_dir / "clean_repo")


@pytest.fixture
def remote_repo(temp_dir: Path) -> Path:
    """A bare remote with ``main`` and a ``feature`` branch."""
    return GitRepositoryFactory.create_remote(temp_dir / "remote.git", ["feature"])


@pytest.fixture
def cloned_repo(temp_dir: Path, remote_repo: Path) -> Path:
    """A clone of ``remote_repo`` with ``main`` tracking ``origin/main``."""
    return GitRepositoryFactory.clone(remote_repo, temp_dir / "work")


def make_config(path: Path) -> Configuration:
    return Configuration(username="Session User", email="session@example.com", path=path)


@pytest.fixture
def config(clean_git_repo: Path) -> Configuration:
    return make_config(clean_git_repo)


@pytest.fixture
def clone_config(cloned_repo: Path) -> Configuration:
    return make_config(cloned_repo)


@pytest.fixture
def run_git():
    """Run git in a directory and return stdout."""
    return git
