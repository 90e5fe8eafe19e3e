"""Tests for Configuration and environment loading."""

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from git_session.configuration import (
    Configuration,
    NoAuth,
    PasswordAuth,
    load_environment_variables,
    repository_path_from_environment,
)
from git_session.error_handling import ConfigurationError


class TestConfiguration:
    def test_defaults(self):
        config = Configuration()

        assert config.username == ""
        assert config.email == ""
        assert isinstance(config.auth, NoAuth)
        assert config.password is None
        assert config.path is None

    def test_password_is_secret(self):
        config = Configuration(username="dev", auth=PasswordAuth("s3cret"))

        assert isinstance(config.auth.password, SecretStr)
        assert config.password == "s3cret"
        assert "s3cret" not in repr(config)

    def test_assignment_is_validated(self):
        config = Configuration()
        config.path = "/tmp/somewhere"

        assert config.path == Path("/tmp/somewhere")
        with pytest.raises(ValidationError):
            config.auth = "password"

    def test_auth_from_mapping_uses_discriminator(self):
        config = Configuration.model_validate(
            {"auth": {"kind": "password", "password": "pw"}, "path": "repo"}
        )

        assert isinstance(config.auth, PasswordAuth)
        assert config.password == "pw"


class TestFromEnvironment:
    def test_explicit_repository_wins(self, monkeypatch, temp_dir: Path):
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("GIT_SESSION_REPOSITORY", "/elsewhere")

        config = Configuration.from_environment(temp_dir / "repo")

        assert config.path == temp_dir / "repo"

    def test_root_and_name(self, monkeypatch, temp_dir: Path):
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("GIT_SESSION_REPOSITORY_ROOT", str(temp_dir))
        monkeypatch.setenv("GIT_SESSION_REPOSITORY_NAME", "project")
        monkeypatch.setenv("GIT_SESSION_USERNAME", "dev")
        monkeypatch.setenv("GIT_SESSION_EMAIL", "dev@example.com")

        config = Configuration.from_environment()

        assert config.path == temp_dir / "project"
        assert config.username == "dev"
        assert config.email == "dev@example.com"
        assert isinstance(config.auth, NoAuth)

    def test_password_enables_password_auth(self, monkeypatch, temp_dir: Path):
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("GIT_SESSION_REPOSITORY", str(temp_dir))
        monkeypatch.setenv("GIT_SESSION_PASSWORD", "s3cret")

        config = Configuration.from_environment()

        assert config.password == "s3cret"

    def test_missing_path_is_configuration_error(self, monkeypatch, temp_dir: Path):
        monkeypatch.chdir(temp_dir)

        with pytest.raises(ConfigurationError, match="GIT_SESSION_REPOSITORY"):
            Configuration.from_environment()

    def test_repository_path_from_environment_needs_both_parts(self, monkeypatch):
        monkeypatch.setenv("GIT_SESSION_REPOSITORY_ROOT", "/root-only")

        assert repository_path_from_environment() is None


class TestLoadEnvironmentVariables:
    def test_loads_project_and_repository_files(self, monkeypatch, temp_dir: Path):
        project = temp_dir / "project"
        repository = temp_dir / "repository"
        project.mkdir()
        repository.mkdir()
        (project / ".env").write_text("GIT_SESSION_USERNAME=from-project\n")
        (repository / ".env").write_text(
            "GIT_SESSION_USERNAME=from-repository\nGIT_SESSION_EMAIL=repo@example.com\n"
        )
        monkeypatch.chdir(project)

        loaded = load_environment_variables(repository)

        assert loaded == [project / ".env", repository / ".env"]
        config = Configuration.from_environment(repository)
        assert config.username == "from-project"
        assert config.email == "repo@example.com"

    def test_system_environment_is_not_overridden(self, monkeypatch, temp_dir: Path):
        (temp_dir / ".env").write_text("GIT_SESSION_EMAIL=dotenv@example.com\n")
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("GIT_SESSION_EMAIL", "system@example.com")

        config = Configuration.from_environment(temp_dir)

        assert config.email == "system@example.com"

    def test_no_files(self, monkeypatch, temp_dir: Path):
        monkeypatch.chdir(temp_dir)

        assert load_environment_variables() == []
