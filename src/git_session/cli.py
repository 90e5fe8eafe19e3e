import logging
import os
from pathlib import Path

import click

from .configuration import Configuration, PasswordAuth
from .constants import EnvironmentKeys
from .error_handling import ConfigurationError
from .facade import GitFacade
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.option("--repository", "-r", type=Path, help="Git working directory path")
@click.option("--username", help="Author name and login for remote operations")
@click.option("--email", help="Author email")
@click.option(
    "--password",
    envvar=EnvironmentKeys.PASSWORD,
    help=f"Password for remote operations (or set {EnvironmentKeys.PASSWORD})",
)
@click.option("-v", "--verbose", count=True)
@click.option("--json-logs", is_flag=True, help="Emit structured JSON logs on stderr")
@click.option("--log-file", type=Path, help="Also write DEBUG logs to this file")
@click.pass_context
def main(
    ctx: click.Context,
    repository: Path | None,
    username: str | None,
    email: str | None,
    password: str | None,
    verbose: int,
    json_logs: bool,
    log_file: Path | None,
) -> None:
    """git-session - repository operations from the command line"""
    logging_level = os.getenv(EnvironmentKeys.LOG_LEVEL, "WARNING")
    if verbose == 1:
        logging_level = "INFO"
    elif verbose >= 2:
        logging_level = "DEBUG"
    configure_logging(logging_level, json_output=json_logs, log_file=log_file)

    try:
        config = Configuration.from_environment(repository)
    except ConfigurationError as e:
        click.echo(e.message)
        ctx.exit(1)

    if username is not None:
        config.username = username
    if email is not None:
        config.email = email
    if password:
        config.auth = PasswordAuth(password=password)

    logger.info(f"Using repository {config.path}")
    ctx.obj = GitFacade(config)


@main.command()
@click.argument("url")
@click.pass_obj
def clone(git: GitFacade, url: str) -> None:
    """Clone URL into the repository path."""
    click.echo(git.clone_repo(url))


@main.command()
@click.argument("files", nargs=-1)
@click.pass_obj
def add(git: GitFacade, files: tuple[str, ...]) -> None:
    """Stage FILES, or the whole working tree when none are given."""
    click.echo(git.add(list(files)) if files else git.add_all())


@main.command()
@click.argument("message")
@click.pass_obj
def commit(git: GitFacade, message: str) -> None:
    """Commit the index with MESSAGE."""
    click.echo(git.commit(message))


@main.command()
@click.pass_obj
def status(git: GitFacade) -> None:
    click.echo(git.status())


@main.command()
@click.pass_obj
def branches(git: GitFacade) -> None:
    """Fetch all remotes and list local and remote branches."""
    click.echo(git.branches())


@main.command("current-branch")
@click.pass_obj
def current_branch(git: GitFacade) -> None:
    click.echo(git.current_branch())


@main.command()
@click.argument("branch_name")
@click.pass_obj
def checkout(git: GitFacade, branch_name: str) -> None:
    """Switch to BRANCH_NAME, discarding conflicting local changes."""
    click.echo(git.checkout(branch_name))


@main.command()
@click.pass_obj
def push(git: GitFacade) -> None:
    click.echo(git.push())


@main.command()
@click.argument("branch_name")
@click.pass_obj
def pull(git: GitFacade, branch_name: str) -> None:
    """Fast-forward BRANCH_NAME to its upstream when possible."""
    click.echo(git.pull(branch_name))


@main.command()
@click.pass_obj
def merge(git: GitFacade) -> None:
    click.echo(git.merge())


if __name__ == "__main__":
    main()
