"""repofetch CLI"""

import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import click
from pydantic import SecretStr, ValidationError

from repofetch import __version__
from repofetch.cli.utils.logging import logger
from repofetch.config import DEFAULT_MAX_ATTEMPTS, DEFAULT_SHALLOW_DEPTH
from repofetch.credentials import CredentialSet, load_credentials
from repofetch.exceptions import CredentialsError, FetchCancelled, FetchError
from repofetch.fetch import FetchOrchestrator
from repofetch.git.process import CancellationToken
from repofetch.model.request import FetchRequest
from repofetch.urls import build_override_url, build_repository_url

from .debug import add_debug_option

DEFAULT_OVERRIDE_BRANCH = "master"

EXIT_FAILURE = 1
EXIT_CANCELLED = 130


@contextmanager
def cancel_on_signals(token: CancellationToken):
    """Cancel ``token`` on SIGINT/SIGTERM for the duration of the block."""

    def handler(signum, frame):
        logger.warning(f"Received signal {signum}, cancelling...")
        token.cancel()

    signums = [signal.SIGINT]
    if hasattr(signal, "SIGTERM"):
        signums.append(signal.SIGTERM)

    previous = {}
    try:
        for signum in signums:
            previous[signum] = signal.signal(signum, handler)
    except ValueError:
        # signal handlers can only be installed from the main thread
        pass

    try:
        yield token
    finally:
        for signum, old_handler in previous.items():
            signal.signal(signum, old_handler)


def override_directory_name(repository: str) -> str:
    """Directory an override repository goes to when none is given."""
    name = repository.rstrip("/").rsplit("/", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name


def build_request(
    credentials: CredentialSet,
    source: str,
    owner: str,
    name: str,
    branch: str,
    revision: str,
    shallow: bool,
    depth: int,
    override_repo: str = "",
    override_branch: str = "",
    override_directory: str = "",
    override_revision: str = "",
) -> FetchRequest:
    """Resolve the command line into the request for the primary or the override repository."""
    common = dict(
        shallow=shallow,
        shallow_depth=depth,
        git_host_kind=credentials.active_host_kind,
        token=SecretStr(credentials.active_token),
    )

    if override_repo:
        return FetchRequest(
            repository_name=override_repo,
            repository_url=build_override_url(
                source, owner, override_repo, credentials
            ),
            branch=override_branch or DEFAULT_OVERRIDE_BRANCH,
            revision=override_revision,
            subdirectory=override_directory or override_directory_name(override_repo),
            **common,
        )

    return FetchRequest(
        repository_name=name,
        repository_url=build_repository_url(source, owner, name, credentials),
        branch=branch,
        revision=revision,
        **common,
    )


@click.command(name="repofetch")
@click.version_option(__version__, prog_name="repofetch")
@click.option(
    "--git-source",
    envvar="REPOFETCH_GIT_SOURCE",
    required=True,
    help="The source of the repository, e.g. github.com.",
)
@click.option(
    "--git-owner",
    envvar="REPOFETCH_GIT_OWNER",
    required=True,
    help="The owner of the repository.",
)
@click.option(
    "--git-name",
    envvar="REPOFETCH_GIT_NAME",
    required=True,
    help="The repository name.",
)
@click.option(
    "--git-branch",
    envvar="REPOFETCH_GIT_BRANCH",
    required=True,
    help="The branch to clone.",
)
@click.option(
    "--git-revision",
    envvar="REPOFETCH_GIT_REVISION",
    default="",
    help="The revision to check out.",
)
@click.option(
    "--shallow-clone/--no-shallow-clone",
    envvar="REPOFETCH_SHALLOW",
    default=True,
    show_default=True,
    help="Shallow clone the repository for improved clone time.",
)
@click.option(
    "--shallow-clone-depth",
    envvar="REPOFETCH_SHALLOW_DEPTH",
    type=click.IntRange(min=1),
    default=DEFAULT_SHALLOW_DEPTH,
    show_default=True,
    help="History depth of a shallow clone.",
)
@click.option(
    "--override-repo",
    envvar="REPOFETCH_OVERRIDE_REPO",
    default="",
    help="Clone another repository of the same owner instead, or any public https:// URL.",
)
@click.option(
    "--override-branch",
    envvar="REPOFETCH_OVERRIDE_BRANCH",
    default="",
    help=f"Branch of the override repository. [default: {DEFAULT_OVERRIDE_BRANCH}]",
)
@click.option(
    "--override-directory",
    envvar="REPOFETCH_OVERRIDE_DIRECTORY",
    default="",
    help="Directory to clone the override repository into. [default: its name]",
)
@click.option(
    "--override-revision",
    envvar="REPOFETCH_OVERRIDE_REVISION",
    default="",
    help="Revision of the override repository to check out.",
)
@click.option(
    "--bitbucket-api-token-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Credentials file with the Bitbucket api token. [default: <credentials dir>/bitbucket_api_token.json]",
)
@click.option(
    "--github-api-token-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Credentials file with the GitHub api token. [default: <credentials dir>/github_api_token.json]",
)
@click.option(
    "--cloudsource-api-token-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Credentials file with the Cloud Source api token. [default: <credentials dir>/cloudsource_api_token.json]",
)
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace root to clone into. [default: REPOFETCH_WORKSPACE_ROOT or /workspace]",
)
@click.option(
    "--retries",
    envvar="REPOFETCH_RETRIES",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_ATTEMPTS,
    show_default=True,
    help="Clone attempts before giving up.",
)
def cli(
    git_source: str,
    git_owner: str,
    git_name: str,
    git_branch: str,
    git_revision: str,
    shallow_clone: bool,
    shallow_clone_depth: int,
    override_repo: str,
    override_branch: str,
    override_directory: str,
    override_revision: str,
    bitbucket_api_token_path: Optional[Path],
    github_api_token_path: Optional[Path],
    cloudsource_api_token_path: Optional[Path],
    workspace: Optional[Path],
    retries: int,
):
    """Clone a repository branch, its submodules and optionally a revision
    into the build workspace."""
    try:
        credentials = load_credentials(
            bitbucket_api_token_path, github_api_token_path, cloudsource_api_token_path
        )
    except CredentialsError as e:
        logger.error(f"Failed reading injected credentials: {e}")
        sys.exit(EXIT_FAILURE)

    try:
        request = build_request(
            credentials,
            source=git_source,
            owner=git_owner,
            name=git_name,
            branch=git_branch,
            revision=git_revision,
            shallow=shallow_clone,
            depth=shallow_clone_depth,
            override_repo=override_repo,
            override_branch=override_branch,
            override_directory=override_directory,
            override_revision=override_revision,
        )
    except ValidationError as e:
        logger.error(f"Invalid fetch request: {e}")
        sys.exit(EXIT_FAILURE)

    token = CancellationToken()
    orchestrator = FetchOrchestrator.create(
        token, workspace_root=workspace, max_attempts=retries
    )

    with cancel_on_signals(token):
        try:
            if override_repo:
                orchestrator.fetch_override(request)
            else:
                orchestrator.fetch_revision(request)
        except FetchCancelled as e:
            logger.error(f"Cancelled cloning git repository {request.repository_name}: {e}")
            sys.exit(EXIT_CANCELLED)
        except FetchError as e:
            revision = f" and revision {request.revision}" if request.revision else ""
            logger.error(
                f"Error cloning git repository {request.repository_name} to branch {request.branch}{revision} into {request.subdirectory}: {e}"
            )
            sys.exit(EXIT_FAILURE)


add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
