"""
Fetch orchestration: clone with retry, then optionally pin a revision.

    Start -> Cloning (retry loop) -> Cloned -> CheckingOut (revision only) -> Done

A failed clone or checkout is terminal and nothing is rolled back: the working
directory stays as the last git command left it.
"""

import logging
from pathlib import Path
from typing import Optional

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from repofetch.exceptions import CheckoutFailed, GitCommandError
from repofetch.git.clone import CloneExecutor
from repofetch.git.paths import resolve_target_dir
from repofetch.git.process import CancellationToken, GitRunner
from repofetch.git.retry import RetryingCloner, RetryPolicy
from repofetch.model.request import FetchRequest

logger = logging.getLogger(__name__)

WORKSPACE_SUBDIRECTORY = "."


def checkout_revision(runner: GitRunner, directory: Path, revision: str) -> None:
    """
    Fetch ``revision`` from origin and force it into the working tree.

    The fetch is best effort: git cannot fetch abbreviated hashes, and servers
    may refuse to serve arbitrary commits, yet the revision can already be in
    the clone. Local modifications are discarded.

    Raises:
        CheckoutFailed: If the revision does not resolve to a commit in the
            clone, or the checkout fails
    """
    logger.info(f"Checking out revision {revision} in {directory}")
    try:
        runner.run(["fetch", "origin", revision], cwd=directory)
    except GitCommandError as e:
        logger.warning(
            f"Could not fetch revision {revision}, trying the history already cloned: {e}"
        )

    try:
        runner.run(
            ["rev-parse", "--quiet", "--verify", f"{revision}^{{commit}}"],
            cwd=directory,
        )
    except GitCommandError as e:
        raise CheckoutFailed(revision, "revision not found in the clone") from e

    try:
        runner.run(["checkout", "--quiet", "--force", revision], cwd=directory)
    except GitCommandError as e:
        raise CheckoutFailed(revision, str(e)) from e


def describe_head(directory: Path) -> Optional[str]:
    """Short hash of the commit checked out in ``directory``, if it can be read."""
    try:
        return Repo(directory).head.commit.hexsha[:7]
    except (InvalidGitRepositoryError, NoSuchPathError, ValueError) as e:
        logger.warning(f"Could not read the checked out commit in {directory}: {e}")
        return None


class FetchOrchestrator:
    """Entry point of the fetch core."""

    def __init__(
        self,
        runner: Optional[GitRunner] = None,
        cloner: Optional[RetryingCloner] = None,
        workspace_root: Optional[Path] = None,
        max_attempts: Optional[int] = None,
    ):
        self.runner = runner or GitRunner()
        self.workspace_root = workspace_root
        self.max_attempts = max_attempts
        if cloner is None:
            cloner = RetryingCloner(
                CloneExecutor(self.runner, workspace_root),
                wait=self.runner.cancellation.wait,
                policy=RetryPolicy(),
            )
        self.cloner = cloner

    @classmethod
    def create(
        cls,
        cancellation: CancellationToken,
        workspace_root: Optional[Path] = None,
        max_attempts: Optional[int] = None,
    ) -> "FetchOrchestrator":
        return cls(
            runner=GitRunner(cancellation=cancellation),
            workspace_root=workspace_root,
            max_attempts=max_attempts,
        )

    def fetch_revision(self, request: FetchRequest) -> Path:
        """
        Clone the primary repository into the workspace root and check out
        ``request.revision`` if one is given.

        Returns:
            The workspace root

        Raises:
            CloneFailed, SubmoduleFailed: When every clone attempt failed
            ConfigurationError: On an unrecognized host kind with submodules
            CheckoutFailed: When the revision checkout fails
        """
        logger.info(
            f"Cloning git repository {request.repository_name} to branch {request.branch} and revision {request.revision} with shallow clone is {request.shallow} and depth {request.shallow_depth}..."
        )
        directory = self._fetch(request, WORKSPACE_SUBDIRECTORY)
        logger.info(
            f"Finished cloning git repository {request.repository_name} to branch {request.branch} and revision {request.revision}"
        )
        return directory

    def fetch_override(self, request: FetchRequest) -> Path:
        """
        Clone an auxiliary repository into ``request.subdirectory``, next to
        the primary one, and check out ``request.revision`` there if given.

        Returns:
            The directory the repository was cloned into
        """
        logger.info(
            f"Cloning git repository {request.repository_name} to branch {request.branch} into subdir {request.subdirectory} with shallow clone is {request.shallow} and depth {request.shallow_depth}..."
        )
        directory = self._fetch(request, request.subdirectory)
        logger.info(
            f"Finished cloning git repository {request.repository_name} to branch {request.branch} into subdir {request.subdirectory}"
        )
        return directory

    def _fetch(self, request: FetchRequest, subdirectory: str) -> Path:
        directory = self.cloner.clone_with_retry(
            request, subdirectory, self.max_attempts
        )
        if directory is None:
            directory = resolve_target_dir(subdirectory, self.workspace_root)

        if request.has_revision:
            checkout_revision(self.runner, directory, request.revision)

        commit = describe_head(directory)
        if commit is not None:
            logger.info(f"{request.repository_name} is at commit {commit}")
        return directory
