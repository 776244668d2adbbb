"""
Exception classes for repository fetching.
"""

from typing import Optional, Sequence


class FetchError(Exception):
    """Base exception for all fetch-related errors."""

    pass


class ConfigurationError(FetchError):
    """Raised when the request cannot be served as configured. Never retried."""

    pass


class CloneError(FetchError):
    """Base exception for failures of a single clone attempt. Retryable."""

    pass


class CloneFailed(CloneError):
    """Raised when `git clone` cannot be spawned or exits non-zero."""

    def __init__(self, repository: str, branch: str, message: str = ""):
        self.repository = repository
        self.branch = branch
        if message:
            super().__init__(
                f"Cloning {repository} at branch {branch} failed: {message}"
            )
        else:
            super().__init__(f"Cloning {repository} at branch {branch} failed")


class SubmoduleFailed(CloneError):
    """Raised when the submodule manifest or a submodule command fails."""

    def __init__(self, directory: str, message: str):
        self.directory = directory
        super().__init__(f"Submodule processing in {directory} failed: {message}")


class CheckoutFailed(FetchError):
    """Raised when checking out a revision after a successful clone fails."""

    def __init__(self, revision: str, message: str = ""):
        self.revision = revision
        if message:
            super().__init__(f"Checking out revision {revision} failed: {message}")
        else:
            super().__init__(f"Checking out revision {revision} failed")


class FetchCancelled(FetchError):
    """Raised when the caller cancelled the fetch."""

    pass


class GitCommandError(Exception):
    """Raised by the git runner for a failed child process."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int] = None,
        message: str = "",
    ):
        self.command = list(args)
        self.returncode = returncode
        if returncode is None:
            detail = message or "could not be started"
        else:
            detail = f"exited with status {returncode}"
        super().__init__(f"`{' '.join(self.command)}` {detail}")


class CredentialsError(Exception):
    """Raised when an injected credentials file exists but cannot be used."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Invalid credentials file {path}: {message}")
