import logging
import platform
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from repofetch.exceptions import CloneFailed, GitCommandError
from repofetch.model.request import FetchRequest

from .paths import resolve_target_dir
from .process import GitRunner
from .submodules import update_submodules

logger = logging.getLogger(__name__)

# (shallow, verbose_progress) -> flags between "clone" and the URL
CLONE_FLAGS: Dict[Tuple[bool, bool], Tuple[str, ...]] = {
    (False, False): ("--branch={branch}",),
    (True, False): ("--depth={depth}", "--branch={branch}", "--no-tags"),
    (False, True): ("--branch={branch}", "--verbose", "--progress"),
    (True, True): (
        "--depth={depth}",
        "--branch={branch}",
        "--verbose",
        "--progress",
        "--no-tags",
    ),
}


def default_verbose_progress() -> bool:
    """Windows consoles only show clone progress when asked for it explicitly."""
    return platform.system() == "Windows"


def clone_arguments(
    request: FetchRequest, target_dir: Path, verbose_progress: bool = False
) -> List[str]:
    """
    Build the argument vector for ``git clone``.

    Args:
        request: The fetch request (URL, branch, shallow settings)
        target_dir: Directory to clone into
        verbose_progress: Ask git for verbose output and progress reporting

    Returns:
        Arguments to pass after the git executable
    """
    flags = CLONE_FLAGS[(request.shallow, verbose_progress)]
    return [
        "clone",
        *(
            flag.format(branch=request.branch, depth=request.shallow_depth)
            for flag in flags
        ),
        request.repository_url,
        str(target_dir),
    ]


class CloneExecutor:
    """Perform one clone attempt, submodules included."""

    def __init__(
        self,
        runner: GitRunner,
        workspace_root: Optional[Path] = None,
        verbose_progress: Optional[bool] = None,
    ):
        self.runner = runner
        self.workspace_root = workspace_root
        if verbose_progress is None:
            verbose_progress = default_verbose_progress()
        self.verbose_progress = verbose_progress

    def clone_once(self, request: FetchRequest, subdirectory: str) -> Path:
        """
        Clone the requested branch into ``subdirectory`` of the workspace and
        materialize its submodules.

        Returns:
            The directory the repository was cloned into

        Raises:
            CloneFailed: If git clone fails; no submodule work is attempted
            ConfigurationError: If the subdirectory leaves the workspace, or
                submodules need credentials for an unrecognized host kind
            SubmoduleFailed: If submodule processing fails
        """
        target_dir = resolve_target_dir(subdirectory, self.workspace_root)
        args = clone_arguments(request, target_dir, self.verbose_progress)

        logger.info(
            f"Cloning {request.repository_name} branch {request.branch} into {target_dir}"
        )
        try:
            self.runner.run(args)
        except GitCommandError as e:
            logger.error(f"Cloning {request.repository_name} failed: {e}")
            raise CloneFailed(request.repository_name, request.branch, str(e)) from e

        if update_submodules(self.runner, target_dir, request):
            logger.info(f"Submodules of {request.repository_name} are up to date")

        return target_dir
