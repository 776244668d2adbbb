from pathlib import Path
from typing import Optional

from repofetch.config import WORKSPACE_ROOT
from repofetch.exceptions import ConfigurationError


def clean_subdirectory(subdirectory: str) -> str:
    """
    Strip the leading markers of a workspace-relative subdirectory.

    Leading "./" and "/" are removed repeatedly, so "/scripts", "./scripts" and
    "scripts" all clean to "scripts", and "." cleans to "".
    """
    cleaned = subdirectory.strip().replace("\\", "/")
    while True:
        if cleaned.startswith("/"):
            cleaned = cleaned[1:]
        elif cleaned.startswith("./"):
            cleaned = cleaned[2:]
        else:
            break
    if cleaned == ".":
        return ""
    return cleaned


def resolve_target_dir(
    subdirectory: str, workspace_root: Optional[Path] = None
) -> Path:
    """
    Map a requested subdirectory to the directory a repository is cloned into.

    Examples:
        "."             -> <workspace>
        "scripts"       -> <workspace>/scripts
        "./scripts/sub" -> <workspace>/scripts/sub
        "/scripts"      -> <workspace>/scripts

    Args:
        subdirectory: Directory relative to the workspace, "." for the root
        workspace_root: Base directory (defaults to the configured workspace)

    Returns:
        Absolute path under the workspace root

    Raises:
        ConfigurationError: If the subdirectory has a ".." segment
    """
    root = Path(workspace_root) if workspace_root is not None else WORKSPACE_ROOT
    cleaned = clean_subdirectory(subdirectory)
    if ".." in cleaned.split("/"):
        raise ConfigurationError(
            f"Subdirectory {subdirectory!r} points outside the workspace {root}"
        )
    if not cleaned:
        return root
    return root.joinpath(*cleaned.split("/"))
