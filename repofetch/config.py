"""Configuration for the fetch step: workspace location and clone defaults"""

import configparser
import os
import platform
from typing import Optional, Any

from pathlib import Path

APP_NAME = "repofetch"

ENV_PREFIX = "REPOFETCH_"

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")


default_cfg = {
    "dirs": {
        "workspace": "/workspace",
        "credentials": "/credentials",
    },
    "fetch": {
        "retries": "3",
        "shallow_depth": "50",
    },
}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/repofetch").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file():
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for the optional repofetch configuration file.

    Missing files, sections and keys are not errors: the build step has to run
    in containers where nothing but the environment is provided.

    Usage:
        config = ConfigAccessor()
        value = config.get('fetch', 'retries', default='3')
    """

    def __init__(self, config_path: Optional[Path] = None):
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = config_path

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default


# Create a global config accessor instance
config = ConfigAccessor()


def get_setting(section: str, key: str) -> str:
    """
    Resolve a setting: ``REPOFETCH_<KEY>`` from the environment first, then
    the config file, then the built-in default.
    """
    env_value = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
    if env_value:
        return env_value
    return config.get(section, key, default_cfg[section][key])


def get_workspace_root() -> Path:
    """
    Get the base directory under which repositories are materialized.

    Returns:
        Absolute path of the workspace root (defaults to /workspace)
    """
    value = os.environ.get(f"{ENV_PREFIX}WORKSPACE_ROOT") or config.get(
        "dirs", "workspace", default_cfg["dirs"]["workspace"]
    )
    return Path(value).expanduser()


def get_credentials_dir() -> Path:
    """
    Get the directory the CI server mounts injected credential files into.

    On Windows the mount lives on the C: drive.
    """
    value = os.environ.get(f"{ENV_PREFIX}CREDENTIALS_DIR") or config.get(
        "dirs", "credentials", default_cfg["dirs"]["credentials"]
    )
    if platform.system() == "Windows" and value.startswith("/"):
        value = "C:" + value
    return Path(value)


def get_max_attempts() -> int:
    return int(get_setting("fetch", "retries"))


def get_shallow_depth() -> int:
    return int(get_setting("fetch", "shallow_depth"))


# Resolved once per process; the fetch core only ever reads these constants.
WORKSPACE_ROOT = get_workspace_root()
DEFAULT_MAX_ATTEMPTS = get_max_attempts()
DEFAULT_SHALLOW_DEPTH = get_shallow_depth()
