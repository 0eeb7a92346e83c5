"""Filesystem locations used by bob.

Nothing here is cached: every location is recomputed from the environment
and the loaded configuration on each call.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from common.errors import ConfigError
from constants import Constants

if TYPE_CHECKING:
    from config import Config


def is_windows() -> bool:
    return sys.platform.startswith("win")


def is_macos() -> bool:
    return sys.platform == "darwin"


def get_home_dir() -> Path:
    """Return the invoking user's home directory.

    Under ``sudo`` the home of SUDO_USER wins so installs do not end up in
    root's home.
    """
    if is_windows():
        profile = os.environ.get("USERPROFILE")
        if not profile:
            raise ConfigError("USERPROFILE is not set; cannot locate the home directory")
        return Path(profile)

    base = Path("/Users") if is_macos() else Path("/home")
    for var in ("SUDO_USER", "USER"):
        user = os.environ.get(var)
        if user and (base / user).is_dir():
            return base / user

    home = os.environ.get("HOME")
    if not home:
        raise ConfigError("HOME is not set; cannot locate the home directory")
    return Path(home)


def get_config_dir() -> Path:
    """Directory holding per-user application configuration."""
    home = get_home_dir()
    if is_windows():
        return home / "AppData" / "Roaming"
    if is_macos():
        return home / "Library" / "Application Support"
    return home / ".config"


def get_local_data_dir() -> Path:
    home = get_home_dir()
    if is_windows():
        return home / "AppData" / "Local"
    return home / ".local" / "share"


def get_config_file() -> Path:
    """Locate the configuration file.

    ``$BOB_CONFIG`` wins; otherwise the first existing of config.toml,
    config.yaml, config.yml and config.json in ``<config dir>/bob``. When none
    exists the JSON path is returned so a later write creates it.
    """
    override = os.environ.get(Constants.ENV_CONFIG)
    if override:
        return Path(override)

    directory = get_config_dir() / Constants.CONFIG_DIR_NAME
    for name in Constants.CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return directory / Constants.CONFIG_FILE_NAMES[-1]


def get_downloads_directory(config: "Config", create: bool = True) -> Path:
    """Return the downloads root.

    Args:
        config: Loaded configuration.
        create: Create the default root when it does not exist yet.

    Raises:
        ConfigError: If a custom ``downloads_location`` does not exist or the
            default root cannot be created.
    """
    if config.downloads_location:
        path = Path(config.downloads_location)
        if not path.is_dir():
            raise ConfigError(f"Custom directory {path} doesn't exist!")
        return path

    path = get_local_data_dir() / Constants.PROGRAM_NAME
    if create and not path.is_dir():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Couldn't create downloads directory {path}: {exc}") from exc
    return path


def get_installation_directory(config: "Config", create: bool = True) -> Path:
    """Directory holding the shim; ``installation_location`` or ``<root>/nvim-bin``."""
    if config.installation_location:
        return Path(config.installation_location)
    return get_downloads_directory(config, create=create) / Constants.INSTALLATION_DIR


def executable_name(name: str = Constants.EDITOR_NAME) -> str:
    """Platform file name of an executable (``nvim.exe`` on Windows)."""
    return f"{name}.exe" if is_windows() else name


def get_sync_file(config: "Config") -> Optional[Path]:
    """Return the configured version sync file, if any."""
    if not config.version_sync_file_location:
        return None
    return Path(config.version_sync_file_location)
