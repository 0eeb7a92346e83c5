"""``bob erase``: remove every file and PATH change bob made."""

import logging
from typing import Any

from common.errors import InstallNotFoundError
from common.filesystem import remove_tree
from config import Config
from directories import get_downloads_directory, get_installation_directory
from repository.github import GitHubClient
from switcher.path_integration import remove_from_path
from switcher.shim import shim_path

logger = logging.getLogger(__name__)


async def erase(config: Config) -> None:
    """Remove the shim, PATH hooks and the downloads root.

    Raises:
        InstallNotFoundError: If there is nothing left to remove.
    """
    root = get_downloads_directory(config, create=False)
    installation_dir = get_installation_directory(config, create=False)
    removed = False

    remove_from_path(installation_dir, root)

    if config.installation_location:
        # A user supplied directory may hold other files; only drop the shim.
        shim = shim_path(installation_dir)
        if shim.exists():
            shim.unlink()
            logger.info("Successfully removed %s", shim)
            removed = True
    elif installation_dir.is_dir():
        await remove_tree(installation_dir)
        logger.info("Successfully removed neovim's installation folder")
        removed = True

    if root.is_dir():
        await remove_tree(root)
        logger.info("Successfully removed neovim downloads folder")
        removed = True

    if not removed:
        raise InstallNotFoundError("There's nothing to erase")


async def start(args: Any, config: Config, client: GitHubClient) -> None:  # pylint: disable=unused-argument
    """Entry point for the ``erase`` command."""
    await erase(config)
