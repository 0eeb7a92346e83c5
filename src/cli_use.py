"""``bob use``: install a version if needed and make it the active one."""

from __future__ import annotations

import logging
from typing import Any

from common.errors import InstallNotFoundError
from common.filesystem import remove_tree
from config import Config
from constants import Constants
from directories import get_downloads_directory, get_installation_directory
from install.pipeline import install, is_version_installed
from repository.github import GitHubClient
from switcher.shim import ensure_shim
from switcher.switch import is_active, switch
from versioning.models import InstallStatus, ResolvedVersion, VersionKind
from versioning.resolver import resolve_version

logger = logging.getLogger(__name__)


async def _remove_legacy_stable(config: Config) -> None:
    # Releases used to be installed under a plain "stable" directory.
    legacy = get_downloads_directory(config) / Constants.STABLE
    if legacy.is_dir():
        logger.debug("Removing legacy %s directory", legacy)
        await remove_tree(legacy)


async def use_version(
    version: ResolvedVersion,
    config: Config,
    client: GitHubClient,
    no_install: bool = False,
) -> None:
    """Install ``version`` unless told not to, then switch to it.

    Raises:
        InstallNotFoundError: If the version is not on disk when switching
            (``no_install`` or a missing rollback snapshot).
    """
    root = get_downloads_directory(config)
    await ensure_shim(get_installation_directory(config))

    is_used = is_active(root, version)
    if is_used and version.tag != Constants.NIGHTLY:
        logger.info("%s is already installed and used!", version.tag)
        return

    if not no_install:
        result = await install(version, config, client)
        if result.status is InstallStatus.NIGHTLY_UP_TO_DATE and is_used:
            logger.info("Nightly is already updated and used!")
            return
        if result.status is InstallStatus.INSTALLED:
            logger.info("Successfully installed %s", version.tag)

    if not is_version_installed(root, version):
        raise InstallNotFoundError(
            f"{version.tag} is not installed; run `bob install {version.raw}` first"
        )

    await switch(version, config)
    if version.kind is VersionKind.STABLE:
        await _remove_legacy_stable(config)
    logger.info("You can now use %s!", version.tag)


async def start(args: Any, config: Config, client: GitHubClient) -> None:
    """Entry point for the ``use`` command."""
    version = await resolve_version(args.VERSION, client)
    await use_version(version, config, client, no_install=getattr(args, "NO_INSTALL", False))
