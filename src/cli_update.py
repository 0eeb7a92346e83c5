"""``bob update``: refresh nightly and/or stable, or one given version."""

from __future__ import annotations

import logging
from typing import Any

from config import Config
from constants import Constants
from directories import get_downloads_directory
from install.pipeline import install, is_version_installed
from repository.github import GitHubClient
from versioning.models import InstallStatus
from versioning.resolver import resolve_version

logger = logging.getLogger(__name__)


async def update_all(config: Config, client: GitHubClient) -> bool:
    """Update stable and nightly where they are installed.

    Returns:
        True when at least one new build was installed.
    """
    root = get_downloads_directory(config)
    did_update = False
    for channel in (Constants.STABLE, Constants.NIGHTLY):
        version = await resolve_version(channel, client)
        if not is_version_installed(root, version):
            continue
        result = await install(version, config, client)
        if result.status is InstallStatus.INSTALLED:
            did_update = True

    if not did_update:
        logger.warning("There was nothing to update.")
    return did_update


async def start(args: Any, config: Config, client: GitHubClient) -> None:
    """Entry point for the ``update`` command."""
    if args.UPDATE_ALL or not args.VERSION:
        await update_all(config, client)
        return

    version = await resolve_version(args.VERSION, client)
    if not is_version_installed(get_downloads_directory(config), version):
        logger.warning("%s is not installed.", args.VERSION)
        return

    result = await install(version, config, client)
    if result.status is InstallStatus.NIGHTLY_UP_TO_DATE:
        logger.info("Nightly is already updated!")
    elif result.status is InstallStatus.ALREADY_INSTALLED:
        logger.info("Stable is already updated!")
    else:
        logger.info("Successfully updated %s", version.tag)
