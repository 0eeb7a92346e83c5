"""``bob install``: install a version without switching to it."""

import logging
from typing import Any

from config import Config
from install.pipeline import install
from repository.github import GitHubClient
from versioning.models import InstallStatus
from versioning.resolver import resolve_version

logger = logging.getLogger(__name__)


async def start(args: Any, config: Config, client: GitHubClient) -> None:
    """Entry point for the ``install`` command."""
    version = await resolve_version(args.VERSION, client)
    result = await install(version, config, client)
    if result.status is InstallStatus.ALREADY_INSTALLED:
        logger.info("%s is already installed!", version.tag)
    elif result.status is InstallStatus.NIGHTLY_UP_TO_DATE:
        logger.info("Nightly is already updated!")
    else:
        logger.info("%s has been successfully installed in %s", version.tag, result.path)
