"""``bob sync``: install and use the version pinned in the sync file."""

import logging
from typing import Any

from cli_use import use_version
from common.errors import ConfigError, UserInputError
from config import Config
from directories import get_sync_file
from repository.github import GitHubClient
from versioning.resolver import resolve_version

logger = logging.getLogger(__name__)


def read_sync_version(config: Config) -> str:
    """Return the first non-empty line of the sync file.

    Raises:
        ConfigError: If no sync file is configured or it cannot be read.
        UserInputError: If the file is empty or pins a nightly rollback.
    """
    path = get_sync_file(config)
    if path is None:
        raise ConfigError("version_sync_file_location needs to be set to use bob sync")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read sync file {path}: {exc}") from exc

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        raise UserInputError("Sync file is empty")
    version = lines[0]
    if "nightly-" in version:
        raise UserInputError("Cannot sync nightly rollbacks.")
    return version


async def start(args: Any, config: Config, client: GitHubClient) -> None:  # pylint: disable=unused-argument
    """Entry point for the ``sync`` command."""
    value = read_sync_version(config)
    logger.info("Using version %s set in %s", value, get_sync_file(config))
    version = await resolve_version(value, client)
    await use_version(version, config, client)
