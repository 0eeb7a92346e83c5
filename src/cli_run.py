"""``bob run``: launch a specific installed version without switching to it."""

from __future__ import annotations

import logging
from typing import Any

from common.errors import InstallNotFoundError
from common.processes import spawn_and_wait
from config import Config
from directories import get_downloads_directory
from install.pipeline import is_version_installed
from repository.github import GitHubClient
from switcher.shim import locate_editor
from versioning.resolver import resolve_version

logger = logging.getLogger(__name__)


async def start(args: Any, config: Config, client: GitHubClient) -> int:
    """Entry point for the ``run`` command.

    Returns:
        The editor's exit code.
    """
    version = await resolve_version(args.VERSION, client)
    root = get_downloads_directory(config)
    if not is_version_installed(root, version):
        raise InstallNotFoundError(
            f"Version {version.tag} is not installed. "
            f"Install it first with: bob install {args.VERSION}"
        )

    try:
        binary = locate_editor(root, version.tag)
    except InstallNotFoundError as exc:
        raise InstallNotFoundError(
            f"Neovim binary not found at expected path: {root / version.directory_name / 'bin'}"
        ) from exc

    run_args = list(getattr(args, "RUN_ARGS", []) or [])
    logger.debug("Running %s %s", binary, " ".join(run_args))
    return await spawn_and_wait([str(binary), *run_args])
