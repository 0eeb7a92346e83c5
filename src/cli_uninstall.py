"""``bob uninstall``: remove one or more installed versions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

from common.errors import InstallNotFoundError
from common.filesystem import remove_tree
from common.prompts import ask_yes_no, select_many
from config import Config
from directories import get_downloads_directory
from repository.github import GitHubClient
from switcher.switch import is_active, read_used
from versioning.parser import is_hash, is_version_name
from versioning.resolver import resolve_version

logger = logging.getLogger(__name__)


def removable_versions(root: Path) -> List[str]:
    """Installed version directories other than the active one, sorted."""
    used = read_used(root)
    names = []
    for path in root.iterdir():
        if not path.is_dir() or not is_version_name(path.name):
            continue
        if used is not None and (path.name == used or (is_hash(used) and used.startswith(path.name))):
            continue
        names.append(path.name)
    return sorted(names)


async def uninstall_selected(root: Path) -> None:
    """Let the user pick versions to remove, then confirm."""
    candidates = removable_versions(root)
    if not candidates:
        logger.info("You only have one neovim instance installed")
        return

    chosen = await select_many(
        "Select the versions to uninstall (numbers separated by spaces):", candidates
    )
    if not chosen:
        logger.info("Uninstall aborted...")
        return

    names = [candidates[index] for index in chosen]
    print("Will uninstall: " + ", ".join(names))
    if not await ask_yes_no("Do you wish to continue?"):
        logger.info("Uninstall aborted...")
        return

    for name in names:
        await remove_tree(root / name)
        logger.info("Successfully uninstalled version: %s", name)


async def start(args: Any, config: Config, client: GitHubClient) -> None:
    """Entry point for the ``uninstall`` command."""
    root = get_downloads_directory(config)
    if not args.VERSION:
        await uninstall_selected(root)
        return

    version = await resolve_version(args.VERSION, client)
    target = root / version.directory_name
    if not target.is_dir():
        raise InstallNotFoundError(f"{version.tag} is not installed")
    if is_active(root, version):
        logger.warning("Switch to a different version before proceeding")
        return

    await remove_tree(target)
    logger.info("Successfully uninstalled version: %s", version.tag)
