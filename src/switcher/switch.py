"""Select the active version: the ``used`` pointer, shim, sync file and PATH."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from common.errors import InstallNotFoundError
from common.filesystem import atomic_write_text
from config import Config
from constants import Constants
from directories import get_downloads_directory, get_installation_directory, get_sync_file
from versioning.models import ResolvedVersion, VersionKind

logger = logging.getLogger(__name__)


def read_used(root: Path) -> Optional[str]:
    """Return the active version payload, or None when nothing is active."""
    try:
        value = (root / Constants.USED_FILE).read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    return value or None


def is_version_used(root: Path, payload: str) -> bool:
    """Whether ``payload`` is exactly the active version."""
    return read_used(root) == payload


def used_payload(version: ResolvedVersion, root: Path) -> str:
    """Return the string ``used`` should hold for ``version``.

    Short hashes are expanded through the ``full-hash.txt`` written by the
    source build.
    """
    if version.kind is VersionKind.HASH:
        if len(version.raw) <= Constants.SHORT_HASH_LENGTH:
            hash_file = root / version.raw / Constants.FULL_HASH_FILE
            try:
                return hash_file.read_text(encoding="utf-8").strip()
            except FileNotFoundError as exc:
                raise InstallNotFoundError(
                    f"{hash_file} is missing; reinstall {version.raw} to recreate it"
                ) from exc
        return version.raw
    return version.tag


def write_used(root: Path, payload: str) -> None:
    """Atomically point ``used`` at ``payload``."""
    atomic_write_text(root / Constants.USED_FILE, payload, Constants.USED_TMP_FILE)


def update_sync_file(config: Config, value: str) -> None:
    """Record ``value`` in the version sync file when it changed."""
    path = get_sync_file(config)
    if path is None:
        return
    try:
        current = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        current = None
    if current == value:
        return
    path.write_text(value, encoding="utf-8")
    logger.info("Written version to %s", path)


async def switch(version: ResolvedVersion, config: Config) -> str:
    """Make ``version`` the active one.

    Returns:
        The payload written to ``used``.
    """
    # pylint: disable=import-outside-toplevel
    from switcher.path_integration import add_to_path
    from switcher.shim import ensure_shim

    root = get_downloads_directory(config)
    payload = used_payload(version, root)
    write_used(root, payload)
    logger.debug("Active version is now %s", payload)

    installation_dir = get_installation_directory(config)
    await ensure_shim(installation_dir)
    update_sync_file(config, payload)
    await add_to_path(installation_dir, config)
    return payload


def is_active(root: Path, version: ResolvedVersion) -> bool:
    """Whether ``version`` is the one ``used`` points at."""
    # Short hashes can only be expanded once their build exists.
    if version.kind is VersionKind.HASH and not (root / version.directory_name).is_dir():
        return False
    return is_version_used(root, used_payload(version, root))
