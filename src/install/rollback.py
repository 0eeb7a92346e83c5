"""Bounded history of past nightly installs (``nightly-<7hex>`` snapshots)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from common.filesystem import copy_tree, remove_tree
from constants import Constants
from versioning.models import LocalNightly, UpstreamRelease
from versioning.parser import is_rollback_name

logger = logging.getLogger(__name__)


def read_release_file(directory: Path) -> Optional[UpstreamRelease]:
    """Load ``<directory>/bob.json``; None when the file is absent."""
    path = directory / Constants.RELEASE_METADATA_FILE
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        return None
    return UpstreamRelease.from_json(data)


def write_release_file(directory: Path, release: UpstreamRelease) -> None:
    path = directory / Constants.RELEASE_METADATA_FILE
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(release.to_json(), handle)


def get_local_nightly(root: Path) -> Optional[UpstreamRelease]:
    return read_release_file(root / Constants.NIGHTLY)


def list_rollbacks(root: Path) -> List[LocalNightly]:
    """Return rollback snapshots sorted newest to oldest by ``published_at``."""
    if not root.is_dir():
        return []
    entries: List[LocalNightly] = []
    for path in root.iterdir():
        if not path.is_dir() or not is_rollback_name(path.name):
            continue
        release = read_release_file(path)
        if release is None:
            logger.debug("Skipping %s: no %s", path.name, Constants.RELEASE_METADATA_FILE)
            continue
        release.tag_name = path.name
        entries.append(LocalNightly(release=release, path=path))
    entries.sort(key=lambda entry: entry.release.published, reverse=True)
    return entries


async def remove_incomplete_rollbacks(root: Path) -> None:
    """Delete snapshot directories whose copy never finished writing ``bob.json``."""
    for path in sorted(root.iterdir()):
        if path.is_dir() and is_rollback_name(path.name) and read_release_file(path) is None:
            logger.warning("Removing incomplete rollback: %s", path.name)
            await remove_tree(path)


async def snapshot_nightly(root: Path, limit: int) -> Optional[Path]:
    """Copy ``<root>/nightly`` to ``<root>/nightly-<7hex>`` before it is replaced.

    Snapshot directories left without ``bob.json`` by an interrupted copy are
    deleted first, then the oldest snapshots are evicted so at most ``limit``
    remain afterwards.
    ``limit == 0`` disables snapshots.

    Returns:
        Path of the new snapshot, or None when nothing was created.
    """
    if limit <= 0:
        return None

    nightly_dir = root / Constants.NIGHTLY
    local = get_local_nightly(root)
    if local is None:
        logger.debug("No local nightly metadata; not creating a rollback")
        return None

    commit_id = (local.target_commitish or "")[:Constants.SHORT_HASH_LENGTH]
    name = f"{Constants.NIGHTLY}-{commit_id}"
    if not is_rollback_name(name):
        logger.warning("Local nightly has no usable commit id; not creating a rollback")
        return None

    await remove_incomplete_rollbacks(root)
    destination = root / name
    if destination.exists():
        logger.debug("Rollback %s already exists", name)
        return None

    existing = list_rollbacks(root)
    while len(existing) >= limit:
        oldest = existing.pop()
        logger.info("Removing oldest rollback: %s", oldest.path.name)
        await remove_tree(oldest.path)

    logger.info("Creating rollback: %s", name)
    await copy_tree(nightly_dir, destination)

    local.tag_name = f"{local.tag_name}-{commit_id}"
    write_release_file(destination, local)
    return destination
