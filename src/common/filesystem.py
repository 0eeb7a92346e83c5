"""Filesystem helpers that keep recursive work off the event loop."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _make_writable_and_retry(func, path, _exc) -> None:
    # Installed binaries are 0o551; directories and files need the write bit
    # before they can be removed.
    os.chmod(path, stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
    func(path)


def remove_tree_sync(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        if sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=_make_writable_and_retry)
        else:
            shutil.rmtree(path, onerror=_make_writable_and_retry)


async def remove_tree(path: Path) -> None:
    """Recursively delete ``path`` if it exists."""
    logger.debug("Removing %s", path)
    await asyncio.to_thread(remove_tree_sync, path)


async def copy_tree(source: Path, destination: Path) -> None:
    """Recursively copy ``source`` to a new directory ``destination``."""
    logger.debug("Copying %s to %s", source, destination)
    await asyncio.to_thread(shutil.copytree, source, destination, symlinks=True)


def atomic_write_text(path: Path, content: str, tmp_name: str) -> None:
    """Write ``content`` next to ``path`` under ``tmp_name`` and rename it over ``path``."""
    tmp_path = path.parent / tmp_name
    with open(tmp_path, "w", encoding="utf-8") as handle:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)
