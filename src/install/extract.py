"""Archive extraction into the ``<root>/<tag>/bin/nvim`` layout.

Upstream archives have used several top-level layouts over time
(``nvim-linux64/``, ``nvim-osx64/``, ``nvim-macos-arm64/``, AppImage
``squashfs-root/usr/``). Rather than naming them, the extracted tree is
probed for the directory that holds ``bin/nvim`` and that directory becomes
the install.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Optional

from common.errors import InstallNotFoundError, UnsafeArchiveError
from common.filesystem import remove_tree, remove_tree_sync
from common.processes import run_command
from constants import Constants
from directories import executable_name, is_windows

logger = logging.getLogger(__name__)

_PROBE_DEPTH = 3


def _ensure_inside(root: Path, name: str) -> None:
    target = (root / name).resolve()
    if target != root and root not in target.parents:
        raise UnsafeArchiveError(f"Refusing to extract '{name}' outside of {root}")


def _extract_tar(archive: Path, staging: Path) -> None:
    root = staging.resolve()
    with tarfile.open(archive, "r:*") as tar:
        members = tar.getmembers()
        for member in members:
            _ensure_inside(root, member.name)
        if hasattr(tarfile, "data_filter"):
            tar.extractall(staging, members=members, filter="tar")
        else:  # pragma: no cover
            tar.extractall(staging, members=members)


def _extract_zip(archive: Path, staging: Path) -> None:
    root = staging.resolve()
    with zipfile.ZipFile(archive) as zf:
        for name in zf.namelist():
            _ensure_inside(root, name)
        zf.extractall(staging)


async def _extract_appimage(archive: Path, staging: Path) -> None:
    mode = archive.stat().st_mode
    archive.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    await run_command([str(archive.resolve()), "--appimage-extract"], cwd=staging)


def find_install_prefix(directory: Path, binary: Optional[str] = None) -> Optional[Path]:
    """Return the shallowest directory under ``directory`` containing ``bin/<binary>``."""
    binary = binary or executable_name()
    level = [directory]
    for _ in range(_PROBE_DEPTH + 1):
        next_level = []
        for candidate in level:
            if (candidate / "bin" / binary).is_file():
                return candidate
            next_level.extend(sorted(p for p in candidate.iterdir() if p.is_dir() and not p.is_symlink()))
        level = next_level
    return None


def _place(prefix: Path, destination: Path) -> None:
    if destination.exists():
        remove_tree_sync(destination)
    shutil.move(str(prefix), str(destination))


async def extract_archive(archive: Path, destination: Path) -> Path:
    """Extract ``archive`` so that ``destination/bin/nvim`` exists.

    Args:
        archive: Downloaded ``.tar.gz``, ``.zip`` or ``.appimage`` file.
        destination: Install directory, ``<root>/<tag>``; replaced if present.

    Returns:
        Path to the installed editor binary.

    Raises:
        InstallNotFoundError: If the archive holds no editor binary.
    """
    staging = destination.parent / f"{destination.name}{Constants.STAGING_SUFFIX}"
    if staging.exists():
        await remove_tree(staging)
    staging.mkdir(parents=True)

    name = archive.name.lower()
    try:
        if name.endswith(".zip"):
            await asyncio.to_thread(_extract_zip, archive, staging)
        elif name.endswith(".appimage"):
            await _extract_appimage(archive, staging)
        else:
            await asyncio.to_thread(_extract_tar, archive, staging)

        prefix = find_install_prefix(staging)
        if prefix is None:
            raise InstallNotFoundError(f"{archive.name} does not contain bin/{executable_name()}")
        logger.debug("Found install prefix %s", prefix)
        await asyncio.to_thread(_place, prefix, destination)
    finally:
        await remove_tree(staging)

    binary = destination / "bin" / executable_name()
    if not is_windows():
        os.chmod(binary, Constants.BINARY_MODE)
    archive.unlink(missing_ok=True)
    logger.info("Extracted %s to %s", archive.name, destination)
    return binary
