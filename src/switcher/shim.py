"""The ``nvim`` shim placed on PATH.

On POSIX the shim is a small generated launcher that re-enters bob with
``SHIM_SENTINEL`` as the first argument. On Windows it is a copy of the
``bob.exe`` console launcher renamed to ``nvim.exe``; bob recognises the
program name instead. Either way the shim reads ``used`` and hands over to the
selected editor binary.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Optional, Sequence

from common.errors import FileBusyError, InstallNotFoundError, NoActiveVersionError, SubprocessError
from common.processes import capture_output, exec_replace, spawn_and_wait
from constants import Constants
from directories import executable_name, is_windows
from install.assets import get_platform_name
from versioning.parser import is_hash, semver_from_tag

from .switch import read_used

logger = logging.getLogger(__name__)

# Windows: ERROR_SHARING_VIOLATION (32) and ERROR_NOT_DOS_DISK (26) when the
# shim is held open by a running editor.
_BUSY_WINERRORS = (26, 32)

SHIM_TEMPLATE = """#!{python}
# bob {version} shim; regenerated by `bob use`.
import sys

from bob import main

sys.exit(main([{sentinel!r}, *sys.argv[1:]]))
"""


def shim_path(installation_dir: Path) -> Path:
    return installation_dir / executable_name()


def render_shim(python: Optional[str] = None) -> str:
    return SHIM_TEMPLATE.format(
        python=python or sys.executable,
        version=Constants.PROGRAM_VERSION,
        sentinel=Constants.SHIM_SENTINEL,
    )


def _current_launcher() -> Path:
    """Locate the running ``bob.exe`` console launcher (Windows)."""
    argv0 = Path(sys.argv[0])
    for candidate in (argv0, argv0.with_suffix(".exe")):
        if candidate.suffix.lower() == ".exe" and candidate.is_file():
            return candidate
    found = shutil.which(Constants.PROGRAM_NAME)
    if found:
        return Path(found)
    raise InstallNotFoundError("Could not locate the bob launcher to copy as the nvim shim")


def _write_shim(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if is_windows():
            shutil.copyfile(_current_launcher(), path)
            return
        tmp = path.with_name(f".{path.name}.tmp")
        tmp.write_text(render_shim(), encoding="utf-8")
        tmp.chmod(0o755)
        os.replace(tmp, path)
    except OSError as exc:
        if getattr(exc, "winerror", None) in _BUSY_WINERRORS:
            raise FileBusyError(
                f"{path} is busy. Close every running nvim instance and try again"
            ) from exc
        raise


async def shim_version(path: Path) -> Optional[str]:
    """Ask an existing shim which bob version produced it."""
    try:
        return await capture_output([str(path), Constants.SHIM_VERSION_FLAG])
    except SubprocessError as exc:
        logger.debug("Shim version probe failed: %s", exc)
        return None


async def ensure_shim(installation_dir: Path) -> bool:
    """Create or refresh the shim in ``installation_dir``.

    The shim is only replaced when missing or built by another bob version,
    so a running editor is not disturbed needlessly.

    Returns:
        True when the shim was (re)written.

    Raises:
        FileBusyError: On Windows, if the shim is held open.
    """
    path = shim_path(installation_dir)
    if path.exists() and await shim_version(path) == Constants.PROGRAM_VERSION:
        return False
    logger.debug("Writing shim to %s", path)
    await asyncio.to_thread(_write_shim, path)
    return True


def locate_editor(root: Path, payload: str) -> Path:
    """Find the editor binary for the ``used`` payload.

    Args:
        root: Downloads root.
        payload: Content of ``used`` (a tag or a full commit hash).

    Raises:
        InstallNotFoundError: If no binary exists for the payload.
    """
    binary = executable_name()
    name = payload[:Constants.SHORT_HASH_LENGTH] if is_hash(payload) else payload
    platform_name = get_platform_name(semver_from_tag(payload))

    directories = [root / name]
    if is_hash(payload) and root.is_dir():
        # Builds of hashes shorter than seven characters live under the short name.
        directories.extend(
            sorted(p for p in root.iterdir() if p.is_dir() and is_hash(p.name) and payload.startswith(p.name))
        )
    for directory in directories:
        for candidate in (directory / "bin" / binary, directory / platform_name / "bin" / binary):
            if candidate.is_file():
                return candidate
    raise InstallNotFoundError(f"Version {payload} is not installed in {root}")


def resolve_active_binary(root: Path) -> Path:
    payload = read_used(root)
    if payload is None:
        raise NoActiveVersionError()
    return locate_editor(root, payload)


def run_shim(root: Path, args: Sequence[str]) -> int:
    """Hand over to the active editor with ``args``.

    On POSIX the process is replaced and this only returns on failure to
    exec. On Windows the editor's exit code is returned.
    """
    if list(args[:1]) == [Constants.SHIM_VERSION_FLAG]:
        print(Constants.PROGRAM_VERSION)
        return 0

    binary = resolve_active_binary(root)
    if is_windows():
        return asyncio.run(spawn_and_wait([str(binary), *args]))
    exec_replace(binary, args)
    return 1
