"""Build neovim from source for commit-hash installs.

The git workspace ``<root>/neovim-git`` is shared between builds and never
cleaned, so repeated builds are incremental.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List

from common.errors import InstallNotFoundError, SubprocessError, ToolchainMissingError
from common.filesystem import remove_tree, remove_tree_sync
from common.processes import capture_output, probe, run_command
from constants import Constants
from directories import executable_name, is_windows

logger = logging.getLogger(__name__)


def build_type(release_build: bool) -> str:
    return "Release" if release_build else "RelWithDebInfo"


async def check_toolchain() -> None:
    """Verify the build prerequisites before anything is downloaded.

    Raises:
        ToolchainMissingError: Listing every missing tool.
    """
    missing: List[str] = []
    if is_windows():
        if not os.environ.get("VisualStudioVersion"):
            missing.append("MSVC developer environment (use a Developer PowerShell/Command Prompt for VS)")
    elif not (await probe(["clang", "--version"]) or await probe(["gcc", "--version"])):
        missing.append("clang or gcc")
    if not await probe(["cmake", "--version"]):
        missing.append("cmake")
    if not await probe(["git", "--version"]):
        missing.append("git")
    if missing:
        raise ToolchainMissingError(missing)


async def checkout(workspace: Path, ref: str) -> str:
    """Fetch ``ref`` at depth 1 into ``workspace`` and check it out.

    Returns:
        The full commit hash that was checked out.
    """
    workspace.mkdir(parents=True, exist_ok=True)
    if not (workspace / ".git").exists():
        await capture_output(["git", "init"], cwd=workspace)

    if await probe(["git", "remote", "get-url", "origin"], cwd=workspace):
        await run_command(["git", "remote", "set-url", "origin", Constants.UPSTREAM_GIT_URL], cwd=workspace)
    else:
        await run_command(["git", "remote", "add", "origin", Constants.UPSTREAM_GIT_URL], cwd=workspace)

    fetch = ["git", "fetch", "--depth", "1", "origin", ref]
    try:
        await run_command(fetch, cwd=workspace)
    except SubprocessError as exc:
        raise SubprocessError(
            fetch, exc.returncode, "fetching remote failed, try providing the full commit hash"
        ) from exc

    await capture_output(["git", "checkout", "FETCH_HEAD"], cwd=workspace)
    return await capture_output(["git", "rev-parse", "FETCH_HEAD"], cwd=workspace)


async def _recreate(path: Path) -> None:
    await remove_tree(path)
    path.mkdir(parents=True)


async def compile_and_install(workspace: Path, prefix: Path, release_build: bool) -> None:
    """Build the checked-out tree and install it into ``prefix``."""
    kind = build_type(release_build)
    type_arg = f"CMAKE_BUILD_TYPE={kind}"
    await _recreate(workspace / "build")

    if is_windows():
        await _recreate(workspace / ".deps")
        await run_command(["cmake", "-S", "cmake.deps", "-B", ".deps", "-D", type_arg], cwd=workspace)
        await run_command(["cmake", "--build", ".deps", "--config", kind], cwd=workspace)
        await run_command(["cmake", "-B", "build", "-D", type_arg], cwd=workspace)
        await run_command(["cmake", "--build", "build", "--config", kind], cwd=workspace)
        await remove_tree(prefix)
        await run_command(["cmake", "--install", "build", "--prefix", str(prefix)], cwd=workspace)
        return

    prefix_arg = f"CMAKE_INSTALL_PREFIX={prefix}"
    await run_command(["make", prefix_arg, type_arg], cwd=workspace)
    await remove_tree(prefix)
    await run_command(["make", prefix_arg, "install"], cwd=workspace)


def _place(staging: Path, prefix: Path) -> None:
    if prefix.exists():
        remove_tree_sync(prefix)
    os.replace(staging, prefix)


async def build_from_source(root: Path, ref: str, prefix: Path, release_build: bool) -> Path:
    """Build ``ref`` (a commit hash or ``HEAD``) and install it into ``prefix``.

    The build installs into ``<prefix>.staging`` first; ``prefix`` is only
    replaced once the install step succeeded, so a failed build leaves any
    previous install untouched and no partial directory behind.

    Args:
        root: Downloads root holding the shared workspace.
        ref: Git ref passed to ``git fetch``.
        prefix: Install directory, e.g. ``<root>/abc1234``.
        release_build: Use the Release build type instead of RelWithDebInfo.

    Callers run ``check_toolchain`` first.

    Returns:
        Path to the installed editor binary.
    """
    workspace = root / Constants.SOURCE_WORKSPACE
    staging = prefix.parent / f"{prefix.name}{Constants.STAGING_SUFFIX}"
    logger.info("Building %s from source in %s", ref, workspace)

    full_hash = await checkout(workspace, ref)
    try:
        await compile_and_install(workspace, staging, release_build)
        binary = staging / "bin" / executable_name()
        if not binary.is_file():
            raise InstallNotFoundError(f"Build of {ref} did not produce bin/{executable_name()}")
        (staging / Constants.FULL_HASH_FILE).write_text(full_hash, encoding="utf-8")
        await asyncio.to_thread(_place, staging, prefix)
    finally:
        await remove_tree(staging)

    binary = prefix / "bin" / executable_name()
    if not is_windows():
        os.chmod(binary, Constants.BINARY_MODE)
    logger.info("Built %s into %s", full_hash[:Constants.SHORT_HASH_LENGTH], prefix)
    return binary
