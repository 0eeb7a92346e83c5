"""Subprocess helpers for build steps, tool probes and launching the editor."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from common.errors import SubprocessError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Signals relayed to a spawned editor so it can react to them itself.
FORWARDED_SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGUSR1", "SIGTERM", "SIGINT", "SIGHUP", "SIGQUIT")
    if hasattr(signal, name)
)


async def run_command(
    command: Sequence[str],
    cwd: Optional[PathLike] = None,
    env: Optional[Dict[str, str]] = None,
) -> None:
    """Run a command to completion, inheriting stdio.

    Raises:
        SubprocessError: On a non-zero exit or death by signal, or when the
            program cannot be started.
    """
    cmd = [str(part) for part in command]
    logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        process = await asyncio.create_subprocess_exec(*cmd, cwd=cwd, env=env)
    except OSError as exc:
        raise SubprocessError(cmd, None, f"Could not start '{cmd[0]}': {exc}") from exc
    returncode = await process.wait()
    if returncode != 0:
        raise SubprocessError(cmd, returncode)


async def capture_output(
    command: Sequence[str],
    cwd: Optional[PathLike] = None,
) -> str:
    """Run a command and return its stripped stdout.

    Raises:
        SubprocessError: On a non-zero exit or when the program is missing.
    """
    cmd = [str(part) for part in command]
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise SubprocessError(cmd, None, f"Could not start '{cmd[0]}': {exc}") from exc
    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        logger.debug("%s stderr: %s", cmd[0], stderr.decode(errors="replace").strip())
        raise SubprocessError(cmd, process.returncode)
    return stdout.decode(errors="replace").strip()


async def probe(command: Sequence[str], cwd: Optional[PathLike] = None) -> bool:
    """Return True when ``command`` starts and exits successfully."""
    try:
        await capture_output(command, cwd=cwd)
    except SubprocessError:
        return False
    return True


async def spawn_and_wait(command: Sequence[str], env: Optional[Dict[str, str]] = None) -> int:
    """Spawn a child with inherited stdio, forward signals, return its exit code.

    On POSIX the child's death by signal is reported as ``128 + signum``.
    """
    cmd = [str(part) for part in command]
    try:
        process = await asyncio.create_subprocess_exec(*cmd, env=env)
    except OSError as exc:
        raise SubprocessError(cmd, None, f"Could not start '{cmd[0]}': {exc}") from exc

    loop = asyncio.get_running_loop()
    installed: List[int] = []
    if sys.platform != "win32":
        for sig in FORWARDED_SIGNALS:
            try:
                loop.add_signal_handler(sig, _forward_signal, process, sig)
            except (NotImplementedError, RuntimeError):
                continue
            installed.append(sig)
    try:
        returncode = await process.wait()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)

    if returncode < 0:
        return 128 - returncode
    return returncode


def _forward_signal(process: "asyncio.subprocess.Process", sig: int) -> None:
    if process.returncode is None:
        process.send_signal(sig)


def exec_replace(binary: PathLike, args: Sequence[str]) -> None:
    """Replace the current process with ``binary`` (POSIX only).

    Arguments and the full environment are passed through unchanged.
    """
    path = str(binary)
    os.execve(path, [path, *args], dict(os.environ))
