"""``bob list``: show installed versions and which one is active."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from config import Config
from constants import Constants
from directories import get_downloads_directory, get_installation_directory
from repository.github import GitHubClient
from switcher.switch import read_used
from versioning.parser import is_hash, is_version_name

logger = logging.getLogger(__name__)

SYSTEM_ENTRY = "system"


@dataclass
class VersionEntry:
    """One row of the version table."""
    name: str
    status: str


def find_system_nvim(excluded: List[Path], path_value: Optional[str] = None) -> Optional[str]:
    """Look for an nvim on PATH that bob did not put there."""
    if path_value is None:
        path_value = os.environ.get("PATH", "")
    skip = {os.path.normcase(os.path.abspath(p)) for p in excluded}
    entries = [
        entry for entry in path_value.split(os.pathsep)
        if entry and os.path.normcase(os.path.abspath(entry)) not in skip
    ]
    if not entries:
        return None
    return shutil.which(Constants.EDITOR_NAME, path=os.pathsep.join(entries))


def _is_used_dir(name: str, used: Optional[str]) -> bool:
    if used is None:
        return False
    if is_hash(used):
        return used.startswith(name) and is_hash(name)
    return name == used


def collect_versions(root: Path, installation_dir: Path) -> List[VersionEntry]:
    """Build the table rows: a system nvim (if any) then every installed version."""
    entries: List[VersionEntry] = []
    system = find_system_nvim([installation_dir, root])
    if system:
        logger.debug("Found system nvim at %s", system)
        entries.append(VersionEntry(SYSTEM_ENTRY, "Available"))

    used = read_used(root)
    for path in sorted(root.iterdir()):
        if not path.is_dir() or not is_version_name(path.name):
            continue
        status = "Used" if _is_used_dir(path.name, used) else "Installed"
        entries.append(VersionEntry(path.name, status))
    return entries


def render_table(entries: List[VersionEntry], padding: int = 2) -> str:
    """Render entries as a two column box-drawn table."""
    name_width = max([len("Version")] + [len(e.name) for e in entries])
    status_width = max([len("Status")] + [len(e.status) for e in entries])

    def border(left: str, mid: str, right: str) -> str:
        return (
            left + "─" * (name_width + padding * 2) + mid
            + "─" * (status_width + padding * 2) + right
        )

    def row(name: str, status: str) -> str:
        pad = " " * padding
        return f"│{pad}{name.ljust(name_width)}{pad}│{pad}{status.ljust(status_width)}{pad}│"

    lines = [border("┌", "┬", "┐"), row("Version", "Status"), border("├", "┼", "┤")]
    lines.extend(row(e.name, e.status) for e in entries)
    lines.append(border("└", "┴", "┘"))
    return "\n".join(lines)


async def start(args: Any, config: Config, client: GitHubClient) -> None:  # pylint: disable=unused-argument
    """Entry point for the ``list`` command."""
    root = get_downloads_directory(config)
    entries = collect_versions(root, get_installation_directory(config))
    if not entries:
        logger.info("There are no versions installed")
        return
    print(render_table(entries))
