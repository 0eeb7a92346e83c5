"""``bob list-remote``: show recent upstream releases."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from config import Config
from directories import get_downloads_directory
from repository.github import GitHubClient
from switcher.switch import read_used

logger = logging.getLogger(__name__)


def format_remote_versions(
    tags: List[str],
    stable_tag: Optional[str],
    root: Path,
) -> List[str]:
    """Annotate release tags with their stable, used and installed state."""
    used = read_used(root)
    lines = []
    for tag in tags:
        if not tag.startswith("v"):
            continue
        line = tag
        if tag == stable_tag:
            line += " (stable)"
        if tag == used:
            line += " (used)"
        elif (root / tag).is_dir():
            line += " (installed)"
        lines.append(line)
    return lines


async def start(args: Any, config: Config, client: GitHubClient) -> None:  # pylint: disable=unused-argument
    """Entry point for the ``list-remote`` command."""
    root = get_downloads_directory(config)
    tags = await client.list_tags()
    stable = await client.get_upstream_stable()
    for line in format_remote_versions(tags, stable.tag_name, root):
        print(line)
