"""``bob rollback``: switch back to a snapshot of an earlier nightly."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from common.prompts import select_one
from config import Config
from directories import get_downloads_directory
from install.rollback import list_rollbacks
from repository.github import GitHubClient
from switcher.switch import is_version_used, switch
from versioning.models import ResolvedVersion, VersionKind

logger = logging.getLogger(__name__)


def humanize_duration(duration: timedelta) -> str:
    """Render a duration as ``2 weeks, 1 day, 3 hours``.

    Durations under an hour are reported as ``less than an hour``.
    """
    hours_total = int(duration.total_seconds() // 3600)
    weeks, rest = divmod(hours_total, 24 * 7)
    days, hours = divmod(rest, 24)

    parts: List[str] = []
    for amount, unit in ((weeks, "week"), (days, "day"), (hours, "hour")):
        if amount:
            parts.append(f"{amount} {unit}{'s' if amount != 1 else ''}")
    return ", ".join(parts) if parts else "less than an hour"


async def start(
    args: Any,  # pylint: disable=unused-argument
    config: Config,
    client: GitHubClient,  # pylint: disable=unused-argument
    now: Optional[datetime] = None,
) -> None:
    """Entry point for the ``rollback`` command."""
    root = get_downloads_directory(config)
    rollbacks = list_rollbacks(root)
    if not rollbacks:
        logger.info("There are no nightly rollbacks available")
        return

    index = await select_one(
        "Choose which rollback to use (Newest to Oldest):",
        [entry.path.name for entry in rollbacks],
    )
    if index is None:
        logger.info("Rollback aborted...")
        return

    chosen = rollbacks[index]
    name = chosen.path.name
    if is_version_used(root, name):
        logger.info("%s is already used.", name)
        return

    await switch(ResolvedVersion(tag=name, kind=VersionKind.NIGHTLY_ROLLBACK, raw=name), config)

    now = now or datetime.now(timezone.utc)
    logger.info(
        "Successfully rolled back to version '%s' from %s ago",
        name,
        humanize_duration(now - chosen.release.published),
    )
