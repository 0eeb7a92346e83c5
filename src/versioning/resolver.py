"""Resolve user version strings, consulting upstream where required."""

from __future__ import annotations

import logging

from common.errors import UpstreamError
from repository.github import GitHubClient

from .models import ResolvedVersion, VersionKind
from .parser import HEAD_ALIASES, STABLE_ALIASES, parse_version_string, semver_from_tag

logger = logging.getLogger(__name__)


async def resolve_version(value: str, client: GitHubClient) -> ResolvedVersion:
    """Resolve ``value`` into a ResolvedVersion.

    Args:
        value: User supplied version string.
        client: Upstream client; only used for ``stable``/``latest`` and the
            ``head`` aliases.

    Returns:
        ResolvedVersion

    Raises:
        VersionParseError: If the string is not a recognised version.
        NetworkError: If upstream could not be queried.
    """
    value = value.strip()
    if value in STABLE_ALIASES:
        logger.info("Fetching latest version")
        release = await client.get_upstream_stable()
        semver = semver_from_tag(release.tag_name)
        if semver is None:
            raise UpstreamError(f"Latest release has an unexpected tag '{release.tag_name}'")
        return ResolvedVersion(
            tag=release.tag_name,
            kind=VersionKind.STABLE,
            raw=value,
            semver=semver,
        )

    if value in HEAD_ALIASES:
        logger.info("Fetching latest commit")
        sha = await client.get_latest_commit()
        return ResolvedVersion(tag=sha, kind=VersionKind.HASH, raw=sha)

    return parse_version_string(value)
