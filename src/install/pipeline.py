"""Install pipeline: resolved version in, ``<root>/<tag>/bin/nvim`` out."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from semantic_version import Version

from common.errors import UnsupportedVersionError
from config import Config
from constants import Constants
from directories import get_downloads_directory
from repository.github import GitHubClient
from switcher.switch import is_version_used
from versioning.models import (
    InstallResult,
    InstallStatus,
    ResolvedVersion,
    UpstreamRelease,
    VersionKind,
)

from .assets import release_assets
from .checksum import checksum_required, fetch_checksum, verify_archive
from .extract import extract_archive
from .rollback import get_local_nightly, snapshot_nightly, write_release_file
from .source_build import build_from_source, check_toolchain

logger = logging.getLogger(__name__)

_MIN_SUPPORTED = Version(Constants.MIN_SUPPORTED_VERSION)


def is_version_installed(root: Path, version: ResolvedVersion) -> bool:
    return (root / version.directory_name).is_dir()


def _builds_from_source(version: ResolvedVersion, config: Config) -> bool:
    if version.kind is VersionKind.HASH:
        return True
    return version.kind is VersionKind.NIGHTLY and config.release_build


def _check_supported(version: ResolvedVersion) -> None:
    if version.kind in (VersionKind.TAGGED, VersionKind.STABLE):
        if version.semver is not None and version.semver <= _MIN_SUPPORTED:
            raise UnsupportedVersionError(
                f"Version {version.tag} is not supported; versions up to "
                f"{Constants.MIN_SUPPORTED_VERSION} cannot be installed"
            )


async def print_commits(
    client: GitHubClient,
    local: UpstreamRelease,
    upstream: UpstreamRelease,
) -> None:
    """Print the commits that landed between two nightly releases."""
    commits = await client.get_commits_between(local.published_at, upstream.published_at)
    for commit in commits:
        message = commit.message.replace("\n", "\n| ")
        print(f"| {commit.author}\n| {message}\n")


async def download_release(
    client: GitHubClient,
    version: ResolvedVersion,
    root: Path,
    destination: Path,
) -> Path:
    """Download, verify and extract a prebuilt release into ``destination``."""
    assets = release_assets(None if version.kind is VersionKind.NIGHTLY else version.semver)
    archive: Optional[Path] = None
    chosen = assets[0]
    for index, asset in enumerate(assets):
        candidate = root / f"{version.tag}.{asset.extension}"
        url = client.release_download_url(version.tag, asset.filename)
        logger.info("Downloading version: %s", version.tag)
        if await client.download(url, candidate, missing_ok=index < len(assets) - 1):
            archive, chosen = candidate, asset
            break
        logger.debug("%s is not published for %s", asset.filename, version.tag)
    assert archive is not None

    if checksum_required(version):
        checksum_file = await fetch_checksum(client, version, chosen, root)
        if checksum_file is not None:
            await verify_archive(archive, checksum_file, chosen.filename)

    return await extract_archive(archive, destination)


async def install(
    version: ResolvedVersion,
    config: Config,
    client: GitHubClient,
) -> InstallResult:
    """Install ``version`` into the downloads root.

    Args:
        version: Resolved version to install.
        config: Loaded configuration.
        client: Upstream client.

    Returns:
        InstallResult with INSTALLED (and the install path), ALREADY_INSTALLED
        or NIGHTLY_UP_TO_DATE.

    Raises:
        UnsupportedVersionError: For releases up to 0.2.2.
        ToolchainMissingError: If a source build lacks its prerequisites.
        ChecksumMismatchError: If the archive fails verification.
    """
    if version.kind is VersionKind.NIGHTLY_ROLLBACK:
        return InstallResult(InstallStatus.ALREADY_INSTALLED)
    _check_supported(version)

    root = get_downloads_directory(config)
    installed = is_version_installed(root, version)
    if installed and version.kind is not VersionKind.NIGHTLY:
        return InstallResult(InstallStatus.ALREADY_INSTALLED)

    builds = _builds_from_source(version, config)
    if builds:
        await check_toolchain()

    upstream_nightly: Optional[UpstreamRelease] = None
    if version.kind is VersionKind.NIGHTLY:
        upstream_nightly = await client.get_upstream_nightly()

    if installed and upstream_nightly is not None:
        logger.info("Looking for nightly updates")
        local_nightly = get_local_nightly(root)
        if local_nightly is not None and local_nightly.published_at == upstream_nightly.published_at:
            return InstallResult(InstallStatus.NIGHTLY_UP_TO_DATE)

        if is_version_used(root, Constants.NIGHTLY):
            await snapshot_nightly(root, config.effective_rollback_limit)

        if config.show_nightly_info and local_nightly is not None:
            await print_commits(client, local_nightly, upstream_nightly)

    destination = root / version.directory_name
    if builds:
        ref = version.raw if version.kind is VersionKind.HASH else "HEAD"
        await build_from_source(root, ref, destination, config.release_build)
    else:
        await download_release(client, version, root, destination)

    if upstream_nightly is not None:
        write_release_file(destination, upstream_nightly)

    logger.debug("Installed %s into %s", version.tag, destination)
    return InstallResult(InstallStatus.INSTALLED, destination)
