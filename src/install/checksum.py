"""SHA-256 verification of downloaded release archives."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Optional

from semantic_version import Version

from common.errors import ChecksumMismatchError
from constants import Constants
from repository.github import GitHubClient
from versioning.models import ResolvedVersion, VersionKind

from .assets import ReleaseAsset

logger = logging.getLogger(__name__)

_CHECKSUM_MIN = Version(Constants.CHECKSUM_MIN_VERSION)
_SHASUM_TXT_MIN = Version(Constants.SHASUM_TXT_MIN_VERSION)


def checksum_required(version: ResolvedVersion) -> bool:
    """Whether upstream publishes a checksum for this release."""
    if version.kind is VersionKind.NIGHTLY:
        return True
    if version.kind is VersionKind.HASH:
        return False
    return version.semver is not None and version.semver > _CHECKSUM_MIN


def checksum_filename(version: ResolvedVersion, asset: ReleaseAsset) -> str:
    """Name of the checksum file published alongside ``asset``."""
    if version.kind is VersionKind.NIGHTLY or (
        version.semver is not None and version.semver > _SHASUM_TXT_MIN
    ):
        return Constants.SHASUM_TXT_FILE
    return f"{asset.filename}.sha256sum"


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for block in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(block)
    return digest.hexdigest()


def expected_checksum(checksum_text: str, filename: str) -> Optional[str]:
    """Find the hash recorded for ``filename`` in a sha256sum-style listing."""
    lines = [line.split() for line in checksum_text.splitlines() if line.strip()]
    for parts in lines:
        if len(parts) >= 2 and Path(parts[-1].lstrip("*")).name == filename:
            return parts[0].lower()
    if len(lines) == 1 and len(lines[0]) == 1:
        return lines[0][0].lower()
    return None


async def fetch_checksum(
    client: GitHubClient,
    version: ResolvedVersion,
    asset: ReleaseAsset,
    directory: Path,
) -> Optional[Path]:
    """Download the checksum file for ``asset``; None when upstream has none."""
    name = checksum_filename(version, asset)
    dest = directory / name
    url = client.release_download_url(version.tag, name)
    if not await client.download(url, dest, missing_ok=True):
        logger.warning("No checksum file found for %s, skipping verification", asset.filename)
        return None
    return dest


async def verify_archive(archive: Path, checksum_file: Path, filename: str) -> None:
    """Compare ``archive`` against its entry in ``checksum_file``.

    On success the checksum file is removed. On mismatch both files are removed.

    Raises:
        ChecksumMismatchError: If the digest differs or no entry exists.
    """
    text = checksum_file.read_text(encoding="utf-8", errors="replace")
    expected = expected_checksum(text, filename)
    actual = await asyncio.to_thread(sha256_file, archive)

    if expected is None or expected != actual:
        archive.unlink(missing_ok=True)
        checksum_file.unlink(missing_ok=True)
        if expected is None:
            raise ChecksumMismatchError(
                f"Checksum mismatch: no checksum entry for {filename} in {checksum_file.name}"
            )
        raise ChecksumMismatchError(
            f"Checksum mismatch for {filename}: expected {expected}, got {actual}"
        )

    checksum_file.unlink(missing_ok=True)
    logger.info("Checksum verified for %s", filename)
