"""Version string classification.

Everything here is pure: strings that need upstream data (``stable``,
``latest``, ``head``) are recognised but resolved by ``versioning.resolver``.
"""

import re
from typing import Optional

from semantic_version import Version

from common.errors import VersionParseError
from constants import Constants

from .models import ResolvedVersion, VersionKind

STABLE_ALIASES = ("stable", "latest")
HEAD_ALIASES = ("head", "git", "HEAD")

_SEMVER_RE = re.compile(Constants.SEMVER_PATTERN)
_HASH_RE = re.compile(Constants.HASH_PATTERN)
_ROLLBACK_RE = re.compile(Constants.ROLLBACK_PATTERN)


def is_hash(value: str) -> bool:
    """Return True for a 5-40 character lowercase hex commit hash."""
    return _HASH_RE.fullmatch(value) is not None


def is_rollback_name(value: str) -> bool:
    """Return True for ``nightly-<7hex>`` snapshot names."""
    return _ROLLBACK_RE.fullmatch(value) is not None


def parse_semver(value: str) -> Optional[Version]:
    """Parse ``[v]X[.Y[.Z]]`` into a Version, or None when it is not one."""
    if _SEMVER_RE.fullmatch(value) is None:
        return None
    try:
        return Version.coerce(value.lstrip("v"))
    except ValueError:
        return None


def needs_upstream(value: str) -> bool:
    """Return True when resolving ``value`` requires the upstream API."""
    return value in STABLE_ALIASES or value in HEAD_ALIASES


def parse_version_string(value: str) -> ResolvedVersion:
    """Classify a version string that can be resolved without the network.

    Args:
        value: User supplied version string.

    Returns:
        ResolvedVersion for ``nightly``, semver strings, commit hashes and
        nightly rollback names.

    Raises:
        VersionParseError: If the string matches none of those forms. Aliases
            that need upstream data are rejected here as well; callers check
            ``needs_upstream`` first.
    """
    value = value.strip()
    if value == Constants.NIGHTLY:
        return ResolvedVersion(tag=value, kind=VersionKind.NIGHTLY, raw=value)

    semver = parse_semver(value)
    if semver is not None:
        return ResolvedVersion(
            tag=f"v{semver}",
            kind=VersionKind.TAGGED,
            raw=value,
            semver=semver,
        )

    if is_hash(value):
        return ResolvedVersion(tag=value, kind=VersionKind.HASH, raw=value)

    if is_rollback_name(value):
        return ResolvedVersion(tag=value, kind=VersionKind.NIGHTLY_ROLLBACK, raw=value)

    raise VersionParseError(value)


def semver_from_tag(tag: str) -> Optional[Version]:
    """Parse a release tag such as ``v0.10.0``; None for non-semver tags."""
    return parse_semver(tag.strip())


def is_version_name(name: str) -> bool:
    """Return True for directory names that hold an installed version."""
    try:
        parse_version_string(name)
    except VersionParseError:
        return False
    return True
