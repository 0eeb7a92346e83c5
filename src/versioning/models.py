"""Data models for version resolution and installation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from semantic_version import Version

from constants import Constants


class VersionKind(Enum):
    """Kind of version a user string resolved to."""
    TAGGED = "tagged"
    STABLE = "stable"
    NIGHTLY = "nightly"
    HASH = "hash"
    NIGHTLY_ROLLBACK = "nightly_rollback"


@dataclass(frozen=True)
class ResolvedVersion:
    """Outcome of resolving a user version string.

    ``tag`` is the install directory name for every kind except HASH, whose
    builds live under the first seven characters of the hash
    (see ``directory_name``).
    """
    tag: str
    kind: VersionKind
    raw: str
    semver: Optional[Version] = None

    @property
    def directory_name(self) -> str:
        if self.kind is VersionKind.HASH:
            return self.tag[:Constants.SHORT_HASH_LENGTH]
        return self.tag

    def __str__(self) -> str:
        return self.tag


def parse_timestamp(value: str) -> datetime:
    """Parse an upstream ISO 8601 timestamp (``2024-05-01T10:00:00Z``)."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class UpstreamRelease:
    """A release document from the upstream API.

    ``data`` keeps the full JSON document so it can be persisted verbatim.
    """
    tag_name: str
    published_at: str
    target_commitish: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UpstreamRelease":
        return cls(
            tag_name=str(data.get("tag_name", "")),
            published_at=str(data.get("published_at", "")),
            target_commitish=data.get("target_commitish"),
            data=dict(data),
        )

    @property
    def published(self) -> datetime:
        return parse_timestamp(self.published_at)

    def to_json(self) -> Dict[str, Any]:
        """Return the upstream document with the current field values applied."""
        doc = dict(self.data)
        doc["tag_name"] = self.tag_name
        doc["published_at"] = self.published_at
        if self.target_commitish is not None:
            doc["target_commitish"] = self.target_commitish
        return doc


@dataclass
class RepoCommit:
    """A single upstream commit, as shown in the nightly change log."""
    sha: str
    message: str
    author: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "RepoCommit":
        commit = data.get("commit") or {}
        author = commit.get("author") or {}
        return cls(
            sha=str(data.get("sha", "")),
            message=str(commit.get("message", "")),
            author=str(author.get("name", "")),
        )


@dataclass
class LocalNightly:
    """A nightly snapshot on disk together with its release metadata."""
    release: UpstreamRelease
    path: Path


class InstallStatus(Enum):
    """Outcome of the install pipeline."""
    INSTALLED = "installed"
    ALREADY_INSTALLED = "already_installed"
    NIGHTLY_UP_TO_DATE = "nightly_up_to_date"


@dataclass
class InstallResult:
    """Install outcome; ``path`` is set only for INSTALLED."""
    status: InstallStatus
    path: Optional[Path] = None
