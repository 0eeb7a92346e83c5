"""Release asset naming per platform and version."""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from typing import List, Optional

from semantic_version import Version

_MACOS_UNIVERSAL_UNTIL = Version("0.9.5")
_LINUX64_UNTIL = Version("0.10.3")


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable release file, e.g. ``nvim-linux-x86_64.tar.gz``."""
    platform_name: str
    extension: str

    @property
    def filename(self) -> str:
        return f"{self.platform_name}.{self.extension}"


def _is_arm(machine: str) -> bool:
    return machine.lower() in ("arm64", "aarch64")


def get_platform_name(
    version: Optional[Version],
    system: Optional[str] = None,
    machine: Optional[str] = None,
) -> str:
    """Return the upstream platform name for a release.

    Args:
        version: Release semver; None for nightly, which uses the newest naming.
        system: ``sys.platform`` style name; defaults to the running platform.
        machine: CPU architecture; defaults to ``platform.machine()``.
    """
    system = system or sys.platform
    machine = machine or platform.machine()

    if system.startswith("win"):
        return "nvim-win64"
    if system == "darwin":
        if version is not None and version <= _MACOS_UNIVERSAL_UNTIL:
            return "nvim-macos"
        return "nvim-macos-arm64" if _is_arm(machine) else "nvim-macos-x86_64"
    if version is not None and version <= _LINUX64_UNTIL:
        return "nvim-linux64"
    return "nvim-linux-arm64" if _is_arm(machine) else "nvim-linux-x86_64"


def archive_extension(system: Optional[str] = None) -> str:
    system = system or sys.platform
    return "zip" if system.startswith("win") else "tar.gz"


def release_assets(
    version: Optional[Version],
    system: Optional[str] = None,
    machine: Optional[str] = None,
) -> List[ReleaseAsset]:
    """Candidate assets for a release, in the order they should be tried.

    Linux x86_64 releases that lack a tarball are fetched as an AppImage.
    """
    system = system or sys.platform
    machine = machine or platform.machine()
    name = get_platform_name(version, system, machine)
    assets = [ReleaseAsset(name, archive_extension(system))]
    if system.startswith("linux") and not _is_arm(machine):
        legacy = version is not None and version <= _LINUX64_UNTIL
        assets.append(ReleaseAsset("nvim" if legacy else name, "appimage"))
    return assets
