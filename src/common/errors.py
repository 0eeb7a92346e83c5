"""Error types raised by bob.

Every error carries the exit code the CLI should terminate with; the entry
point logs the message once and exits with ``exit_code.value``.
"""
from __future__ import annotations

from typing import List, Optional

from constants import ExitCodes


class BobError(Exception):
    """Base class for all expected failures."""

    exit_code = ExitCodes.FILE_ERROR


class VersionParseError(BobError):
    """The version string matched none of the accepted forms."""

    exit_code = ExitCodes.USER_ERROR

    def __init__(self, value: str):
        super().__init__(
            f"Please provide a proper version string, got '{value}'. "
            "Valid forms: nightly, stable, latest, vX.Y.Z, a commit hash, nightly-<hash>"
        )
        self.value = value


class UserInputError(BobError):
    """A command cannot proceed with what the user asked for."""

    exit_code = ExitCodes.USER_ERROR


class UnsupportedVersionError(BobError):
    """The requested release is older than the oldest installable one."""

    exit_code = ExitCodes.USER_ERROR


class ConfigError(BobError):
    """The configuration file could not be read or is invalid."""

    exit_code = ExitCodes.FILE_ERROR


class NetworkError(BobError):
    """Connection failure or timeout talking to the upstream host."""

    exit_code = ExitCodes.CONNECTION_ERROR


class UpstreamError(NetworkError):
    """The upstream API answered with an error document."""

    def __init__(self, message: str, documentation_url: Optional[str] = None):
        super().__init__(message)
        self.documentation_url = documentation_url


class RateLimitError(UpstreamError):
    """The upstream API rate limit was exhausted."""


class ChecksumMismatchError(BobError):
    """Downloaded archive does not match its published SHA-256."""

    exit_code = ExitCodes.INTEGRITY_ERROR


class FileBusyError(BobError):
    """The shim could not be replaced because it is in use."""

    exit_code = ExitCodes.FILE_ERROR


class NoActiveVersionError(BobError):
    """No version has been selected yet."""

    exit_code = ExitCodes.FILE_ERROR

    def __init__(self, message: str = "no active version; install one with `install`"):
        super().__init__(message)


class InstallNotFoundError(BobError):
    """A version was expected on disk but is not installed."""

    exit_code = ExitCodes.FILE_ERROR


class ToolchainMissingError(BobError):
    """A tool required to build from source is not available."""

    exit_code = ExitCodes.BUILD_ERROR

    def __init__(self, tools: List[str]):
        super().__init__(
            "Missing required build tools: " + ", ".join(tools)
            + ". Install them and try again"
        )
        self.tools = list(tools)


class SubprocessError(BobError):
    """An external command exited unsuccessfully."""

    exit_code = ExitCodes.BUILD_ERROR

    def __init__(self, command: List[str], returncode: Optional[int], message: Optional[str] = None):
        shown = " ".join(command)
        if message is None:
            if returncode is not None and returncode < 0:
                message = f"'{shown}' was terminated by signal {-returncode}"
            else:
                message = f"'{shown}' failed with exit code {returncode}"
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode


class UnsafeArchiveError(BobError):
    """An archive member would be written outside the extraction directory."""

    exit_code = ExitCodes.INTEGRITY_ERROR
