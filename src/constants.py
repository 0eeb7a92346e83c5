"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    USER_ERROR = 3
    INTEGRITY_ERROR = 4
    BUILD_ERROR = 5
    INTERRUPTED = 130


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PROGRAM_NAME = "bob"
    PROGRAM_VERSION = "0.1.0"
    EDITOR_NAME = "nvim"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "BOB_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for API requests
    DOWNLOAD_TIMEOUT = 600  # Timeout in seconds for artifact downloads
    DOWNLOAD_CHUNK_SIZE = 64 * 1024

    # Upstream API constants
    GITHUB_API_BASE = "https://api.github.com"
    GITHUB_DEFAULT_MIRROR = "https://github.com"
    UPSTREAM_REPO = "neovim/neovim"
    UPSTREAM_GIT_URL = "https://github.com/neovim/neovim.git"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    USER_AGENT = "bob"
    GITHUB_ACCEPT = "application/vnd.github.v3+json"
    REPO_API_PER_PAGE = 100
    TAGS_PER_PAGE = 50
    RATE_LIMIT_MARKER = "rate-limiting"
    RATE_LIMIT_HELP = (
        "Github API rate limit has been reached, either wait an hour or set the "
        "GITHUB_TOKEN environment variable to a personal access token"
    )

    # Configuration
    ENV_CONFIG = "BOB_CONFIG"
    CONFIG_DIR_NAME = "bob"
    CONFIG_FILE_NAMES = ["config.toml", "config.yaml", "config.yml", "config.json"]
    DEFAULT_ROLLBACK_LIMIT = 3
    ENV_VAR_PATTERN = r"\$([A-Z_]+)"

    # Downloads root layout
    USED_FILE = "used"
    USED_TMP_FILE = "used.tmp"
    NIGHTLY = "nightly"
    STABLE = "stable"
    SOURCE_WORKSPACE = "neovim-git"
    INSTALLATION_DIR = "nvim-bin"
    ENV_DIR = "env"
    RELEASE_METADATA_FILE = "bob.json"
    FULL_HASH_FILE = "full-hash.txt"
    STAGING_SUFFIX = ".staging"

    # Version string grammar
    SEMVER_PATTERN = r"v?[0-9]+(\.[0-9]+){0,2}"
    HASH_PATTERN = r"[0-9a-f]{5,40}"
    ROLLBACK_PATTERN = r"nightly-[0-9a-f]{7}"
    SHORT_HASH_LENGTH = 7
    MIN_SUPPORTED_VERSION = "0.2.2"  # this and older cannot be installed
    CHECKSUM_MIN_VERSION = "0.4.4"  # versions after this publish checksums
    SHASUM_TXT_MIN_VERSION = "0.10.4"  # versions after this publish shasum.txt
    SHASUM_TXT_FILE = "shasum.txt"

    # Interaction
    PROMPT_TIMEOUT_SEC = 120

    # Shim
    SHIM_SENTINEL = "--&bob-shim"
    SHIM_VERSION_FLAG = "--&bob-version"

    BINARY_MODE = 0o551  # r-xr-x--x for installed editor binaries
