"""User configuration loading and persistence.

The configuration file is JSON by default; ``.toml`` files are read with
tomllib (tomli before Python 3.11) and written with tomli_w, ``.yaml``/``.yml``
files go through PyYAML. A missing file yields the defaults.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import tomli_w
import yaml

from common.errors import ConfigError
from constants import Constants
from directories import get_config_file

try:
    import tomllib as toml  # type: ignore
except ImportError:  # pragma: no cover
    import tomli as toml  # type: ignore

logger = logging.getLogger(__name__)

_ENV_VAR_RE = re.compile(Constants.ENV_VAR_PATTERN)

_BOOL_KEYS = ("enable_nightly_info", "enable_release_build", "add_neovim_binary_to_path")
_STR_KEYS = (
    "downloads_location",
    "installation_location",
    "version_sync_file_location",
    "github_mirror",
)


@dataclass
class Config:
    """Recognised configuration options; None means "not set"."""
    enable_nightly_info: Optional[bool] = None
    enable_release_build: Optional[bool] = None
    downloads_location: Optional[str] = None
    installation_location: Optional[str] = None
    version_sync_file_location: Optional[str] = None
    github_mirror: Optional[str] = None
    rollback_limit: Optional[int] = None
    add_neovim_binary_to_path: Optional[bool] = None
    path: Optional[Path] = None

    @property
    def effective_rollback_limit(self) -> int:
        if self.rollback_limit is None:
            return Constants.DEFAULT_ROLLBACK_LIMIT
        return self.rollback_limit

    @property
    def show_nightly_info(self) -> bool:
        return self.enable_nightly_info is not False

    @property
    def release_build(self) -> bool:
        return bool(self.enable_release_build)


def _file_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return "toml"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return "json"


def expand_env_vars(value: str) -> str:
    """Replace every ``$NAME`` with the value of that environment variable."""

    def _sub(match: "re.Match[str]") -> str:
        name = match.group(1)
        env_value = os.environ.get(name)
        if env_value is None:
            logger.debug("Environment variable %s is not set; leaving it as-is", name)
            return match.group(0)
        return env_value

    return _ENV_VAR_RE.sub(_sub, value)


def _read_raw(path: Path) -> Dict[str, Any]:
    """Read the config file into a dict; an absent file yields an empty dict."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    if not text.strip():
        return {}

    fmt = _file_format(path)
    try:
        if fmt == "toml":
            data = toml.loads(text)
        elif fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {path}: expected a mapping at the top level")
    return data


def _validate(key: str, value: Any) -> Any:
    if key in _BOOL_KEYS:
        if not isinstance(value, bool):
            raise ConfigError(f"Config option '{key}' must be true or false")
        return value
    if key in _STR_KEYS:
        if not isinstance(value, str):
            raise ConfigError(f"Config option '{key}' must be a string")
        return expand_env_vars(value)
    if key == "rollback_limit":
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
            raise ConfigError("Config option 'rollback_limit' must be an integer between 0 and 255")
        return value
    return value


def load_config(path: Optional[Path] = None) -> Config:
    """Load the configuration.

    Args:
        path: Explicit config file; defaults to ``get_config_file()``.

    Returns:
        Config with ``path`` pointing at the file that was (or would be) read.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    config_path = Path(path) if path is not None else get_config_file()
    data = _read_raw(config_path)

    known = {f.name for f in fields(Config)} - {"path"}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.debug("Ignoring unknown config option: %s", key)
            continue
        if value is None:
            continue
        values[key] = _validate(key, value)

    if data:
        logger.debug("Loaded config from %s", config_path)
    return Config(path=config_path, **values)


def persist_setting(config: Config, key: str, value: Any) -> None:
    """Write a single option back to the config file in its own format.

    Existing options, including ones bob does not know about, are preserved.
    """
    if config.path is None:
        config.path = get_config_file()
    path = config.path
    data = _read_raw(path)
    data[key] = value

    fmt = _file_format(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "toml":
            with open(path, "wb") as handle:
                tomli_w.dump(data, handle)
        elif fmt == "yaml":
            with open(path, "w", encoding="utf-8") as handle:
                yaml.safe_dump(data, handle, sort_keys=False)
        else:
            with open(path, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
                handle.write("\n")
    except OSError as exc:
        raise ConfigError(f"Could not write config file {path}: {exc}") from exc

    setattr(config, key, value)
    logger.debug("Persisted %s=%r to %s", key, value, path)
