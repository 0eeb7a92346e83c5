"""Put the shim directory on the user's PATH, once, and take it off again.

Windows edits the per-user ``Path`` registry value. POSIX shells source a
generated ``env.sh`` (or ``env.fish``) from their startup files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from common.prompts import ask_yes_no, is_interactive
from config import Config, persist_setting
from constants import Constants
from directories import get_downloads_directory, get_home_dir, is_windows

logger = logging.getLogger(__name__)

PATH_SETTING = "add_neovim_binary_to_path"

ENV_SH_TEMPLATE = """#!/bin/sh
case ":${{PATH}}:" in
    *:"{nvim_bin}":*)
        ;;
    *)
        export PATH="{nvim_bin}:$PATH"
        ;;
esac
"""

ENV_FISH_TEMPLATE = """if not contains "{nvim_bin}" $PATH
    set -gx PATH "{nvim_bin}" $PATH
end
"""


def _norm(path: str) -> str:
    value = os.path.normpath(os.path.expanduser(path))
    return os.path.normcase(value)


def is_on_path(directory: Path, path_value: Optional[str] = None) -> bool:
    """Whether ``directory`` is one of the entries of PATH."""
    if path_value is None:
        path_value = os.environ.get("PATH", "")
    target = _norm(str(directory))
    return any(_norm(entry) == target for entry in path_value.split(os.pathsep) if entry)


# Windows registry

def _norm_windows(entry: str) -> str:
    return entry.replace("/", "\\").rstrip("\\").lower()


def windows_path_with(value: str, directory: str) -> Optional[str]:
    """Return ``value`` with ``directory`` appended, or None if already present."""
    entries = [e for e in value.split(";") if e]
    if any(_norm_windows(e) == _norm_windows(directory) for e in entries):
        return None
    entries.append(directory.replace("/", "\\"))
    return ";".join(entries)


def windows_path_without(value: str, directory: str) -> str:
    """Return ``value`` with every occurrence of ``directory`` removed."""
    entries = [e for e in value.split(";") if e]
    return ";".join(e for e in entries if _norm_windows(e) != _norm_windows(directory))


def _update_windows_path(directory: Path, remove: bool) -> bool:
    import winreg  # pylint: disable=import-outside-toplevel,import-error

    with winreg.OpenKey(
        winreg.HKEY_CURRENT_USER, "Environment", 0, winreg.KEY_READ | winreg.KEY_WRITE
    ) as key:
        try:
            value, value_type = winreg.QueryValueEx(key, "Path")
        except FileNotFoundError:
            value, value_type = "", winreg.REG_EXPAND_SZ
        if remove:
            new_value: Optional[str] = windows_path_without(value, str(directory))
            if new_value == value:
                return False
        else:
            new_value = windows_path_with(value, str(directory))
            if new_value is None:
                return False
        winreg.SetValueEx(key, "Path", 0, value_type, new_value)
    return True


# POSIX shells

def detect_shell() -> str:
    return os.path.basename(os.environ.get("SHELL", "")) or "sh"


def rc_files(shell: str, home: Path) -> List[Path]:
    """Startup files that should source ``env.sh`` for ``shell``."""
    if shell == "bash":
        files = [home / ".bashrc"]
        if (home / ".bash_profile").exists():
            files.append(home / ".bash_profile")
        return files
    if shell == "zsh":
        zdotdir = os.environ.get("ZDOTDIR")
        return [Path(zdotdir) / ".zshrc" if zdotdir else home / ".zshrc"]
    return [home / ".profile"]


def fish_conf_file(home: Path) -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else home / ".config"
    return base / "fish" / "conf.d" / "bob.fish"


def source_line(env_sh: Path) -> str:
    return f'. "{env_sh}"'


def write_env_scripts(root: Path, installation_dir: Path) -> Path:
    """Write ``env/env.sh`` and ``env/env.fish``; returns the env directory."""
    env_dir = root / Constants.ENV_DIR
    env_dir.mkdir(parents=True, exist_ok=True)
    (env_dir / "env.sh").write_text(ENV_SH_TEMPLATE.format(nvim_bin=installation_dir), encoding="utf-8")
    (env_dir / "env.fish").write_text(ENV_FISH_TEMPLATE.format(nvim_bin=installation_dir), encoding="utf-8")
    return env_dir


def _has_line(path: Path, line: str) -> bool:
    try:
        return any(existing.strip() == line for existing in path.read_text(encoding="utf-8").splitlines())
    except FileNotFoundError:
        return False


def add_to_shell_path(root: Path, installation_dir: Path, shell: Optional[str] = None) -> List[Path]:
    """Hook the generated env script into the user's shell startup files.

    Returns:
        The files that were created or modified.
    """
    shell = shell or detect_shell()
    home = get_home_dir()
    env_dir = write_env_scripts(root, installation_dir)
    changed: List[Path] = []

    if shell == "fish":
        conf = fish_conf_file(home)
        if not conf.exists():
            conf.parent.mkdir(parents=True, exist_ok=True)
            conf.write_text(f'source "{env_dir / "env.fish"}"\n', encoding="utf-8")
            changed.append(conf)
        return changed

    line = source_line(env_dir / "env.sh")
    for rc in rc_files(shell, home):
        if _has_line(rc, line):
            continue
        with open(rc, "a", encoding="utf-8") as handle:
            handle.write(f"\n{line}\n")
        changed.append(rc)
    return changed


def remove_from_shell_path(root: Path, shell: Optional[str] = None) -> List[Path]:
    """Undo ``add_to_shell_path``; returns the files that were touched."""
    shell = shell or detect_shell()
    home = get_home_dir()
    changed: List[Path] = []

    if shell == "fish":
        conf = fish_conf_file(home)
        if conf.exists():
            conf.unlink()
            changed.append(conf)
        return changed

    line = source_line(root / Constants.ENV_DIR / "env.sh")
    for rc in rc_files(shell, home):
        if not _has_line(rc, line):
            continue
        kept = [l for l in rc.read_text(encoding="utf-8").splitlines() if l.strip() != line]
        rc.write_text("\n".join(kept).rstrip("\n") + "\n", encoding="utf-8")
        changed.append(rc)
    return changed


async def _should_modify_path(installation_dir: Path, config: Config) -> bool:
    decision = config.add_neovim_binary_to_path
    if decision is not None:
        return decision

    if not is_interactive():
        persist_setting(config, PATH_SETTING, True)
        return True

    answer = await ask_yes_no(
        f"Add {installation_dir} to your PATH?",
        timeout=Constants.PROMPT_TIMEOUT_SEC,
    )
    if answer is None:
        logger.warning("No answer received, PATH was not modified")
        return False
    persist_setting(config, PATH_SETTING, answer)
    return answer


async def add_to_path(installation_dir: Path, config: Config) -> None:
    """Make sure ``installation_dir`` ends up on PATH exactly once."""
    if is_on_path(installation_dir):
        return

    if not await _should_modify_path(installation_dir, config):
        logger.info("Make sure to have %s in PATH", installation_dir)
        return

    if is_windows():
        if _update_windows_path(installation_dir, remove=False):
            logger.info("Added %s to PATH; restart your terminal to pick it up", installation_dir)
        return

    root = get_downloads_directory(config)
    changed = add_to_shell_path(root, installation_dir)
    for path in changed:
        logger.info("Updated %s", path)
    if changed:
        logger.info("Restart your shell or source the updated file to use %s", installation_dir)


def remove_from_path(installation_dir: Path, root: Path) -> None:
    """Remove every PATH hook created by ``add_to_path``."""
    if is_windows():
        if _update_windows_path(installation_dir, remove=True):
            logger.info("Successfully removed neovim's installation PATH from registry")
        return
    for path in remove_from_shell_path(root):
        logger.info("Removed PATH entry from %s", path)
