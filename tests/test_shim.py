"""Tests for the nvim shim."""

import asyncio
import sys
from unittest.mock import AsyncMock, patch

import pytest

from common.errors import FileBusyError, InstallNotFoundError, NoActiveVersionError
from constants import Constants
from switcher import shim

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX shim")
BINARY = "nvim.exe" if sys.platform.startswith("win") else "nvim"
FULL = "abcdef1234567890abcdef1234567890abcdef12"


def _install(root, name, nested=None):
    directory = root / name / nested / "bin" if nested else root / name / "bin"
    directory.mkdir(parents=True)
    (directory / BINARY).write_text("")
    return directory / BINARY


class TestLocateEditor:
    """Mapping the ``used`` payload to a binary."""

    def test_tag(self, root):
        binary = _install(root, "v0.9.5")
        assert shim.locate_editor(root, "v0.9.5") == binary

    def test_hash_uses_short_directory(self, root):
        binary = _install(root, "abcdef1")
        assert shim.locate_editor(root, FULL) == binary

    def test_nested_platform_directory(self, root):
        with patch.object(shim, "get_platform_name", return_value="nvim-osx64"):
            binary = _install(root, "v0.4.4", nested="nvim-osx64")
            assert shim.locate_editor(root, "v0.4.4") == binary

    def test_short_hash_build(self, root):
        binary = _install(root, "abcde")
        assert shim.locate_editor(root, "abcde" + "0" * 35) == binary

    def test_missing(self, root):
        with pytest.raises(InstallNotFoundError):
            shim.locate_editor(root, "v0.9.5")


class TestResolveActiveBinary:
    """Reading ``used``."""

    def test_no_used_file(self, root):
        with pytest.raises(NoActiveVersionError) as excinfo:
            shim.resolve_active_binary(root)
        assert str(excinfo.value) == "no active version; install one with `install`"

    def test_used(self, root):
        binary = _install(root, "nightly")
        (root / "used").write_text("nightly")
        assert shim.resolve_active_binary(root) == binary


class TestRunShim:
    """Handing over to the editor."""

    def test_version_flag(self, root, capsys):
        assert shim.run_shim(root, [Constants.SHIM_VERSION_FLAG]) == 0
        assert capsys.readouterr().out.strip() == Constants.PROGRAM_VERSION

    @posix_only
    def test_posix_execs_with_arguments(self, root):
        binary = _install(root, "v0.9.5")
        (root / "used").write_text("v0.9.5")
        with patch.object(shim, "exec_replace") as exec_replace:
            shim.run_shim(root, ["-u", "NONE", "file.txt"])
        exec_replace.assert_called_once_with(binary, ["-u", "NONE", "file.txt"])

    def test_windows_propagates_exit_code(self, root):
        binary = _install(root, "v0.9.5")
        (root / "used").write_text("v0.9.5")
        with patch.object(shim, "is_windows", return_value=True), \
                patch.object(shim, "spawn_and_wait", new=AsyncMock(return_value=3)) as spawn:
            assert shim.run_shim(root, ["x"]) == 3
        spawn.assert_awaited_once_with([str(binary), "x"])


class TestEnsureShim:
    """Creating and refreshing the shim."""

    @posix_only
    def test_creates_executable_launcher(self, tmp_path):
        installation_dir = tmp_path / "nvim-bin"
        assert asyncio.run(shim.ensure_shim(installation_dir)) is True
        path = installation_dir / "nvim"
        text = path.read_text()
        assert text.startswith("#!")
        assert repr(Constants.SHIM_SENTINEL) in text
        assert path.stat().st_mode & 0o111

    def test_current_version_is_kept(self, tmp_path):
        installation_dir = tmp_path / "nvim-bin"
        installation_dir.mkdir()
        (installation_dir / BINARY).write_text("existing")
        with patch.object(shim, "shim_version", new=AsyncMock(return_value=Constants.PROGRAM_VERSION)):
            assert asyncio.run(shim.ensure_shim(installation_dir)) is False
        assert (installation_dir / BINARY).read_text() == "existing"

    @posix_only
    def test_outdated_shim_is_replaced(self, tmp_path):
        installation_dir = tmp_path / "nvim-bin"
        installation_dir.mkdir()
        (installation_dir / "nvim").write_text("old")
        with patch.object(shim, "shim_version", new=AsyncMock(return_value="0.0.1")):
            assert asyncio.run(shim.ensure_shim(installation_dir)) is True
        assert "from bob import main" in (installation_dir / "nvim").read_text()

    def test_busy_shim_on_windows(self, tmp_path):
        err = OSError("busy")
        err.winerror = 32
        with patch.object(shim, "is_windows", return_value=True), \
                patch.object(shim, "_current_launcher", return_value=tmp_path / "bob.exe"), \
                patch.object(shim.shutil, "copyfile", side_effect=err):
            with pytest.raises(FileBusyError):
                shim._write_shim(tmp_path / "nvim.exe")
