"""Tests for PATH integration."""

import asyncio
import json
import os
from unittest.mock import AsyncMock, patch

from switcher import path_integration as pi


class TestIsOnPath:
    """PATH membership."""

    def test_present(self, tmp_path):
        value = os.pathsep.join(["/usr/bin", str(tmp_path / "nvim-bin")])
        assert pi.is_on_path(tmp_path / "nvim-bin", value)

    def test_absent(self, tmp_path):
        assert not pi.is_on_path(tmp_path / "nvim-bin", "/usr/bin")


class TestWindowsPathValue:
    """Registry Path string manipulation."""

    def test_append(self):
        assert pi.windows_path_with("C:\\a;C:\\b", "C:/bob/nvim-bin") == "C:\\a;C:\\b;C:\\bob\\nvim-bin"

    def test_already_present_is_noop(self):
        assert pi.windows_path_with("C:\\Bob\\NVIM-BIN\\;C:\\b", "C:/bob/nvim-bin") is None

    def test_remove(self):
        assert pi.windows_path_without("C:\\a;C:\\bob\\nvim-bin;C:\\b", "C:\\bob\\nvim-bin") == "C:\\a;C:\\b"


class TestShellFiles:
    """POSIX rc file handling."""

    def test_env_scripts(self, tmp_path):
        env_dir = pi.write_env_scripts(tmp_path, tmp_path / "nvim-bin")
        sh = (env_dir / "env.sh").read_text()
        assert f'export PATH="{tmp_path / "nvim-bin"}:$PATH"' in sh
        assert ':${PATH}:' in sh
        assert "set -gx PATH" in (env_dir / "env.fish").read_text()

    def test_bash_added_once(self, fake_home, tmp_path):
        root = tmp_path / "root"
        changed = pi.add_to_shell_path(root, root / "nvim-bin", shell="bash")
        assert changed == [fake_home / ".bashrc"]
        assert pi.add_to_shell_path(root, root / "nvim-bin", shell="bash") == []
        line = pi.source_line(root / "env" / "env.sh")
        assert (fake_home / ".bashrc").read_text().count(line) == 1

    def test_bash_profile_when_present(self, fake_home, tmp_path):
        (fake_home / ".bash_profile").write_text("# profile\n")
        changed = pi.add_to_shell_path(tmp_path, tmp_path / "nvim-bin", shell="bash")
        assert fake_home / ".bash_profile" in changed

    def test_zsh_respects_zdotdir(self, fake_home, tmp_path, monkeypatch):
        zdotdir = tmp_path / "zdot"
        zdotdir.mkdir()
        monkeypatch.setenv("ZDOTDIR", str(zdotdir))
        assert pi.add_to_shell_path(tmp_path, tmp_path / "nvim-bin", shell="zsh") == [zdotdir / ".zshrc"]

    def test_fish(self, fake_home, tmp_path):
        changed = pi.add_to_shell_path(tmp_path, tmp_path / "nvim-bin", shell="fish")
        conf = fake_home / ".config" / "fish" / "conf.d" / "bob.fish"
        assert changed == [conf]
        assert "env.fish" in conf.read_text()

    def test_remove_restores_rc(self, fake_home, tmp_path):
        rc = fake_home / ".profile"
        rc.write_text("export EDITOR=nvim\n")
        pi.add_to_shell_path(tmp_path, tmp_path / "nvim-bin", shell="sh")
        assert pi.remove_from_shell_path(tmp_path, shell="sh") == [rc]
        assert rc.read_text() == "export EDITOR=nvim\n"


class TestAddToPath:
    """Deciding whether to touch PATH."""

    def test_noop_when_already_on_path(self, config, root, monkeypatch):
        installation_dir = root / "nvim-bin"
        monkeypatch.setenv("PATH", str(installation_dir))
        with patch.object(pi, "_should_modify_path", new=AsyncMock()) as decide:
            asyncio.run(pi.add_to_path(installation_dir, config))
        decide.assert_not_awaited()

    def test_declined_in_config(self, config, root, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        with patch.object(pi, "add_to_shell_path") as add:
            asyncio.run(pi.add_to_path(root / "nvim-bin", config))
        add.assert_not_called()

    def test_non_interactive_persists_yes(self, config, root, monkeypatch):
        config.add_neovim_binary_to_path = None
        monkeypatch.setenv("PATH", "/usr/bin")
        with patch.object(pi, "is_interactive", return_value=False), \
                patch.object(pi, "is_windows", return_value=False), \
                patch.object(pi, "add_to_shell_path", return_value=[]) as add:
            asyncio.run(pi.add_to_path(root / "nvim-bin", config))
        add.assert_called_once_with(root, root / "nvim-bin")
        assert json.loads(config.path.read_text()) == {"add_neovim_binary_to_path": True}

    def test_prompt_timeout_changes_nothing(self, config, root, monkeypatch):
        config.add_neovim_binary_to_path = None
        monkeypatch.setenv("PATH", "/usr/bin")
        with patch.object(pi, "is_interactive", return_value=True), \
                patch.object(pi, "ask_yes_no", new=AsyncMock(return_value=None)) as ask, \
                patch.object(pi, "add_to_shell_path") as add:
            asyncio.run(pi.add_to_path(root / "nvim-bin", config))
        assert ask.await_args.kwargs["timeout"] == 120
        add.assert_not_called()
        assert not config.path.exists()
        assert config.add_neovim_binary_to_path is None

    def test_prompt_answer_is_persisted(self, config, root, monkeypatch):
        config.add_neovim_binary_to_path = None
        monkeypatch.setenv("PATH", "/usr/bin")
        with patch.object(pi, "is_interactive", return_value=True), \
                patch.object(pi, "ask_yes_no", new=AsyncMock(return_value=False)), \
                patch.object(pi, "add_to_shell_path") as add:
            asyncio.run(pi.add_to_path(root / "nvim-bin", config))
        add.assert_not_called()
        assert json.loads(config.path.read_text()) == {"add_neovim_binary_to_path": False}

    def test_windows_updates_registry(self, config, root, monkeypatch):
        config.add_neovim_binary_to_path = True
        monkeypatch.setenv("PATH", "/usr/bin")
        with patch.object(pi, "is_windows", return_value=True), \
                patch.object(pi, "_update_windows_path", return_value=True) as update:
            asyncio.run(pi.add_to_path(root / "nvim-bin", config))
        update.assert_called_once_with(root / "nvim-bin", remove=False)
