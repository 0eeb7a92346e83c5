"""Shared fixtures: an isolated home directory and downloads root."""

import pytest

from config import Config


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """Point HOME at a temporary directory and clear user overrides."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USER", "bob-test-no-such-user")
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.delenv("BOB_CONFIG", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("ZDOTDIR", raising=False)
    return home


@pytest.fixture
def root(tmp_path):
    """An existing downloads root."""
    path = tmp_path / "downloads"
    path.mkdir()
    return path


@pytest.fixture
def config(root, tmp_path):
    """Config rooted at the temporary downloads directory."""
    return Config(
        downloads_location=str(root),
        add_neovim_binary_to_path=False,
        path=tmp_path / "config.json",
    )
