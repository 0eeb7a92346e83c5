"""Tests for filesystem helpers."""

import asyncio
import sys

import pytest

from common.filesystem import atomic_write_text, copy_tree, remove_tree


class TestRemoveTree:
    """Recursive removal."""

    @pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permissions")
    def test_removes_read_only_install(self, tmp_path):
        install = tmp_path / "v0.9.5"
        (install / "bin").mkdir(parents=True)
        (install / "bin" / "nvim").write_text("")
        (install / "bin" / "nvim").chmod(0o551)
        asyncio.run(remove_tree(install))
        assert not install.exists()

    def test_missing_path_is_ignored(self, tmp_path):
        asyncio.run(remove_tree(tmp_path / "missing"))


class TestCopyTree:
    """Snapshot copies."""

    def test_copy(self, tmp_path):
        (tmp_path / "src" / "bin").mkdir(parents=True)
        (tmp_path / "src" / "bin" / "nvim").write_text("x")
        asyncio.run(copy_tree(tmp_path / "src", tmp_path / "dst"))
        assert (tmp_path / "dst" / "bin" / "nvim").read_text() == "x"


class TestAtomicWrite:
    """Temp file plus rename."""

    def test_overwrites(self, tmp_path):
        target = tmp_path / "used"
        target.write_text("old")
        atomic_write_text(target, "new", "used.tmp")
        assert target.read_text() == "new"
        assert not (tmp_path / "used.tmp").exists()
