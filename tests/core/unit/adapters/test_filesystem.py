"""Unit tests for filesystem normalization helpers."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

import pytest

from xspect_prebuilt.adapters.filesystem import (
    fix_permissions,
    is_executable_file,
    make_tree_executable,
    replace_symlinks,
)
from xspect_prebuilt.domain.exceptions import CorruptArchiveError


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


@pytest.mark.tier(1)
@pytest.mark.unit
@pytest.mark.tra("Adapter.ReplaceSymlinks")
class TestReplaceSymlinks:
    """Test replace_symlinks()."""

    def test_file_link_is_copied_with_mode(self, tmp_path: Path) -> None:
        """Test a link to a file becomes a copy carrying the target's mode."""
        target = tmp_path / "python3.9"
        target.write_bytes(b"interpreter")
        target.chmod(0o750)
        (tmp_path / "python3").symlink_to("python3.9")

        assert replace_symlinks(tmp_path) == 1

        copy = tmp_path / "python3"
        assert not copy.is_symlink()
        assert copy.read_bytes() == b"interpreter"
        assert _mode(copy) == 0o750

    def test_link_resolved_relative_to_its_directory(self, tmp_path: Path) -> None:
        """Test relative targets resolve against the link's directory, not the cwd."""
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib" / "libpython3.9.so").write_bytes(b"lib")
        (tmp_path / "bin").mkdir()
        (tmp_path / "bin" / "libpython.so").symlink_to("../lib/libpython3.9.so")

        replace_symlinks(tmp_path)

        assert (tmp_path / "bin" / "libpython.so").read_bytes() == b"lib"

    def test_chained_links_are_followed(self, tmp_path: Path) -> None:
        """Test a link to a link ends up as a copy of the final file."""
        (tmp_path / "python3.9").write_bytes(b"py")
        (tmp_path / "python3").symlink_to("python3.9")
        (tmp_path / "python").symlink_to("python3")

        assert replace_symlinks(tmp_path) == 2

        assert (tmp_path / "python").read_bytes() == b"py"
        assert not (tmp_path / "python").is_symlink()

    def test_directory_link_is_copied_recursively(self, tmp_path: Path) -> None:
        """Test a link to a directory becomes a directory copy."""
        (tmp_path / "share" / "v1").mkdir(parents=True)
        (tmp_path / "share" / "v1" / "data.txt").write_text("data")
        (tmp_path / "share" / "current").symlink_to("v1", target_is_directory=True)

        replace_symlinks(tmp_path)

        current = tmp_path / "share" / "current"
        assert current.is_dir() and not current.is_symlink()
        assert (current / "data.txt").read_text() == "data"

    def test_dangling_link_is_removed_with_warning(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a dangling link is removed and reported."""
        (tmp_path / "broken").symlink_to("missing")

        with caplog.at_level(logging.WARNING, logger="xspect_prebuilt.adapters.filesystem"):
            assert replace_symlinks(tmp_path) == 1

        assert not os.path.lexists(tmp_path / "broken")
        assert "dangling symlink" in caplog.text

    def test_link_escaping_root_rejected(self, tmp_path: Path) -> None:
        """Test links pointing outside the tree are rejected."""
        outside = tmp_path / "outside.txt"
        outside.write_text("secret")
        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "leak").symlink_to(outside)

        with pytest.raises(CorruptArchiveError, match="points outside"):
            replace_symlinks(tree)

    def test_link_to_own_ancestor_rejected(self, tmp_path: Path) -> None:
        """Test a directory link pointing up the tree is rejected instead of recursing."""
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "b" / "loop").symlink_to("..", target_is_directory=True)

        with pytest.raises(CorruptArchiveError, match="own ancestor"):
            replace_symlinks(tmp_path)

    def test_tree_without_links_is_untouched(self, tmp_path: Path) -> None:
        """Test no links means nothing is replaced."""
        (tmp_path / "file").write_text("x")

        assert replace_symlinks(tmp_path) == 0


@pytest.mark.tier(1)
@pytest.mark.unit
@pytest.mark.tra("Adapter.FixPermissions")
class TestFixPermissions:
    """Test make_tree_executable() and fix_permissions()."""

    def test_make_tree_executable_is_recursive(self, tmp_path: Path) -> None:
        """Test every regular file below the directory gets mode 0o755."""
        (tmp_path / "nested").mkdir()
        (tmp_path / "a").write_bytes(b"a")
        (tmp_path / "nested" / "b").write_bytes(b"b")
        (tmp_path / "a").chmod(0o644)
        (tmp_path / "nested" / "b").chmod(0o600)

        assert make_tree_executable(tmp_path) == 2

        assert _mode(tmp_path / "a") == 0o755
        assert _mode(tmp_path / "nested" / "b") == 0o755

    def test_make_tree_executable_missing_dir(self, tmp_path: Path) -> None:
        """Test a missing directory is a no-op."""
        assert make_tree_executable(tmp_path / "missing") == 0

    def test_make_tree_executable_swallows_chmod_errors(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test chmod failures are logged and skipped."""
        (tmp_path / "a").write_bytes(b"a")

        def deny(self: Path, mode: int) -> None:
            raise PermissionError(1, "Operation not permitted", str(self))

        monkeypatch.setattr(Path, "chmod", deny)

        with caplog.at_level(logging.WARNING, logger="xspect_prebuilt.adapters.filesystem"):
            assert make_tree_executable(tmp_path) == 0

        assert "Could not make" in caplog.text

    def test_fix_permissions_only_touches_binary_dirs(self, tmp_path: Path) -> None:
        """Test only bin/ and libexec/ subtrees are made executable."""
        for relative in ("python/bin/python3", "python/libexec/tool", "python/lib/os.py"):
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"x")
            path.chmod(0o644)

        assert fix_permissions(tmp_path) == 2

        assert _mode(tmp_path / "python" / "bin" / "python3") == 0o755
        assert _mode(tmp_path / "python" / "libexec" / "tool") == 0o755
        assert _mode(tmp_path / "python" / "lib" / "os.py") == 0o644

    def test_is_executable_file(self, tmp_path: Path) -> None:
        """Test executability requires a regular file with an exec bit."""
        script = tmp_path / "script"
        script.write_bytes(b"#!/bin/sh\n")
        script.chmod(0o644)
        assert is_executable_file(script) is False

        script.chmod(0o755)
        assert is_executable_file(script) is True
        assert is_executable_file(tmp_path) is False
