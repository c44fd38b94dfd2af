"""Filesystem normalization for unpacked artifacts.

npm does not preserve symbolic links or reliably preserve permission bits
across pack, publish and install. These helpers turn an unpacked tree into
one that survives that round trip: symlinks become real files or
directories, and files under binary directories become executable.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from xspect_prebuilt.domain.exceptions import ArtifactIOError, CorruptArchiveError

logger = logging.getLogger(__name__)

BINARY_DIR_NAMES = frozenset({"bin", "libexec"})
EXECUTABLE_MODE = 0o755


def replace_symlinks(directory: Path, root: Path | None = None) -> int:
    """Recursively replace symlinks under directory with copies of their targets.

    Each link target is resolved relative to the directory containing the
    link. File targets are copied with their mode; directory targets are
    copied recursively with links followed. Dangling links are removed.

    Args:
        directory: Directory to normalize.
        root: Links may not point outside this directory. Defaults to
            directory.

    Returns:
        Number of symlinks replaced or removed.

    Raises:
        CorruptArchiveError: If a link escapes root or points at one of its
            own ancestors.
        ArtifactIOError: If copying or unlinking fails.
    """
    directory = Path(directory)
    root_path = Path(root if root is not None else directory).resolve()
    return _replace_symlinks_in(directory, root_path)


def _replace_symlinks_in(directory: Path, root: Path) -> int:
    replaced = 0
    with os.scandir(directory) as entries:
        children = sorted(entries, key=lambda entry: entry.name)

    for entry in children:
        link_path = Path(entry.path)
        if entry.is_symlink():
            _replace_symlink(link_path, root)
            replaced += 1
        elif entry.is_dir(follow_symlinks=False):
            replaced += _replace_symlinks_in(link_path, root)
    return replaced


def _replace_symlink(link_path: Path, root: Path) -> None:
    target = os.readlink(link_path)
    target_path = Path(os.path.join(link_path.parent, target))
    try:
        resolved = target_path.resolve()
    except (OSError, RuntimeError) as e:
        raise CorruptArchiveError(
            f"Symlink {link_path} cannot be resolved: {target}",
            original_error=e,
        ) from e

    if not resolved.is_relative_to(root):
        raise CorruptArchiveError(
            f"Symlink {link_path} points outside {root}: {target}"
        )
    if resolved.is_dir() and link_path.parent.resolve().is_relative_to(resolved):
        raise CorruptArchiveError(f"Symlink {link_path} points at its own ancestor")

    try:
        link_path.unlink()
        if not resolved.exists():
            logger.warning("Removed dangling symlink %s -> %s", link_path, target)
        elif resolved.is_dir():
            shutil.copytree(resolved, link_path, symlinks=False)
        else:
            shutil.copy(resolved, link_path)
    except OSError as e:
        raise ArtifactIOError(
            f"Failed to replace symlink {link_path}: {e}",
            path=link_path,
            original_error=e,
        ) from e


def make_tree_executable(directory: Path) -> int:
    """Set mode 0o755 on every regular file under directory.

    Best-effort: chmod failures are logged and skipped, since some files
    legitimately cannot be changed (read-only mounts, foreign ownership).

    Returns:
        Number of files whose mode was set.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    fixed = 0
    for dirpath, _dirnames, filenames in os.walk(directory):
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.is_symlink() or not path.is_file():
                continue
            try:
                path.chmod(EXECUTABLE_MODE)
                fixed += 1
            except OSError as e:
                logger.warning("Could not make %s executable: %s", path, e)
    return fixed


def fix_permissions(root: Path) -> int:
    """Make every regular file under any bin/ or libexec/ directory executable.

    Args:
        root: Tree to scan.

    Returns:
        Number of files whose mode was set.
    """
    fixed = 0
    for dirpath, dirnames, _filenames in os.walk(root):
        binary_dirs = [name for name in dirnames if name in BINARY_DIR_NAMES]
        for name in binary_dirs:
            fixed += make_tree_executable(Path(dirpath) / name)
            dirnames.remove(name)
    return fixed


def is_executable_file(path: Path) -> bool:
    """Return True if path is a regular file the current process may execute."""
    return path.is_file() and os.access(path, os.X_OK)
