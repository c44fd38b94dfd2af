"""Fake binary locator for testing.

Provides a test double for BinaryLocatorPort that returns
preconfigured package directories without probing the filesystem.
"""

from __future__ import annotations

from pathlib import Path


class FakeBinaryLocator:
    """Fake implementation of BinaryLocatorPort for testing.

    Maps package names to directories and records every lookup.

    Example:
        >>> fake = FakeBinaryLocator({"@xspect-build/patchelf-linux-x64": Path("/pkg")})
        >>> fake.locate("@xspect-build/patchelf-linux-x64")
        PosixPath('/pkg')
        >>> fake.locate("@xspect-build/patchelf-linux-arm") is None
        True
    """

    def __init__(self, packages: dict[str, Path] | None = None) -> None:
        """Initialize with preconfigured package locations.

        Args:
            packages: Package name to directory. Missing names locate to None.
        """
        self._packages = dict(packages or {})
        self._calls: list[str] = []

    @property
    def calls(self) -> list[str]:
        """Return the package names passed to locate(), in order."""
        return list(self._calls)

    def add_package(self, package_name: str, directory: Path) -> None:
        """Register a package directory."""
        self._packages[package_name] = directory

    def locate(self, package_name: str) -> Path | None:
        self._calls.append(package_name)
        return self._packages.get(package_name)
