"""Install-layout locators for platform packages.

Different package managers place optional, platform-scoped dependencies in
different physical locations. Each locator implements BinaryLocatorPort for
one layout, anchored on the wrapper package's directory (the package that
lists the platform packages as optionalDependencies).
"""

from __future__ import annotations

from pathlib import Path

from xspect_prebuilt.adapters.ports import BinaryLocatorPort


def enclosing_node_modules(package_dir: Path) -> Path | None:
    """Return the node_modules directory a package is installed in.

    Handles both ``node_modules/<name>`` and ``node_modules/@scope/<name>``.
    Returns None if package_dir is not inside a node_modules directory.
    """
    parent = package_dir.parent
    if parent.name == "node_modules":
        return parent
    if parent.name.startswith("@") and parent.parent.name == "node_modules":
        return parent.parent
    return None


class NestedInstallLocator:
    """Locator for dependencies installed under the wrapper's own node_modules.

    Layout: ``<wrapper>/node_modules/<package>``.
    """

    def __init__(self, package_dir: Path) -> None:
        self._package_dir = Path(package_dir)

    def locate(self, package_name: str) -> Path | None:
        candidate = self._package_dir / "node_modules" / package_name
        return candidate if candidate.is_dir() else None


class HoistedInstallLocator:
    """Locator for dependencies hoisted next to the wrapper (npm, yarn classic).

    Layout: ``<node_modules>/<package>`` where node_modules encloses the wrapper.
    """

    def __init__(self, package_dir: Path) -> None:
        self._package_dir = Path(package_dir)

    def locate(self, package_name: str) -> Path | None:
        node_modules = enclosing_node_modules(self._package_dir)
        if node_modules is None:
            return None
        candidate = node_modules / package_name
        return candidate if candidate.is_dir() else None


class PnpmStoreLocator:
    """Locator for pnpm's content-addressable store layout.

    Layout: ``<node_modules>/.pnpm/node_modules/<package>``.
    """

    def __init__(self, package_dir: Path) -> None:
        self._package_dir = Path(package_dir)

    def locate(self, package_name: str) -> Path | None:
        node_modules = enclosing_node_modules(self._package_dir)
        if node_modules is None:
            return None
        candidate = node_modules / ".pnpm" / "node_modules" / package_name
        return candidate if candidate.is_dir() else None


class AncestorNodeModulesLocator:
    """Locator following Node's module resolution from the wrapper directory.

    Walks from the wrapper directory up to the filesystem root and returns
    the first ``<ancestor>/node_modules/<package>`` holding a package.json.
    """

    def __init__(self, package_dir: Path) -> None:
        self._package_dir = Path(package_dir)

    def locate(self, package_name: str) -> Path | None:
        for directory in (self._package_dir, *self._package_dir.parents):
            if directory.name == "node_modules":
                continue
            candidate = directory / "node_modules" / package_name
            if (candidate / "package.json").is_file():
                return candidate
        return None


def default_locators(package_dir: Path) -> list[BinaryLocatorPort]:
    """Return the install layouts to try, in priority order."""
    return [
        NestedInstallLocator(package_dir),
        HoistedInstallLocator(package_dir),
        PnpmStoreLocator(package_dir),
        AncestorNodeModulesLocator(package_dir),
    ]
