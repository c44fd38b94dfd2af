"""Post-install use case restoring executable bits on an installed platform package."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from xspect_prebuilt.adapters.filesystem import make_tree_executable
from xspect_prebuilt.adapters.ports import BinaryLocatorPort, PlatformDetectorPort
from xspect_prebuilt.domain.artifact import ArtifactDefinition
from xspect_prebuilt.domain.exceptions import UnsupportedPlatformError

logger = logging.getLogger(__name__)


class InstalledPermissionFixer:
    """Makes the installed platform package's binaries executable.

    npm does not reliably keep mode bits through publish and install, so the
    wrapper package runs this after install. Missing packages and unsupported
    hosts are not errors: the optional dependency is simply absent.
    """

    def __init__(
        self,
        platform_detector: PlatformDetectorPort,
        locators: Sequence[BinaryLocatorPort],
        artifact: ArtifactDefinition,
    ) -> None:
        self._platform_detector = platform_detector
        self._locators = list(locators)
        self._artifact = artifact

    def __call__(self) -> Path | None:
        """Fix permissions under the package's bin/ and libexec/ directories.

        Returns:
            The installed package directory, or None when there is none.
        """
        try:
            platform = self._platform_detector.detect()
            package_name = self._artifact.platforms.package_name(platform)
        except UnsupportedPlatformError as e:
            logger.warning("%s: %s, skipping permission fix", self._artifact.name, e)
            return None

        package_dir = self._locate(package_name)
        if package_dir is None:
            logger.warning(
                "%s: Platform package not found, skipping permission fix", package_name
            )
            return None

        bin_dir = package_dir / self._artifact.binary.parent
        fixed = make_tree_executable(bin_dir)
        fixed += make_tree_executable(bin_dir.parent / "libexec")
        logger.info("%s: Installation complete (%d files executable)", package_name, fixed)
        return package_dir

    def _locate(self, package_name: str) -> Path | None:
        for locator in self._locators:
            package_dir = locator.locate(package_name)
            if package_dir is not None:
                return package_dir
        return None
