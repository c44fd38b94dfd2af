"""Binary resolver use case for locating an installed platform binary."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from xspect_prebuilt.adapters.filesystem import is_executable_file
from xspect_prebuilt.adapters.ports import BinaryLocatorPort, PlatformDetectorPort
from xspect_prebuilt.domain.artifact import ArtifactDefinition, BinaryHandle
from xspect_prebuilt.domain.exceptions import BinaryNotFoundError, PrebuiltError

logger = logging.getLogger(__name__)


class BinaryResolver:
    """Use case for resolving the installed binary of an artifact.

    Coordinates platform detection (via PlatformDetectorPort) and an ordered
    list of install layouts (via BinaryLocatorPort):
    1. Detect the current platform (OS and CPU)
    2. Map it to the platform package name
    3. Ask each locator in turn for the package directory
    4. Return the first candidate whose binary is a regular file
    """

    def __init__(
        self,
        platform_detector: PlatformDetectorPort,
        locators: Sequence[BinaryLocatorPort],
        artifact: ArtifactDefinition,
    ) -> None:
        """Initialize the binary resolver use case.

        Args:
            platform_detector: Port for detecting current platform.
            locators: Install layouts to try, highest priority first.
            artifact: Artifact whose binary is resolved.
        """
        self._platform_detector = platform_detector
        self._locators = list(locators)
        self._artifact = artifact

    def __call__(self) -> BinaryHandle:
        """Execute binary resolution workflow.

        Returns:
            BinaryHandle with the absolute binary path and whether it is
            executable by the current process.

        Raises:
            UnsupportedPlatformError: If the host has no platform package.
            BinaryNotFoundError: If no install layout holds the binary.
        """
        platform = self._platform_detector.detect()
        package_name = self._artifact.platforms.package_name(platform)

        candidates: list[Path] = []
        for locator in self._locators:
            package_dir = locator.locate(package_name)
            if package_dir is None:
                continue
            binary = package_dir / self._artifact.binary
            candidates.append(binary)
            logger.debug("Probing %s", binary)
            if binary.is_file():
                return BinaryHandle(
                    path=binary.absolute(),
                    is_executable=is_executable_file(binary),
                )

        raise BinaryNotFoundError(package_name, candidates)

    def is_available(self) -> bool:
        """Check whether the binary resolves and is executable. Never raises."""
        try:
            return self().is_executable
        except PrebuiltError:
            return False

    def bin_dir(self) -> Path:
        """Return the directory containing the binary.

        Raises:
            UnsupportedPlatformError: If the host has no platform package.
            BinaryNotFoundError: If no install layout holds the binary.
        """
        return self().path.parent
