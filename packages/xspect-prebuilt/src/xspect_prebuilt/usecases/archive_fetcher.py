"""Archive fetcher use case for downloading platform packages from the registry."""

from __future__ import annotations

import gzip
import logging
import zlib
from typing import TYPE_CHECKING

from xspect_prebuilt.domain.artifact import (
    ArchiveHandle,
    ArtifactDefinition,
    RegistryPackageRef,
    VersionTag,
)
from xspect_prebuilt.domain.exceptions import CorruptArchiveError

if TYPE_CHECKING:
    from xspect_prebuilt.adapters.ports import ArchiveTransportPort, PlatformDetectorPort
    from xspect_prebuilt.domain.platform import PlatformKey

logger = logging.getLogger(__name__)


def decompress_archive(
    name: str,
    raw: bytes,
    package_name: str | None = None,
    platform: PlatformKey | None = None,
) -> ArchiveHandle:
    """Gunzip a downloaded archive into an in-memory ArchiveHandle.

    Args:
        name: Archive name, for error messages.
        raw: gzip-compressed tar bytes.
        package_name: Platform package the archive came from.
        platform: Platform the package was published for.

    Raises:
        CorruptArchiveError: If raw is not valid gzip data.
    """
    try:
        data = gzip.decompress(raw)
    except (OSError, EOFError, zlib.error) as e:
        raise CorruptArchiveError(
            f"Failed to decompress {name}: {e}", archive=name, original_error=e
        ) from e
    return ArchiveHandle(name=name, data=data, package_name=package_name, platform=platform)


class ArchiveFetcher:
    """Fetches the platform package of an artifact for one version.

    Resolves the platform package name first, so an unsupported platform
    fails before any transport attempt, then packs the package from the
    registry and decompresses it.
    """

    def __init__(
        self,
        transport: ArchiveTransportPort,
        artifact: ArtifactDefinition,
        platform_detector: PlatformDetectorPort,
    ) -> None:
        """Initialize the archive fetcher.

        Args:
            transport: Registry transport used to download the package.
            artifact: Artifact whose platform packages are fetched.
            platform_detector: Used when no platform is passed explicitly.
        """
        self._transport = transport
        self._artifact = artifact
        self._platform_detector = platform_detector

    @property
    def artifact(self) -> ArtifactDefinition:
        return self._artifact

    def resolve_platform(self, platform: PlatformKey | None = None) -> PlatformKey:
        """Return platform, or the running host's platform when None."""
        return platform if platform is not None else self._platform_detector.detect()

    def package_name(self, platform: PlatformKey | None = None) -> str:
        """Return the platform package name for platform (default: this host).

        Raises:
            UnsupportedPlatformError: If the artifact is not published for it.
        """
        return self._artifact.platforms.package_name(self.resolve_platform(platform))

    def fetch_archive(
        self,
        version: str | VersionTag,
        platform: PlatformKey | None = None,
    ) -> ArchiveHandle:
        """Download and decompress the platform package for version.

        Args:
            version: Package version or dist-tag, required.
            platform: Target platform; defaults to the running host.

        Returns:
            ArchiveHandle holding the uncompressed package tarball.

        Raises:
            PrebuiltConfigError: If version is blank.
            UnsupportedPlatformError: If the platform has no package.
            TransportError: If the registry fetch fails.
            CorruptArchiveError: If the payload is not gzip data.
        """
        tag = version if isinstance(version, VersionTag) else VersionTag(version)
        key = self.resolve_platform(platform)
        ref = RegistryPackageRef(name=self.package_name(key), version=tag)
        logger.info("Downloading %s...", ref)

        raw = self._transport.fetch(ref)
        logger.info("Fetched %s (%d bytes)", ref, len(raw))
        return decompress_archive(str(ref), raw, package_name=ref.name, platform=key)
