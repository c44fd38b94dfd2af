"""Programmatic entry points for artifact resolution and delivery.

These functions wire the default adapters through the factories. Every
collaborator can be overridden by keyword, which is how the tests run
them without npm or network access.
"""

from __future__ import annotations

from pathlib import Path

from xspect_prebuilt.adapters.ports import (
    ArchiveMaterializerPort,
    ArchiveTransportPort,
    BinaryLocatorPort,
    PlatformDetectorPort,
)
from xspect_prebuilt.domain.artifact import (
    PATCHELF,
    PYTHON,
    ArchiveHandle,
    ArtifactDefinition,
    VersionTag,
)
from xspect_prebuilt.domain.platform import PlatformKey
from xspect_prebuilt.domain.settings import PrebuiltSettings
from xspect_prebuilt.factories import (
    create_archive_fetcher,
    create_artifact_cache,
    create_binary_resolver,
    create_permission_fixer,
)


def _platform_key(platform: PlatformKey | str | None) -> PlatformKey | None:
    if platform is None or isinstance(platform, PlatformKey):
        return platform
    return PlatformKey.from_string(platform)


def resolve_platform_key(os: str, cpu: str, artifact: ArtifactDefinition = PYTHON) -> PlatformKey:
    """Return the PlatformKey for an (os, cpu) pair in Node.js naming.

    Raises:
        UnsupportedPlatformError: If artifact is not published for the pair.
    """
    return artifact.platforms.resolve(os, cpu)


def get_platform_package_name(
    artifact: ArtifactDefinition = PYTHON,
    platform: PlatformKey | str | None = None,
    *,
    settings: PrebuiltSettings | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> str:
    """Return the npm platform package name, e.g. '@xspect-build/python-linux-x64'.

    Args:
        artifact: Artifact whose platform package is named.
        platform: Target platform; defaults to the running host.

    Raises:
        UnsupportedPlatformError: If the platform has no package.
    """
    fetcher = create_archive_fetcher(
        artifact,
        settings=settings,
        platform_detector=platform_detector,
    )
    return fetcher.package_name(_platform_key(platform))


def fetch_archive(
    version: str | VersionTag,
    platform: PlatformKey | str | None = None,
    *,
    artifact: ArtifactDefinition = PYTHON,
    settings: PrebuiltSettings | None = None,
    transport: ArchiveTransportPort | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> ArchiveHandle:
    """Fetch and decompress the platform package of artifact for version.

    Args:
        version: Package version or dist-tag.
        platform: Target platform, as a PlatformKey or 'os-cpu' string.
            Defaults to the running host.

    Raises:
        PrebuiltConfigError: If version is blank.
        UnsupportedPlatformError: If the platform has no package.
        TransportError: If the registry fetch fails.
        CorruptArchiveError: If the payload is not gzip data.
    """
    fetcher = create_archive_fetcher(
        artifact,
        settings=settings,
        transport=transport,
        platform_detector=platform_detector,
    )
    return fetcher.fetch_archive(version, _platform_key(platform))


def materialize(
    archive: ArchiveHandle,
    destination: Path,
    *,
    version: str | VersionTag | None = None,
    artifact: ArtifactDefinition = PYTHON,
    materializer: ArchiveMaterializerPort | None = None,
) -> Path:
    """Unpack archive into destination and mark it complete.

    Args:
        archive: Archive returned by fetch_archive().
        destination: Version root directory; may be relative.
        version: Version recorded in the marker; defaults to the name of
            the resolved destination directory.

    Returns:
        The payload directory inside destination.

    Raises:
        CorruptArchiveError: If the archive cannot be unpacked.
        ArtifactIOError: If writing destination fails.
    """
    destination = Path(destination)
    cache = create_artifact_cache(
        artifact,
        cache_root=destination.resolve().parent,
        materializer=materializer,
    )
    return cache.materialize(archive, destination, version=version)


def get_artifact_path(
    version: str | VersionTag,
    destination: Path | None = None,
    cache_root: Path | None = None,
    *,
    platform: PlatformKey | str | None = None,
    artifact: ArtifactDefinition = PYTHON,
    settings: PrebuiltSettings | None = None,
    transport: ArchiveTransportPort | None = None,
    materializer: ArchiveMaterializerPort | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> Path:
    """Return the payload directory for version, fetching it on first use.

    Args:
        version: Pinned package version or dist-tag.
        destination: Version root; defaults to ``<cache_root>/<version>``.
        cache_root: Cache root; defaults to ``~/.xspect-build/<artifact>``.
        platform: Target platform; defaults to the running host.

    Returns:
        e.g. ``~/.xspect-build/python/<version>/package/python``.
    """
    cache = create_artifact_cache(
        artifact,
        cache_root=cache_root,
        settings=settings,
        transport=transport,
        materializer=materializer,
        platform_detector=platform_detector,
    )
    return cache.get_or_materialize(
        version, platform=_platform_key(platform), destination=destination
    )


def resolve_installed_binary(
    package_dir: Path,
    artifact: ArtifactDefinition = PATCHELF,
    *,
    settings: PrebuiltSettings | None = None,
    locators: list[BinaryLocatorPort] | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> Path:
    """Return the absolute path of the installed artifact binary.

    Args:
        package_dir: Directory of the wrapper package whose optional
            dependencies are the platform packages.

    Raises:
        UnsupportedPlatformError: If the host has no platform package.
        BinaryNotFoundError: If no install layout holds the binary.
    """
    resolver = create_binary_resolver(
        package_dir,
        artifact,
        settings=settings,
        locators=locators,
        platform_detector=platform_detector,
    )
    return resolver().path


def is_binary_available(
    package_dir: Path,
    artifact: ArtifactDefinition = PATCHELF,
    *,
    settings: PrebuiltSettings | None = None,
    locators: list[BinaryLocatorPort] | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> bool:
    """Return True if the installed binary exists and is executable."""
    resolver = create_binary_resolver(
        package_dir,
        artifact,
        settings=settings,
        locators=locators,
        platform_detector=platform_detector,
    )
    return resolver.is_available()


def get_bin_dir(
    package_dir: Path,
    artifact: ArtifactDefinition = PATCHELF,
    *,
    settings: PrebuiltSettings | None = None,
    locators: list[BinaryLocatorPort] | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> Path:
    """Return the directory holding the installed binary."""
    resolver = create_binary_resolver(
        package_dir,
        artifact,
        settings=settings,
        locators=locators,
        platform_detector=platform_detector,
    )
    return resolver.bin_dir()


def fix_installed_permissions(
    package_dir: Path,
    artifact: ArtifactDefinition = PATCHELF,
    *,
    settings: PrebuiltSettings | None = None,
    locators: list[BinaryLocatorPort] | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> Path | None:
    """Post-install hook: make the installed platform package executable.

    Returns:
        The platform package directory, or None if it is not installed.
    """
    fixer = create_permission_fixer(
        package_dir,
        artifact,
        settings=settings,
        locators=locators,
        platform_detector=platform_detector,
    )
    return fixer()
