"""Factory functions wiring adapters into use cases.

Every factory takes its collaborators as optional keyword arguments so
tests and callers can substitute fakes; the defaults are the production
adapters.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path

from xspect_prebuilt.adapters.httpx_url_transport import HttpxUrlTransport
from xspect_prebuilt.adapters.node_modules_locators import default_locators
from xspect_prebuilt.adapters.npm_pack_transport import NpmPackTransport
from xspect_prebuilt.adapters.platform_detector import OsPlatformDetector
from xspect_prebuilt.adapters.ports import (
    ArchiveMaterializerPort,
    ArchiveTransportPort,
    BinaryLocatorPort,
    PlatformDetectorPort,
)
from xspect_prebuilt.adapters.tarfile_materializer import TarfileMaterializer
from xspect_prebuilt.domain.artifact import PYTHON, ArtifactDefinition
from xspect_prebuilt.domain.settings import PrebuiltSettings, StandalonePythonRelease
from xspect_prebuilt.usecases.archive_fetcher import ArchiveFetcher
from xspect_prebuilt.usecases.artifact_cache import ArtifactCache
from xspect_prebuilt.usecases.binary_resolver import BinaryResolver
from xspect_prebuilt.usecases.permission_fixer import InstalledPermissionFixer
from xspect_prebuilt.usecases.python_package_stager import StandalonePythonStager


def scoped_artifact(
    artifact: ArtifactDefinition, settings: PrebuiltSettings
) -> ArtifactDefinition:
    """Return artifact with its platform table moved to the settings' scope."""
    if artifact.platforms.scope == settings.scope:
        return artifact
    platforms = dataclasses.replace(artifact.platforms, scope=settings.scope)
    return dataclasses.replace(artifact, platforms=platforms)


def create_archive_fetcher(
    artifact: ArtifactDefinition,
    settings: PrebuiltSettings | None = None,
    transport: ArchiveTransportPort | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> ArchiveFetcher:
    """Create an ArchiveFetcher backed by `npm pack` unless told otherwise."""
    settings = settings or PrebuiltSettings()
    return ArchiveFetcher(
        transport=transport or NpmPackTransport(npm_command=settings.npm_command),
        artifact=scoped_artifact(artifact, settings),
        platform_detector=platform_detector or OsPlatformDetector(),
    )


def create_artifact_cache(
    artifact: ArtifactDefinition,
    cache_root: Path | None = None,
    settings: PrebuiltSettings | None = None,
    transport: ArchiveTransportPort | None = None,
    materializer: ArchiveMaterializerPort | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> ArtifactCache:
    """Create an ArtifactCache for artifact.

    Args:
        artifact: Artifact to cache.
        cache_root: Cache root; defaults to ``~/<cache_namespace>/<artifact>``.
        settings: Shared settings.
        transport: Registry transport override.
        materializer: Materializer override.
        platform_detector: Platform detector override.
    """
    settings = settings or PrebuiltSettings()
    fetcher = create_archive_fetcher(
        artifact,
        settings=settings,
        transport=transport,
        platform_detector=platform_detector,
    )
    return ArtifactCache(
        fetcher=fetcher,
        materializer=materializer or TarfileMaterializer(),
        cache_root=cache_root or settings.default_cache_root(artifact.name),
    )


def create_binary_resolver(
    package_dir: Path,
    artifact: ArtifactDefinition,
    settings: PrebuiltSettings | None = None,
    locators: list[BinaryLocatorPort] | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> BinaryResolver:
    """Create a BinaryResolver probing the default install layouts around package_dir.

    Args:
        package_dir: Directory of the wrapper package that depends on the
            platform packages.
        artifact: Artifact whose binary is resolved.
    """
    settings = settings or PrebuiltSettings()
    return BinaryResolver(
        platform_detector=platform_detector or OsPlatformDetector(),
        locators=locators if locators is not None else default_locators(Path(package_dir)),
        artifact=scoped_artifact(artifact, settings),
    )


def create_permission_fixer(
    package_dir: Path,
    artifact: ArtifactDefinition,
    settings: PrebuiltSettings | None = None,
    locators: list[BinaryLocatorPort] | None = None,
    platform_detector: PlatformDetectorPort | None = None,
) -> InstalledPermissionFixer:
    """Create the post-install permission fixer for the wrapper at package_dir."""
    settings = settings or PrebuiltSettings()
    return InstalledPermissionFixer(
        platform_detector=platform_detector or OsPlatformDetector(),
        locators=locators if locators is not None else default_locators(Path(package_dir)),
        artifact=scoped_artifact(artifact, settings),
    )


def create_python_stager(
    settings: PrebuiltSettings | None = None,
    release: StandalonePythonRelease | None = None,
    transport: ArchiveTransportPort | None = None,
    materializer: ArchiveMaterializerPort | None = None,
) -> StandalonePythonStager:
    """Create a StandalonePythonStager downloading over HTTP unless told otherwise."""
    settings = settings or PrebuiltSettings()
    return StandalonePythonStager(
        transport=transport or HttpxUrlTransport(),
        materializer=materializer or TarfileMaterializer(),
        release=release,
        artifact=scoped_artifact(PYTHON, settings),
    )
