"""Build-time use case staging a standalone Python platform package."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from xspect_prebuilt.domain.artifact import PYTHON, ArtifactDefinition, UrlSource
from xspect_prebuilt.domain.exceptions import ArtifactIOError
from xspect_prebuilt.domain.settings import StandalonePythonRelease
from xspect_prebuilt.usecases.archive_fetcher import decompress_archive

if TYPE_CHECKING:
    from xspect_prebuilt.adapters.ports import (
        ArchiveMaterializerPort,
        ArchiveTransportPort,
    )
    from xspect_prebuilt.domain.platform import PlatformKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagedPackage:
    """Result of staging one platform package.

    Attributes:
        name: npm package name, e.g. '@xspect-build/python-linux-x64'.
        version: npm version, e.g. '3.9.13-install-only.1'.
        directory: Staged package directory.
        bin_entries: Executable name to its path inside the package.
    """

    name: str
    version: str
    directory: Path
    bin_entries: dict[str, str] = field(default_factory=dict)


class StandalonePythonStager:
    """Downloads a python-build-standalone release and lays it out as a package.

    The release archive has a single top-level ``python/`` directory, which
    is unpacked (first component stripped) into
    ``<dist>/python-<os>-<cpu>/python``. Symlinks are replaced with real
    files so the tree survives `npm publish`.
    """

    def __init__(
        self,
        transport: ArchiveTransportPort,
        materializer: ArchiveMaterializerPort,
        release: StandalonePythonRelease | None = None,
        artifact: ArtifactDefinition = PYTHON,
    ) -> None:
        """Initialize the stager.

        Args:
            transport: URL transport for the upstream release archive.
            materializer: Unpacks the archive.
            release: Upstream release coordinates.
            artifact: Artifact definition supplying the platform table.
        """
        self._transport = transport
        self._materializer = materializer
        self._release = release or StandalonePythonRelease()
        self._artifact = artifact

    def source_for(self, platform: PlatformKey) -> UrlSource:
        """Return the mirror and origin URLs of the release archive for platform."""
        filename = self._release.filename(platform)
        date = self._release.build_date
        return UrlSource(
            primary=f"{self._release.mirror_base}/{date}/{filename}",
            origin=f"{self._release.origin_base}/{date}/{filename}",
        )

    def stage(self, platform: PlatformKey, release: int, dist_dir: Path) -> StagedPackage:
        """Stage the platform package into dist_dir.

        Args:
            platform: Target platform.
            release: Packaging release number appended to the version.
            dist_dir: Output directory; the package directory inside it is
                recreated from scratch.

        Returns:
            StagedPackage describing the staged directory.

        Raises:
            UnsupportedPlatformError: If there is no package for platform.
            PrebuiltConfigError: If the release has no build for platform.
            TransportError: If the download fails.
            CorruptArchiveError: If the archive cannot be unpacked.
            ArtifactIOError: If writing the package directory fails.
        """
        name = self._artifact.platforms.package_name(platform)
        version = self._release.package_version(release)
        source = self.source_for(platform)

        package_dir = Path(dist_dir) / f"{self._artifact.name}-{platform}"
        payload_dir = package_dir / self._artifact.payload_root.relative_to("package")
        logger.info("Building %s v%s", name, version)

        self._recreate(package_dir)
        raw = self._transport.fetch(source)
        archive = decompress_archive(source.filename, raw)
        self._materializer.unpack(archive, payload_dir, strip_components=1)

        bin_entries = self._collect_bin_entries(package_dir, payload_dir / "bin")
        logger.info(
            "Found %d bin entries: %s", len(bin_entries), ", ".join(bin_entries)
        )
        return StagedPackage(
            name=name,
            version=version,
            directory=package_dir,
            bin_entries=bin_entries,
        )

    def _recreate(self, package_dir: Path) -> None:
        try:
            if package_dir.exists():
                shutil.rmtree(package_dir)
            package_dir.mkdir(parents=True)
        except OSError as e:
            raise ArtifactIOError(
                f"Cannot prepare {package_dir}: {e}", path=package_dir, original_error=e
            ) from e

    def _collect_bin_entries(self, package_dir: Path, bin_dir: Path) -> dict[str, str]:
        """Map executables in bin_dir to package-relative paths, skipping *-config."""
        if not bin_dir.is_dir():
            return {}
        entries: dict[str, str] = {}
        for path in sorted(bin_dir.iterdir()):
            if not path.is_file() or path.name.endswith("-config"):
                continue
            if path.stat().st_mode & 0o111:
                relative = path.relative_to(package_dir)
                entries[path.name] = str(PurePosixPath(*relative.parts))
        return entries
