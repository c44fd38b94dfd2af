"""Artifact cache use case for reusing or materializing version directories."""

from __future__ import annotations

import json
import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from xspect_prebuilt.domain.artifact import ArtifactRecord, VersionTag
from xspect_prebuilt.domain.exceptions import (
    ArtifactIOError,
    CorruptArchiveError,
    PrebuiltConfigError,
)

if TYPE_CHECKING:
    from xspect_prebuilt.adapters.ports import ArchiveMaterializerPort
    from xspect_prebuilt.domain.artifact import ArchiveHandle
    from xspect_prebuilt.domain.platform import PlatformKey
    from xspect_prebuilt.usecases.archive_fetcher import ArchiveFetcher

logger = logging.getLogger(__name__)


class ArtifactCache:
    """Owns the per-version artifact directories under a cache root.

    A version directory is READY only when its completion marker exists.
    The marker is written as the very last step of a materialization, so
    an interrupted fetch or unpack leaves the directory UNRESOLVED and the
    next call starts over from a fresh fetch.

    The marker records the platform package it was written for. A version
    directory materialized for another platform is not a hit; it is
    replaced with the requested platform's payload.

    Layout::

        <cache_root>/<version>/manifest.json
        <cache_root>/<version>/<payload_root>/...

    No inter-process locking is done: two processes materializing the same
    version at once race on the same directory.
    """

    def __init__(
        self,
        fetcher: ArchiveFetcher,
        materializer: ArchiveMaterializerPort,
        cache_root: Path,
    ) -> None:
        """Initialize the artifact cache.

        Args:
            fetcher: Fetches the platform package archive for a version.
            materializer: Unpacks archives into version directories.
            cache_root: Directory holding one subdirectory per version.
        """
        self._fetcher = fetcher
        self._materializer = materializer
        self._cache_root = Path(cache_root)

    @property
    def cache_root(self) -> Path:
        """Return the cache root directory."""
        return self._cache_root

    def record_for(
        self, version: str | VersionTag, destination: Path | None = None
    ) -> ArtifactRecord:
        """Return the record for version, at destination or under the cache root."""
        tag = version if isinstance(version, VersionTag) else VersionTag(version)
        return ArtifactRecord(
            version=tag,
            destination=Path(destination) if destination is not None else self._cache_root / tag.value,
            payload_root=self._fetcher.artifact.payload_root,
        )

    def read_manifest(self, record: ArtifactRecord) -> dict[str, Any] | None:
        """Return record's completion marker contents, or None if it is absent.

        An unreadable or malformed marker counts as absent, so the version
        is materialized again.
        """
        marker = record.completion_marker
        if not marker.is_file():
            return None
        try:
            manifest = json.loads(marker.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable completion marker %s: %s", marker, e)
            return None
        if not isinstance(manifest, dict):
            logger.warning("Ignoring malformed completion marker %s", marker)
            return None
        return manifest

    def is_complete(self, record: ArtifactRecord, package_name: str | None = None) -> bool:
        """Check whether record is materialized, for package_name if given.

        A marker written for a different platform package does not count:
        the version directory holds one platform's payload at a time.
        """
        manifest = self.read_manifest(record)
        if manifest is None:
            return False
        if package_name is not None and manifest.get("name") != package_name:
            logger.info(
                "%s holds %s, not %s",
                record.destination,
                manifest.get("name"),
                package_name,
            )
            return False
        return True

    def get_or_materialize(
        self,
        version: str | VersionTag,
        platform: PlatformKey | None = None,
        destination: Path | None = None,
    ) -> Path:
        """Return the payload directory for version, fetching it if needed.

        The platform is resolved and checked before the cache is consulted,
        so an unsupported platform fails even when the version is cached.

        Args:
            version: Pinned package version or dist-tag, required.
            platform: Target platform; defaults to the running host.
            destination: Version root; defaults to ``<cache_root>/<version>``.

        Returns:
            Path to the payload directory (e.g. ``.../<version>/package/python``).

        Raises:
            PrebuiltConfigError: If version is blank or a floating dist-tag.
            UnsupportedPlatformError: If the platform has no package.
            TransportError: If the fetch fails.
            CorruptArchiveError: If the archive cannot be unpacked.
            ArtifactIOError: If writing the version directory fails.
        """
        record = self.record_for(version, destination)
        if record.version.is_floating:
            raise PrebuiltConfigError(
                f"version {record.version} is a floating dist-tag; pin a version"
            )

        platform_key = self._fetcher.resolve_platform(platform)
        package_name = self._fetcher.package_name(platform_key)

        if self.is_complete(record, package_name):
            logger.info(
                "%s %s already exists at %s, skipping extraction",
                package_name,
                record.version,
                record.payload_path,
            )
            return record.payload_path

        archive = self._fetcher.fetch_archive(record.version, platform_key)
        return self._materialize(archive, record)

    def materialize(
        self,
        archive: ArchiveHandle,
        destination: Path,
        version: str | VersionTag | None = None,
    ) -> Path:
        """Unpack an already fetched archive into destination and mark it complete.

        Idempotent: if destination already carries a completion marker for
        the archive's package the archive is not unpacked again.

        Args:
            archive: Decompressed package archive.
            destination: Version root directory.
            version: Version recorded in the marker; defaults to the name of
                the resolved destination directory.

        Returns:
            Path to the payload directory.
        """
        destination = Path(destination)
        if version is None:
            version = destination.resolve().name
        record = self.record_for(version, destination)
        if self.is_complete(record, archive.package_name):
            logger.info("%s is already materialized, skipping", destination)
            return record.payload_path
        return self._materialize(archive, record)

    def _materialize(self, archive: ArchiveHandle, record: ArtifactRecord) -> Path:
        self._discard_partial(record)
        self._materializer.unpack(archive, record.destination)

        if not record.payload_path.is_dir():
            raise CorruptArchiveError(
                f"{archive.name} has no {record.payload_root} directory",
                archive=archive.name,
            )

        self._write_marker(record, archive)
        logger.info("Materialized %s into %s", archive.name, record.payload_path)
        return record.payload_path

    def _discard_partial(self, record: ArtifactRecord) -> None:
        """Remove the marker and payload left behind by an earlier materialization.

        The marker goes first so an interrupted retry never leaves a stale
        marker next to a partial payload. Only the payload's top-level
        directory is removed; anything else a caller keeps in a custom
        destination is left alone.
        """
        top_level = record.destination / record.payload_root.parts[0]
        try:
            record.completion_marker.unlink(missing_ok=True)
            if top_level.is_symlink() or top_level.is_file():
                top_level.unlink()
            elif top_level.is_dir():
                logger.info("Discarding previous materialization at %s", top_level)
                shutil.rmtree(top_level)
        except OSError as e:
            raise ArtifactIOError(
                f"Cannot clear {top_level}: {e}", path=top_level, original_error=e
            ) from e

    def _write_marker(self, record: ArtifactRecord, archive: ArchiveHandle) -> None:
        """Write the completion marker atomically."""
        manifest = {
            "name": archive.package_name or archive.name,
            "version": record.version.value,
            "platform": str(archive.platform) if archive.platform is not None else None,
            "payload_root": str(record.payload_root),
            "materialized_at": datetime.now(timezone.utc).isoformat(),
        }
        marker = record.completion_marker
        staging = marker.with_name(f".{marker.name}.tmp")
        try:
            staging.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
            os.replace(staging, marker)
        except OSError as e:
            raise ArtifactIOError(
                f"Cannot write completion marker {marker}: {e}",
                path=marker,
                original_error=e,
            ) from e
