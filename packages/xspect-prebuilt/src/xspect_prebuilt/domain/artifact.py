"""Artifact-related domain value objects.

This module contains value objects describing the redistributed artifacts,
the sources they are fetched from, and the handles passed between the
transport, materializer, cache and resolver.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from xspect_prebuilt.domain.exceptions import PrebuiltConfigError
from xspect_prebuilt.domain.platform import (
    PATCHELF_PLATFORMS,
    PYTHON_PLATFORMS,
    PlatformKey,
    PlatformTable,
)

MARKER_FILENAME = "manifest.json"

# Dist-tags that move between publishes and therefore cannot key a cache entry.
FLOATING_TAGS = frozenset({"latest", "next"})


@dataclass(frozen=True)
class VersionTag:
    """Version tag value object.

    An opaque identifier for the artifact to fetch: either a semantic version
    ('0.18.0', '3.9.13-install_only.1') or a dist-tag ('python3.9.13').
    The tag doubles as a cache directory name, so it may not contain path
    separators or be a relative path component.

    Attributes:
        value: The tag, stripped of surrounding whitespace by the caller.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate the tag."""
        if not self.value or not self.value.strip():
            raise PrebuiltConfigError("version is required")
        if self.value != self.value.strip():
            raise PrebuiltConfigError(
                f"version cannot have leading/trailing whitespace, got: {self.value!r}"
            )
        if "/" in self.value or "\\" in self.value or self.value in (".", ".."):
            raise PrebuiltConfigError(
                f"version cannot contain path separators, got: {self.value!r}"
            )

    @property
    def is_floating(self) -> bool:
        """Return True for dist-tags that do not pin a single publish."""
        return self.value in FLOATING_TAGS

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ArtifactDefinition:
    """Static description of one redistributed artifact.

    Attributes:
        name: Artifact name ('patchelf', 'python').
        platforms: Platform table the artifact is published for.
        payload_root: Directory inside the unpacked npm tarball that callers
            receive from the cache.
        binary: Path of the main executable relative to the installed
            platform package directory.
    """

    name: str
    platforms: PlatformTable
    payload_root: PurePosixPath
    binary: PurePosixPath

    def __post_init__(self) -> None:
        if self.payload_root.is_absolute() or self.binary.is_absolute():
            raise PrebuiltConfigError("artifact paths must be relative")
        if not self.binary.name:
            raise PrebuiltConfigError("binary path cannot be empty")


PATCHELF = ArtifactDefinition(
    name="patchelf",
    platforms=PATCHELF_PLATFORMS,
    payload_root=PurePosixPath("package"),
    binary=PurePosixPath("bin/patchelf"),
)

PYTHON = ArtifactDefinition(
    name="python",
    platforms=PYTHON_PLATFORMS,
    payload_root=PurePosixPath("package/python"),
    binary=PurePosixPath("python/bin/python3"),
)


@dataclass(frozen=True)
class RegistryPackageRef:
    """Reference to a package version on the npm registry.

    Attributes:
        name: Package name, possibly scoped ('@xspect-build/python-linux-x64').
        version: Version or dist-tag to fetch.
    """

    name: str
    version: VersionTag

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise PrebuiltConfigError("package name cannot be empty")

    @property
    def tarball_prefix(self) -> str:
        """Return the filename prefix `npm pack` gives this package's tarball."""
        return self.name.lstrip("@").replace("/", "-") + "-"

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class UrlSource:
    """Direct download location for an upstream archive.

    Attributes:
        primary: Public mirror URL, used when no credentials are available.
        origin: Authenticated origin URL, used instead of the mirror when a
            token is present. None when the archive has no origin.
    """

    primary: str
    origin: str | None = None

    def __post_init__(self) -> None:
        if not self.primary.strip():
            raise PrebuiltConfigError("primary url cannot be empty")

    @property
    def filename(self) -> str:
        """Return the archive filename taken from the primary URL."""
        return self.primary.rstrip("/").rsplit("/", 1)[-1]

    def __str__(self) -> str:
        return self.primary


ArchiveSource = RegistryPackageRef | UrlSource


@dataclass(frozen=True, repr=False)
class ArchiveHandle:
    """A downloaded and decompressed tar archive held in memory.

    Ownership passes from the fetcher to the materializer; nothing on disk
    backs it.

    Attributes:
        name: Where the archive came from, for error messages.
        data: Uncompressed tar bytes.
        package_name: Platform package the archive was packed from, if known.
        platform: Platform the package was published for, if known.
    """

    name: str
    data: bytes
    package_name: str | None = None
    platform: PlatformKey | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"ArchiveHandle(name={self.name!r}, size_bytes={self.size_bytes})"


@dataclass(frozen=True)
class ArtifactRecord:
    """The cache's view of one materialized version directory.

    Attributes:
        version: Version tag the directory holds.
        destination: Version root directory.
        payload_root: Payload path relative to the version root.
    """

    version: VersionTag
    destination: Path
    payload_root: PurePosixPath

    @property
    def completion_marker(self) -> Path:
        """Marker file written only after a successful materialization."""
        return self.destination / MARKER_FILENAME

    @property
    def payload_path(self) -> Path:
        """Directory handed to callers once the record is complete."""
        return self.destination / self.payload_root


@dataclass(frozen=True)
class BinaryHandle:
    """A resolved binary. Recomputed on every resolution, never persisted.

    Attributes:
        path: Absolute path to the binary.
        is_executable: Whether the current process may execute it.
    """

    path: Path
    is_executable: bool
