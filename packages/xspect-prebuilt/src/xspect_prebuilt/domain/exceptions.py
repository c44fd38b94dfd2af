"""Domain exceptions.

Exception hierarchy:
- PrebuiltError: Base exception for everything raised by this package.
  - PrebuiltConfigError: Invalid values (version tags, platform strings, settings).
    - UnsupportedPlatformError: (os, cpu) pair outside an artifact's platform table.
  - TransportError: Registry or URL fetch failed. Never retried.
  - CorruptArchiveError: Decompression or tar unpacking failed.
  - ArtifactIOError: Filesystem write failed during materialization.
  - BinaryNotFoundError: No installed platform package holds the binary.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class PrebuiltError(Exception):
    """Base exception for artifact resolution and delivery errors."""

    pass


class PrebuiltConfigError(PrebuiltError):
    """Raised when a value object or setting is invalid.

    Domain entities raise this from ``__post_init__`` validation; use cases
    raise it when a caller passes an unusable argument (e.g. a blank version).
    """

    pass


class UnsupportedPlatformError(PrebuiltConfigError):
    """Raised when no artifact exists for the requested platform.

    This is the single gate that prevents a transport attempt for an
    artifact that was never published.

    Attributes:
        os: Operating system that was requested.
        cpu: CPU architecture that was requested.
        supported: Platform strings that would have been accepted.
    """

    def __init__(self, os: str, cpu: str, supported: Sequence[str] = ()) -> None:
        """Initialize UnsupportedPlatformError.

        Args:
            os: Operating system that was requested.
            cpu: CPU architecture that was requested.
            supported: Platform strings that would have been accepted.
        """
        message = f"Unsupported platform: {os}-{cpu}"
        if supported:
            message += f". Supported: {', '.join(supported)}"
        super().__init__(message)
        self.os = os
        self.cpu = cpu
        self.supported = tuple(supported)


class TransportError(PrebuiltError):
    """Raised when fetching an archive fails.

    Attributes:
        message: Human-readable error description.
        source: The package reference or URL that failed (optional).
        original_error: The underlying exception (optional).
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize TransportError.

        Args:
            message: Human-readable error description.
            source: The package reference or URL that failed.
            original_error: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.message = message
        self.source = source
        self.original_error = original_error


class CorruptArchiveError(PrebuiltError):
    """Raised when an archive cannot be decompressed or unpacked.

    Attributes:
        message: Human-readable error description.
        archive: Name of the offending archive (optional).
        original_error: The underlying exception (optional).
    """

    def __init__(
        self,
        message: str,
        archive: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.archive = archive
        self.original_error = original_error


class ArtifactIOError(PrebuiltError):
    """Raised when writing a materialized artifact to disk fails.

    Attributes:
        message: Human-readable error description.
        path: Destination path being written (optional).
        original_error: The underlying OSError (optional).
    """

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.original_error = original_error


class BinaryNotFoundError(PrebuiltError):
    """Raised when no install layout contains the platform binary.

    Attributes:
        package_name: Platform package that was looked for.
        candidates: Binary paths that were checked, in order.
    """

    def __init__(self, package_name: str, candidates: Sequence[Path] = ()) -> None:
        super().__init__(
            f"Binary from {package_name} not found. "
            "This may be because your platform is not supported or the "
            "optional dependency failed to install."
        )
        self.package_name = package_name
        self.candidates = tuple(candidates)
