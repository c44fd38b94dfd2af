"""Port interfaces for the xspect-prebuilt package.

Ports define the contracts that adapters must implement.
These are Protocol classes (structural subtyping) for flexible testing.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from xspect_prebuilt.domain.artifact import ArchiveHandle, ArchiveSource
    from xspect_prebuilt.domain.platform import PlatformKey


@runtime_checkable
class PlatformDetectorPort(Protocol):
    """Port interface for detecting the running host's platform.

    Contract:
        - detect() returns the host PlatformKey in Node.js naming
        - Raises UnsupportedPlatformError for hosts outside darwin/linux
          or x64/arm64/arm
    """

    def detect(self) -> PlatformKey:
        """Detect the current platform.

        Raises:
            UnsupportedPlatformError: If the host os or cpu is unknown.
        """
        ...


@runtime_checkable
class ArchiveTransportPort(Protocol):
    """Port interface for fetching a compressed archive.

    Implementations fetch from one kind of source (registry reference or
    direct URL) and return the raw, still-compressed bytes.

    Contract:
        - fetch() never leaves files behind, on success or failure
        - Any failure raises TransportError; nothing is retried
    """

    def fetch(self, source: ArchiveSource) -> bytes:
        """Fetch the archive described by source.

        Args:
            source: Registry package reference or URL source.

        Returns:
            Compressed archive bytes.

        Raises:
            TransportError: If the fetch fails for any reason.
        """
        ...


@runtime_checkable
class ArchiveMaterializerPort(Protocol):
    """Port interface for unpacking an archive into a directory.

    Contract:
        - unpack() leaves no symbolic links under destination
        - Regular files under bin/ and libexec/ directories are executable
          (best-effort)
        - Raises CorruptArchiveError for unreadable archives
        - Raises ArtifactIOError for destination write failures
    """

    def unpack(
        self,
        archive: ArchiveHandle,
        destination: Path,
        strip_components: int = 0,
    ) -> None:
        """Unpack archive into destination.

        Args:
            archive: Decompressed tar archive.
            destination: Directory to unpack into. Created if missing.
            strip_components: Leading path components to drop from members.
        """
        ...


@runtime_checkable
class BinaryLocatorPort(Protocol):
    """Port interface for one package-manager install layout.

    Implementations check a single layout (nested, hoisted, pnpm store, ...)
    for an installed package directory.

    Contract:
        - locate() returns the package directory if it exists in this layout
        - locate() returns None otherwise and never raises for missing paths
    """

    def locate(self, package_name: str) -> Path | None:
        """Return the installed directory of package_name, or None.

        Args:
            package_name: npm package name, possibly scoped.
        """
        ...


@runtime_checkable
class CommandRunnerPort(Protocol):
    """Port interface for running an external command.

    Contract:
        - run() blocks until the command exits
        - Raises subprocess.CalledProcessError on non-zero exit
        - Raises OSError (e.g. FileNotFoundError) if the executable is missing
    """

    def run(self, args: Sequence[str], cwd: Path) -> None:
        """Run args with cwd as the working directory."""
        ...


@runtime_checkable
class TokenResolverPort(Protocol):
    """Port interface for resolving an origin authentication token.

    Contract:
        - resolve_token() returns a non-empty token or None
    """

    def resolve_token(self) -> str | None:
        """Return the token, or None if no credentials are configured."""
        ...


class SubprocessCommandRunner:
    """Default implementation: run commands through subprocess.run.

    Output is captured so failures carry the command's stderr.
    """

    def run(self, args: Sequence[str], cwd: Path) -> None:
        subprocess.run(
            list(args),
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )


class EnvironmentTokenResolver:
    """Default implementation: read the token from an environment variable.

    Reads GITHUB_TOKEN by default. Empty or whitespace-only values count as
    absent so a blank variable in CI does not switch to the origin.
    """

    def __init__(self, variable: str = "GITHUB_TOKEN") -> None:
        self._variable = variable

    def resolve_token(self) -> str | None:
        """Resolve the token from the environment.

        Returns:
            The stripped token, or None when unset or blank.
        """
        token = os.environ.get(self._variable, "").strip()
        return token or None
