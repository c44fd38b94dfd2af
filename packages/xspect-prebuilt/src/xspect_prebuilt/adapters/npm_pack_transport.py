"""npm-registry implementation of ArchiveTransportPort.

Platform payloads are published as ordinary npm packages, so the registry
doubles as the download channel: `npm pack name@version` fetches the
package tarball without installing it.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path

from xspect_prebuilt.adapters.ports import (
    ArchiveTransportPort,
    CommandRunnerPort,
    SubprocessCommandRunner,
)
from xspect_prebuilt.domain.artifact import ArchiveSource, RegistryPackageRef
from xspect_prebuilt.domain.exceptions import TransportError

logger = logging.getLogger(__name__)


class NpmPackTransport:
    """Adapter that fetches package tarballs with `npm pack`.

    Each fetch runs in a fresh temporary directory, so concurrent fetches of
    different packages never see each other's tarballs. The directory and
    the tarball in it are removed before fetch() returns or raises.
    """

    def __init__(
        self,
        npm_command: str = "npm",
        runner: CommandRunnerPort | None = None,
    ) -> None:
        """Initialize the registry transport.

        Args:
            npm_command: npm executable to invoke.
            runner: Command runner; defaults to SubprocessCommandRunner.
        """
        self._npm_command = npm_command
        self._runner = runner or SubprocessCommandRunner()

    def fetch(self, source: ArchiveSource) -> bytes:
        """Pack source from the registry and return the .tgz bytes.

        Args:
            source: Registry package reference.

        Returns:
            The gzip-compressed package tarball.

        Raises:
            TransportError: If npm fails, is missing, or produces no tarball.
            TypeError: If source is not a RegistryPackageRef.
        """
        if not isinstance(source, RegistryPackageRef):
            raise TypeError(f"NpmPackTransport cannot fetch {source!r}")

        spec = str(source)
        logger.debug("Running %s pack %s", self._npm_command, spec)

        with tempfile.TemporaryDirectory(prefix="xspect-prebuilt-") as workdir:
            cwd = Path(workdir)
            try:
                self._runner.run([self._npm_command, "pack", spec], cwd=cwd)
            except subprocess.CalledProcessError as e:
                detail = (e.stderr or "").strip()
                message = f"npm pack {spec} exited with status {e.returncode}"
                if detail:
                    message += f": {detail}"
                raise TransportError(message, source=spec, original_error=e) from e
            except OSError as e:
                raise TransportError(
                    f"Could not run {self._npm_command!r}: {e}",
                    source=spec,
                    original_error=e,
                ) from e

            tarball = self._find_tarball(cwd, source)
            logger.debug("Packed %s into %s", spec, tarball.name)
            return tarball.read_bytes()

    def _find_tarball(self, cwd: Path, source: RegistryPackageRef) -> Path:
        """Return the tarball npm pack wrote into cwd."""
        prefix = source.tarball_prefix
        matches = sorted(
            path
            for path in cwd.iterdir()
            if path.name.startswith(prefix) and path.name.endswith(".tgz")
        )
        if not matches:
            raise TransportError(
                f"Failed to find downloaded package for {source}",
                source=str(source),
            )
        return matches[0]


# Runtime protocol check
assert isinstance(NpmPackTransport(), ArchiveTransportPort)
