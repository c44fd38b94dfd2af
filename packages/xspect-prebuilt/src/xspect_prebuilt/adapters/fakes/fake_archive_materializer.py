"""Fake archive materializer for testing.

Provides a test double for ArchiveMaterializerPort that writes a
preconfigured set of files instead of parsing tar data, and can fail
partway through to simulate an interrupted unpack.
"""

from __future__ import annotations

from pathlib import Path

from xspect_prebuilt.domain.artifact import ArchiveHandle


class FakeArchiveMaterializer:
    """Fake implementation of ArchiveMaterializerPort for testing."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        """Initialize with the files unpack() creates.

        Args:
            files: Relative path to content, written under destination.
        """
        self._files = dict(files or {})
        self._exception: BaseException | None = None
        self._calls: list[tuple[ArchiveHandle, Path, int]] = []

    @property
    def calls(self) -> list[tuple[ArchiveHandle, Path, int]]:
        """Return (archive, destination, strip_components) tuples."""
        return list(self._calls)

    def fail_after_files(self, exception: BaseException | None) -> None:
        """Raise exception after the files are written, or None to clear."""
        self._exception = exception

    def unpack(
        self,
        archive: ArchiveHandle,
        destination: Path,
        strip_components: int = 0,
    ) -> None:
        self._calls.append((archive, Path(destination), strip_components))
        for relative, content in self._files.items():
            path = Path(destination) / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        if self._exception is not None:
            raise self._exception
