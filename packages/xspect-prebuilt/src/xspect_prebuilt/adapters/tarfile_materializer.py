"""tarfile-based implementation of ArchiveMaterializerPort."""

from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path, PurePosixPath

from xspect_prebuilt.adapters.filesystem import fix_permissions, replace_symlinks
from xspect_prebuilt.adapters.ports import ArchiveMaterializerPort
from xspect_prebuilt.domain.artifact import ArchiveHandle
from xspect_prebuilt.domain.exceptions import (
    ArtifactIOError,
    CorruptArchiveError,
    PrebuiltConfigError,
)

logger = logging.getLogger(__name__)


class TarfileMaterializer:
    """Adapter that unpacks tar archives with the standard tarfile module.

    Unpacking runs in three steps:
    1. Extract members through the ``data`` filter, which rejects absolute
       paths, members escaping the destination and device files.
    2. Replace every symlink with a real copy of its target.
    3. Make files under bin/ and libexec/ executable (best-effort).
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
            strip_components: Leading path components to drop from member
                names, like ``tar --strip-components``. Members with no
                components left are skipped.

        Raises:
            CorruptArchiveError: If the tar stream is malformed or a member
                is rejected by the extraction filter.
            ArtifactIOError: If writing to destination fails.
            PrebuiltConfigError: If strip_components is negative.
        """
        if strip_components < 0:
            raise PrebuiltConfigError(
                f"strip_components must be non-negative, got: {strip_components}"
            )

        destination = Path(destination)
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactIOError(
                f"Cannot create {destination}: {e}", path=destination, original_error=e
            ) from e

        logger.info("Unpacking %s into %s", archive.name, destination)
        self._extract(archive, destination, strip_components)

        replaced = replace_symlinks(destination)
        fixed = fix_permissions(destination)
        logger.debug(
            "Unpacked %s: %d symlinks replaced, %d files made executable",
            archive.name,
            replaced,
            fixed,
        )

    def _extract(
        self, archive: ArchiveHandle, destination: Path, strip_components: int
    ) -> None:
        def member_filter(
            member: tarfile.TarInfo, dest_path: str
        ) -> tarfile.TarInfo | None:
            stripped = _strip(member.name, strip_components)
            if stripped is None:
                return None
            changes: dict[str, str] = {"name": stripped}
            if member.islnk():
                # Hard link targets are archive paths and are stripped too.
                linkname = _strip(member.linkname, strip_components)
                if linkname is None:
                    return None
                changes["linkname"] = linkname
            return tarfile.data_filter(member.replace(**changes), dest_path)

        try:
            with tarfile.open(fileobj=io.BytesIO(archive.data), mode="r:") as tar:
                tar.extractall(destination, filter=member_filter)
        except tarfile.TarError as e:
            raise CorruptArchiveError(
                f"Failed to unpack {archive.name}: {e}",
                archive=archive.name,
                original_error=e,
            ) from e
        except EOFError as e:
            raise CorruptArchiveError(
                f"Unexpected end of archive {archive.name}",
                archive=archive.name,
                original_error=e,
            ) from e
        except OSError as e:
            raise ArtifactIOError(
                f"Failed to write {archive.name} into {destination}: {e}",
                path=destination,
                original_error=e,
            ) from e


def _strip(name: str, components: int) -> str | None:
    if components == 0:
        return name
    parts = PurePosixPath(name).parts[components:]
    if not parts:
        return None
    return str(PurePosixPath(*parts))


# Runtime protocol check
assert isinstance(TarfileMaterializer(), ArchiveMaterializerPort)
