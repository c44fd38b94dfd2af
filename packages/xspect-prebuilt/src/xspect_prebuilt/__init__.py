"""xspect-prebuilt: Resolve and deliver prebuilt binaries shipped as npm platform packages."""

__version__ = "0.1.0"

from xspect_prebuilt.api import (
    fetch_archive,
    fix_installed_permissions,
    get_artifact_path,
    get_bin_dir,
    get_platform_package_name,
    is_binary_available,
    materialize,
    resolve_installed_binary,
    resolve_platform_key,
)
from xspect_prebuilt.domain.artifact import PATCHELF, PYTHON, ArchiveHandle, VersionTag
from xspect_prebuilt.domain.exceptions import (
    ArtifactIOError,
    BinaryNotFoundError,
    CorruptArchiveError,
    PrebuiltConfigError,
    PrebuiltError,
    TransportError,
    UnsupportedPlatformError,
)
from xspect_prebuilt.domain.platform import PlatformKey
from xspect_prebuilt.domain.settings import PrebuiltSettings, StandalonePythonRelease

__all__ = [
    "PATCHELF",
    "PYTHON",
    "ArchiveHandle",
    "ArtifactIOError",
    "BinaryNotFoundError",
    "CorruptArchiveError",
    "PlatformKey",
    "PrebuiltConfigError",
    "PrebuiltError",
    "PrebuiltSettings",
    "StandalonePythonRelease",
    "TransportError",
    "UnsupportedPlatformError",
    "VersionTag",
    "fetch_archive",
    "fix_installed_permissions",
    "get_artifact_path",
    "get_bin_dir",
    "get_platform_package_name",
    "is_binary_available",
    "materialize",
    "resolve_installed_binary",
    "resolve_platform_key",
]
