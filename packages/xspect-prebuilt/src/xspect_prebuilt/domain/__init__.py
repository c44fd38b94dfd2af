"""Domain layer: Value objects, settings, and exceptions with zero I/O."""

from xspect_prebuilt.domain.artifact import (
    PATCHELF,
    PYTHON,
    ArchiveHandle,
    ArtifactDefinition,
    ArtifactRecord,
    BinaryHandle,
    RegistryPackageRef,
    UrlSource,
    VersionTag,
)
from xspect_prebuilt.domain.exceptions import (
    ArtifactIOError,
    BinaryNotFoundError,
    CorruptArchiveError,
    PrebuiltConfigError,
    PrebuiltError,
    TransportError,
    UnsupportedPlatformError,
)
from xspect_prebuilt.domain.platform import (
    PATCHELF_PLATFORMS,
    PYTHON_PLATFORMS,
    PlatformKey,
    PlatformTable,
    resolve_platform_key,
)
from xspect_prebuilt.domain.settings import PrebuiltSettings, StandalonePythonRelease
