"""Use cases: Artifact fetching, caching, resolution and packaging."""

from xspect_prebuilt.usecases.archive_fetcher import ArchiveFetcher, decompress_archive
from xspect_prebuilt.usecases.artifact_cache import ArtifactCache
from xspect_prebuilt.usecases.binary_resolver import BinaryResolver
from xspect_prebuilt.usecases.permission_fixer import InstalledPermissionFixer
from xspect_prebuilt.usecases.python_package_stager import (
    StagedPackage,
    StandalonePythonStager,
)
