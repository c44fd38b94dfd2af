"""Settings domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from xspect_prebuilt.domain.exceptions import PrebuiltConfigError
from xspect_prebuilt.domain.platform import DEFAULT_SCOPE, PlatformKey

DEFAULT_CACHE_NAMESPACE = ".xspect-build"

MIRROR_BASE = "https://registry.npmmirror.com/-/binary/python-build-standalone"
GITHUB_BASE = "https://github.com/astral-sh/python-build-standalone/releases/download"

STANDALONE_TRIPLES: Mapping[PlatformKey, str] = MappingProxyType(
    {
        PlatformKey(os="linux", cpu="x64"): "x86_64-unknown-linux-gnu",
        PlatformKey(os="linux", cpu="arm64"): "aarch64-unknown-linux-gnu",
    }
)


@dataclass(frozen=True)
class PrebuiltSettings:
    """Settings shared by the resolution and delivery use cases.

    Attributes:
        scope: npm scope the platform packages are published under.
        cache_namespace: Directory under the home directory holding caches,
            only used when a caller passes no explicit cache root.
        npm_command: Executable used for `npm pack`.
    """

    scope: str = DEFAULT_SCOPE
    cache_namespace: str = DEFAULT_CACHE_NAMESPACE
    npm_command: str = "npm"

    def __post_init__(self) -> None:
        """Validate settings."""
        self._validate_scope()
        self._validate_cache_namespace()
        if not self.npm_command.strip():
            raise PrebuiltConfigError("npm_command cannot be empty")

    def _validate_scope(self) -> None:
        if not self.scope.startswith("@") or len(self.scope) < 2:
            raise PrebuiltConfigError(
                f"scope must be an npm scope like '@name', got: {self.scope!r}"
            )

    def _validate_cache_namespace(self) -> None:
        if not self.cache_namespace.strip():
            raise PrebuiltConfigError("cache_namespace cannot be empty")
        if "/" in self.cache_namespace or self.cache_namespace in (".", ".."):
            raise PrebuiltConfigError(
                f"cache_namespace must be a single directory name, got: {self.cache_namespace!r}"
            )

    def default_cache_root(self, artifact: str, home: Path | None = None) -> Path:
        """Return ``<home>/<cache_namespace>/<artifact>``.

        Args:
            artifact: Artifact name, e.g. 'python'.
            home: Home directory override; defaults to ``Path.home()``.
        """
        base = home if home is not None else Path.home()
        return base / self.cache_namespace / artifact


@dataclass(frozen=True)
class StandalonePythonRelease:
    """Upstream python-build-standalone release used for the python packages.

    Attributes:
        python_version: CPython version shipped.
        build_date: Upstream release tag (a date).
        build_type: Build type as used in the npm version (npm semver does
            not allow underscores in prereleases).
        build_type_file: Build type as spelled in upstream filenames.
        mirror_base: Public mirror base URL.
        origin_base: Authenticated GitHub releases base URL.
        triples: Platform key to upstream target triple.
    """

    python_version: str = "3.9.13"
    build_date: str = "20220528"
    build_type: str = "install-only"
    build_type_file: str = "install_only"
    mirror_base: str = MIRROR_BASE
    origin_base: str = GITHUB_BASE
    triples: Mapping[PlatformKey, str] = field(
        default_factory=lambda: STANDALONE_TRIPLES, hash=False
    )

    def __post_init__(self) -> None:
        for name in ("python_version", "build_date", "build_type", "build_type_file"):
            if not getattr(self, name).strip():
                raise PrebuiltConfigError(f"{name} cannot be empty")
        if not self.triples:
            raise PrebuiltConfigError("triples cannot be empty")

    def triple(self, platform: PlatformKey) -> str:
        """Return the upstream target triple for a platform.

        Raises:
            PrebuiltConfigError: If the platform has no upstream build.
        """
        try:
            return self.triples[platform]
        except KeyError:
            supported = ", ".join(sorted(str(key) for key in self.triples))
            raise PrebuiltConfigError(
                f"No python-build-standalone build for {platform}. Supported: {supported}"
            ) from None

    def filename(self, platform: PlatformKey) -> str:
        """Return the upstream archive filename for a platform."""
        return (
            f"cpython-{self.python_version}+{self.build_date}-"
            f"{self.triple(platform)}-{self.build_type_file}.tar.gz"
        )

    def package_version(self, release: int) -> str:
        """Return the npm version for the given packaging release number.

        Example: release 1 -> '3.9.13-install-only.1'.
        """
        if release < 0:
            raise PrebuiltConfigError(f"release must be non-negative, got: {release}")
        return f"{self.python_version}-{self.build_type}.{release}"
