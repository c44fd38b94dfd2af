"""Platform value objects.

This module contains the canonical platform key used to select a
platform-specific artifact, and the static tables listing which keys
each redistributed artifact is published for.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from xspect_prebuilt.domain.exceptions import (
    PrebuiltConfigError,
    UnsupportedPlatformError,
)

OsName = Literal["darwin", "linux"]
CpuName = Literal["x64", "arm64", "arm"]

VALID_OS: tuple[str, ...] = ("darwin", "linux")
VALID_CPU: tuple[str, ...] = ("x64", "arm64", "arm")

DEFAULT_SCOPE = "@xspect-build"


@dataclass(frozen=True, order=True)
class PlatformKey:
    """Platform value object representing OS and CPU architecture.

    Uses the Node.js naming (``process.platform`` / ``process.arch``) since the
    artifacts are published as npm packages.

    Attributes:
        os: Operating system, one of 'darwin' or 'linux'.
        cpu: CPU architecture, one of 'x64', 'arm64' or 'arm'.
    """

    os: OsName
    cpu: CpuName

    def __post_init__(self) -> None:
        """Validate platform components."""
        if self.os not in VALID_OS:
            raise PrebuiltConfigError(
                f"os must be one of {VALID_OS}, got: {self.os!r}"
            )
        if self.cpu not in VALID_CPU:
            raise PrebuiltConfigError(
                f"cpu must be one of {VALID_CPU}, got: {self.cpu!r}"
            )

    @classmethod
    def from_string(cls, value: str) -> PlatformKey:
        """Parse a platform string such as 'linux-x64'.

        Args:
            value: Platform string in '<os>-<cpu>' form.

        Returns:
            PlatformKey instance.

        Raises:
            PrebuiltConfigError: If the string is malformed or names an
                unknown os or cpu.
        """
        os_name, sep, cpu_name = value.partition("-")
        if not sep or not os_name or not cpu_name:
            raise PrebuiltConfigError(
                f"Invalid platform format, expected '<os>-<cpu>', got: {value!r}"
            )
        return cls(os=os_name, cpu=cpu_name)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return f"{self.os}-{self.cpu}"


@dataclass(frozen=True)
class PlatformTable:
    """Static table of the platforms an artifact is published for.

    Attributes:
        artifact: Artifact name, used as the platform package prefix.
        platforms: Supported platform keys.
        scope: npm scope the platform packages are published under.
    """

    artifact: str
    platforms: frozenset[PlatformKey]
    scope: str = DEFAULT_SCOPE

    def __post_init__(self) -> None:
        if not self.artifact.strip():
            raise PrebuiltConfigError("artifact cannot be empty")
        if not self.platforms:
            raise PrebuiltConfigError("platforms cannot be empty")
        if not self.scope.startswith("@"):
            raise PrebuiltConfigError(
                f"scope must start with '@', got: {self.scope!r}"
            )

    @property
    def supported(self) -> tuple[str, ...]:
        """Return the supported platform strings, sorted."""
        return tuple(sorted(str(key) for key in self.platforms))

    def resolve(self, os: str, cpu: str) -> PlatformKey:
        """Look up the platform key for an (os, cpu) pair.

        Args:
            os: Operating system in Node.js naming.
            cpu: CPU architecture in Node.js naming.

        Returns:
            The matching PlatformKey.

        Raises:
            UnsupportedPlatformError: If the pair is not in this table.
        """
        for key in self.platforms:
            if key.os == os and key.cpu == cpu:
                return key
        raise UnsupportedPlatformError(os, cpu, self.supported)

    def package_name(self, key: PlatformKey) -> str:
        """Return the downstream npm package name for a platform key.

        Raises:
            UnsupportedPlatformError: If the key is not in this table.
        """
        if key not in self.platforms:
            raise UnsupportedPlatformError(key.os, key.cpu, self.supported)
        return f"{self.scope}/{self.artifact}-{key}"


def resolve_platform_key(os: str, cpu: str, table: PlatformTable) -> PlatformKey:
    """Resolve an (os, cpu) pair against a platform table.

    Pure function; never falls back to a default platform.
    """
    return table.resolve(os, cpu)


PATCHELF_PLATFORMS = PlatformTable(
    artifact="patchelf",
    platforms=frozenset(
        {
            PlatformKey(os="darwin", cpu="arm64"),
            PlatformKey(os="darwin", cpu="x64"),
            PlatformKey(os="linux", cpu="arm64"),
            PlatformKey(os="linux", cpu="arm"),
            PlatformKey(os="linux", cpu="x64"),
        }
    ),
)

PYTHON_PLATFORMS = PlatformTable(
    artifact="python",
    platforms=frozenset(
        {
            PlatformKey(os="linux", cpu="arm64"),
            PlatformKey(os="linux", cpu="x64"),
        }
    ),
)
