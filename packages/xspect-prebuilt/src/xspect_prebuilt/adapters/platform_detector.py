"""Platform detector adapter for detecting current OS and architecture.

This module provides an adapter that implements PlatformDetectorPort
by using Python's standard library platform module.
"""

from __future__ import annotations

import platform

from xspect_prebuilt.domain.exceptions import UnsupportedPlatformError
from xspect_prebuilt.domain.platform import CpuName, OsName, PlatformKey


class OsPlatformDetector:
    """Adapter that detects the current platform using platform module.

    Implements PlatformDetectorPort by querying platform.system() and
    platform.machine(), then translating them to the Node.js names the
    platform packages are published under.

    Machine type mappings:
        - x86_64, AMD64 -> x64
        - aarch64, arm64 -> arm64
        - armv6l, armv7l, armv8l, arm -> arm
    """

    # Mapping from platform.system() values to Node.js process.platform
    _OS_MAP: dict[str, OsName] = {
        "linux": "linux",
        "darwin": "darwin",
    }

    # Mapping from platform.machine() values to Node.js process.arch
    _CPU_MAP: dict[str, CpuName] = {
        "x86_64": "x64",
        "amd64": "x64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "armv6l": "arm",
        "armv7l": "arm",
        "armv8l": "arm",
        "arm": "arm",
    }

    def detect(self) -> PlatformKey:
        """Detect the current platform.

        Returns:
            PlatformKey for the running host.

        Raises:
            UnsupportedPlatformError: If the current OS or architecture is
                not one any artifact is published for.
        """
        system = platform.system()
        machine = platform.machine()

        os_name = self._OS_MAP.get(system.lower())
        cpu_name = self._CPU_MAP.get(machine.lower())
        if os_name is None or cpu_name is None:
            raise UnsupportedPlatformError(system.lower(), machine.lower())

        return PlatformKey(os=os_name, cpu=cpu_name)
