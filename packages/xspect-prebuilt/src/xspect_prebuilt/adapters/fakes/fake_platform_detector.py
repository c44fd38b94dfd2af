"""Fake platform detector for testing.

This module provides a fake implementation of PlatformDetectorPort
that allows tests to control platform detection without relying on
actual OS/architecture detection.
"""

from __future__ import annotations

from xspect_prebuilt.domain.platform import PlatformKey


class FakePlatformDetector:
    """Fake implementation of PlatformDetectorPort for testing.

    Returns a configured PlatformKey, or raises a configured exception to
    simulate an unsupported host.

    Example:
        >>> fake = FakePlatformDetector.from_string("linux-x64")
        >>> fake.detect()
        PlatformKey(os='linux', cpu='x64')
    """

    def __init__(self, platform: PlatformKey | None = None) -> None:
        """Initialize with the platform to return.

        Args:
            platform: PlatformKey to return from detect(). Defaults to linux-x64.
        """
        self._platform = platform or PlatformKey(os="linux", cpu="x64")
        self._exception: BaseException | None = None

    @classmethod
    def from_string(cls, value: str) -> FakePlatformDetector:
        """Create a FakePlatformDetector from a platform string like 'darwin-arm64'."""
        return cls(PlatformKey.from_string(value))

    def set_exception(self, exception: BaseException | None) -> None:
        """Configure an exception to raise from detect(), or None to clear."""
        self._exception = exception

    def detect(self) -> PlatformKey:
        if self._exception is not None:
            raise self._exception
        return self._platform
