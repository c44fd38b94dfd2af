"""Fake adapters for testing.

This module provides test doubles for port interfaces, enabling
deterministic testing without real I/O operations.
"""

from xspect_prebuilt.adapters.fakes.fake_archive_materializer import (
    FakeArchiveMaterializer,
)
from xspect_prebuilt.adapters.fakes.fake_archive_transport import FakeArchiveTransport
from xspect_prebuilt.adapters.fakes.fake_binary_locator import FakeBinaryLocator
from xspect_prebuilt.adapters.fakes.fake_command_runner import FakeCommandRunner
from xspect_prebuilt.adapters.fakes.fake_platform_detector import FakePlatformDetector
from xspect_prebuilt.adapters.fakes.fake_token_resolver import FakeTokenResolver

__all__ = [
    "FakeArchiveMaterializer",
    "FakeArchiveTransport",
    "FakeBinaryLocator",
    "FakeCommandRunner",
    "FakePlatformDetector",
    "FakeTokenResolver",
]
