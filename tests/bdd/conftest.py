"""Shared fixtures and steps for BDD tests."""

import pytest
from pathlib import Path
from pytest_bdd import given, then, parsers

from xspect_prebuilt.adapters.fakes import FakeArchiveTransport, FakePlatformDetector


@pytest.fixture
def context():
    """Shared context for passing state between steps."""
    return {}


@pytest.fixture
def registry() -> FakeArchiveTransport:
    """Registry transport serving preconfigured package tarballs."""
    return FakeArchiveTransport()


@pytest.fixture
def host() -> FakePlatformDetector:
    """Platform detector standing in for the running host."""
    return FakePlatformDetector()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Cache root in place of ~/.xspect-build/<artifact>."""
    return tmp_path / "cache"


@given(parsers.parse('the host platform is "{platform}"'), target_fixture="host")
def given_host_platform(platform: str) -> FakePlatformDetector:
    """Pretend the process runs on platform."""
    return FakePlatformDetector.from_string(platform)


@then(parsers.re(r"an? (?P<error>\w+) is raised$"))
def then_error_raised(context: dict, error: str):
    """Verify the last action failed with the named exception."""
    raised = context.get("error")
    assert raised is not None, "no exception was raised"
    assert type(raised).__name__ == error, f"expected {error}, got {raised!r}"
