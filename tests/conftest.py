"""
Root conftest.py for the xspect-prebuilt test suite.

Pytest plugin that enforces TRA (Test Responsibility Architecture) and Tier markers,
plus fixtures that build package tarballs in memory.
- Reports tests missing a TRA marker or tier marker
- Enforces tier timeouts (when pytest-timeout is active)
- Uses enforcement='warn' by default (no collection failures)

Usage:
    @pytest.mark.tier(1)
    @pytest.mark.tra("Adapter.TarfileMaterializer")
    def test_something():
        ...

Configuration:
    Set TIER_ENFORCE=0 to disable tier enforcement
    Set TRA_ENFORCE=0 to disable TRA enforcement
    Set either to 1 to fail collection on violations
"""

from __future__ import annotations

import gzip
import io
import os
import tarfile
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.nodes import Item


# ============================================================================
# TRA (Test Responsibility Architecture) Configuration
# ============================================================================

VALID_TRA_PREFIXES = frozenset(
    [
        "Domain.Invariant.",
        "Domain.Policy.",
        "UseCase.",
        "Port.",
        "Adapter.",
        "Contract.",
    ]
)


# ============================================================================
# Tier Configuration
# ============================================================================

# Tier timeout limits in seconds
TIER_TIMEOUTS: dict[int, float] = {
    0: 0.1,  # 100ms - instant
    1: 2.0,  # 2s - fast (pre-commit)
    2: 30.0,  # 30s - standard (CI)
    3: 300.0,  # 5min - slow (merge to main)
    4: 0,  # No limit - manual
}


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config: Config) -> None:
    """Register custom markers for TRA and Tier enforcement."""
    config.addinivalue_line(
        "markers",
        "tra(anchor): Test Responsibility Anchor - declares the single responsibility this test protects. "
        "Must start with one of: Domain.Invariant, Domain.Policy, UseCase, Port, Adapter, Contract",
    )
    config.addinivalue_line(
        "markers",
        "tier(level): Test tier (0=instant, 1=fast, 2=standard, 3=slow, 4=manual). "
        "Determines when test runs and enforces timeout.",
    )
    config.addinivalue_line("markers", "unit: Unit tests (no npm, no network)")
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def _get_tier(item: Item) -> int | None:
    """Extract tier level from item's markers."""
    for marker in item.iter_markers(name="tier"):
        if marker.args:
            tier = marker.args[0]
            if isinstance(tier, int) and 0 <= tier <= 4:
                return tier
    return None


def _enforce_tra_markers(items: list[Item]) -> list[str]:
    """Validate TRA markers on all tests.

    Returns:
        List of error messages. Empty if all valid.
    """
    if os.environ.get("TRA_ENFORCE", "warn") == "0":
        return []

    errors = []
    for item in items:
        tra_markers = list(item.iter_markers(name="tra"))
        test_id = item.nodeid

        if not tra_markers:
            errors.append(f"{test_id}: Missing @pytest.mark.tra('...')")
            continue

        if len(tra_markers) > 1:
            errors.append(
                f"{test_id}: Multiple @tra markers found. Each test must have exactly one responsibility."
            )
            continue

        marker = tra_markers[0]
        if not marker.args:
            errors.append(f"{test_id}: @tra marker missing anchor argument")
            continue

        anchor = marker.args[0]
        if not isinstance(anchor, str) or not anchor.strip():
            errors.append(f"{test_id}: @tra anchor must be a non-empty string")
            continue

        if not any(anchor.startswith(prefix) for prefix in VALID_TRA_PREFIXES):
            valid = ", ".join(sorted(VALID_TRA_PREFIXES))
            errors.append(
                f"{test_id}: Invalid TRA anchor '{anchor}'. Must start with one of: {valid}"
            )

    return errors


def _enforce_tier_markers(items: list[Item]) -> list[str]:
    """Validate tier markers on all tests.

    Returns:
        List of error messages. Empty if all valid.
    """
    if os.environ.get("TIER_ENFORCE", "warn") == "0":
        return []

    missing: list[str] = []
    invalid: list[str] = []
    for item in items:
        tier_markers = list(item.iter_markers(name="tier"))
        if not tier_markers:
            missing.append(item.nodeid)
        elif len(tier_markers) > 1:
            invalid.append(f"{item.nodeid} (multiple tier markers)")
        elif _get_tier(item) is None:
            invalid.append(f"{item.nodeid} (invalid tier value)")

    errors = []
    if missing:
        errors.append(
            f"\nTests missing @pytest.mark.tier() marker ({len(missing)}):\n"
            + "\n".join(f"  - {nodeid}" for nodeid in missing[:10])
        )
    if invalid:
        errors.append(
            f"\nTests with invalid tier markers ({len(invalid)}):\n"
            + "\n".join(f"  - {msg}" for msg in invalid[:10])
        )
    return errors


def _apply_tier_timeouts(items: list[Item], config: Config) -> None:
    """Apply timeout based on tier level.

    Only applies if the pytest-timeout plugin is active and no explicit
    timeout is set. Respects TIER_TIMEOUT_MULTIPLIER.
    """
    if not config.pluginmanager.hasplugin("timeout"):
        return

    multiplier = float(os.environ.get("TIER_TIMEOUT_MULTIPLIER", "1.0"))
    for item in items:
        tier = _get_tier(item)
        if tier is None or any(item.iter_markers(name="timeout")):
            continue
        timeout = TIER_TIMEOUTS.get(tier, 0)
        if timeout > 0:
            item.add_marker(pytest.mark.timeout(timeout * multiplier))


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config: Config, items: list[Item]) -> None:
    """Enforce TRA and Tier markers at collection time."""
    all_errors = _enforce_tra_markers(items) + _enforce_tier_markers(items)

    if all_errors:
        strict = (
            os.environ.get("TRA_ENFORCE", "warn") == "1"
            or os.environ.get("TIER_ENFORCE", "warn") == "1"
        )
        if strict:
            error_msg = "TRA/Tier Enforcement Errors:\n" + "\n".join(
                f"  - {e}" for e in all_errors
            )
            pytest.fail(error_msg, pytrace=False)
        print("\nTRA/Tier Enforcement Warnings:")
        for error in all_errors:
            print(f"  {error}")

    _apply_tier_timeouts(items, config)


@pytest.hookimpl(trylast=True)
def pytest_report_header(config: Config) -> str:
    """Add enforcement info to pytest header."""
    tra_enforce = os.environ.get("TRA_ENFORCE", "warn")
    tier_enforce = os.environ.get("TIER_ENFORCE", "warn")
    return f"TRA enforcement: {tra_enforce} | Tier enforcement: {tier_enforce}"


# ============================================================================
# Archive fixtures
# ============================================================================

FileSpec = bytes | tuple[bytes, int]
TarBuilder = Callable[..., bytes]


def build_tar(
    files: Mapping[str, FileSpec] | None = None,
    symlinks: Mapping[str, str] | None = None,
    hardlinks: Mapping[str, str] | None = None,
    directories: tuple[str, ...] = (),
) -> bytes:
    """Build an uncompressed tar stream.

    Args:
        files: Member name to content, or (content, mode). Default mode 0o644.
        symlinks: Member name to link target.
        hardlinks: Member name to the archive path it links to.
        directories: Directory members to add explicitly.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w", format=tarfile.PAX_FORMAT) as tar:
        for name in directories:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, spec in (files or {}).items():
            content, mode = spec if isinstance(spec, tuple) else (spec, 0o644)
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = mode
            tar.addfile(info, io.BytesIO(content))
        for name, target in (symlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            info.mode = 0o777
            tar.addfile(info)
        for name, target in (hardlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.LNKTYPE
            info.linkname = target
            info.mode = 0o644
            tar.addfile(info)
    return buffer.getvalue()


def build_tar_gz(**kwargs: object) -> bytes:
    """Build a gzip-compressed tar stream; accepts build_tar's arguments."""
    return gzip.compress(build_tar(**kwargs))  # type: ignore[arg-type]


PYTHON3_CONTENT = b"#!/bin/sh\necho 'Python 3.9.13'\n"
PATCHELF_CONTENT = b"\x7fELF patchelf"


@pytest.fixture
def tar_builder() -> TarBuilder:
    """Provide build_tar for tests that need a raw tar stream."""
    return build_tar


@pytest.fixture
def tar_gz_builder() -> TarBuilder:
    """Provide build_tar_gz for tests that need a compressed package."""
    return build_tar_gz


@pytest.fixture
def python_package_tgz() -> bytes:
    """A python platform package as `npm pack` produces it.

    bin/python3 is a symlink and python3.9 is published without its
    executable bit, as npm tends to leave it.
    """
    return build_tar_gz(
        files={
            "package/package.json": b'{"name": "@xspect-build/python-linux-x64"}',
            "package/python/bin/python3.9": PYTHON3_CONTENT,
            "package/python/bin/python3-config": (b"#!/bin/sh\n", 0o644),
            "package/python/lib/libpython3.9.so.1.0": b"\x7fELF lib",
        },
        symlinks={
            "package/python/bin/python3": "python3.9",
            "package/python/lib/libpython3.so": "libpython3.9.so.1.0",
        },
    )


@pytest.fixture
def patchelf_package_tgz() -> bytes:
    """A patchelf platform package as `npm pack` produces it."""
    return build_tar_gz(
        files={
            "package/package.json": b'{"name": "@xspect-build/patchelf-linux-x64"}',
            "package/bin/patchelf": (PATCHELF_CONTENT, 0o644),
        },
    )
