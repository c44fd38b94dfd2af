"""Unit tests for OsPlatformDetector adapter."""

from unittest.mock import patch

import pytest

from xspect_prebuilt.adapters.platform_detector import OsPlatformDetector
from xspect_prebuilt.adapters.ports import PlatformDetectorPort
from xspect_prebuilt.domain.exceptions import (
    PrebuiltConfigError,
    UnsupportedPlatformError,
)
from xspect_prebuilt.domain.platform import PlatformKey


@pytest.mark.tier(1)
@pytest.mark.unit
@pytest.mark.tra("Adapter.OsPlatformDetector")
class TestOsPlatformDetector:
    """Test OsPlatformDetector implementation."""

    def test_satisfies_protocol(self) -> None:
        """Test that OsPlatformDetector satisfies PlatformDetectorPort protocol."""
        detector = OsPlatformDetector()
        assert isinstance(detector, PlatformDetectorPort)

    @pytest.mark.parametrize(
        "system, machine, expected",
        [
            ("Linux", "x86_64", PlatformKey(os="linux", cpu="x64")),
            ("Linux", "aarch64", PlatformKey(os="linux", cpu="arm64")),
            ("Linux", "armv7l", PlatformKey(os="linux", cpu="arm")),
            ("Linux", "armv6l", PlatformKey(os="linux", cpu="arm")),
            ("Darwin", "arm64", PlatformKey(os="darwin", cpu="arm64")),
            ("Darwin", "x86_64", PlatformKey(os="darwin", cpu="x64")),
            ("Linux", "AMD64", PlatformKey(os="linux", cpu="x64")),
        ],
    )
    def test_detect_maps_to_node_names(
        self, system: str, machine: str, expected: PlatformKey
    ) -> None:
        """Test platform.system()/machine() values map to Node.js names."""
        with patch("platform.system", return_value=system), patch(
            "platform.machine", return_value=machine
        ):
            result = OsPlatformDetector().detect()

        assert result == expected

    @patch("platform.system")
    @patch("platform.machine")
    def test_unsupported_os_raises(self, mock_machine, mock_system) -> None:
        """Test Windows is reported as an unsupported platform."""
        mock_system.return_value = "Windows"
        mock_machine.return_value = "AMD64"

        with pytest.raises(UnsupportedPlatformError) as exc_info:
            OsPlatformDetector().detect()

        assert exc_info.value.os == "windows"
        assert exc_info.value.cpu == "amd64"

    @patch("platform.system")
    @patch("platform.machine")
    def test_unsupported_cpu_raises(self, mock_machine, mock_system) -> None:
        """Test an unknown machine type is reported as unsupported."""
        mock_system.return_value = "Linux"
        mock_machine.return_value = "s390x"

        with pytest.raises(UnsupportedPlatformError, match="linux-s390x"):
            OsPlatformDetector().detect()

    @patch("platform.system")
    @patch("platform.machine")
    def test_unsupported_platform_is_config_error(self, mock_machine, mock_system) -> None:
        """Test callers can catch detection failures as PrebuiltConfigError."""
        mock_system.return_value = "FreeBSD"
        mock_machine.return_value = "amd64"

        with pytest.raises(PrebuiltConfigError):
            OsPlatformDetector().detect()
