"""
Unit tests for the download URL builder.
"""

import pytest
import requests
import responses

from vulkankit.core.exceptions import InvalidVersionError, UnsupportedPlatformError
from vulkankit.sdk.urls import (
    build_runtime_url,
    build_sdk_filename,
    build_sdk_url,
    is_downloadable,
)
from vulkankit.core.platform import PlatformFamily

BASE = "https://sdk.lunarg.com/sdk/download"


class TestSdkUrl:
    """Tests for SDK URLs per platform."""

    def test_windows(self, windows_facts):
        """Test the Windows installer URL."""
        assert build_sdk_url("1.3.250.1", windows_facts) == (
            f"{BASE}/1.3.250.1/windows/VulkanSDK-1.3.250.1-Installer.exe"
        )

    def test_windows_arm(self, warm_facts):
        """Test the Windows ARM installer URL uses the warm base."""
        assert build_sdk_url("1.4.304.0", warm_facts) == (
            f"{BASE}/1.4.304.0/warm/InstallVulkanARM64-1.4.304.0.exe"
        )

    def test_linux_threshold_is_tar_gz(self, linux_facts):
        """Test versions up to 1.3.250.1 are .tar.gz."""
        url = build_sdk_url("1.3.250.1", linux_facts)
        assert url == f"{BASE}/1.3.250.1/linux/vulkansdk-linux-x86_64-1.3.250.1.tar.gz"

    def test_linux_after_threshold_is_tar_xz(self, linux_facts):
        """Test later versions are .tar.xz."""
        assert build_sdk_url("1.3.261.1", linux_facts).endswith(
            "vulkansdk-linux-x86_64-1.3.261.1.tar.xz"
        )
        assert build_sdk_url("1.4.304.0", linux_facts).endswith(
            "vulkansdk-linux-x86_64-1.4.304.0.tar.xz"
        )

    def test_linux_arm_default_distro(self, linux_arm_facts):
        """Test Linux ARM uses the community release repository."""
        assert build_sdk_url("1.4.304.0", linux_arm_facts) == (
            "https://github.com/jakoch/vulkan-sdk-arm/releases/download/1.4.304.0/"
            "vulkansdk-ubuntu-24.04-arm-1.4.304.0.tar.xz"
        )

    def test_linux_arm_legacy_distro(self, facts_factory):
        """Test 20.04 is only used when the probe says exactly that."""
        facts = facts_factory(PlatformFamily.LINUX_ARM, "arm64", "20.04")
        assert "vulkansdk-ubuntu-20.04-arm-" in build_sdk_url("1.4.304.0", facts)

    @pytest.mark.parametrize("distro", ["", "22.04", "20.10"])
    def test_linux_arm_unknown_distro(self, facts_factory, distro):
        """Test any other distro falls back to 24.04."""
        facts = facts_factory(PlatformFamily.LINUX_ARM, "arm64", distro)
        assert "vulkansdk-ubuntu-24.04-arm-" in build_sdk_url("1.4.304.0", facts)

    def test_mac_threshold_is_dmg(self, mac_facts):
        """Test versions up to 1.3.290.0 are disk images."""
        assert build_sdk_url("1.3.290.0", mac_facts) == (
            f"{BASE}/1.3.290.0/mac/vulkansdk-macos-1.3.290.0.dmg"
        )

    def test_mac_after_threshold_is_zip(self, mac_facts):
        """Test later versions are zip archives."""
        assert build_sdk_url("1.3.296.0", mac_facts).endswith(
            "vulkansdk-macos-1.3.296.0.zip"
        )

    def test_deterministic(self, linux_facts):
        """Test the builder is pure."""
        assert build_sdk_url("1.3.261.1", linux_facts) == build_sdk_url(
            "1.3.261.1", linux_facts
        )

    @pytest.mark.parametrize("version", ["latest", "", "1.3.250"])
    def test_rejects_unresolved_versions(self, linux_facts, version):
        """Test only concrete versions reach the builder."""
        with pytest.raises(InvalidVersionError):
            build_sdk_url(version, linux_facts)


class TestRuntimeUrl:
    """Tests for runtime component URLs."""

    def test_windows(self, windows_facts):
        """Test the Windows runtime URL."""
        assert build_runtime_url("1.3.250.1", windows_facts) == (
            f"{BASE}/1.3.250.1/windows/vulkan-runtime-components.zip"
        )

    def test_windows_arm(self, warm_facts):
        """Test the runtime base is keyed by warm."""
        assert build_runtime_url("1.4.304.0", warm_facts) == (
            f"{BASE}/1.4.304.0/warm/vulkan-runtime-components.zip"
        )

    def test_not_available_on_linux(self, linux_facts):
        """Test other platforms have no runtime bundle."""
        with pytest.raises(UnsupportedPlatformError):
            build_runtime_url("1.3.250.1", linux_facts)

    def test_not_available_on_mac(self, mac_facts):
        """Test macOS has no runtime bundle."""
        with pytest.raises(UnsupportedPlatformError):
            build_runtime_url("1.3.250.1", mac_facts)


class TestSdkFilename:
    """Tests for local filenames."""

    def test_windows(self, windows_facts, warm_facts):
        """Test both Windows variants share the installer filename."""
        assert build_sdk_filename("1.3.250.1", windows_facts) == "VulkanSDK-Installer.exe"
        assert build_sdk_filename("1.3.250.1", warm_facts) == "VulkanSDK-Installer.exe"

    def test_linux_extension_follows_url(self, linux_facts):
        """Test the extension matches the downloaded artifact."""
        assert build_sdk_filename("1.3.250.1", linux_facts) == "vulkansdk-linux-x86_64.tar.gz"
        assert build_sdk_filename("1.3.261.1", linux_facts) == "vulkansdk-linux-x86_64.tar.xz"

    def test_linux_arm(self, linux_arm_facts):
        """Test the Linux ARM filename."""
        assert build_sdk_filename("1.4.304.0", linux_arm_facts) == "vulkansdk-linux-arm.tar.xz"

    def test_mac(self, mac_facts):
        """Test the macOS filename follows the dmg/zip switch."""
        assert build_sdk_filename("1.3.290.0", mac_facts) == "vulkansdk-macos.dmg"
        assert build_sdk_filename("1.3.296.0", mac_facts) == "vulkansdk-macos.zip"


class TestIsDownloadable:
    """Tests for the reachability pre-check."""

    URL = f"{BASE}/1.3.250.1/windows/VulkanSDK-1.3.250.1-Installer.exe"

    @responses.activate
    def test_reachable(self, reporter):
        """Test a reachable URL reports nothing."""
        responses.add(responses.HEAD, self.URL, status=200)
        assert is_downloadable("VULKAN-SDK", "1.3.250.1", self.URL, reporter) is True
        assert reporter.exit_code == 0

    @responses.activate
    def test_not_found_is_reported(self, reporter):
        """Test an error status marks the job failed without raising."""
        responses.add(responses.HEAD, self.URL, status=404)
        assert is_downloadable("VULKAN-SDK", "1.3.250.1", self.URL, reporter) is False
        assert reporter.exit_code == 1
        assert "HTTP 404" in reporter.failures[0]

    @responses.activate
    def test_transport_error_is_reported(self, reporter):
        """Test transport errors are reported, not raised."""
        responses.add(
            responses.HEAD,
            self.URL,
            body=requests.exceptions.ConnectionError("refused"),
        )
        assert is_downloadable("VULKAN-SDK", "1.3.250.1", self.URL, reporter) is False
        assert reporter.failed
