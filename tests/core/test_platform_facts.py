"""
Unit tests for the platform detection module.

Tests cover:
- PlatformFacts derived booleans and canonical names
- OS family and architecture detection with mocking
- Linux distribution version probe
- Cache behavior
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from vulkankit.core.exceptions import UnsupportedPlatformError
from vulkankit.core.platform import (
    PlatformFacts,
    PlatformFamily,
    _detect_architecture,
    _detect_family,
    clear_platform_cache,
    detect_platform,
    get_linux_distribution_version_id,
)


def facts_for(family, arch="x64"):
    return PlatformFacts(family, arch, "", Path("/home/runner"), Path("/tmp"))


class TestPlatformFacts:
    """Tests for PlatformFacts dataclass."""

    @pytest.mark.parametrize(
        "family,expected",
        [
            (PlatformFamily.WINDOWS, "windows"),
            (PlatformFamily.WINDOWS_ARM, "warm"),
            (PlatformFamily.LINUX, "linux"),
            (PlatformFamily.LINUX_ARM, "linux"),
            (PlatformFamily.MAC, "mac"),
        ],
    )
    def test_canonical_name(self, family, expected):
        """Test canonical platform name used in download URLs."""
        assert facts_for(family).canonical_name() == expected

    def test_windows_family_flags(self):
        """Test Windows and Windows ARM are both in the Windows family."""
        assert facts_for(PlatformFamily.WINDOWS).is_windows_family
        assert facts_for(PlatformFamily.WINDOWS_ARM).is_windows_family
        assert not facts_for(PlatformFamily.LINUX).is_windows_family

    def test_linux_family_flags(self):
        """Test Linux and Linux ARM are both in the Linux family."""
        assert facts_for(PlatformFamily.LINUX).is_linux_family
        assert facts_for(PlatformFamily.LINUX_ARM).is_linux_family
        assert not facts_for(PlatformFamily.MAC).is_linux_family

    def test_is_arm(self):
        """Test ARM flag follows the family, not the arch string."""
        assert facts_for(PlatformFamily.LINUX_ARM, "arm64").is_arm
        assert facts_for(PlatformFamily.WINDOWS_ARM, "arm64").is_arm
        assert not facts_for(PlatformFamily.MAC, "arm64").is_arm

    def test_is_mac(self):
        """Test mac flag."""
        assert facts_for(PlatformFamily.MAC).is_mac
        assert not facts_for(PlatformFamily.LINUX).is_mac

    def test_facts_are_immutable(self):
        """Test PlatformFacts cannot be modified."""
        facts = facts_for(PlatformFamily.LINUX)
        with pytest.raises(AttributeError):
            facts.arch = "arm64"

    def test_str_includes_distro(self):
        """Test string form includes the distro version when known."""
        facts = PlatformFacts(
            PlatformFamily.LINUX, "x64", "22.04", Path("/home"), Path("/tmp")
        )
        assert str(facts) == "linux-x64 (22.04)"


class TestArchitectureDetection:
    """Tests for architecture normalization."""

    @pytest.mark.parametrize(
        "machine,expected",
        [
            ("x86_64", "x64"),
            ("AMD64", "x64"),
            ("aarch64", "arm64"),
            ("arm64", "arm64"),
            ("i686", "x86"),
            ("armv7l", "arm"),
            ("riscv64", "riscv64"),
        ],
    )
    def test_normalize(self, machine, expected):
        """Test machine names are normalized."""
        with patch("platform.machine", return_value=machine):
            assert _detect_architecture() == expected


class TestFamilyDetection:
    """Tests for OS family detection."""

    @pytest.mark.parametrize(
        "system,arch,expected",
        [
            ("Windows", "x64", PlatformFamily.WINDOWS),
            ("Windows", "arm64", PlatformFamily.WINDOWS_ARM),
            ("Linux", "x64", PlatformFamily.LINUX),
            ("Linux", "arm64", PlatformFamily.LINUX_ARM),
            ("Darwin", "arm64", PlatformFamily.MAC),
            ("Darwin", "x64", PlatformFamily.MAC),
        ],
    )
    def test_detect_family(self, system, arch, expected):
        """Test family detection from system name and architecture."""
        with patch("platform.system", return_value=system):
            assert _detect_family(arch) is expected

    def test_unsupported_system(self):
        """Test unknown operating systems raise UnsupportedPlatformError."""
        with patch("platform.system", return_value="SunOS"):
            with pytest.raises(UnsupportedPlatformError, match="sunos"):
                _detect_family("x64")


class TestLinuxDistributionVersion:
    """Tests for the os-release probe."""

    def test_parses_version_id(self, tmp_path):
        """Test VERSION_ID is read from os-release."""
        os_release = tmp_path / "os-release"
        os_release.write_text(
            'NAME="Ubuntu"\nVERSION_ID="20.04"\nVERSION_CODENAME=focal\n'
        )
        assert get_linux_distribution_version_id(os_release) == "20.04"

    def test_missing_file(self, tmp_path):
        """Test a missing file yields an empty string."""
        assert get_linux_distribution_version_id(tmp_path / "missing") == ""

    def test_no_match(self, tmp_path):
        """Test a file without a quoted X.Y VERSION_ID yields an empty string."""
        os_release = tmp_path / "os-release"
        os_release.write_text("NAME=Arch\nVERSION_ID=rolling\n")
        assert get_linux_distribution_version_id(os_release) == ""


class TestDetectPlatform:
    """Tests for detect_platform caching."""

    def setup_method(self):
        clear_platform_cache()

    def teardown_method(self):
        clear_platform_cache()

    def test_detection_is_cached(self):
        """Test detection runs once per process."""
        with patch("platform.system", return_value="Linux"), patch(
            "platform.machine", return_value="x86_64"
        ):
            first = detect_platform()
            second = detect_platform()
        assert first is second

    def test_clear_cache(self):
        """Test clearing the cache re-runs detection."""
        with patch("platform.system", return_value="Darwin"), patch(
            "platform.machine", return_value="arm64"
        ):
            mac = detect_platform()
        clear_platform_cache()
        with patch("platform.system", return_value="Windows"), patch(
            "platform.machine", return_value="AMD64"
        ):
            windows = detect_platform()

        assert mac.family is PlatformFamily.MAC
        assert windows.family is PlatformFamily.WINDOWS
        assert windows.linux_distro_version == ""
