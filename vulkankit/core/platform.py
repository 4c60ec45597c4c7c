"""
Platform detection for vulkankit.

This module detects the execution environment once per process and exposes it
as an immutable PlatformFacts value that is passed to every component that needs
it. The Vulkan SDK download service names platforms differently from Python, so
this module also owns the mapping to the canonical names used in download URLs.

Usage:
    from vulkankit.core.platform import detect_platform

    facts = detect_platform()
    print(f"Family: {facts.family.value}")
    print(f"Canonical name: {facts.canonical_name()}")
"""

import functools
import platform
import re
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from vulkankit.core.exceptions import UnsupportedPlatformError

OS_RELEASE_PATH = Path("/etc/os-release")

_VERSION_ID_RE = re.compile(r'VERSION_ID="(\d+\.\d+)"')


class PlatformFamily(Enum):
    """Operating system family as seen by the Vulkan SDK download service."""

    WINDOWS = "windows"
    WINDOWS_ARM = "windows_arm"
    LINUX = "linux"
    LINUX_ARM = "linux_arm"
    MAC = "mac"


_CANONICAL_NAMES = {
    PlatformFamily.WINDOWS: "windows",
    PlatformFamily.WINDOWS_ARM: "warm",
    PlatformFamily.LINUX: "linux",
    PlatformFamily.LINUX_ARM: "linux",
    PlatformFamily.MAC: "mac",
}


@dataclass(frozen=True)
class PlatformFacts:
    """
    Facts about the execution environment.

    Attributes:
        family: Operating system family
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm' or the raw machine name)
        linux_distro_version: VERSION_ID from /etc/os-release, or empty
        home_dir: Home directory of the current user
        temp_dir: Temporary directory used for downloads and extraction
    """

    family: PlatformFamily
    arch: str
    linux_distro_version: str
    home_dir: Path
    temp_dir: Path

    @property
    def is_windows_family(self) -> bool:
        return self.family in (PlatformFamily.WINDOWS, PlatformFamily.WINDOWS_ARM)

    @property
    def is_linux_family(self) -> bool:
        return self.family in (PlatformFamily.LINUX, PlatformFamily.LINUX_ARM)

    @property
    def is_mac(self) -> bool:
        return self.family is PlatformFamily.MAC

    @property
    def is_arm(self) -> bool:
        return self.family in (PlatformFamily.WINDOWS_ARM, PlatformFamily.LINUX_ARM)

    def canonical_name(self) -> str:
        """
        Get the platform name used inside vendor download URLs.

        Returns:
            'windows', 'warm', 'linux' or 'mac'

        Example:
            >>> facts = PlatformFacts(PlatformFamily.WINDOWS_ARM, "arm64", "", Path("~"), Path("/tmp"))
            >>> facts.canonical_name()
            'warm'
        """
        return _CANONICAL_NAMES[self.family]

    def __str__(self) -> str:
        parts = [f"{self.canonical_name()}-{self.arch}"]
        if self.linux_distro_version:
            parts.append(f"({self.linux_distro_version})")
        return " ".join(parts)


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformFacts:
    """
    Detect current platform facts.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformFacts for the running interpreter

    Raises:
        UnsupportedPlatformError: If the operating system is not supported
    """
    arch = _detect_architecture()
    family = _detect_family(arch)
    distro_version = (
        get_linux_distribution_version_id()
        if family in (PlatformFamily.LINUX, PlatformFamily.LINUX_ARM)
        else ""
    )

    return PlatformFacts(
        family=family,
        arch=arch,
        linux_distro_version=distro_version,
        home_dir=Path.home(),
        temp_dir=Path(tempfile.gettempdir()),
    )


def _detect_family(arch: str) -> PlatformFamily:
    """
    Detect the operating system family.

    Args:
        arch: Normalized CPU architecture

    Returns:
        PlatformFamily value

    Raises:
        UnsupportedPlatformError: If the operating system is not supported
    """
    system = platform.system().lower()
    is_arm = arch in ("arm64", "arm")

    if system == "windows":
        return PlatformFamily.WINDOWS_ARM if is_arm else PlatformFamily.WINDOWS
    elif system == "linux":
        return PlatformFamily.LINUX_ARM if is_arm else PlatformFamily.LINUX
    elif system == "darwin":
        return PlatformFamily.MAC
    else:
        raise UnsupportedPlatformError(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        return machine


def get_linux_distribution_version_id(
    os_release_path: Union[str, Path] = OS_RELEASE_PATH,
) -> str:
    """
    Determine the Linux distribution version, e.g. "20.04" or "24.04".

    Args:
        os_release_path: Path to the os-release file

    Returns:
        The VERSION_ID value, or an empty string if absent or unparsable
    """
    try:
        content = Path(os_release_path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""

    match = _VERSION_ID_RE.search(content)
    if match:
        return match.group(1)
    return ""


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformFamily",
    "PlatformFacts",
    "detect_platform",
    "get_linux_distribution_version_id",
    "clear_platform_cache",
]
