"""
Linux Strategies.

The Linux SDK is a plain tarball which is extracted into the destination. The
archive's top-level folder is the version ("1.3.250.1/x86_64/bin/...").

ARM64 builds are not published by the vendor; they come from a community
release repository, built per Ubuntu release.
"""

import logging
from pathlib import Path
from typing import Sequence

from vulkankit.core.filesystem import extract_archive
from vulkankit.core.versions import legacy_compare

from ..strategy import PlatformStrategy

logger = logging.getLogger(__name__)

#: Last version published as .tar.gz; later versions are .tar.xz
LINUX_TAR_GZ_LAST_VERSION = "1.3.250.1"

ARM_RELEASES_URL = "https://github.com/jakoch/vulkan-sdk-arm/releases/download"
ARM_DEFAULT_DISTRO = "24.04"
ARM_LEGACY_DISTRO = "20.04"


class LinuxStrategy(PlatformStrategy):
    """Strategy for Linux x86_64."""

    library_path_variable = "LD_LIBRARY_PATH"
    arch_folder = "x86_64"

    def archive_extension(self, version: str) -> str:
        if legacy_compare(version, LINUX_TAR_GZ_LAST_VERSION) <= 0:
            return "tar.gz"
        return "tar.xz"

    def sdk_url(self, version: str) -> str:
        base = self.base_url(version)
        return f"{base}/vulkansdk-linux-x86_64-{version}.{self.archive_extension(version)}"

    def sdk_filename(self, version: str) -> str:
        return f"vulkansdk-linux-x86_64.{self.archive_extension(version)}"

    def install(
        self,
        sdk_file: Path,
        destination: Path,
        version: str,
        optional_components: Sequence[str],
        reporter,
        strict: bool = False,
    ) -> Path:
        if optional_components:
            logger.debug(
                "Optional components are part of the Linux archive, nothing to select"
            )
        logger.info(f"Extracting {Path(sdk_file).name} to {destination}")
        return extract_archive(sdk_file, destination)

    def sdk_path(self, install_path: Path, version: str) -> Path:
        versioned = Path(install_path) / version
        if versioned.is_dir():
            return versioned
        return Path(install_path)

    def sdk_probe(self, sdk_path: Path) -> Path:
        return Path(sdk_path) / self.arch_folder / "bin" / "vulkaninfo"

    def sdk_home(self, sdk_path: Path) -> Path:
        arch_home = Path(sdk_path) / self.arch_folder
        if arch_home.is_dir():
            return arch_home
        return Path(sdk_path)


class LinuxArmStrategy(LinuxStrategy):
    """Strategy for Linux ARM64."""

    arch_folder = "aarch64"

    def distro(self) -> str:
        """Ubuntu release the ARM build is taken from."""
        if self.facts.linux_distro_version == ARM_LEGACY_DISTRO:
            return ARM_LEGACY_DISTRO
        return ARM_DEFAULT_DISTRO

    def archive_extension(self, version: str) -> str:
        return "tar.xz"

    def sdk_url(self, version: str) -> str:
        self._check_version(version)
        return (
            f"{ARM_RELEASES_URL}/{version}/"
            f"vulkansdk-ubuntu-{self.distro()}-arm-{version}.tar.xz"
        )

    def sdk_filename(self, version: str) -> str:
        return "vulkansdk-linux-arm.tar.xz"
