"""
Windows Strategies.

Implementations for Windows x64 and Windows on ARM ("warm"). Both use the
vendor .exe installer, which is run elevated, and both offer the runtime
component bundle.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Sequence

from ..process import installer_arguments, run_step
from ..strategy import PlatformStrategy

logger = logging.getLogger(__name__)

INSTALLER_FILENAME = "VulkanSDK-Installer.exe"
RUNTIME_ARCHIVE = "vulkan-runtime-components.zip"


def elevated_command(executable: Path, arguments: List[str]) -> List[str]:
    """
    Build a PowerShell command that runs an executable elevated and waits.

    Start-Process -Wait blocks until the installer process has exited, and the
    installer's exit code becomes the exit code of the PowerShell process.
    """
    exe = str(executable).replace("'", "''")
    args = subprocess.list2cmdline(arguments).replace("'", "''")
    script = (
        f"$p = Start-Process -FilePath '{exe}' -ArgumentList '{args}' "
        f"-Verb RunAs -Wait -PassThru; exit $p.ExitCode"
    )
    return ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command", script]


class WindowsStrategy(PlatformStrategy):
    """Strategy for Windows x64."""

    def sdk_url(self, version: str) -> str:
        return f"{self.base_url(version)}/VulkanSDK-{version}-Installer.exe"

    def sdk_filename(self, version: str) -> str:
        return INSTALLER_FILENAME

    @property
    def supports_runtime(self) -> bool:
        return True

    def runtime_url(self, version: str) -> str:
        return f"{self.base_url(version)}/{RUNTIME_ARCHIVE}"

    def install_path(self, destination: Path, version: str) -> Path:
        """Installs always go into a version-qualified folder, e.g. C:/VulkanSDK/1.3.250.1."""
        return Path(destination) / version

    def install(
        self,
        sdk_file: Path,
        destination: Path,
        version: str,
        optional_components: Sequence[str],
        reporter,
        strict: bool = False,
    ) -> Path:
        install_path = self.install_path(destination, version)
        arguments = installer_arguments(install_path, optional_components)

        logger.info(f"Running Vulkan SDK installer for {install_path}")
        run_step(
            elevated_command(Path(sdk_file), arguments),
            f"Installer failed. Arguments used: {' '.join(arguments)}",
            reporter,
            strict,
        )
        return install_path

    def sdk_path(self, install_path: Path, version: str) -> Path:
        install_path = Path(install_path)
        if install_path.name == version:
            return install_path
        return install_path / version

    def sdk_probe(self, sdk_path: Path) -> Path:
        return Path(sdk_path) / "bin" / "vulkaninfoSDK.exe"

    def runtime_probe(self, sdk_path: Path) -> Path:
        return Path(sdk_path) / "runtime" / "x64" / "vulkan-1.dll"

    def verify_runtime(self, sdk_path: Path) -> bool:
        return self.runtime_probe(sdk_path).exists()


class WindowsArmStrategy(WindowsStrategy):
    """Strategy for Windows on ARM64. The vendor ships a differently named installer."""

    def sdk_url(self, version: str) -> str:
        return f"{self.base_url(version)}/InstallVulkanARM64-{version}.exe"
