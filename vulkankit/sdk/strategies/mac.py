"""
macOS Strategy.

The macOS SDK was shipped as a disk image (.dmg) up to 1.3.290.0 and as a .zip
since 1.3.296.0. Both contain the Qt installer app, which is run with sudo.
"""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from vulkankit.core.exceptions import FilesystemError
from vulkankit.core.filesystem import copy_tree, extract_archive, safe_rmtree
from vulkankit.core.versions import legacy_compare

from ..process import installer_arguments, report_failure, run_step
from ..strategy import PlatformStrategy

logger = logging.getLogger(__name__)

#: Last version published as .dmg; later versions are .zip
MAC_DMG_LAST_VERSION = "1.3.290.0"

VOLUMES_ROOT = Path("/Volumes")


class MacStrategy(PlatformStrategy):
    """Strategy for macOS (universal binaries)."""

    library_path_variable = "DYLD_LIBRARY_PATH"
    arch_folder = "x86_64"

    def __init__(self, facts, volumes_root: Path = VOLUMES_ROOT):
        super().__init__(facts)
        self.volumes_root = Path(volumes_root)

    def uses_disk_image(self, version: str) -> bool:
        return legacy_compare(version, MAC_DMG_LAST_VERSION) <= 0

    def archive_extension(self, version: str) -> str:
        return "dmg" if self.uses_disk_image(version) else "zip"

    def sdk_url(self, version: str) -> str:
        base = self.base_url(version)
        return f"{base}/vulkansdk-macos-{version}.{self.archive_extension(version)}"

    def sdk_filename(self, version: str) -> str:
        return f"vulkansdk-macos.{self.archive_extension(version)}"

    def install(
        self,
        sdk_file: Path,
        destination: Path,
        version: str,
        optional_components: Sequence[str],
        reporter,
        strict: bool = False,
    ) -> Path:
        destination = Path(destination)
        staging = Path(tempfile.mkdtemp(prefix="vulkansdk_", dir=self._temp_parent()))
        try:
            if self.uses_disk_image(version):
                if not self._stage_disk_image(Path(sdk_file), staging, reporter, strict):
                    return destination
            else:
                logger.info(f"Extracting {Path(sdk_file).name} to {staging}")
                extract_archive(sdk_file, staging)

            app = self.find_installer_app(staging)
            if app is None:
                report_failure(f"No installer app found in {staging}", reporter, strict)
                return destination

            binary = app / "Contents" / "MacOS" / app.stem
            arguments = installer_arguments(destination, optional_components)

            logger.info(f"Running {app.name} for {destination}")
            run_step(
                ["sudo", str(binary), *arguments],
                f"Installer failed. Arguments used: {' '.join(arguments)}",
                reporter,
                strict,
            )
        finally:
            safe_rmtree(staging)

        return destination

    def _stage_disk_image(
        self, image: Path, staging: Path, reporter, strict: bool
    ) -> bool:
        """Mount the disk image and copy the mounted volume into staging."""
        run_step(
            ["hdiutil", "attach", str(image)],
            "Mounting the disk image failed.",
            reporter,
            strict,
        )

        volume = self.find_mounted_volume()
        if volume is None:
            report_failure("Could not find the mounted volume.", reporter, strict)
            return False

        try:
            copy_tree(volume, staging)
        except (FilesystemError, OSError) as e:
            report_failure(
                f"Copying the contents of the mounted volume to '{staging}' failed: {e}",
                reporter,
                strict,
            )
            return False
        finally:
            self._detach(volume)

        return True

    def find_mounted_volume(self) -> Optional[Path]:
        """First mounted volume whose name contains "VulkanSDK"."""
        if not self.volumes_root.is_dir():
            return None
        for volume in sorted(self.volumes_root.iterdir()):
            if "VulkanSDK" in volume.name:
                return volume
        return None

    @staticmethod
    def find_installer_app(folder: Path) -> Optional[Path]:
        """Locate InstallVulkan.app (or a versioned InstallVulkan-<v>.app)."""
        exact = folder / "InstallVulkan.app"
        if exact.is_dir():
            return exact
        candidates = sorted(folder.glob("InstallVulkan*.app"))
        return candidates[0] if candidates else None

    @staticmethod
    def _detach(volume: Path) -> None:
        try:
            result = subprocess.run(
                ["hdiutil", "detach", str(volume)],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            logger.warning(f"Could not detach {volume}: {e}")
            return
        if result.returncode != 0:
            logger.warning(f"Could not detach {volume}: {result.stderr.strip()}")

    def _temp_parent(self) -> Path:
        parent = Path(self.facts.temp_dir)
        parent.mkdir(parents=True, exist_ok=True)
        return parent

    def sdk_probe(self, sdk_path: Path) -> Path:
        return Path(sdk_path) / self.arch_folder / "bin" / "vulkaninfo"

    def sdk_home(self, sdk_path: Path) -> Path:
        arch_home = Path(sdk_path) / self.arch_folder
        if arch_home.is_dir():
            return arch_home
        return Path(sdk_path)
