"""
Vulkan SDK installation.

SdkInstaller hands the downloaded artifact to the platform strategy and adds
the platform independent steps around it: the runtime components install on
the Windows family, post-install verification by file probes, and stripdown
of an installation before it is cached.

Example:
    >>> installer = SdkInstaller(facts, reporter)
    >>> install_path = installer.install_sdk(sdk_file, Path("C:/VulkanSDK"), "1.3.250.1", [])
    >>> installer.verify_sdk(installer.sdk_path(install_path, "1.3.250.1"))
    True
"""

import logging
import time
from pathlib import Path
from typing import List, Optional, Sequence

from vulkankit.config.inputs import InstallerOptions
from vulkankit.core.exceptions import InstallerError, UnsupportedPlatformError
from vulkankit.core.filesystem import (
    copy_tree,
    delete_files_in_folder,
    extract_archive,
    remove_folder_if_exists,
    safe_rmtree,
)
from vulkankit.core.platform import PlatformFacts
from vulkankit.sdk.strategies import get_strategy
from vulkankit.sdk.strategy import PlatformStrategy

logger = logging.getLogger(__name__)

#: Folders removed by stripdown; the payload kept is bin/, lib/, include/ etc.
STRIPDOWN_FOLDERS = ("Demos", "Helpers", "installerResources", "Licenses", "Templates")

RUNTIME_TEMP_FOLDER = "vulkan-runtime"

_POLL_INITIAL = 0.1
_POLL_MAX = 1.0


class SdkInstaller:
    """
    Installs the Vulkan SDK and the runtime components.

    Args:
        facts: Platform facts
        reporter: ActionsReporter receiving failure annotations
        options: Installer options (strict mode, runtime settling)
        strategy: Platform strategy (selected from facts if None)
    """

    def __init__(
        self,
        facts: PlatformFacts,
        reporter,
        options: Optional[InstallerOptions] = None,
        strategy: Optional[PlatformStrategy] = None,
    ):
        self.facts = facts
        self.reporter = reporter
        self.options = options or InstallerOptions()
        self.strategy = strategy or get_strategy(facts)

    def install_sdk(
        self,
        sdk_file: Path,
        destination: Path,
        version: str,
        optional_components: Sequence[str] = (),
    ) -> Path:
        """
        Install the SDK.

        Returns:
            Installation path: destination/version on the Windows family, the
            destination elsewhere

        Raises:
            ArchiveExtractionError: If the archive cannot be extracted
            InstallerError: In strict mode, if the installer fails
        """
        logger.info("Extracting Vulkan SDK...")
        install_path = self.strategy.install(
            Path(sdk_file),
            Path(destination),
            version,
            list(optional_components),
            self.reporter,
            strict=self.options.strict,
        )
        logger.info(f"Installed into folder: {install_path}")
        return install_path

    def install_runtime(self, runtime_file: Path, destination: Path, version: str) -> Path:
        """
        Install the runtime components into destination/version/runtime.

        The archive contains one top-level folder whose name is not known in
        advance (e.g. VulkanRT-1.3.250.1-Components); its contents are copied.

        Raises:
            UnsupportedPlatformError: If the platform has no runtime bundle
            InstallerError: If the extracted archive is empty
        """
        if not self.strategy.supports_runtime:
            raise UnsupportedPlatformError(
                f"The Vulkan runtime is not available for {self.facts.canonical_name()}"
            )

        runtime_path = Path(destination) / version / "runtime"
        staging = Path(self.facts.temp_dir) / RUNTIME_TEMP_FOLDER
        if staging.exists():
            safe_rmtree(staging, require_prefix=self.facts.temp_dir)

        logger.info("Extracting Vulkan Runtime (vulkan-1.dll)...")
        try:
            extract_archive(runtime_file, staging)
            source = self._wait_for_extracted_folder(staging)
            copy_tree(source, runtime_path)
        finally:
            safe_rmtree(staging, require_prefix=self.facts.temp_dir)

        logger.info(f"Installed Vulkan Runtime into {runtime_path}")
        return runtime_path

    def _wait_for_extracted_folder(self, staging: Path) -> Path:
        """
        Wait until the extracted top-level folder is visible, then return it.

        Falls back to the staging folder itself when the archive has no single
        top-level folder.
        """
        if self.options.settle_delay > 0:
            time.sleep(self.options.settle_delay)

        deadline = time.monotonic() + self.options.settle_timeout
        interval = _POLL_INITIAL
        while True:
            entries = _list_entries(staging)
            if len(entries) == 1 and entries[0].is_dir():
                return entries[0]
            if time.monotonic() >= deadline:
                break
            time.sleep(interval)
            interval = min(interval * 2, _POLL_MAX)

        if not entries:
            raise InstallerError(f"Runtime archive extracted nothing into {staging}")

        logger.warning(
            f"Runtime archive has no single top-level folder, copying {staging} as is"
        )
        return staging

    def sdk_path(self, install_path: Path, version: str) -> Path:
        """Map an installation path (or restored cache destination) to the SDK path."""
        return self.strategy.sdk_path(Path(install_path), version)

    def sdk_home(self, sdk_path: Path) -> Path:
        return self.strategy.sdk_home(Path(sdk_path))

    def verify_sdk(self, sdk_path: Path) -> bool:
        """Check for the SDK probe binary. A missing binary is a warning only."""
        probe = self.strategy.sdk_probe(Path(sdk_path))
        if probe.exists():
            logger.info(f"Found Vulkan SDK binary at {probe}")
            return True
        logger.warning(f"Could not find Vulkan SDK in {sdk_path} (missing {probe})")
        return False

    def verify_runtime(self, sdk_path: Path) -> bool:
        """Check for the runtime loader (Windows family only)."""
        runtime = Path(sdk_path) / "runtime"
        if self.strategy.verify_runtime(Path(sdk_path)):
            logger.info(f"Path to Vulkan Runtime: {runtime}")
            return True
        logger.warning(f"Could not find Vulkan Runtime in {runtime}")
        return False

    def stripdown(self, install_path: Path) -> List[Path]:
        """
        Shrink an installation before it is cached (Windows family only).

        Removes the known-large folders and every regular file directly in
        the installation root. Missing folders are logged and skipped.

        Returns:
            Removed paths
        """
        if not self.facts.is_windows_family:
            logger.info("Stripdown is only supported on Windows, skipping")
            return []

        install_path = Path(install_path)
        logger.info(f"Stripping down installation at {install_path}")

        removed = []
        for name in STRIPDOWN_FOLDERS:
            folder = install_path / name
            if remove_folder_if_exists(folder):
                removed.append(folder)

        if install_path.is_dir():
            removed.extend(delete_files_in_folder(install_path))
        return removed


def _list_entries(folder: Path) -> List[Path]:
    if not folder.is_dir():
        return []
    return sorted(folder.iterdir())
