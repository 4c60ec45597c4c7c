"""
Platform Strategy Interface.

This module defines the interface for platform strategies, which encapsulate
the platform-specific parts of acquiring and installing the Vulkan SDK: vendor
download naming conventions, the install procedure and the on-disk layout used
for verification.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from vulkankit.core.exceptions import InvalidVersionError, UnsupportedPlatformError
from vulkankit.core.platform import PlatformFacts
from vulkankit.core.versions import validate_version

DOWNLOAD_BASE_URL = "https://sdk.lunarg.com/sdk/download"


class PlatformStrategy(ABC):
    """
    Abstract base class for platform strategies.

    Args:
        facts: Platform facts the strategy works with
    """

    #: Environment variable that receives <sdk>/lib, if any
    library_path_variable: Optional[str] = None

    def __init__(self, facts: PlatformFacts):
        self.facts = facts

    # ------------------------------------------------------------------
    # Download naming
    # ------------------------------------------------------------------

    def base_url(self, version: str) -> str:
        """Versioned vendor download base URL for this platform."""
        self._check_version(version)
        return f"{DOWNLOAD_BASE_URL}/{version}/{self.facts.canonical_name()}"

    @abstractmethod
    def sdk_url(self, version: str) -> str:
        """
        Get the SDK download URL.

        Args:
            version: Concrete four component version

        Returns:
            Download URL
        """
        pass

    @abstractmethod
    def sdk_filename(self, version: str) -> str:
        """
        Get the local filename for the downloaded SDK.

        The extension always matches the artifact served by sdk_url() so the
        installer can select the extraction method from it.
        """
        pass

    @property
    def supports_runtime(self) -> bool:
        """Whether a separate runtime component bundle exists for this platform."""
        return False

    def runtime_url(self, version: str) -> str:
        """
        Get the runtime component download URL.

        Raises:
            UnsupportedPlatformError: If the platform has no runtime bundle
        """
        raise UnsupportedPlatformError(
            f"The Vulkan runtime is not available for {self.facts.canonical_name()}"
        )

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------

    def install_path(self, destination: Path, version: str) -> Path:
        """
        Get the directory the installer writes to (and the cache stores).

        Returns:
            destination unless the platform uses a version-qualified folder
        """
        return destination

    @abstractmethod
    def install(
        self,
        sdk_file: Path,
        destination: Path,
        version: str,
        optional_components: Sequence[str],
        reporter,
        strict: bool = False,
    ) -> Path:
        """
        Install the downloaded SDK.

        Args:
            sdk_file: Downloaded installer or archive
            destination: Installation root requested by the user
            version: Concrete SDK version
            optional_components: Validated optional component names
            reporter: ActionsReporter receiving failure annotations
            strict: Raise on installer failures instead of continuing

        Returns:
            Installation path
        """
        pass

    # ------------------------------------------------------------------
    # Layout and verification
    # ------------------------------------------------------------------

    def sdk_path(self, install_path: Path, version: str) -> Path:
        """Map an installation path (or cached destination) to the SDK path."""
        return install_path

    @abstractmethod
    def sdk_probe(self, sdk_path: Path) -> Path:
        """File whose presence marks an installed SDK."""
        pass

    def sdk_home(self, sdk_path: Path) -> Path:
        """Directory holding bin/, lib/ and etc/, used for VULKAN_SDK."""
        return sdk_path

    def verify_sdk(self, sdk_path: Path) -> bool:
        """Check that the SDK probe binary exists."""
        return self.sdk_probe(sdk_path).exists()

    def verify_runtime(self, sdk_path: Path) -> bool:
        """Check that the runtime loader exists. False where no runtime exists."""
        return False

    @staticmethod
    def _check_version(version: str) -> None:
        if not validate_version(version):
            raise InvalidVersionError(version)
