"""
Vulkan SDK version resolution.

The LunarG version API publishes the latest SDK version per platform and the
list of all versions available for a platform:

    https://vulkan.lunarg.com/sdk/latest.json
        {"linux":"1.4.304.0","mac":"1.4.304.0","warm":"1.4.304.0","windows":"1.4.304.0"}

    https://vulkan.lunarg.com/sdk/versions/{platform}.json
        ["1.4.304.0","1.3.296.0","1.3.290.0", ...]

Platforms may report different latest versions at the same time, so the
resolver always reads the field for the caller's platform.
"""

import logging
from typing import Dict, List, Optional

import requests

from vulkankit.core.download import get_json
from vulkankit.core.exceptions import DownloadError, VersionResolutionError
from vulkankit.core.platform import PlatformFacts
from vulkankit.core.versions import LATEST

logger = logging.getLogger(__name__)

VERSION_API_URL = "https://vulkan.lunarg.com/sdk"
LATEST_VERSIONS_URL = f"{VERSION_API_URL}/latest.json"


class VersionResolver:
    """
    Turns a version token into a concrete SDK version.

    Example:
        >>> resolver = VersionResolver(detect_platform())
        >>> resolver.resolve("latest")
        '1.4.304.0'
        >>> resolver.resolve("1.3.250.1")
        '1.3.250.1'
    """

    def __init__(
        self,
        facts: PlatformFacts,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        self.facts = facts
        self.session = session
        self.timeout = timeout

    def get_latest_versions(self) -> Dict[str, str]:
        """
        Get the latest version for each platform.

        Raises:
            VersionResolutionError: If the document cannot be fetched or is malformed
        """
        try:
            data = get_json(LATEST_VERSIONS_URL, self.session, self.timeout)
        except DownloadError as e:
            raise VersionResolutionError(
                f"Unable to retrieve the latest version information from '{LATEST_VERSIONS_URL}': {e}"
            ) from e

        if not isinstance(data, dict) or not data:
            raise VersionResolutionError(
                f"Unexpected latest version document from '{LATEST_VERSIONS_URL}': {data!r}"
            )
        return data

    def get_available_versions(self) -> List[str]:
        """
        Get all SDK versions available for this platform.

        Raises:
            VersionResolutionError: If the list cannot be fetched or is malformed
        """
        url = f"{VERSION_API_URL}/versions/{self.facts.canonical_name()}.json"
        try:
            data = get_json(url, self.session, self.timeout)
        except DownloadError as e:
            raise VersionResolutionError(
                f"Unable to retrieve the list of all available Vulkan SDK versions from '{url}': {e}"
            ) from e

        if not isinstance(data, list):
            raise VersionResolutionError(
                f"Unexpected version list from '{url}': {data!r}"
            )
        return [str(v) for v in data]

    def latest_version_for_platform(self, latest_versions: Dict[str, str]) -> str:
        """
        Pick the latest version for this platform out of the latest document.

        Raises:
            VersionResolutionError: If the platform field is missing or empty
        """
        field = self.facts.canonical_name()
        version = latest_versions.get(field)
        if not version or not isinstance(version, str):
            raise VersionResolutionError(
                f"Latest version document has no entry for platform '{field}'"
            )
        return version

    def resolve(self, token: str) -> str:
        """
        Resolve a version token.

        "latest" is replaced by the latest version for this platform; any other
        token is returned unchanged.

        Raises:
            VersionResolutionError: If "latest" cannot be resolved
        """
        if token != LATEST:
            return token

        version = self.latest_version_for_platform(self.get_latest_versions())
        logger.info(f"Latest Version: {version}")
        return version
