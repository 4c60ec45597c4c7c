"""
Download URL builder.

Pure functions mapping (version, platform facts) to vendor download URLs and
local filenames, plus the HTTP HEAD reachability pre-check.

Example:
    >>> facts = detect_platform()
    >>> build_sdk_url("1.3.250.1", facts)
    'https://sdk.lunarg.com/sdk/download/1.3.250.1/linux/vulkansdk-linux-x86_64-1.3.250.1.tar.gz'
"""

import logging
from typing import Optional

import requests
from requests.exceptions import RequestException

from vulkankit.core.download import head_status
from vulkankit.core.exceptions import InvalidVersionError
from vulkankit.core.platform import PlatformFacts
from vulkankit.core.versions import validate_version
from vulkankit.sdk.strategies import get_strategy

logger = logging.getLogger(__name__)


def _require_concrete(version: str) -> None:
    if not validate_version(version):
        raise InvalidVersionError(version)


def build_sdk_url(version: str, facts: PlatformFacts) -> str:
    """
    Build the SDK download URL.

    Raises:
        InvalidVersionError: If version is not a concrete four component version
    """
    _require_concrete(version)
    return get_strategy(facts).sdk_url(version)


def build_runtime_url(version: str, facts: PlatformFacts) -> str:
    """
    Build the runtime components download URL (Windows family only).

    Raises:
        InvalidVersionError: If version is not a concrete four component version
        UnsupportedPlatformError: If the platform has no runtime bundle
    """
    _require_concrete(version)
    return get_strategy(facts).runtime_url(version)


def build_sdk_filename(version: str, facts: PlatformFacts) -> str:
    """Build the local filename for the downloaded SDK."""
    _require_concrete(version)
    return get_strategy(facts).sdk_filename(version)


def is_downloadable(
    name: str,
    version: str,
    url: str,
    reporter,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> bool:
    """
    Check that a download URL is reachable with an HTTP HEAD request.

    A failed check is reported through reporter.set_failed(), but it never
    raises: the download is still attempted and fails on its own if the file
    really is missing.

    Args:
        name: Human readable artifact name ("VULKAN-SDK", "VULKAN-RUNTIME")
        version: Version the URL belongs to
        url: URL to probe
        reporter: ActionsReporter receiving the failure annotation
        session: Optional requests session
        timeout: Request timeout in seconds

    Returns:
        True if the server answered with a non-error status
    """
    try:
        status = head_status(url, session, timeout)
    except RequestException as e:
        reporter.set_failed(
            f"HTTP error: {name} {version} is not downloadable from '{url}': {e}"
        )
        return False

    if status >= 400:
        reporter.set_failed(
            f"HTTP error: {name} {version} is not downloadable from '{url}' "
            f"(HTTP {status})"
        )
        return False

    logger.info(f"{name} {version} is downloadable (HTTP {status}).")
    return True
