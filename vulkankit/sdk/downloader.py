"""
Vulkan SDK and runtime downloads.
"""

import logging
from pathlib import Path
from typing import Optional

import requests

from vulkankit.core.download import (
    DownloadProgress,
    create_session,
    download_file,
    format_progress,
)
from vulkankit.core.platform import PlatformFacts
from vulkankit.sdk.urls import (
    build_runtime_url,
    build_sdk_filename,
    build_sdk_url,
    is_downloadable,
)

logger = logging.getLogger(__name__)

RUNTIME_FILENAME = "vulkan-runtime-components.zip"


class SdkDownloader:
    """
    Downloads the Vulkan SDK and the runtime components.

    Every download runs the reachability pre-check first. A failed pre-check
    is reported but the download is attempted anyway; transport failures of
    the download itself propagate as DownloadError.

    Args:
        facts: Platform facts
        reporter: ActionsReporter receiving failure annotations
        download_dir: Directory for downloaded files (defaults to facts.temp_dir)
        session: Optional requests session shared by all requests
        timeout: Request timeout in seconds
        max_retries: Download attempts before giving up
    """

    def __init__(
        self,
        facts: PlatformFacts,
        reporter,
        download_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
        max_retries: int = 3,
    ):
        self.facts = facts
        self.reporter = reporter
        self.download_dir = Path(download_dir or facts.temp_dir)
        self.session = session or create_session()
        self.timeout = timeout
        self.max_retries = max_retries

    def download_sdk(self, version: str) -> Path:
        """
        Download the SDK installer or archive.

        Returns:
            Path to the downloaded file

        Raises:
            DownloadError: If the download fails after retries
        """
        url = build_sdk_url(version, self.facts)
        filename = build_sdk_filename(version, self.facts)
        return self._download("VULKAN-SDK", version, url, filename)

    def download_runtime(self, version: str) -> Path:
        """
        Download the runtime components archive (Windows family only).

        Raises:
            UnsupportedPlatformError: If the platform has no runtime bundle
            DownloadError: If the download fails after retries
        """
        url = build_runtime_url(version, self.facts)
        return self._download("VULKAN-RUNTIME", version, url, RUNTIME_FILENAME)

    def _download(self, name: str, version: str, url: str, filename: str) -> Path:
        is_downloadable(name, version, url, self.reporter, self.session, self.timeout)

        destination = self.download_dir / filename
        logger.info(f"Downloading {name} {version} from {url}")

        path = download_file(
            url,
            destination,
            progress_callback=self._log_progress,
            timeout=self.timeout,
            max_retries=self.max_retries,
            session=self.session,
        )
        logger.info(f"Downloaded {name} {version} to {path}")
        return path

    @staticmethod
    def _log_progress(progress: DownloadProgress) -> None:
        logger.debug(format_progress(progress))
