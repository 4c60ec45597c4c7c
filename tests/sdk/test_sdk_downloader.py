"""
Unit tests for SDK and runtime downloads.
"""

from unittest.mock import patch

import pytest
import responses

from vulkankit.core.exceptions import DownloadError, UnsupportedPlatformError
from vulkankit.sdk.downloader import SdkDownloader

LINUX_URL = (
    "https://sdk.lunarg.com/sdk/download/1.3.250.1/linux/"
    "vulkansdk-linux-x86_64-1.3.250.1.tar.gz"
)
RUNTIME_URL = (
    "https://sdk.lunarg.com/sdk/download/1.3.250.1/windows/"
    "vulkan-runtime-components.zip"
)


class TestSdkDownloader:
    """Tests for SdkDownloader."""

    @responses.activate
    def test_download_sdk(self, linux_facts, reporter):
        """Test the SDK is saved under its platform filename."""
        responses.add(responses.HEAD, LINUX_URL, status=200)
        responses.add(responses.GET, LINUX_URL, body=b"tarball")

        path = SdkDownloader(linux_facts, reporter).download_sdk("1.3.250.1")

        assert path == linux_facts.temp_dir / "vulkansdk-linux-x86_64.tar.gz"
        assert path.read_bytes() == b"tarball"
        assert reporter.exit_code == 0

    @responses.activate
    def test_download_dir_override(self, linux_facts, reporter, tmp_path):
        """Test an explicit download directory is used."""
        responses.add(responses.HEAD, LINUX_URL, status=200)
        responses.add(responses.GET, LINUX_URL, body=b"tarball")

        downloader = SdkDownloader(linux_facts, reporter, download_dir=tmp_path / "dl")
        path = downloader.download_sdk("1.3.250.1")

        assert path.parent == tmp_path / "dl"

    @responses.activate
    def test_failed_precheck_still_downloads(self, linux_facts, reporter):
        """Test an unreachable pre-check is reported but not fatal."""
        responses.add(responses.HEAD, LINUX_URL, status=403)
        responses.add(responses.GET, LINUX_URL, body=b"tarball")

        path = SdkDownloader(linux_facts, reporter).download_sdk("1.3.250.1")

        assert path.exists()
        assert reporter.failed

    @responses.activate
    def test_download_failure_raises(self, linux_facts, reporter):
        """Test a failing download raises DownloadError after retries."""
        responses.add(responses.HEAD, LINUX_URL, status=404)
        responses.add(responses.GET, LINUX_URL, status=404)

        with patch("vulkankit.core.download.time.sleep"):
            with pytest.raises(DownloadError):
                SdkDownloader(linux_facts, reporter, max_retries=2).download_sdk(
                    "1.3.250.1"
                )

    @responses.activate
    def test_download_runtime(self, windows_facts, reporter):
        """Test the runtime archive is downloaded on Windows."""
        responses.add(responses.HEAD, RUNTIME_URL, status=200)
        responses.add(responses.GET, RUNTIME_URL, body=b"zip")

        path = SdkDownloader(windows_facts, reporter).download_runtime("1.3.250.1")

        assert path.name == "vulkan-runtime-components.zip"

    def test_download_runtime_unsupported(self, linux_facts, reporter):
        """Test the runtime is refused on platforms without a bundle."""
        with pytest.raises(UnsupportedPlatformError):
            SdkDownloader(linux_facts, reporter).download_runtime("1.3.250.1")
