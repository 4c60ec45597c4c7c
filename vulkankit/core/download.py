"""
HTTP helpers: file downloads with progress tracking and retry logic, JSON
documents, and reachability checks.

This module provides the network primitives used by the version resolver and
the SDK downloader:
- Streaming HTTP/HTTPS downloads with TLS verification
- Progress reporting (bytes, percentage, speed, ETA)
- Retry logic with exponential backoff
- Timeout handling
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import requests
from requests.exceptions import RequestException

from vulkankit.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

USER_AGENT = "vulkankit"
MAX_REDIRECTS = 3


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def create_session() -> requests.Session:
    """
    Create an HTTP session with the client defaults used across vulkankit.

    Returns:
        Configured requests.Session
    """
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    session.max_redirects = MAX_REDIRECTS
    return session


def head_status(
    url: str, session: Optional[requests.Session] = None, timeout: int = 30
) -> int:
    """
    Send an HTTP HEAD request and return the final status code.

    Args:
        url: URL to probe
        session: Optional session (a new one is created if None)
        timeout: Request timeout in seconds

    Returns:
        HTTP status code after following redirects

    Raises:
        requests.RequestException: If the request cannot be made
    """
    session = session or create_session()
    response = session.head(url, timeout=timeout, allow_redirects=True)
    return response.status_code


def get_json(
    url: str, session: Optional[requests.Session] = None, timeout: int = 30
) -> Any:
    """
    Fetch and decode a JSON document.

    Args:
        url: URL of the JSON document
        session: Optional session (a new one is created if None)
        timeout: Request timeout in seconds

    Returns:
        Decoded JSON value

    Raises:
        DownloadError: If the request fails, returns an error status or the
            body is not valid JSON
    """
    session = session or create_session()
    try:
        response = session.get(url, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
        return response.json()
    except ValueError as e:
        raise DownloadError(f"Invalid JSON returned by {url}: {e}") from e
    except RequestException as e:
        raise DownloadError(f"Request to {url} failed: {e}") from e


def download_file(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: int = 30,
    max_retries: int = 3,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download file from URL to destination with retry logic.

    Args:
        url: URL to download from
        destination: Local path to save file
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds
        max_retries: Maximum number of retry attempts
        session: Optional session (a new one is created if None)

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ValueError: If URL or destination is invalid

    Example:
        >>> from vulkankit.core.download import download_file
        >>> url = "https://sdk.lunarg.com/sdk/download/1.3.250.1/linux/vulkansdk-linux-x86_64-1.3.250.1.tar.gz"
        >>> download_file(url, Path("/tmp/vulkansdk-linux-x86_64.tar.gz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    session = session or create_session()

    for attempt in range(max_retries):
        try:
            return _download_with_progress(
                url=url,
                destination=destination,
                progress_callback=progress_callback,
                timeout=timeout,
                session=session,
            )
        except RequestException as e:
            if attempt == max_retries - 1:
                raise DownloadError(
                    f"Download failed after {max_retries} attempts: {e}"
                ) from e

            # Exponential backoff
            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    raise DownloadError(f"Download failed: {url}")


def _download_with_progress(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
    session: requests.Session,
) -> Path:
    """
    Perform download with streaming and progress updates.

    This is an internal function called by download_file().
    """
    logger.debug(f"Downloading from {url}")

    with session.get(
        url, stream=True, timeout=timeout, allow_redirects=True
    ) as response:
        response.raise_for_status()

        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        try:
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=65536):
                    if not chunk:
                        continue
                    f.write(chunk)
                    downloaded += len(chunk)

                    # Report progress (max once per 0.5 seconds to avoid spam)
                    current_time = time.time()
                    if progress_callback and (
                        current_time - last_progress_time >= 0.5
                        or downloaded == total_size
                    ):
                        elapsed = current_time - start_time
                        speed = downloaded / elapsed if elapsed > 0 else 0
                        remaining = total_size - downloaded if total_size > 0 else 0
                        eta = remaining / speed if speed > 0 else 0

                        progress_callback(
                            DownloadProgress(
                                bytes_downloaded=downloaded,
                                total_bytes=total_size if total_size > 0 else downloaded,
                                percentage=(downloaded / total_size * 100)
                                if total_size > 0
                                else 0,
                                speed_bps=speed,
                                eta_seconds=eta,
                            )
                        )
                        last_progress_time = current_time
        except OSError as e:
            logger.error(f"Error writing download to {destination}: {e}")
            raise DownloadError(f"Failed to write {destination}: {e}") from e

    logger.debug(f"Download complete: {destination} ({downloaded} bytes)")
    return destination


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"
