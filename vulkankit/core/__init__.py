"""
Core functionality for vulkankit.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    PlatformFacts,
    PlatformFamily,
    detect_platform,
    clear_platform_cache,
    get_linux_distribution_version_id,
)

from .versions import (
    LATEST,
    legacy_compare,
    validate_version,
)

from .exceptions import (
    VulkanKitError,
    UnsupportedPlatformError,
    ConfigurationError,
    InvalidVersionError,
    VersionResolutionError,
    DownloadError,
    FilesystemError,
    ArchiveExtractionError,
    InstallerError,
    CacheError,
    CacheEntryExistsError,
    CacheLockTimeout,
)

__all__ = [
    "PlatformFacts",
    "PlatformFamily",
    "detect_platform",
    "clear_platform_cache",
    "get_linux_distribution_version_id",
    "LATEST",
    "legacy_compare",
    "validate_version",
    "VulkanKitError",
    "UnsupportedPlatformError",
    "ConfigurationError",
    "InvalidVersionError",
    "VersionResolutionError",
    "DownloadError",
    "FilesystemError",
    "ArchiveExtractionError",
    "InstallerError",
    "CacheError",
    "CacheEntryExistsError",
    "CacheLockTimeout",
]
