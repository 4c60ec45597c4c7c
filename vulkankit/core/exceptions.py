"""
Centralized exception hierarchy for vulkankit.

This module defines all custom exceptions used across the codebase
to provide clear exception semantics for the install pipeline.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class VulkanKitError(Exception):
    """Base exception for all vulkankit errors."""

    pass


class UnsupportedPlatformError(VulkanKitError):
    """Raised when the operation is not available on the current platform."""

    pass


class ConfigurationError(VulkanKitError):
    """Raised when configuration or action inputs cannot be used."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class InvalidVersionError(VulkanKitError):
    """Invalid version format."""

    def __init__(self, version: str, available_versions=None):
        self.version = version
        self.available_versions = list(available_versions or [])
        msg = (
            f"Invalid format of vulkan_version: '{version}'. "
            "Please specify a version using the format 'major.minor.build.rev'."
        )
        if self.available_versions:
            msg += f" The following versions are available: {', '.join(self.available_versions)}."
        super().__init__(msg)


class VersionResolutionError(VulkanKitError):
    """Raised when a version cannot be resolved from the remote version documents."""

    pass


# ============================================================================
# Download / Install Exceptions
# ============================================================================


class DownloadError(VulkanKitError):
    """Exception raised when download fails."""

    pass


class FilesystemError(VulkanKitError):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class InstallerError(VulkanKitError):
    """Raised when the vendor installer or a mount step fails in strict mode."""

    pass


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(VulkanKitError):
    """Base exception for cache store errors."""

    pass


class CacheEntryExistsError(CacheError):
    """Raised when saving under a key that is already stored."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Cache entry already exists for key: {key}")


class CacheLockTimeout(CacheError):
    """Raised when the cache lock cannot be acquired within timeout."""

    pass
