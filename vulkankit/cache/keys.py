"""
Cache key derivation.

Keys have the form "cache-{platform}-{arch}-vulkan-sdk-{version}", e.g.
"cache-linux-x64-vulkan-sdk-1.3.250.1". Restore keys are prefix truncations of
the primary key, most specific first, so an older installation of the same
platform can be reused when the exact version is not cached.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CacheKey:
    """Primary key plus the ordered restore (prefix) keys."""

    primary: str
    restore_keys: Tuple[str, ...]


def compute_keys(platform: str, arch: str, version: str) -> CacheKey:
    """
    Compute the cache keys for an SDK installation.

    Example:
        >>> compute_keys("linux", "x64", "1.3.250.1")
        CacheKey(primary='cache-linux-x64-vulkan-sdk-1.3.250.1', restore_keys=('cache-linux-x64-vulkan-sdk-', 'cache-linux-x64-'))
    """
    platform_prefix = f"cache-{platform}-{arch}-"
    sdk_prefix = f"{platform_prefix}vulkan-sdk-"
    return CacheKey(
        primary=f"{sdk_prefix}{version}",
        restore_keys=(sdk_prefix, platform_prefix),
    )
