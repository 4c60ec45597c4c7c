"""
Caching of SDK installations.
"""

from vulkankit.cache.keys import CacheKey, compute_keys
from vulkankit.cache.orchestrator import CacheOrchestrator
from vulkankit.cache.store import CacheStore, LocalCacheStore, paths_version

__all__ = [
    "CacheKey",
    "CacheOrchestrator",
    "CacheStore",
    "LocalCacheStore",
    "compute_keys",
    "paths_version",
]
