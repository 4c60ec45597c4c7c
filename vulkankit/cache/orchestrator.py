"""
Cache restore and save around the SDK installation.
"""

import logging
from pathlib import Path
from typing import Optional

from vulkankit.cache.keys import CacheKey, compute_keys
from vulkankit.cache.store import CacheStore
from vulkankit.core.exceptions import CacheError
from vulkankit.core.platform import PlatformFacts

logger = logging.getLogger(__name__)


class CacheOrchestrator:
    """
    Restores an SDK installation before download and saves it afterwards.

    Neither a restore nor a save failure is fatal: a failed restore is a
    miss, a failed save is logged as a warning.

    Args:
        store: Cache store collaborator
        facts: Platform facts (key derivation and cached path shape)
    """

    def __init__(self, store: CacheStore, facts: PlatformFacts):
        self.store = store
        self.facts = facts

    def keys(self, version: str) -> CacheKey:
        return compute_keys(self.facts.canonical_name(), self.facts.arch, version)

    def cached_path(self, destination: Path, version: str) -> Path:
        """
        Path that is cached for an installation.

        On the Windows family the installer writes into destination/version,
        so that folder is cached; elsewhere it is the destination itself.
        """
        destination = Path(destination)
        if self.facts.is_windows_family:
            return destination / version
        return destination

    def restore(self, destination: Path, version: str) -> Optional[str]:
        """
        Try to restore a cached installation.

        Returns:
            The restored key, or None on a miss
        """
        keys = self.keys(version)
        path = self.cached_path(destination, version)

        try:
            hit = self.store.restore([path], keys.primary, keys.restore_keys)
        except (CacheError, OSError) as e:
            logger.warning(f"[Cache] Restore failed: {e}")
            hit = None

        if hit is None:
            logger.info("[Cache] Cache for 'Vulkan SDK' not found.")
            return None

        logger.info(
            f"[Cache] Restored Vulkan SDK in path: '{destination}'. Cache Restore ID: '{hit}'."
        )
        return hit

    def save(self, install_path: Path, version: str) -> Optional[int]:
        """
        Save an installation under the primary key only.

        Returns:
            The cache entry id, or None if saving failed
        """
        key = self.keys(version).primary
        try:
            cache_id = self.store.save([Path(install_path)], key)
        except (CacheError, OSError) as e:
            logger.warning(str(e))
            return None

        logger.info(
            f"[Cache] Saved Vulkan SDK in path: '{install_path}'. Cache Save ID: '{cache_id}'."
        )
        return cache_id
