"""
Cache stores.

A cache store keeps directory trees under string keys. LocalCacheStore is a
filesystem implementation: each entry is a .tar.gz archive in the cache
directory, and registry.json maps keys to archives. The registry is guarded by
a file lock so concurrent jobs on one machine (self-hosted runners) can share
one cache directory.

Layout:
    <cache_dir>/registry.json
    <cache_dir>/lock/registry.lock
    <cache_dir>/archives/<id>.tar.gz

Entries are scoped by a hash of the cached path list, so a restore only
matches entries that were saved for the same set of paths.
"""

import hashlib
import json
import logging
import os
import tarfile
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from filelock import FileLock, Timeout

from vulkankit.core.exceptions import (
    CacheEntryExistsError,
    CacheError,
    CacheLockTimeout,
    FilesystemError,
)
from vulkankit.core.filesystem import (
    atomic_write,
    copy_tree,
    extract_archive,
    temporary_directory,
)

logger = logging.getLogger(__name__)

REGISTRY_VERSION = 1


class CacheStore(Protocol):
    """Interface of the binary cache collaborator."""

    def restore(
        self, paths: Sequence[Path], primary_key: str, restore_keys: Sequence[str] = ()
    ) -> Optional[str]:
        """Restore paths; returns the matched key or None on a miss."""
        ...

    def save(self, paths: Sequence[Path], key: str) -> int:
        """Save paths under key; returns the entry id."""
        ...


def paths_version(paths: Sequence[Path]) -> str:
    """Hash identifying a cached path list."""
    normalized = "\n".join(os.path.normpath(str(p)) for p in paths)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def _is_valid_entry(entry) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("key"), str)
        and isinstance(entry.get("archive"), str)
    )


class LocalCacheStore:
    """
    Cache store backed by a local directory.

    Example:
        >>> store = LocalCacheStore(Path("~/.vulkankit/cache").expanduser())
        >>> store.save([Path("/home/runner/vulkan-sdk")], "cache-linux-x64-vulkan-sdk-1.3.250.1")
        1
        >>> store.restore([Path("/home/runner/vulkan-sdk")], "cache-linux-x64-vulkan-sdk-1.3.250.1")
        'cache-linux-x64-vulkan-sdk-1.3.250.1'
    """

    def __init__(self, cache_dir: Path, lock_timeout: int = 30):
        self.cache_dir = Path(cache_dir)
        self.registry_path = self.cache_dir / "registry.json"
        self.archive_dir = self.cache_dir / "archives"
        self.lock_path = self.cache_dir / "lock" / "registry.lock"
        self.lock_timeout = lock_timeout

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def _empty_registry(self) -> dict:
        return {"version": REGISTRY_VERSION, "next_id": 1, "entries": []}

    def _load_registry(self) -> dict:
        if not self.registry_path.exists():
            return self._empty_registry()

        try:
            with open(self.registry_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load cache registry: {e}")
            raise CacheError(f"Failed to load cache registry: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            logger.warning("Invalid cache registry format, resetting")
            return self._empty_registry()

        entries = [e for e in data["entries"] if _is_valid_entry(e)]
        if len(entries) != len(data["entries"]):
            logger.warning(
                f"Ignoring {len(data['entries']) - len(entries)} malformed cache registry entries"
            )
            data["entries"] = entries
        return data

    def _save_registry(self, data: dict) -> None:
        try:
            atomic_write(self.registry_path, json.dumps(data, indent=2))
        except OSError as e:
            raise CacheError(f"Failed to save cache registry: {e}") from e

    @contextmanager
    def _lock(self):
        lock = FileLock(self.lock_path, timeout=self.lock_timeout)
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            lock.acquire()
        except Timeout as e:
            raise CacheLockTimeout(
                f"Could not acquire cache lock within {self.lock_timeout} seconds"
            ) from e
        except OSError as e:
            raise CacheError(f"Failed to acquire cache lock {self.lock_path}: {e}") from e

        try:
            yield
        finally:
            lock.release()

    def entries(self) -> List[dict]:
        """All registered entries, oldest first."""
        with self._lock():
            return list(self._load_registry()["entries"])

    # ------------------------------------------------------------------
    # Restore / save
    # ------------------------------------------------------------------

    @staticmethod
    def _match(
        entries: List[dict], version: str, primary_key: str, restore_keys: Sequence[str]
    ) -> Optional[dict]:
        scoped = [e for e in entries if e.get("paths_version") == version]
        for entry in scoped:
            if entry["key"] == primary_key:
                return entry

        newest_first = sorted(
            scoped, key=lambda e: (e.get("created", ""), e.get("id", 0)), reverse=True
        )
        for prefix in restore_keys:
            for entry in newest_first:
                if entry["key"].startswith(prefix):
                    return entry
        return None

    def restore(
        self, paths: Sequence[Path], primary_key: str, restore_keys: Sequence[str] = ()
    ) -> Optional[str]:
        """
        Restore cached paths.

        The exact primary key is tried first, then each restore key as a
        prefix, newest entry first.

        Returns:
            The key of the restored entry, or None on a miss

        Raises:
            CacheError: If the registry or the archive cannot be read
            CacheLockTimeout: If the lock cannot be acquired
        """
        paths = [Path(p) for p in paths]
        version = paths_version(paths)

        with self._lock():
            entry = self._match(
                self._load_registry()["entries"], version, primary_key, restore_keys
            )

        if entry is None:
            logger.debug(f"No cache entry for {primary_key}")
            return None

        archive = self.archive_dir / entry["archive"]
        if not archive.exists():
            raise CacheError(f"Cache archive missing for key {entry['key']}: {archive}")

        logger.debug(f"Restoring {entry['key']} from {archive}")
        try:
            with temporary_directory(prefix="vulkankit_restore_", parent=self.cache_dir) as temp:
                extract_archive(archive, temp)
                for index, path in enumerate(paths):
                    source = temp / str(index)
                    if source.is_dir():
                        copy_tree(source, path)
        except (FilesystemError, OSError) as e:
            raise CacheError(f"Failed to restore cache entry {entry['key']}: {e}") from e

        return entry["key"]

    def save(self, paths: Sequence[Path], key: str) -> int:
        """
        Save paths under a key.

        Returns:
            Id of the new entry

        Raises:
            CacheEntryExistsError: If the key is already stored for these paths
            CacheError: If a path is missing or the archive cannot be written
            CacheLockTimeout: If the lock cannot be acquired
        """
        paths = [Path(p) for p in paths]
        version = paths_version(paths)

        for path in paths:
            if not path.is_dir():
                raise CacheError(f"Path does not exist or is not a directory: {path}")

        with self._lock():
            if self._find(self._load_registry(), key, version):
                raise CacheEntryExistsError(key)

        try:
            self.archive_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=self.archive_dir, prefix=".pending-", suffix=".tar.gz"
            )
            os.close(fd)
        except OSError as e:
            raise CacheError(f"Failed to prepare cache archive for {key}: {e}") from e
        temp_archive = Path(temp_name)

        try:
            with tarfile.open(temp_archive, "w:gz") as tar:
                for index, path in enumerate(paths):
                    tar.add(path, arcname=str(index))

            with self._lock():
                data = self._load_registry()
                if self._find(data, key, version):
                    raise CacheEntryExistsError(key)

                entry_id = data.get("next_id", 1)
                archive_name = f"{entry_id}.tar.gz"
                temp_archive.replace(self.archive_dir / archive_name)

                data["entries"].append(
                    {
                        "id": entry_id,
                        "key": key,
                        "paths_version": version,
                        "paths": [str(p) for p in paths],
                        "archive": archive_name,
                        "created": datetime.now().isoformat(),
                        "size": (self.archive_dir / archive_name).stat().st_size,
                    }
                )
                data["next_id"] = entry_id + 1
                self._save_registry(data)
        except (OSError, tarfile.TarError) as e:
            raise CacheError(f"Failed to save cache entry {key}: {e}") from e
        finally:
            if temp_archive.exists():
                temp_archive.unlink()

        logger.debug(f"Saved cache entry {entry_id} for {key}")
        return entry_id

    @staticmethod
    def _find(data: dict, key: str, version: str) -> Optional[dict]:
        for entry in data["entries"]:
            if entry["key"] == key and entry.get("paths_version") == version:
                return entry
        return None
