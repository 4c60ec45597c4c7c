"""
Unit tests for the local cache store.
"""

import json
import logging
from unittest.mock import patch

import pytest
from filelock import Timeout

from vulkankit.cache.store import LocalCacheStore, paths_version
from vulkankit.core.exceptions import (
    CacheEntryExistsError,
    CacheError,
    CacheLockTimeout,
)

KEY = "cache-linux-x64-vulkan-sdk-1.3.250.1"


@pytest.fixture
def store(tmp_path):
    return LocalCacheStore(tmp_path / "cache")


@pytest.fixture
def sdk_dir(tmp_path):
    root = tmp_path / "vulkan-sdk"
    (root / "1.3.250.1" / "x86_64" / "bin").mkdir(parents=True)
    (root / "1.3.250.1" / "x86_64" / "bin" / "vulkaninfo").write_text("v1")
    return root


class TestPathsVersion:
    """Tests for path scope hashing."""

    def test_normalized(self, tmp_path):
        """Test equivalent spellings hash the same."""
        assert paths_version([tmp_path / "a" / ".." / "b"]) == paths_version([tmp_path / "b"])

    def test_order_matters(self, tmp_path):
        """Test different path lists hash differently."""
        assert paths_version([tmp_path / "a", tmp_path / "b"]) != paths_version(
            [tmp_path / "b", tmp_path / "a"]
        )


class TestSaveRestore:
    """Tests for saving and restoring entries."""

    def test_save_then_restore(self, store, sdk_dir):
        """Test a saved tree comes back after deletion."""
        entry_id = store.save([sdk_dir], KEY)
        assert entry_id == 1

        (sdk_dir / "1.3.250.1" / "x86_64" / "bin" / "vulkaninfo").unlink()

        assert store.restore([sdk_dir], KEY) == KEY
        assert (sdk_dir / "1.3.250.1" / "x86_64" / "bin" / "vulkaninfo").read_text() == "v1"

    def test_registry_contents(self, store, sdk_dir):
        """Test the registry records the entry."""
        store.save([sdk_dir], KEY)
        registry = json.loads(store.registry_path.read_text())
        assert registry["next_id"] == 2
        entry = registry["entries"][0]
        assert entry["key"] == KEY
        assert entry["paths_version"] == paths_version([sdk_dir])
        assert (store.archive_dir / entry["archive"]).exists()
        assert store.entries()[0]["id"] == 1

    def test_save_existing_key(self, store, sdk_dir):
        """Test saving the same key twice raises."""
        store.save([sdk_dir], KEY)
        with pytest.raises(CacheEntryExistsError):
            store.save([sdk_dir], KEY)

    def test_save_missing_path(self, store, tmp_path):
        """Test saving a missing path raises CacheError."""
        with pytest.raises(CacheError):
            store.save([tmp_path / "missing"], KEY)

    def test_miss(self, store, sdk_dir):
        """Test an unknown key is a miss."""
        assert store.restore([sdk_dir], KEY) is None

    def test_prefix_restore_prefers_newest(self, store, tmp_path):
        """Test restore keys match the newest entry with the prefix."""
        root = tmp_path / "vulkan-sdk"
        root.mkdir()
        (root / "marker").write_text("old")
        store.save([root], "cache-linux-x64-vulkan-sdk-1.3.239.0")
        (root / "marker").write_text("new")
        store.save([root], "cache-linux-x64-vulkan-sdk-1.3.243.0")
        (root / "marker").unlink()

        hit = store.restore(
            [root],
            "cache-linux-x64-vulkan-sdk-1.3.250.1",
            ["cache-linux-x64-vulkan-sdk-", "cache-linux-x64-"],
        )

        assert hit == "cache-linux-x64-vulkan-sdk-1.3.243.0"
        assert (root / "marker").read_text() == "new"

    def test_exact_key_wins_over_prefix(self, store, sdk_dir):
        """Test the primary key is preferred over newer prefix matches."""
        store.save([sdk_dir], KEY)
        store.save([sdk_dir], "cache-linux-x64-vulkan-sdk-1.4.304.0")
        assert store.restore([sdk_dir], KEY, ["cache-linux-x64-"]) == KEY

    def test_scoped_by_paths(self, store, sdk_dir, tmp_path):
        """Test entries saved for other paths never match."""
        store.save([sdk_dir], KEY)
        other = tmp_path / "elsewhere"
        assert store.restore([other], KEY, ["cache-"]) is None

    def test_missing_archive(self, store, sdk_dir):
        """Test a registered entry without archive raises CacheError."""
        store.save([sdk_dir], KEY)
        (store.archive_dir / "1.tar.gz").unlink()
        with pytest.raises(CacheError, match="missing"):
            store.restore([sdk_dir], KEY)

    def test_corrupt_registry(self, store, sdk_dir):
        """Test an unreadable registry raises CacheError."""
        store.registry_path.parent.mkdir(parents=True)
        store.registry_path.write_text("{not json")
        with pytest.raises(CacheError):
            store.restore([sdk_dir], KEY)

    def test_lock_timeout(self, store, sdk_dir):
        """Test lock contention raises CacheLockTimeout."""
        with patch(
            "vulkankit.cache.store.FileLock.acquire",
            side_effect=Timeout(str(store.lock_path)),
        ):
            with pytest.raises(CacheLockTimeout):
                store.restore([sdk_dir], KEY)


class TestUnusableCacheDir:
    """Tests for cache directories that cannot be written."""

    @pytest.fixture
    def file_store(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        return LocalCacheStore(blocker)

    def test_restore_raises_cache_error(self, file_store, sdk_dir):
        """Test a file in place of the cache dir raises CacheError on restore."""
        with pytest.raises(CacheError, match="cache lock"):
            file_store.restore([sdk_dir], KEY)

    def test_save_raises_cache_error(self, file_store, sdk_dir):
        """Test a file in place of the cache dir raises CacheError on save."""
        with pytest.raises(CacheError):
            file_store.save([sdk_dir], KEY)

    def test_archive_dir_blocked(self, store, sdk_dir):
        """Test an unwritable archive dir raises CacheError and leaves no entry."""
        store.cache_dir.mkdir(parents=True)
        store.archive_dir.write_text("")
        with pytest.raises(CacheError, match="prepare cache archive"):
            store.save([sdk_dir], KEY)
        assert store.entries() == []


class TestMalformedEntries:
    """Tests for registry entries missing required fields."""

    def test_entry_without_key_is_ignored(self, store, sdk_dir, caplog):
        """Test entries without key or archive are skipped."""
        store.save([sdk_dir], KEY)
        data = json.loads(store.registry_path.read_text())
        data["entries"].insert(0, {"id": 99, "paths_version": paths_version([sdk_dir])})
        data["entries"].append("garbage")
        store.registry_path.write_text(json.dumps(data))

        with caplog.at_level(logging.WARNING):
            assert store.restore([sdk_dir], KEY, ["cache-"]) == KEY
            assert [e["key"] for e in store.entries()] == [KEY]
        assert "malformed" in caplog.text
