"""
Pytest configuration and shared fixtures for vulkankit tests.
"""

import io
from pathlib import Path

import pytest

from vulkankit.ci.actions import ActionsReporter
from vulkankit.core.platform import PlatformFacts, PlatformFamily


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Platform Facts
# ============================================================================


def make_facts(
    family: PlatformFamily, arch: str, tmp_path: Path, distro: str = ""
) -> PlatformFacts:
    """Build synthetic platform facts rooted in a test directory."""
    home = tmp_path / "home"
    temp = tmp_path / "temp"
    home.mkdir(exist_ok=True)
    temp.mkdir(exist_ok=True)
    return PlatformFacts(
        family=family,
        arch=arch,
        linux_distro_version=distro,
        home_dir=home,
        temp_dir=temp,
    )


@pytest.fixture
def linux_facts(tmp_path) -> PlatformFacts:
    """Linux x64 facts."""
    return make_facts(PlatformFamily.LINUX, "x64", tmp_path, "22.04")


@pytest.fixture
def linux_arm_facts(tmp_path) -> PlatformFacts:
    """Linux ARM64 facts on Ubuntu 24.04."""
    return make_facts(PlatformFamily.LINUX_ARM, "arm64", tmp_path, "24.04")


@pytest.fixture
def windows_facts(tmp_path) -> PlatformFacts:
    """Windows x64 facts."""
    return make_facts(PlatformFamily.WINDOWS, "x64", tmp_path)


@pytest.fixture
def warm_facts(tmp_path) -> PlatformFacts:
    """Windows on ARM64 facts."""
    return make_facts(PlatformFamily.WINDOWS_ARM, "arm64", tmp_path)


@pytest.fixture
def mac_facts(tmp_path) -> PlatformFacts:
    """macOS facts."""
    return make_facts(PlatformFamily.MAC, "arm64", tmp_path)


# ============================================================================
# CI Reporter
# ============================================================================


@pytest.fixture
def environ(tmp_path) -> dict:
    """Isolated environment with GITHUB_ENV / GITHUB_PATH files."""
    env_file = tmp_path / "github_env"
    path_file = tmp_path / "github_path"
    env_file.touch()
    path_file.touch()
    return {
        "PATH": "/usr/bin",
        "GITHUB_ENV": str(env_file),
        "GITHUB_PATH": str(path_file),
    }


@pytest.fixture
def reporter(environ) -> ActionsReporter:
    """Reporter writing to an isolated environment and an in-memory stream."""
    return ActionsReporter(environ=environ, stream=io.StringIO())


# ============================================================================
# SDK Trees
# ============================================================================


@pytest.fixture
def make_sdk_tree():
    """Factory creating a fake installed SDK with the probe binary."""

    def _make(root: Path, probe: str) -> Path:
        probe_path = root / probe
        probe_path.parent.mkdir(parents=True, exist_ok=True)
        probe_path.write_text("probe")
        return root

    return _make


@pytest.fixture
def facts_factory(tmp_path):
    """Factory for facts with an explicit family, arch and distro version."""

    def _make(family: PlatformFamily, arch: str = "x64", distro: str = "") -> PlatformFacts:
        return make_facts(family, arch, tmp_path, distro)

    return _make


# ============================================================================
# Cache
# ============================================================================


class FakeCacheStore:
    """In-memory cache store recording every call."""

    def __init__(self, hit=None, error=None):
        self.hit = hit
        self.error = error
        self.restore_calls = []
        self.save_calls = []

    def restore(self, paths, primary_key, restore_keys=()):
        self.restore_calls.append((list(paths), primary_key, tuple(restore_keys)))
        if self.error:
            raise self.error
        return self.hit

    def save(self, paths, key):
        self.save_calls.append((list(paths), key))
        if self.error:
            raise self.error
        return len(self.save_calls)


@pytest.fixture
def fake_store():
    """Cache store that always misses."""
    return FakeCacheStore()


@pytest.fixture
def fake_store_factory():
    """Factory for cache stores with a configured hit or error."""
    return FakeCacheStore
