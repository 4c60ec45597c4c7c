"""
The install pipeline.

    resolve version -> cache restore -> [miss] download + install -> cache save
        -> verify -> export environment

get_vulkan_sdk() covers acquisition, run() the whole pipeline including the
environment export for later CI steps.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import requests

from vulkankit.cache.orchestrator import CacheOrchestrator
from vulkankit.cache.store import CacheStore, LocalCacheStore
from vulkankit.config.inputs import InstallerOptions, RequestSpec
from vulkankit.core.download import create_session
from vulkankit.core.platform import PlatformFacts
from vulkankit.sdk.downloader import SdkDownloader
from vulkankit.sdk.installer import SdkInstaller
from vulkankit.sdk.versions import VersionResolver

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Wires resolver, downloader, installer and cache together.

    Collaborators are created from the facts and options unless given, which
    lets tests substitute any of them.

    Args:
        facts: Platform facts
        reporter: ActionsReporter for annotations and environment export
        options: Installer options
        store: Cache store (LocalCacheStore in options.cache_dir if None)
        session: requests session shared by all HTTP calls
    """

    def __init__(
        self,
        facts: PlatformFacts,
        reporter,
        options: Optional[InstallerOptions] = None,
        store: Optional[CacheStore] = None,
        session: Optional[requests.Session] = None,
        resolver: Optional[VersionResolver] = None,
        downloader: Optional[SdkDownloader] = None,
        installer: Optional[SdkInstaller] = None,
    ):
        self.facts = facts
        self.reporter = reporter
        self.options = options or InstallerOptions()
        self.session = session or create_session()
        self.store = store
        self.resolver = resolver or VersionResolver(
            facts, self.session, self.options.http_timeout
        )
        self.downloader = downloader or SdkDownloader(
            facts,
            reporter,
            session=self.session,
            timeout=self.options.http_timeout,
            max_retries=self.options.max_retries,
        )
        self.installer = installer or SdkInstaller(facts, reporter, self.options)

    def cache(self) -> CacheOrchestrator:
        if self.store is None:
            self.store = LocalCacheStore(self.options.cache_dir)
        return CacheOrchestrator(self.store, self.facts)

    def get_vulkan_sdk(self, request: RequestSpec, version: str) -> Path:
        """
        Restore or download and install the SDK.

        A cache hit returns the destination unchanged without downloading.

        Returns:
            The restored destination or the installation path
        """
        cache = self.cache() if request.use_cache else None

        if cache is not None and cache.restore(request.destination, version):
            return request.destination

        sdk_file = self.downloader.download_sdk(version)
        install_path = self.installer.install_sdk(
            sdk_file, request.destination, version, request.optional_components
        )

        # Runtime goes in after the SDK so both are cached together
        if request.install_runtime and self.facts.is_windows_family:
            runtime_file = self.downloader.download_runtime(version)
            self.installer.install_runtime(runtime_file, request.destination, version)

        if cache is not None:
            if request.stripdown:
                self.installer.stripdown(install_path)
            cache.save(install_path, version)

        return install_path

    def export_environment(self, sdk_path: Path, version: str) -> None:
        """
        Export PATH, VULKAN_SDK, VULKAN_VERSION and, on Linux and macOS,
        VK_LAYER_PATH plus the library search path.
        """
        home = self.installer.sdk_home(sdk_path)
        reporter = self.reporter

        reporter.add_path(home / "bin")
        logger.info("[PATH] Added path to Vulkan SDK to environment variable PATH.")

        reporter.export_variable("VULKAN_SDK", str(home))
        logger.info(f'[ENV] Set env variable VULKAN_SDK -> "{home}".')

        reporter.export_variable("VULKAN_VERSION", version)
        logger.info(f'[ENV] Set env variable VULKAN_VERSION -> "{version}".')

        if self.facts.is_windows_family:
            return

        layer_path = home / "etc" / "vulkan" / "explicit_layer.d"
        reporter.export_variable("VK_LAYER_PATH", str(layer_path))
        logger.info(f'[ENV] Set env variable VK_LAYER_PATH -> "{layer_path}".')

        variable = self.installer.strategy.library_path_variable
        if variable:
            previous = reporter.environ.get(variable, "")
            value = str(home / "lib")
            if previous:
                value = f"{value}{os.pathsep}{previous}"
            reporter.export_variable(variable, value)
            logger.info(f'[ENV] Set env variable {variable} -> "{value}".')

    def run(self, request: RequestSpec) -> int:
        """
        Run the whole pipeline.

        Returns:
            Exit code: 1 if any failure was reported, else 0

        Raises:
            VulkanKitError: On fatal errors (version resolution, download,
                extraction, strict-mode installer failures)
        """
        version = self.resolver.resolve(request.version)

        install_path = self.get_vulkan_sdk(request, version)
        sdk_path = self.installer.sdk_path(install_path, version)

        if self.installer.verify_sdk(sdk_path):
            self.export_environment(sdk_path, version)

        if request.install_runtime and self.facts.is_windows_family:
            self.installer.verify_runtime(sdk_path)

        logger.info("Done.")
        return self.reporter.exit_code


def get_vulkan_sdk(
    request: RequestSpec,
    version: str,
    facts: PlatformFacts,
    reporter,
    options: Optional[InstallerOptions] = None,
    store: Optional[CacheStore] = None,
) -> Path:
    """Restore or install the SDK for an already resolved version."""
    return Pipeline(facts, reporter, options, store).get_vulkan_sdk(request, version)


def run(
    request: RequestSpec,
    facts: PlatformFacts,
    reporter,
    options: Optional[InstallerOptions] = None,
    store: Optional[CacheStore] = None,
) -> int:
    """Run the install pipeline and return the exit code."""
    return Pipeline(facts, reporter, options, store).run(request)
