"""
URL command implementation.

Prints the download URL of the SDK or of the runtime components.
"""

import logging

from vulkankit.cli.utils import build_context
from vulkankit.sdk.urls import build_runtime_url, build_sdk_url, is_downloadable
from vulkankit.sdk.versions import VersionResolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the url command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 if --check failed)
    """
    facts, reporter, request, options = build_context(args)
    version = VersionResolver(facts, timeout=options.http_timeout).resolve(
        request.version
    )

    if args.runtime:
        name, url = "VULKAN-RUNTIME", build_runtime_url(version, facts)
    else:
        name, url = "VULKAN-SDK", build_sdk_url(version, facts)

    print(url)

    if args.check:
        is_downloadable(name, version, url, reporter, timeout=options.http_timeout)
    return reporter.exit_code
