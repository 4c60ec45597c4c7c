"""
Install command implementation.

Restores or downloads and installs the Vulkan SDK, then exports the
environment for later CI steps.
"""

import logging

from vulkankit.cli.utils import build_context
from vulkankit.pipeline import Pipeline
from vulkankit.sdk.versions import VersionResolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 if any failure was reported)
    """
    facts, reporter, request, options = build_context(
        args, lambda f, o: VersionResolver(f, timeout=o.http_timeout)
    )
    logger.debug(f"Request: {request}")

    with reporter.group(f"Vulkan SDK {request.version} ({facts})"):
        return Pipeline(facts, reporter, options).run(request)
