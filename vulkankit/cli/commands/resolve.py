"""
Resolve command implementation.

Prints the concrete SDK version a token resolves to on this platform.
"""

import logging

from vulkankit.cli.utils import build_context
from vulkankit.sdk.versions import VersionResolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    facts, _, request, options = build_context(
        args, lambda f, o: VersionResolver(f, timeout=o.http_timeout)
    )
    resolver = VersionResolver(facts, timeout=options.http_timeout)

    if getattr(args, "list", False):
        for version in resolver.get_available_versions():
            print(version)
        return 0

    print(resolver.resolve(request.version))
    return 0
