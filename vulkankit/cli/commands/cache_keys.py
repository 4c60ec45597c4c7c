"""
Cache-keys command implementation.
"""

import logging

from vulkankit.cache.keys import compute_keys
from vulkankit.cli.utils import build_context
from vulkankit.sdk.versions import VersionResolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Print the primary cache key followed by the restore keys, one per line.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    facts, _, request, options = build_context(args)
    version = VersionResolver(facts, timeout=options.http_timeout).resolve(
        request.version
    )

    keys = compute_keys(facts.canonical_name(), facts.arch, version)
    print(keys.primary)
    for key in keys.restore_keys:
        print(key)
    return 0
