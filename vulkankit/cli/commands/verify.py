"""
Verify command implementation.

Checks an installation for the SDK (and runtime) probe files.
"""

import logging

from vulkankit.ci.actions import ActionsReporter
from vulkankit.core.platform import detect_platform
from vulkankit.core.versions import validate_version
from vulkankit.core.exceptions import InvalidVersionError
from vulkankit.sdk.installer import SdkInstaller

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if everything was found, 1 otherwise)
    """
    if not validate_version(args.version):
        raise InvalidVersionError(args.version)

    facts = detect_platform()
    installer = SdkInstaller(facts, ActionsReporter())
    sdk_path = installer.sdk_path(args.path, args.version)

    ok = installer.verify_sdk(sdk_path)
    if args.runtime:
        if facts.is_windows_family:
            ok = installer.verify_runtime(sdk_path) and ok
        else:
            logger.warning("The Vulkan runtime is only installed on Windows")

    print(f"{sdk_path}: {'OK' if ok else 'MISSING'}")
    return 0 if ok else 1
