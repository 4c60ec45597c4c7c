"""
Running vendor installer processes.

Every Vulkan SDK installer accepts the same Qt installer-framework command
line; this module builds it and runs installer processes to completion.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from vulkankit.core.exceptions import InstallerError

logger = logging.getLogger(__name__)


def installer_arguments(
    destination: Path, optional_components: Sequence[str] = ()
) -> List[str]:
    """
    Build the unattended installer argument list.

    Example:
        >>> installer_arguments(Path("C:/VulkanSDK/1.3.250.1"), ["com.lunarg.vulkan.vma"])
        ['--root', 'C:/VulkanSDK/1.3.250.1', '--accept-licenses', '--default-answer', '--confirm-command', 'install', 'com.lunarg.vulkan.vma']
    """
    return [
        "--root",
        str(destination),
        "--accept-licenses",
        "--default-answer",
        "--confirm-command",
        "install",
        *optional_components,
    ]


def run_step(
    command: List[str],
    failure_message: str,
    reporter,
    strict: bool = False,
    timeout: Optional[float] = None,
) -> bool:
    """
    Run a command and wait until the process has exited.

    A failing command is reported through reporter.set_failed(). In strict
    mode it raises instead, otherwise the caller continues.

    Args:
        command: Command line
        failure_message: Message reported when the command fails
        reporter: ActionsReporter receiving failure annotations
        strict: Raise InstallerError instead of continuing
        timeout: Optional timeout in seconds

    Returns:
        True if the command exited with status 0

    Raises:
        InstallerError: In strict mode, if the command fails
    """
    logger.debug(f"Command: {' '.join(command)}")

    try:
        result = subprocess.run(
            command, capture_output=True, text=True, timeout=timeout, check=False
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        return report_failure(f"{failure_message} ({e})", reporter, strict)

    if result.stdout:
        logger.debug(result.stdout.rstrip())

    if result.returncode != 0:
        if result.stderr:
            logger.error(result.stderr.rstrip())
        return report_failure(
            f"{failure_message} (exit code {result.returncode})", reporter, strict
        )

    return True


def report_failure(message: str, reporter, strict: bool) -> bool:
    """Report a failed step, or raise InstallerError in strict mode."""
    if strict:
        raise InstallerError(message)
    reporter.set_failed(message)
    return False
