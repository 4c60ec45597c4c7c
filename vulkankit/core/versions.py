"""
Version token helpers.

Vulkan SDK versions use a four component "major.minor.build.rev" scheme.
Several download URL shapes depend on ordering against fixed threshold
versions; that ordering uses the legacy digit-concatenation comparison below
and must not be replaced by a component-wise comparison, otherwise historical
URLs change.
"""

import re

LATEST = "latest"

VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+\.\d+$")


def validate_version(version: str) -> bool:
    """
    Check that a version conforms to "major.minor.build.rev" ("1.2.3.4").

    Example:
        >>> validate_version("1.3.250.1")
        True
        >>> validate_version("1.3.250")
        False
    """
    return bool(VERSION_PATTERN.match(version))


def legacy_compare(v1: str, v2: str) -> int:
    """
    Compare two version strings by stripping the dots and comparing as integers.

    "1.3.250.1" becomes 132501. This is not a semantic version comparison:
    "1.4.0.0" (1400) orders below "1.3.250.1" (132501).

    Args:
        v1: First version string
        v2: Second version string

    Returns:
        -1 if v1 < v2, 1 if v1 > v2, 0 if equal

    Raises:
        ValueError: If a version contains characters other than digits and dots
    """
    int_v1 = int(v1.replace(".", ""))
    int_v2 = int(v2.replace(".", ""))

    if int_v1 < int_v2:
        return -1
    elif int_v1 > int_v2:
        return 1
    return 0


__all__ = ["LATEST", "VERSION_PATTERN", "validate_version", "legacy_compare"]
