"""
Platform strategies package.

One strategy per platform family; get_strategy() selects the one matching the
given platform facts.
"""

from vulkankit.core.exceptions import UnsupportedPlatformError
from vulkankit.core.platform import PlatformFacts, PlatformFamily
from vulkankit.sdk.strategies.linux import LinuxArmStrategy, LinuxStrategy
from vulkankit.sdk.strategies.mac import MacStrategy
from vulkankit.sdk.strategies.windows import WindowsArmStrategy, WindowsStrategy

_STRATEGIES = {
    PlatformFamily.WINDOWS: WindowsStrategy,
    PlatformFamily.WINDOWS_ARM: WindowsArmStrategy,
    PlatformFamily.LINUX: LinuxStrategy,
    PlatformFamily.LINUX_ARM: LinuxArmStrategy,
    PlatformFamily.MAC: MacStrategy,
}


def get_strategy(facts: PlatformFacts):
    """
    Get the platform strategy for the given platform facts.

    Raises:
        UnsupportedPlatformError: If no strategy exists for the platform family
    """
    try:
        strategy_class = _STRATEGIES[facts.family]
    except KeyError:
        raise UnsupportedPlatformError(
            f"No installation strategy for platform family {facts.family}"
        ) from None
    return strategy_class(facts)


__all__ = [
    "get_strategy",
    "LinuxStrategy",
    "LinuxArmStrategy",
    "MacStrategy",
    "WindowsStrategy",
    "WindowsArmStrategy",
]
