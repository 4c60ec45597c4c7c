"""
YAML configuration file loading.

A vulkankit.yaml file supplies defaults for everything that can be passed as
a CLI flag or action input:

    vulkan_version: 1.3.250.1
    destination: ~/vulkan-sdk
    cache: true
    optional_components:
      - com.lunarg.vulkan.vma
    installer:
      strict: true
      settle_timeout: 20
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from vulkankit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "vulkankit.yaml"

_REQUEST_KEYS = {
    "vulkan_version",
    "destination",
    "install_runtime",
    "cache",
    "optional_components",
    "stripdown",
}
_INSTALLER_KEYS = {
    "strict",
    "settle_delay",
    "settle_timeout",
    "http_timeout",
    "max_retries",
    "cache_dir",
}


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required but missing, cannot be
            parsed, or contains unknown keys

    Example:
        >>> config = load_yaml_config(Path("vulkankit.yaml"))
        >>> config.get("vulkan_version", "latest")
    """
    config_file = Path(config_file)
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Invalid configuration in {config_file}: expected a mapping at top level"
        )

    _validate_keys(config, config_file)
    return config


def _validate_keys(config: Dict[str, Any], config_file: Path) -> None:
    unknown = sorted(set(config) - _REQUEST_KEYS - {"installer"})
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in {config_file}: {', '.join(unknown)}"
        )

    installer = config.get("installer") or {}
    if not isinstance(installer, dict):
        raise ConfigurationError(f"'installer' in {config_file} must be a mapping")

    unknown = sorted(set(installer) - _INSTALLER_KEYS)
    if unknown:
        raise ConfigurationError(
            f"Unknown installer keys in {config_file}: {', '.join(unknown)}"
        )


def find_config_file(
    explicit: Optional[Path] = None, cwd: Optional[Path] = None
) -> Optional[Path]:
    """
    Locate the configuration file.

    An explicitly given file must exist; otherwise vulkankit.yaml in the
    working directory is used when present.
    """
    if explicit is not None:
        return Path(explicit)
    candidate = Path(cwd or Path.cwd()) / DEFAULT_CONFIG_FILENAME
    return candidate if candidate.exists() else None
