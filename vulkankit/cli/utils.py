"""
Shared utilities for CLI commands.

Provides the configuration file lookup and the collaborators every command
builds the same way (platform facts, reporter, request, options).
"""

import logging
from typing import Any, Dict

from vulkankit.ci.actions import ActionsReporter
from vulkankit.config.inputs import build_options, build_request
from vulkankit.config.loader import find_config_file, load_yaml_config
from vulkankit.core.platform import detect_platform

logger = logging.getLogger(__name__)

_REQUEST_ARGS = (
    "version",
    "destination",
    "install_runtime",
    "use_cache",
    "optional_components",
    "stripdown",
)
_OPTION_ARGS = ("strict", "cache_dir")


# ============================================================================
# Configuration Management
# ============================================================================


def load_config(args) -> Dict[str, Any]:
    """
    Load the YAML configuration for a command.

    --config must point to an existing file; without it vulkankit.yaml in the
    working directory is used when present.
    """
    explicit = getattr(args, "config", None)
    config_file = find_config_file(explicit)
    if config_file is None:
        return {}
    return load_yaml_config(config_file, required=explicit is not None)


def cli_values(args, names=_REQUEST_ARGS + _OPTION_ARGS) -> Dict[str, Any]:
    """Collect the given attributes from parsed args; missing ones are None."""
    return {name: getattr(args, name, None) for name in names}


def build_context(args, resolver_factory=None):
    """
    Build (facts, reporter, request, options) for a command.

    Args:
        args: Parsed arguments
        resolver_factory: Optional callable(facts, options) returning a
            VersionResolver, used for listing versions on invalid input
    """
    facts = detect_platform()
    logger.debug(f"Platform: {facts}")

    config = load_config(args)
    values = cli_values(args)
    options = build_options(values, config)
    resolver = resolver_factory(facts, options) if resolver_factory else None
    request = build_request(facts, values, config, resolver=resolver)

    return facts, ActionsReporter(), request, options
