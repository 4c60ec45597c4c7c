"""
Configuration: request inputs, installer options and the YAML config file.
"""

from vulkankit.config.inputs import (
    OPTIONAL_COMPONENTS_ALLOWLIST,
    InstallerOptions,
    RequestSpec,
    build_options,
    build_request,
    filter_optional_components,
    get_input_destination,
    get_input_version,
)
from vulkankit.config.loader import find_config_file, load_yaml_config

__all__ = [
    "OPTIONAL_COMPONENTS_ALLOWLIST",
    "InstallerOptions",
    "RequestSpec",
    "build_options",
    "build_request",
    "filter_optional_components",
    "find_config_file",
    "get_input_destination",
    "get_input_version",
    "load_yaml_config",
]
