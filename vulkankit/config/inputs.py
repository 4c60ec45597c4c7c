"""
Request inputs and installer options.

Every setting is looked up in this order, first match wins:

1. command line flags
2. action inputs (INPUT_<NAME> environment variables)
3. the YAML configuration file
4. built-in defaults
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from vulkankit.ci.actions import get_input, parse_bool
from vulkankit.core.exceptions import (
    ConfigurationError,
    InvalidVersionError,
    VersionResolutionError,
)
from vulkankit.core.platform import PlatformFacts
from vulkankit.core.versions import LATEST, validate_version

logger = logging.getLogger(__name__)

CACHE_DIR_ENV = "VULKANKIT_CACHE_DIR"
DEFAULT_CACHE_DIR = Path("~/.vulkankit/cache")

WINDOWS_DEFAULT_DESTINATION = "C:/VulkanSDK"
POSIX_DEFAULT_DESTINATION = "vulkan-sdk"

OPTIONAL_COMPONENTS_ALLOWLIST = (
    "com.lunarg.vulkan.32bit",
    "com.lunarg.vulkan.sdl2",
    "com.lunarg.vulkan.glm",
    "com.lunarg.vulkan.volk",
    "com.lunarg.vulkan.vma",
    "com.lunarg.vulkan.debug32",
    # components of old installers
    "com.lunarg.vulkan.thirdparty",
    "com.lunarg.vulkan.debug",
)


@dataclass(frozen=True)
class RequestSpec:
    """
    What to install, built once from the layered inputs.

    Attributes:
        version: "latest" or a four component version
        destination: Installation root
        install_runtime: Also install the runtime components (Windows family only)
        use_cache: Restore from and save to the cache
        optional_components: Validated optional component names
        stripdown: Shrink the installation before caching (Windows family only)
    """

    version: str
    destination: Path
    install_runtime: bool = False
    use_cache: bool = False
    optional_components: Tuple[str, ...] = ()
    stripdown: bool = False


@dataclass
class InstallerOptions:
    """
    Tunables for installation behaviour.

    Attributes:
        strict: Raise on installer failures instead of reporting and continuing
        settle_delay: Seconds to wait after extracting the runtime archive
        settle_timeout: Seconds to poll for the extracted runtime folder
        http_timeout: HTTP request timeout in seconds
        max_retries: Download attempts before giving up
        cache_dir: Directory of the local cache store
    """

    strict: bool = False
    settle_delay: float = 0.0
    settle_timeout: float = 10.0
    http_timeout: int = 30
    max_retries: int = 3
    cache_dir: Path = field(default_factory=lambda: DEFAULT_CACHE_DIR.expanduser())


def filter_optional_components(
    raw: Union[str, Iterable[str], None],
) -> Tuple[List[str], List[str]]:
    """
    Split requested optional components into allowed and rejected ones.

    Args:
        raw: Comma separated string or a list of component names

    Returns:
        (valid, invalid) lists, each in input order

    Example:
        >>> filter_optional_components("com.lunarg.vulkan.vma,bogus.one")
        (['com.lunarg.vulkan.vma'], ['bogus.one'])
    """
    if not raw:
        return [], []

    items = raw.split(",") if isinstance(raw, str) else list(raw)
    components = [str(item).strip() for item in items if str(item).strip()]

    valid = [c for c in components if c in OPTIONAL_COMPONENTS_ALLOWLIST]
    invalid = [c for c in components if c not in OPTIONAL_COMPONENTS_ALLOWLIST]

    if invalid:
        logger.error(
            f"Please remove the following invalid optional_components: {', '.join(invalid)}"
        )
    if valid:
        logger.info(f"Installing Optional Components: {', '.join(valid)}")

    return valid, invalid


def get_input_version(raw: Optional[str], resolver=None) -> str:
    """
    Validate the requested version token.

    An empty token means "latest".

    Args:
        raw: Requested version
        resolver: Optional VersionResolver used to list available versions in
            the error message

    Raises:
        InvalidVersionError: If the token is neither "latest" nor a four
            component version
    """
    version = (raw or "").strip()
    if not version:
        return LATEST
    if version == LATEST or validate_version(version):
        return version

    available = None
    if resolver is not None:
        try:
            available = resolver.get_available_versions()
        except VersionResolutionError as e:
            logger.debug(f"Could not list available versions: {e}")
    raise InvalidVersionError(version, available)


def get_input_destination(raw: Optional[str], facts: PlatformFacts) -> Path:
    """
    Get the installation root, falling back to the platform default.

    Defaults are C:/VulkanSDK on the Windows family and $HOME/vulkan-sdk
    elsewhere.
    """
    destination = (raw or "").strip()
    if not destination:
        if facts.is_windows_family:
            destination = WINDOWS_DEFAULT_DESTINATION
        else:
            destination = str(Path(facts.home_dir) / POSIX_DEFAULT_DESTINATION)

    path = Path(os.path.normpath(os.path.expanduser(destination)))
    logger.info(f"Destination: {path}")
    return path


def _layered(
    key: str,
    cli_values: Mapping[str, Any],
    environ: Mapping[str, str],
    file_config: Mapping[str, Any],
    input_name: Optional[str] = None,
):
    value = cli_values.get(key)
    if value is not None:
        return value
    value = get_input(input_name or key, environ)
    if value:
        return value
    return file_config.get(input_name or key)


def build_request(
    facts: PlatformFacts,
    cli_values: Optional[Mapping[str, Any]] = None,
    file_config: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    resolver=None,
) -> RequestSpec:
    """
    Build the RequestSpec from CLI flags, action inputs and the config file.

    Args:
        facts: Platform facts
        cli_values: Values from the command line (None means "not given")
        file_config: Parsed YAML configuration
        environ: Environment mapping (defaults to os.environ)
        resolver: Optional VersionResolver for invalid version messages

    Raises:
        InvalidVersionError: If the requested version is malformed
    """
    cli_values = cli_values or {}
    file_config = file_config or {}
    environ = os.environ if environ is None else environ

    def layered(key, input_name=None):
        return _layered(key, cli_values, environ, file_config, input_name)

    version = get_input_version(
        _as_text(layered("version", "vulkan_version")), resolver
    )
    destination = get_input_destination(_as_text(layered("destination")), facts)
    components, _ = filter_optional_components(layered("optional_components"))

    return RequestSpec(
        version=version,
        destination=destination,
        install_runtime=parse_bool(layered("install_runtime")),
        use_cache=parse_bool(layered("use_cache", "cache")),
        optional_components=tuple(components),
        stripdown=parse_bool(layered("stripdown")),
    )


def build_options(
    cli_values: Optional[Mapping[str, Any]] = None,
    file_config: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> InstallerOptions:
    """
    Build InstallerOptions from CLI flags, the environment and the config file.

    The cache directory comes from VULKANKIT_CACHE_DIR, then the config
    file's installer.cache_dir, then ~/.vulkankit/cache.

    Raises:
        ConfigurationError: If a numeric option cannot be parsed
    """
    cli_values = cli_values or {}
    installer: Dict[str, Any] = dict((file_config or {}).get("installer") or {})
    environ = os.environ if environ is None else environ

    def pick(key):
        value = cli_values.get(key)
        return value if value is not None else installer.get(key)

    options = InstallerOptions()
    if pick("strict") is not None:
        options.strict = parse_bool(pick("strict"))
    for key, convert in (
        ("settle_delay", float),
        ("settle_timeout", float),
        ("http_timeout", int),
        ("max_retries", int),
    ):
        value = pick(key)
        if value is None:
            continue
        try:
            setattr(options, key, convert(value))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid value for {key}: {value!r}") from e

    cache_dir = environ.get(CACHE_DIR_ENV) or pick("cache_dir")
    if cache_dir:
        options.cache_dir = Path(os.path.expanduser(str(cache_dir)))

    return options


def _as_text(value) -> Optional[str]:
    return None if value is None else str(value)
