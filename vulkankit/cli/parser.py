"""
vulkankit CLI argument parser.

This module implements the command-line interface for vulkankit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from vulkankit.ci.actions import WorkflowCommandHandler, is_github_actions

# Get version from package
try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("vulkankit")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """vulkankit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="vulkankit",
            description="vulkankit - Vulkan SDK installer for CI jobs",
            epilog='Use "vulkankit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"vulkankit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./vulkankit.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_url_command(subparsers)
        self._add_verify_command(subparsers)
        self._add_cache_keys_command(subparsers)

        return parser

    @staticmethod
    def _add_version_argument(parser):
        parser.add_argument(
            "--vulkan-version",
            dest="version",
            metavar="VERSION",
            help='SDK version, "latest" or major.minor.build.rev (default: latest)',
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install the Vulkan SDK",
            description="Restore or download and install the Vulkan SDK, then "
            "export PATH, VULKAN_SDK and related variables",
        )
        self._add_version_argument(parser)
        parser.add_argument(
            "--destination",
            metavar="DIR",
            help="Installation root (default: C:/VulkanSDK or $HOME/vulkan-sdk)",
        )
        parser.add_argument(
            "--install-runtime",
            action="store_const",
            const=True,
            help="Also install the Vulkan runtime components (Windows only)",
        )
        parser.add_argument(
            "--cache",
            dest="use_cache",
            action="store_const",
            const=True,
            help="Restore the SDK from cache and save it after install",
        )
        parser.add_argument(
            "--optional-components",
            metavar="LIST",
            help="Comma separated optional components (e.g. com.lunarg.vulkan.vma)",
        )
        parser.add_argument(
            "--stripdown",
            action="store_const",
            const=True,
            help="Reduce the installation size before caching (Windows only)",
        )
        parser.add_argument(
            "--strict",
            action="store_const",
            const=True,
            help="Abort on installer failures instead of continuing",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="DIR",
            help="Local cache directory (default: ~/.vulkankit/cache)",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Print the resolved SDK version",
            description="Resolve a version token and print the concrete version",
        )
        self._add_version_argument(parser)
        parser.add_argument(
            "--list",
            action="store_true",
            help="List all versions available for this platform",
        )

    def _add_url_command(self, subparsers):
        """Add 'url' subcommand."""
        parser = subparsers.add_parser(
            "url",
            help="Print download URLs",
            description="Print the SDK (and runtime) download URL for a version",
        )
        self._add_version_argument(parser)
        parser.add_argument(
            "--runtime",
            action="store_true",
            help="Print the runtime components URL instead (Windows only)",
        )
        parser.add_argument(
            "--check",
            action="store_true",
            help="Check that the URL is reachable",
        )

    def _add_verify_command(self, subparsers):
        """Add 'verify' subcommand."""
        parser = subparsers.add_parser(
            "verify",
            help="Verify an SDK installation",
            description="Check an installation for the Vulkan SDK probe binaries",
        )
        parser.add_argument("path", type=Path, help="Installation path")
        parser.add_argument(
            "--vulkan-version",
            dest="version",
            required=True,
            metavar="VERSION",
            help="Installed SDK version",
        )
        parser.add_argument(
            "--runtime",
            action="store_true",
            help="Also verify the runtime components (Windows only)",
        )

    def _add_cache_keys_command(self, subparsers):
        """Add 'cache-keys' subcommand."""
        parser = subparsers.add_parser(
            "cache-keys",
            help="Print cache keys",
            description="Print the primary and restore cache keys for a version",
        )
        self._add_version_argument(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Under GitHub Actions, records are written as workflow commands so
        warnings and errors become annotations.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        handlers = None
        if is_github_actions():
            handlers = [WorkflowCommandHandler(sys.stdout)]
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            handlers=handlers,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "install": "vulkankit.cli.commands.install",
            "resolve": "vulkankit.cli.commands.resolve",
            "url": "vulkankit.cli.commands.url",
            "verify": "vulkankit.cli.commands.verify",
            "cache-keys": "vulkankit.cli.commands.cache_keys",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main(args: Optional[List[str]] = None):
    """Console script entry point."""
    sys.exit(CLI().run(args))
