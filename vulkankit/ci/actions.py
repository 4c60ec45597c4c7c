"""
GitHub Actions workflow command helpers.

This module covers the small part of the Actions runner protocol vulkankit
needs: reading action inputs, exporting environment variables and PATH entries
for later steps, and turning log records into annotations.

Usage:
    from vulkankit.ci.actions import ActionsReporter, get_input

    reporter = ActionsReporter()
    version = get_input("vulkan_version")
    reporter.export_variable("VULKAN_VERSION", version)
    reporter.set_failed("Something went wrong")
    sys.exit(reporter.exit_code)
"""

import logging
import os
import re
import sys
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, TextIO

logger = logging.getLogger(__name__)

_TRUE_RE = re.compile(r"true", re.IGNORECASE)


def _input_env_name(name: str) -> str:
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read an action input.

    Args:
        name: Input name as declared in action.yml (e.g. "vulkan_version")
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The trimmed input value, or an empty string when unset
    """
    environ = os.environ if environ is None else environ
    return environ.get(_input_env_name(name), "").strip()


def get_bool_input(name: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Read a bool-like action input. Any value containing "true" (any case) is True.
    """
    return parse_bool(get_input(name, environ))


def parse_bool(value) -> bool:
    """Interpret a bool-like value the way action inputs are interpreted."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return bool(_TRUE_RE.search(str(value)))


def is_github_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Check whether the process runs inside a GitHub Actions job."""
    environ = os.environ if environ is None else environ
    return environ.get("GITHUB_ACTIONS", "").lower() == "true"


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandHandler(logging.Handler):
    """
    Logging handler that writes records as workflow commands.

    WARNING records become warning annotations, ERROR and above become error
    annotations, DEBUG records go to the step debug log. Other records are
    written as plain lines.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                line = f"::error::{escape_data(message)}"
            elif record.levelno >= logging.WARNING:
                line = f"::warning::{escape_data(message)}"
            elif record.levelno <= logging.DEBUG:
                line = f"::debug::{escape_data(message)}"
            else:
                line = message
            stream = self.stream or sys.stdout
            stream.write(line + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)


class ActionsReporter:
    """
    Reports results back to the CI host.

    Failures reported through set_failed() do not stop the run; they mark the
    job as failed and are reflected in exit_code.

    Args:
        environ: Environment mapping to read and update (defaults to os.environ)
        stream: Stream for raw workflow commands (defaults to sys.stdout)
    """

    def __init__(
        self,
        environ: Optional[MutableMapping[str, str]] = None,
        stream: Optional[TextIO] = None,
    ):
        self.environ = os.environ if environ is None else environ
        self.stream = stream
        self.failures = []

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    @property
    def exit_code(self) -> int:
        return 1 if self.failures else 0

    def _write(self, line: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()

    def info(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)

    def set_failed(self, message: str) -> None:
        """Emit an error annotation and mark the job as failed."""
        self.failures.append(message)
        logger.error(message)

    @contextmanager
    def group(self, title: str):
        """Wrap log output in a collapsible group."""
        self._write(f"::group::{escape_data(title)}")
        try:
            yield
        finally:
            self._write("::endgroup::")

    def export_variable(self, name: str, value: str) -> None:
        """
        Export an environment variable for this process and later steps.

        Args:
            name: Variable name
            value: Variable value
        """
        value = str(value)
        self.environ[name] = value

        env_file = self.environ.get("GITHUB_ENV")
        if env_file:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            with open(env_file, "a", encoding="utf-8") as f:
                f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            logger.debug(f"GITHUB_ENV not set, exported {name} to this process only")

    def add_path(self, path) -> None:
        """
        Prepend a directory to PATH for this process and later steps.

        Args:
            path: Directory to add
        """
        path = str(Path(path))
        current = self.environ.get("PATH", "")
        self.environ["PATH"] = f"{path}{os.pathsep}{current}" if current else path

        path_file = self.environ.get("GITHUB_PATH")
        if path_file:
            with open(path_file, "a", encoding="utf-8") as f:
                f.write(f"{path}\n")
        else:
            logger.debug("GITHUB_PATH not set, updated PATH for this process only")


__all__ = [
    "ActionsReporter",
    "WorkflowCommandHandler",
    "get_input",
    "get_bool_input",
    "parse_bool",
    "is_github_actions",
    "escape_data",
]
