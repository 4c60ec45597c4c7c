"""
CI host integration (GitHub Actions inputs, environment export, annotations).
"""

from vulkankit.ci.actions import (
    ActionsReporter,
    WorkflowCommandHandler,
    get_bool_input,
    get_input,
    is_github_actions,
    parse_bool,
)

__all__ = [
    "ActionsReporter",
    "WorkflowCommandHandler",
    "get_bool_input",
    "get_input",
    "is_github_actions",
    "parse_bool",
]
