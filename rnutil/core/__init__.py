"""
rnutil.core - Foundation layer for the rn CLI.

Exports logging, errors, command helpers, and git checks.
"""

# Errors
from rnutil.core.errors import (
    ReactNativeUtilError,
    ConversionError,
    ExecutionError,
    CommandNotFoundError,
)

# Utils
from rnutil.core.utils import (
    # Logging
    log,
    Logger,
    # Constants
    NAME,
    REQUIRED_COMMANDS,
    # Environment
    boolean_env_var,
    parse_bool,
    is_mac,
    # Commands
    CommandInfo,
    validate_commands,
    probe_command,
    run_cmd,
    run_command_with_log,
)

# Git operations
from rnutil.core.git_ops import (
    is_git_repo,
    git_has_changes,
    check_repo_status,
)

__all__ = [
    # Errors
    "ReactNativeUtilError",
    "ConversionError",
    "ExecutionError",
    "CommandNotFoundError",
    # Logging
    "log",
    "Logger",
    # Constants
    "NAME",
    "REQUIRED_COMMANDS",
    # Environment
    "boolean_env_var",
    "parse_bool",
    "is_mac",
    # Commands
    "CommandInfo",
    "validate_commands",
    "probe_command",
    "run_cmd",
    "run_command_with_log",
    # Git operations
    "is_git_repo",
    "git_has_changes",
    "check_repo_status",
]
