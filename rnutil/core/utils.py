"""
Shared utilities for the rn CLI.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from rnutil.core.errors import CommandNotFoundError, ExecutionError

# =============================================================================
# Constants
# =============================================================================

NAME = "rnutil"

# Values accepted as "true" for boolean environment variables
TRUTHY_VALUES = {"1", "y", "yes", "t", "true", "on"}

# Commands required by the conversion, mapped to the package providing them
REQUIRED_COMMANDS: dict[str, str] = {
    "yarn": "yarn",
    "react-native": "react-native-cli",
    "pod": "cocoapods",
}


# =============================================================================
# Logging
# =============================================================================


class Logger:
    """Simple colored logger with --no-color support."""

    COLORS = {
        "reset": "\033[0m",
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "cyan": "\033[96m",
        "bold": "\033[1m",
        "dim": "\033[2m",
    }

    def __init__(self, use_color: Optional[bool] = None):
        if use_color is None:
            self._use_color = sys.stdout.isatty()
        else:
            self._use_color = use_color

    def set_color(self, use_color: bool) -> None:
        """Set whether to use color output."""
        self._use_color = use_color

    def _color(self, text: str, color: str) -> str:
        if not self._use_color:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def header(self, message: str) -> None:
        """Print a section header."""
        print(f"\n{self._color('===', 'cyan')} {self._color(message, 'bold')} {self._color('===', 'cyan')}")

    def info(self, message: str) -> None:
        """Print an info message."""
        print(f"  {message}")

    def success(self, message: str) -> None:
        """Print a success message."""
        print(f"  {self._color('[OK]', 'green')} {message}")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        print(f"  {self._color('[WARN]', 'yellow')} {message}")

    def error(self, message: str) -> None:
        """Print an error message."""
        print(f"  {self._color('[ERROR]', 'red')} {message}")

    def dim(self, message: str) -> None:
        """Print a dim/secondary message."""
        print(f"  {self._color(message, 'dim')}")

    def table_row(self, col1: str, col2: str, col1_width: int = 24) -> None:
        """Print a table row with two columns."""
        print(f"  {col1:<{col1_width}} {col2}")


# Global logger instance
log = Logger()


# =============================================================================
# Environment
# =============================================================================


def parse_bool(value: object, default_value: Optional[bool] = False) -> Optional[bool]:
    """Interpret a setting as a boolean.

    Strings use the same truthy values as environment variables; None and
    blank strings yield default_value.
    """
    if value is None:
        return default_value
    if isinstance(value, str):
        if value.strip() == "":
            return default_value
        return value.strip().lower() in TRUTHY_VALUES
    return bool(value)


def boolean_env_var(
    name: str,
    default_value: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> bool:
    """Interpret an environment variable as a boolean.

    Unset or empty variables yield default_value.
    """
    env = os.environ if environ is None else environ
    return parse_bool(env.get(name), default_value)


def is_mac() -> bool:
    return sys.platform == "darwin"


# =============================================================================
# Command Discovery
# =============================================================================


@dataclass
class CommandInfo:
    """Result of probing an external command for the configuration report."""

    command: str
    package: str
    path: Optional[str] = None
    version: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.path is not None


def validate_commands(commands: Mapping[str, str] = REQUIRED_COMMANDS) -> None:
    """Make sure every required command is on the PATH.

    Raises:
        CommandNotFoundError: for the first command that cannot be resolved.
    """
    for command, package in commands.items():
        if shutil.which(command) is None:
            raise CommandNotFoundError(command, package)


def probe_command(
    command: str,
    package: Optional[str] = None,
    include_version: bool = True,
) -> CommandInfo:
    """Look up a command's path and, optionally, its --version output.

    Never raises: a missing command or a failing --version leaves the
    corresponding field as None.
    """
    info = CommandInfo(command=command, package=package or command)
    info.path = shutil.which(command)
    if info.path is None or not include_version:
        return info

    try:
        result = subprocess.run(
            [command, "--version"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return info

    if result.returncode == 0:
        info.version = result.stdout.strip()
    return info


# =============================================================================
# Runtime Utilities
# =============================================================================


def run_cmd(
    cmd: list[str],
    cwd: Optional[Path] = None,
    capture: bool = False,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run a command with proper error handling."""
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture,
            text=True,
            check=check,
        )
        return result
    except subprocess.CalledProcessError as e:
        if capture:
            log.error(f"Command failed: {' '.join(cmd)}")
            if e.stdout:
                log.error(f"stdout: {e.stdout}")
            if e.stderr:
                log.error(f"stderr: {e.stderr}")
        raise


def run_command_with_log(
    *cmd: str,
    log_path: Optional[Union[str, Path]] = None,
    chdir: Optional[Union[str, Path]] = None,
) -> None:
    """Run a command, sending combined stdout/stderr to a log file.

    With log_path None the output is discarded.

    Raises:
        CommandNotFoundError: if the executable does not exist.
        ExecutionError: on a nonzero exit status.
    """
    command = list(cmd)
    log_file = Path(log_path) if log_path is not None else None

    log.dim(f"$ {' '.join(command)}" + (f"  (log: {log_file})" if log_file else ""))

    try:
        if log_file is None:
            result = subprocess.run(
                command,
                cwd=chdir,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        else:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(log_file, "w", encoding="utf-8") as f:
                result = subprocess.run(
                    command,
                    cwd=chdir,
                    stdout=f,
                    stderr=subprocess.STDOUT,
                    check=False,
                )
    except FileNotFoundError as e:
        raise CommandNotFoundError(command[0]) from e

    if result.returncode != 0:
        raise ExecutionError(command, result.returncode, log_file)
