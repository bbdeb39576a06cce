"""
Exception hierarchy for rnutil.

Every error raised on purpose by this package inherits from
ReactNativeUtilError, so callers can catch a single type.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class ReactNativeUtilError(Exception):
    """Base class for all rnutil errors."""


class ConversionError(ReactNativeUtilError):
    """A conversion precondition or project invariant failed."""


class ExecutionError(ReactNativeUtilError):
    """An external command exited with a nonzero status."""

    def __init__(
        self,
        command: Sequence[str],
        exit_status: int,
        log_path: Optional[Path] = None,
    ):
        self.command = list(command)
        self.exit_status = exit_status
        self.log_path = log_path

        message = f"{' '.join(self.command)} failed with status {exit_status}"
        if log_path is not None:
            message += f". See {log_path} for details."
        super().__init__(message)


class CommandNotFoundError(ReactNativeUtilError):
    """A required executable is not on the PATH."""

    def __init__(self, command: str, package: Optional[str] = None):
        self.command = command
        self.package = package or command
        super().__init__(
            f"{command} command not found. Please install {self.package}."
        )
