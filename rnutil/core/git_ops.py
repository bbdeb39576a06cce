"""
Git operations for rnutil.

The conversion rewrites project files in place, so it refuses to run on a
working tree with uncommitted changes.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from rnutil.core.errors import ConversionError
from rnutil.core.utils import run_cmd


def is_git_repo(directory: Optional[Path] = None) -> bool:
    """Check whether directory (default: cwd) is inside a git work tree."""
    result = run_cmd(
        ["git", "rev-parse", "--git-dir"],
        cwd=directory,
        capture=True,
        check=False,
    )
    return result.returncode == 0


def git_has_changes(directory: Optional[Path] = None) -> bool:
    """Check for changes relative to HEAD."""
    result = run_cmd(
        ["git", "diff-index", "--quiet", "HEAD", "--"],
        cwd=directory,
        capture=True,
        check=False,
    )
    return result.returncode != 0


def check_repo_status(directory: Optional[Path] = None) -> None:
    """Refuse to continue with uncommitted changes.

    Silently passes when git is not installed or directory is not a repo.

    Raises:
        ConversionError: if the work tree differs from HEAD.
    """
    if shutil.which("git") is None:
        return

    if not is_git_repo(directory):
        return

    if git_has_changes(directory):
        raise ConversionError(
            "Uncommitted changes in repo. Please commit or stash before continuing."
        )
