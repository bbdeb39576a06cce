"""
External command steps for the conversion.

Each step shells out to yarn, react-native, pod or open. Failures raise
ExecutionError with the log file to inspect; only the configuration report
is best effort.
"""

from __future__ import annotations

import os
import platform
import sys
from pathlib import Path
from typing import Sequence

from rnutil import __version__
from rnutil.convert.config import HOMEBREW_ENV, ConvertConfig
from rnutil.core.errors import ExecutionError
from rnutil.core.utils import (
    NAME,
    CommandInfo,
    boolean_env_var,
    log,
    probe_command,
    run_command_with_log,
)


# =============================================================================
# react-native link / unlink
# =============================================================================


def unlink_dependencies(dependencies: Sequence[str], config: ConvertConfig) -> None:
    """Run react-native unlink for each dependency, in order."""
    for dep in dependencies:
        run_command_with_log(
            "react-native", "unlink", dep,
            log_path=config.log_path(f"react-native-unlink-{dep}"),
            chdir=config.project_root,
        )
        log.success(f"Unlinked {dep}")


def link_dependencies(dependencies: Sequence[str], config: ConvertConfig) -> None:
    """Run react-native link for each dependency, in order."""
    for dep in dependencies:
        run_command_with_log(
            "react-native", "link", dep,
            log_path=config.log_path(f"react-native-link-{dep}"),
            chdir=config.project_root,
        )
        log.success(f"Linked {dep}")


# =============================================================================
# CocoaPods
# =============================================================================


def setup_cocoapods_if_needed(config: ConvertConfig) -> bool:
    """Run pod setup when the master podspec repo is missing.

    Returns True if setup ran.
    """
    if config.master_repo.is_dir():
        return False

    log.info("Setting up CocoaPods")
    run_command_with_log("pod", "setup", log_path=config.log_path("pod-setup"))
    return True


def pod_install(config: ConvertConfig) -> None:
    """Run pod install in ios/."""
    command = ["pod", "install"]
    if config.repo_update:
        command.append("--repo-update")
    run_command_with_log(
        *command,
        log_path=config.log_path("pod-install"),
        chdir=config.project_root / "ios",
    )


def open_workspace(app_name: str, config: ConvertConfig) -> None:
    run_command_with_log("open", str(Path("ios") / f"{app_name}.xcworkspace"), chdir=config.project_root)


# =============================================================================
# npm dependencies
# =============================================================================


def install_npm_deps_if_needed(config: ConvertConfig) -> bool:
    """Run yarn install unless yarn check already passes.

    Returns True if yarn install ran.
    """
    try:
        run_command_with_log("yarn", "check", "--integrity", chdir=config.project_root)
        run_command_with_log("yarn", "check", "--verify-tree", chdir=config.project_root)
        return False
    except ExecutionError:
        log.info("Installing npm dependencies")

    run_command_with_log("yarn", "install", log_path=config.log_path("yarn"), chdir=config.project_root)
    return True


# =============================================================================
# Configuration report
# =============================================================================


def _log_command(info: CommandInfo) -> None:
    if not info.found:
        log.warning(f"{info.package}: not found")
    elif info.version:
        log.table_row(f"{info.package} {info.version.splitlines()[0]}", info.path or "")
    else:
        log.table_row(info.package, info.path or "")


def report_configuration(config: ConvertConfig) -> list[CommandInfo]:
    """Print tool and environment versions.

    Returns the probed commands so callers can inspect what was found.
    """
    log.header(f"{NAME} v{__version__}")

    install_npm_deps_if_needed(config)

    if boolean_env_var(HOMEBREW_ENV):
        log.info("Installed from Homebrew")

    uname = platform.uname()
    log.info(f"{uname.system} {uname.release} {uname.machine}")
    log.table_row(f"Python {platform.python_version()}", sys.executable)

    react_native = probe_command("react-native", "react-native-cli")
    if react_native.found:
        log.table_row("react-native-cli", react_native.path or "")
        for line in (react_native.version or "").splitlines():
            log.dim(f"  {line}")
    else:
        log.warning("react-native-cli: not found")

    probes = [react_native]
    for command, package in (("yarn", "yarn"), ("pod", "cocoapods")):
        info = probe_command(command, package)
        _log_command(info)
        probes.append(info)

    if os.environ.get("VIRTUAL_ENV"):
        log.dim(f"virtualenv: {os.environ['VIRTUAL_ENV']}")

    return probes
