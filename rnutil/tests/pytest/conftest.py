"""
Shared pytest fixtures for rnutil tests.

Provides a throwaway React Native app layout (package.json, ios/ project,
node_modules/react-native/React/React.xcodeproj) built from the projects
in fixtures/, and a recorder standing in for external commands.

Test Tier Markers:
  @pytest.mark.evergreen - Tests that always run, never skip (production tests)
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Optional

import pytest

from rnutil.convert import converter as converter_mod
from rnutil.convert import phases
from rnutil.convert.config import REPO_UPDATE_ENV, ConvertConfig


# =============================================================================
# Test Data Constants
# =============================================================================

FIXTURES_DIR = Path(__file__).parent / "fixtures"
APP_NAME = "MyApp"


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test tiers."""
    config.addinivalue_line(
        "markers",
        "evergreen: tests that always run, never skip (production tests)"
    )


# =============================================================================
# App Layout
# =============================================================================


def _create_app(root: Path, app_name: str = APP_NAME) -> Path:
    """Lay out a React Native app under root.

    Returns root.
    """
    root.mkdir(parents=True)
    (root / "package.json").write_text(json.dumps({"name": app_name, "version": "0.0.1"}))

    ios = root / "ios"
    ios.mkdir(parents=True)
    shutil.copytree(FIXTURES_DIR / "MyApp.xcodeproj", ios / f"{app_name}.xcodeproj")

    react = root / "node_modules" / "react-native" / "React"
    react.mkdir(parents=True)
    shutil.copytree(FIXTURES_DIR / "React.xcodeproj", react / "React.xcodeproj")
    return root


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's environment from leaking into option defaults."""
    monkeypatch.delenv(REPO_UPDATE_ENV, raising=False)


@pytest.fixture
def rn_app(tmp_path: Path) -> Path:
    """A fresh, unconverted app. Returns its root directory."""
    return _create_app(tmp_path / "app")


@pytest.fixture
def xcodeproj_path(rn_app: Path) -> Path:
    return rn_app / "ios" / f"{APP_NAME}.xcodeproj"


@pytest.fixture
def react_xcodeproj_path(rn_app: Path) -> Path:
    return rn_app / "node_modules" / "react-native" / "React" / "React.xcodeproj"


@pytest.fixture
def config(rn_app: Path, tmp_path: Path) -> ConvertConfig:
    """Config rooted at rn_app with logs and the pod master repo under tmp_path."""
    master = tmp_path / "cocoapods" / "repos" / "master"
    master.mkdir(parents=True)
    return ConvertConfig.from_settings(
        repo_update=False,
        project_root=rn_app,
        log_dir=tmp_path / "logs",
        cocoapods_master_repo=str(master),
        require_macos=False,
    )


# =============================================================================
# External Commands
# =============================================================================


class CommandRecorder:
    """Records commands instead of running them; can fail on request."""

    def __init__(self) -> None:
        self.commands: list[list[str]] = []
        self.logs: list[Optional[Path]] = []
        self.fail_on: Optional[list[str]] = None

    def __call__(self, *cmd: str, log_path=None, chdir=None) -> None:
        from rnutil.core.errors import ExecutionError

        self.commands.append(list(cmd))
        self.logs.append(Path(log_path) if log_path is not None else None)
        if self.fail_on is not None and list(cmd[: len(self.fail_on)]) == self.fail_on:
            raise ExecutionError(list(cmd), 1, log_path)

    def reset(self) -> None:
        self.commands.clear()
        self.logs.clear()


@pytest.fixture
def commands(monkeypatch: pytest.MonkeyPatch) -> CommandRecorder:
    """Replace every external command used by the converter with a recorder.

    Preflight checks (command lookup, git status, configuration report)
    become no-ops.
    """
    recorder = CommandRecorder()
    monkeypatch.setattr(phases, "run_command_with_log", recorder)
    monkeypatch.setattr(phases, "report_configuration", lambda config: [])
    monkeypatch.setattr(converter_mod, "validate_commands", lambda commands: None)
    monkeypatch.setattr(converter_mod, "check_repo_status", lambda directory=None: None)
    return recorder
