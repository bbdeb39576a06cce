"""
Conversion configuration for rnutil.

Defaults come from the bundled defaults.yaml; a user file can override
individual keys.
"""

from __future__ import annotations

import re
import tempfile
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from rnutil.core.errors import ConversionError
from rnutil.core.utils import boolean_env_var, parse_bool

# =============================================================================
# Constants
# =============================================================================

ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"
DEFAULTS_PATH = ASSETS_DIR / "defaults.yaml"
PODFILE_TEMPLATE_PATH = ASSETS_DIR / "templates" / "Podfile.tmpl"

REPO_UPDATE_ENV = "REACT_NATIVE_UTIL_REPO_UPDATE"
HOMEBREW_ENV = "REACT_NATIVE_UTIL_INSTALLED_FROM_HOMEBREW"

APP_PRODUCT_TYPE = "com.apple.product-type.application"
UNIT_TEST_PRODUCT_TYPE = "com.apple.product-type.bundle.unit-test"


@lru_cache(maxsize=1)
def load_defaults() -> dict[str, Any]:
    """Load and return the bundled defaults.

    Result is cached for the lifetime of the process.
    """
    with open(DEFAULTS_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ConvertConfig:
    """Configuration for a conversion or update run."""

    project_root: Path = field(default_factory=Path.cwd)
    repo_update: bool = True
    libraries_group: str = "Libraries"
    default_libraries: list[str] = field(default_factory=list)
    secondary_platform_pattern: str = "-tvOS$"
    packager_phase_pattern: str = "packager"
    packager_phase_name: str = "Start Packager"
    react_package: str = "react-native"
    react_project_fragment: str = "React.xcodeproj"
    react_project_path: str = "node_modules/react-native/React/React.xcodeproj"
    podfile_path: str = "ios/Podfile"
    state_file: str = "ios/.rnutil-state.json"
    cocoapods_master_repo: str = "~/.cocoapods/repos/master"
    log_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    require_macos: bool = True

    @property
    def podfile(self) -> Path:
        return self.project_root / self.podfile_path

    @property
    def state_path(self) -> Path:
        return self.project_root / self.state_file

    @property
    def master_repo(self) -> Path:
        return Path(self.cocoapods_master_repo).expanduser()

    @property
    def secondary_platform_regex(self) -> re.Pattern[str]:
        return re.compile(self.secondary_platform_pattern)

    @property
    def packager_phase_regex(self) -> re.Pattern[str]:
        return re.compile(self.packager_phase_pattern, re.IGNORECASE)

    def log_path(self, name: str) -> Path:
        """Path of a per-command log file."""
        return self.log_dir / f"{name}.log"

    def rewrite_script(self, script: str) -> str:
        """Point ../scripts at the installed copy under node_modules."""
        return script.replace("../scripts", f"../node_modules/{self.react_package}/scripts")

    @classmethod
    def from_settings(
        cls,
        settings: Optional[dict[str, Any]] = None,
        repo_update: Optional[bool] = None,
        **overrides: Any,
    ) -> "ConvertConfig":
        """Build a config from the bundled defaults plus optional settings.

        repo_update resolution order: explicit argument, then a repo_update
        setting, then the REACT_NATIVE_UTIL_REPO_UPDATE environment
        variable, then True.

        Raises:
            ConversionError: on an unknown settings key.
        """
        known = {f.name for f in fields(cls)}
        merged: dict[str, Any] = dict(load_defaults())
        merged.update(settings or {})
        merged.update(overrides)

        unknown = sorted(set(merged) - known)
        if unknown:
            raise ConversionError(f"Unknown configuration keys: {', '.join(unknown)}")

        setting = merged.pop("repo_update", None)
        if repo_update is None:
            repo_update = parse_bool(setting, default_value=None)
        if repo_update is None:
            repo_update = boolean_env_var(REPO_UPDATE_ENV, default_value=True)

        if "project_root" in merged:
            merged["project_root"] = Path(merged["project_root"])
        if "log_dir" in merged:
            merged["log_dir"] = Path(merged["log_dir"])
        merged["default_libraries"] = list(merged.get("default_libraries") or [])

        return cls(repo_update=parse_bool(repo_update), **merged)


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML settings file.

    Raises:
        ConversionError: if the file is missing, malformed, or not a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConversionError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConversionError(f"Failed to parse {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConversionError(f"{path} must contain a mapping of settings")
    return data
