"""
rnutil.convert - Libraries group to CocoaPods conversion.

Provides the Xcode project model, run state tracking, Podfile generation
and the Converter pipeline that ties them together.
"""

from rnutil.convert.config import (
    ConvertConfig,
    load_config_file,
    load_defaults,
)
from rnutil.convert.converter import Converter
from rnutil.convert.manifest import PackageJson
from rnutil.convert.project import (
    Project,
    dependency_name,
    library_root,
)
from rnutil.convert.state import (
    ConversionState,
    RunState,
    StepResult,
)

__all__ = [
    # Config
    "ConvertConfig",
    "load_config_file",
    "load_defaults",
    # Pipeline
    "Converter",
    "PackageJson",
    # Project model
    "Project",
    "dependency_name",
    "library_root",
    # State
    "ConversionState",
    "RunState",
    "StepResult",
]
