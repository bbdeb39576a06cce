"""
Conversion of a React Native app from the Libraries group to CocoaPods.

Expects the app's package.json in config.project_root:

    from rnutil.convert import Converter
    from rnutil.core import ReactNativeUtilError

    try:
        Converter(repo_update=True).convert_to_react_pod()
    except ReactNativeUtilError as e:
        print(f"Conversion failed: {e}")
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rnutil.convert import phases
from rnutil.convert.config import ConvertConfig
from rnutil.convert.manifest import PACKAGE_JSON, PackageJson
from rnutil.convert.podfile import render_podfile, write_podfile
from rnutil.convert.project import Project
from rnutil.convert.state import ConversionState, RunState, StepResult
from rnutil.core.errors import ConversionError
from rnutil.core.git_ops import check_repo_status
from rnutil.core.utils import REQUIRED_COMMANDS, is_mac, log, validate_commands


class Converter:
    """Runs the conversion pipeline or the packager-phase update."""

    def __init__(self, repo_update: Optional[bool] = None, config: Optional[ConvertConfig] = None):
        if config is None:
            config = ConvertConfig.from_settings(repo_update=repo_update)
        elif repo_update is not None:
            config.repo_update = repo_update
        self.config = config

        self.package_json: Optional[PackageJson] = None
        self.project: Optional[Project] = None
        self.react_project: Optional[Project] = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @property
    def app_name(self) -> str:
        if self.package_json is None:
            self.load_package_json()
        return self.package_json.app_name

    @property
    def xcodeproj_path(self) -> Path:
        return (self.config.project_root / "ios" / f"{self.app_name}.xcodeproj").absolute()

    def load_package_json(self) -> PackageJson:
        self.package_json = PackageJson.load(self.config.project_root / PACKAGE_JSON)
        return self.package_json

    def load_xcodeproj(self) -> Project:
        self.project = None  # in case of exception on reopen
        self.project = Project.open(self.xcodeproj_path, app_name=self.app_name, config=self.config)
        return self.project

    def load_react_project(self) -> StepResult:
        """Open React.xcodeproj, preferring the copy referenced by the Libraries group."""
        path = None
        if self.project is not None:
            path = self.project.react_project_path
        if path is None:
            path = self.config.project_root / self.config.react_project_path

        try:
            self.react_project = Project.open(path, app_name="React", config=self.config)
        except ConversionError as e:
            self.react_project = None
            return StepResult("degraded", f"Could not open reference project: {e}")
        return StepResult("ok", value=self.react_project)

    def startup(self, check_repo: bool = True) -> None:
        validate_commands(REQUIRED_COMMANDS)

        # A resumed run has already modified tracked files
        if check_repo:
            check_repo_status(self.config.project_root)

        phases.report_configuration(self.config)

        if self.config.require_macos and not is_mac():
            raise ConversionError("macOS required.")

        self.load_package_json()
        log.info("package.json:")
        log.info(f" app name: {self.app_name!r}")

        self.load_xcodeproj()
        log.info(f"Found Xcode project at {self.xcodeproj_path}")

        self.project.validate_app_target()

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def _pending_state(self) -> Optional[ConversionState]:
        state = ConversionState.load(self.config.state_path)
        if state is None or state.reached(RunState.INSTALLED):
            return None
        return state

    def convert_to_react_pod(self) -> int:
        """Convert the app to use the React pod.

        Returns the process exit status: 0 on success or when there is
        nothing to convert, 1 when a Podfile already exists.

        Raises:
            ConversionError: on conversion failure
            ExecutionError: on command failure
            CommandNotFoundError: if a required command is not present
        """
        state = self._pending_state()

        if state is None and self.config.podfile.exists():
            log.error(f"Podfile already present at {self.config.podfile}.")
            log.info("A future release may support integration with an existing Podfile.")
            log.info("This release can only convert apps that do not currently use a Podfile.")
            return 1

        self.startup(check_repo=state is None)

        if state is None:
            if self.project.libraries_group is None:
                log.info(f"Libraries group not found in {self.xcodeproj_path}. No conversion necessary.")
                return 0
            state = ConversionState(app_name=self.app_name)
            self.detect_dependencies(state)
        elif state.app_name != self.app_name:
            raise ConversionError(
                f"{self.config.state_path} belongs to {state.app_name}, not {self.app_name}. "
                "Remove it to start over."
            )
        else:
            log.info(f"Resuming conversion after step {state.state.name}")

        self.run_steps(state)
        return 0

    def detect_dependencies(self, state: ConversionState) -> None:
        """Snapshot the third-party dependencies before anything changes."""
        state.dependencies = self.project.dependencies
        state.library_roots = self.project.library_roots
        state.save(self.config.state_path)

        log.header("Dependencies")
        for dep in state.dependencies:
            log.info(dep)
        if not state.dependencies:
            log.dim("(none)")

    def run_steps(self, state: ConversionState) -> None:
        state_path = self.config.state_path

        if not state.reached(RunState.GROUP_REMOVED):
            log.header("Unlinking dependencies")
            phases.unlink_dependencies(state.dependencies, self.config)

            # react-native unlink rewrites the project on disk
            self.load_xcodeproj()
            self.mutate_project(state.library_roots)
            state.advance(RunState.GROUP_REMOVED, state_path)

        if not state.reached(RunState.CONFIG_WRITTEN):
            self.generate_podfile(state.dependencies)
            state.advance(RunState.CONFIG_WRITTEN, state_path)

        if not state.reached(RunState.LINKED):
            log.header("Linking dependencies")
            phases.link_dependencies(state.dependencies, self.config)
            state.advance(RunState.LINKED, state_path)

        if not state.reached(RunState.INSTALLED):
            self.install_pods()
            state.advance(RunState.INSTALLED, state_path)

        log.success("Conversion complete")
        state_path.unlink()

        phases.open_workspace(self.app_name, self.config)

    def mutate_project(self, library_roots: list[str]) -> None:
        """Unlink static libraries, add the packager phase, drop the Libraries group, save."""
        log.header(f"Updating {self.xcodeproj_path.name}")

        removed = self.project.remove_libraries_from_targets(library_roots)
        for target_name, libs in removed.items():
            log.info(f"Removed {', '.join(libs)} from {target_name}")

        self.add_packager_phase()

        self.project.remove_libraries_group()
        log.info("Removed Libraries group")

        self.project.save()
        log.success(f"Saved {self.xcodeproj_path}")

    def add_packager_phase(self) -> StepResult:
        if self.project.packager_phase is not None:
            log.dim("Packager build phase already present")
            return StepResult("skipped", "packager phase already present")

        result = self.load_react_project()
        if not result.ok:
            log.warning(f"{result.message}. Skipping packager step.")
            return result

        phase = self.project.add_packager_script_from(self.react_project)
        log.info(f"Added {phase.name} build phase")
        return StepResult("ok", value=phase)

    def generate_podfile(self, dependencies: list[str]) -> Path:
        path = self.config.podfile
        log.info(f"Generating {self.config.podfile_path}")

        test_target = self.project.test_target if self.project is not None else None
        contents = render_podfile(
            self.app_name,
            dependencies,
            test_target.name if test_target is not None else None,
        )
        write_podfile(path, contents)
        return path

    def install_pods(self) -> None:
        phases.setup_cocoapods_if_needed(self.config)

        log.header(f"Generating Pods project and ios/{self.app_name}.xcworkspace")
        log.info("Once pod install is complete, your project will be part of this workspace.")
        log.info("From now on, you should build the workspace with Xcode instead of the project.")
        log.info("Always add the workspace and Podfile.lock to SCM.")
        log.info("It is common practice also to add the Pods directory.")
        log.info("The workspace will be automatically opened when pod install completes.")
        phases.pod_install(self.config)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def update_project(self) -> int:
        """Refresh the packager build phase from React.xcodeproj.

        Raises:
            ConversionError: if the app still needs conversion or the
                reference project lacks a packager phase.
        """
        self.startup()

        if self.project.libraries_group is not None:
            raise ConversionError(
                f"Libraries group present in {self.xcodeproj_path}. Conversion necessary. Run rn convert first."
            )

        if not self.config.podfile.exists():
            raise ConversionError(
                f"{self.config.podfile_path} not found. Conversion necessary. Run rn convert first."
            )

        log.info(f"Updating project at {self.xcodeproj_path}")

        result = self.load_react_project()
        if not result.ok:
            raise ConversionError(result.message)

        current = self.project.packager_phase
        if current is None:
            # Not an error. User may have removed it.
            log.warning(f"Packager build phase not found in {self.xcodeproj_path}. Not updating.")
            return 0

        source = self.react_project.packager_phase
        if source is None:
            raise ConversionError(f"Packager build phase not found in {self.react_project.path}.")

        new_script = self.config.rewrite_script(source.shellScript)
        new_name = getattr(source, "name", None)
        current_name = getattr(current, "name", None)

        if new_script == current.shellScript and new_name == current_name:
            log.success(f"{current_name} build phase up to date.")
            return 0

        log.info("Updating packager phase.")
        log.info(f" Current name: {current_name}")
        log.info(f" New name    : {new_name}")

        current.name = new_name
        current.shellScript = new_script
        self.project.save()

        log.success(f"Updated {self.xcodeproj_path}")
        return 0
