"""
Xcode project model for rnutil.

Wraps pbxproj.XcodeProject with the typed queries and mutations the
conversion needs: finding the Libraries group, classifying its children,
unlinking static libraries, copying the packager phase and removing the
group along with everything that points into it.
"""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Optional, Union

from pbxproj import XcodeProject
from pbxproj.pbxsections import PBXShellScriptBuildPhase

from rnutil.convert.config import (
    APP_PRODUCT_TYPE,
    UNIT_TEST_PRODUCT_TYPE,
    ConvertConfig,
)
from rnutil.core.errors import ConversionError

# Static library produced by a sub-project, e.g. libRNVectorIcons.a
STATIC_LIBRARY_PATTERN = re.compile(r"^lib(.+)\.a$")

BUILD_PHASE_SECTIONS = (
    "PBXCopyFilesBuildPhase",
    "PBXFrameworksBuildPhase",
    "PBXHeadersBuildPhase",
    "PBXResourcesBuildPhase",
    "PBXShellScriptBuildPhase",
    "PBXSourcesBuildPhase",
)


def _field(obj: Any, name: str) -> Any:
    # Inline dictionaries (e.g. projectReferences entries) may come back as plain dicts
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def display_name(obj: Any) -> Optional[str]:
    """Name shown in Xcode's navigator: name if set, otherwise path."""
    return getattr(obj, "name", None) or getattr(obj, "path", None)


def library_root(path: str) -> str:
    """RNVectorIcons for .../ios/RNVectorIcons.xcodeproj."""
    name = PurePosixPath(path).name
    if name.endswith(".xcodeproj"):
        name = name[: -len(".xcodeproj")]
    return name


def dependency_name(path: str) -> str:
    """npm package for a sub-project: base name of the grandparent directory.

    ../node_modules/react-native-vector-icons/ios/RNVectorIcons.xcodeproj
    yields react-native-vector-icons. Falls back to the library root for
    paths too short to have a grandparent.
    """
    name = PurePosixPath(path).parent.parent.name
    return name or library_root(path)


class Project:
    """An Xcode project opened for conversion."""

    def __init__(
        self,
        pbx: XcodeProject,
        path: Path,
        app_name: Optional[str] = None,
        config: Optional[ConvertConfig] = None,
    ):
        self.pbx = pbx
        self.path = path
        self.app_name = app_name
        self.config = config or ConvertConfig.from_settings()

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        app_name: Optional[str] = None,
        config: Optional[ConvertConfig] = None,
    ) -> "Project":
        """Load <path>/project.pbxproj.

        Raises:
            ConversionError: if the project is missing or cannot be parsed.
        """
        path = Path(path)
        pbxproj_path = path / "project.pbxproj"
        if not pbxproj_path.is_file():
            raise ConversionError(f"Failed to open {path}. File not found.")

        try:
            pbx = XcodeProject.load(str(pbxproj_path))
        except Exception as e:
            raise ConversionError(f"Failed to load {path}: {e}") from e

        return cls(pbx, path, app_name=app_name, config=config)

    def save(self) -> None:
        self.pbx.save()

    # -------------------------------------------------------------------------
    # Object graph
    # -------------------------------------------------------------------------

    def _object(self, key: Any) -> Any:
        if key is None:
            return None
        try:
            return self.pbx.objects[key]
        except KeyError:
            return None

    def _section(self, *sections: str) -> list[Any]:
        return self.pbx.objects.get_objects_in_section(*sections)

    def _children(self, group: Any) -> list[Any]:
        children = []
        for key in getattr(group, "children", None) or []:
            child = self._object(key)
            if child is not None:
                children.append(child)
        return children

    def _delete(self, key: Any) -> None:
        if self._object(key) is not None:
            del self.pbx.objects[key]

    @property
    def root_object(self) -> Any:
        return self._object(self.pbx.rootObject)

    @property
    def main_group(self) -> Any:
        return self._object(self.root_object.mainGroup)

    # -------------------------------------------------------------------------
    # Targets
    # -------------------------------------------------------------------------

    @property
    def targets(self) -> list[Any]:
        return list(self._section("PBXNativeTarget"))

    @property
    def app_target(self) -> Optional[Any]:
        for target in self.targets:
            if target.name == self.app_name and getattr(target, "productType", None) == APP_PRODUCT_TYPE:
                return target
        return None

    @property
    def test_target(self) -> Optional[Any]:
        for target in self.targets:
            if getattr(target, "productType", None) == UNIT_TEST_PRODUCT_TYPE:
                return target
        return None

    @property
    def primary_target(self) -> Optional[Any]:
        """Target named after the app, or the first native target."""
        for target in self.targets:
            if target.name == self.app_name:
                return target
        targets = self.targets
        return targets[0] if targets else None

    def validate_app_target(self) -> None:
        """Require exactly one application target named after the app.

        Raises:
            ConversionError: describing what was found instead.
        """
        named = [t for t in self.targets if t.name == self.app_name]
        apps = [t for t in named if getattr(t, "productType", None) == APP_PRODUCT_TYPE]

        if len(apps) == 1:
            return
        if len(apps) > 1:
            raise ConversionError(
                f"Found {len(apps)} application targets named {self.app_name} in {self.path}."
            )
        if named:
            product_type = getattr(named[0], "productType", None)
            raise ConversionError(
                f"Target {self.app_name} in {self.path} is not an application (product type {product_type})."
            )
        raise ConversionError(f"No application target named {self.app_name} found in {self.path}.")

    def build_phases(self, target: Any) -> list[Any]:
        phases = []
        for key in getattr(target, "buildPhases", None) or []:
            phase = self._object(key)
            if phase is not None:
                phases.append(phase)
        return phases

    def frameworks_phase(self, target: Any) -> Optional[Any]:
        for phase in self.build_phases(target):
            if phase.isa == "PBXFrameworksBuildPhase":
                return phase
        return None

    # -------------------------------------------------------------------------
    # Libraries group
    # -------------------------------------------------------------------------

    @property
    def libraries_group(self) -> Optional[Any]:
        for child in self._children(self.main_group):
            if child.isa == "PBXGroup" and display_name(child) == self.config.libraries_group:
                return child
        return None

    @property
    def dependency_paths(self) -> list[str]:
        """Path of every project reference in the Libraries group."""
        group = self.libraries_group
        if group is None:
            return []
        paths = []
        for child in self._children(group):
            path = getattr(child, "path", None) or display_name(child)
            if path:
                paths.append(path)
        return paths

    def _third_party_paths(self) -> list[str]:
        defaults = set(self.config.default_libraries)
        return [p for p in self.dependency_paths if library_root(p) not in defaults]

    @property
    def library_roots(self) -> list[str]:
        """Static library roots of the non-default sub-projects."""
        return [library_root(p) for p in self._third_party_paths()]

    @property
    def dependencies(self) -> list[str]:
        """npm packages to unlink and relink, in group order, without repeats."""
        deps: list[str] = []
        for path in self._third_party_paths():
            name = dependency_name(path)
            if name not in deps:
                deps.append(name)
        return deps

    def _real_path(self, child: Any, group: Any) -> Path:
        path = getattr(child, "path", None) or ""
        source_tree = getattr(child, "sourceTree", "<group>")
        source_root = self.path.parent

        if source_tree == "<absolute>":
            return Path(path)
        if source_tree == "SOURCE_ROOT":
            return Path(os.path.normpath(source_root / path))

        base = source_root
        group_path = getattr(group, "path", None)
        if group_path:
            base = base / group_path
        return Path(os.path.normpath(base / path))

    @property
    def react_project_path(self) -> Optional[Path]:
        """Real path of React.xcodeproj if the Libraries group references it."""
        group = self.libraries_group
        if group is None:
            return None
        for child in self._children(group):
            if self.config.react_project_fragment in (getattr(child, "path", None) or ""):
                return self._real_path(child, group)
        return None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def linked_libraries(self, target: Any) -> list[tuple[Any, str]]:
        """(build file id, file path) for everything in target's frameworks phase."""
        phase = self.frameworks_phase(target)
        if phase is None:
            return []

        linked = []
        for key in getattr(phase, "files", None) or []:
            build_file = self._object(key)
            if build_file is None:
                continue
            file_ref = self._object(getattr(build_file, "fileRef", None))
            path = getattr(file_ref, "path", None) if file_ref is not None else None
            if path:
                linked.append((key, path))
        return linked

    def remove_linkage(self, target: Any, roots: Iterable[str]) -> list[str]:
        """Remove lib<root>.a from target's frameworks phase for each root.

        Returns the removed library file names.
        """
        phase = self.frameworks_phase(target)
        if phase is None:
            return []

        roots = set(roots)
        removed: list[str] = []
        for key, path in self.linked_libraries(target):
            match = STATIC_LIBRARY_PATTERN.match(path)
            if match is None or match.group(1) not in roots:
                continue
            phase.files.remove(key)
            self._delete(key)
            removed.append(path)
        return removed

    def remove_libraries_from_targets(self, roots: Optional[Iterable[str]] = None) -> dict[str, list[str]]:
        """Unlink third-party static libraries from every primary-platform target.

        Returns removed library names keyed by target name.
        """
        roots = list(self.library_roots if roots is None else roots)
        secondary = self.config.secondary_platform_regex
        removed: dict[str, list[str]] = {}
        for target in self.targets:
            if secondary.search(target.name):
                continue
            libs = self.remove_linkage(target, roots)
            if libs:
                removed[target.name] = libs
        return removed

    @property
    def packager_phase(self) -> Optional[Any]:
        target = self.primary_target
        if target is None:
            return None
        pattern = self.config.packager_phase_regex
        for phase in self.build_phases(target):
            if pattern.search(getattr(phase, "name", None) or ""):
                return phase
        return None

    def add_build_phase(self, target: Any, name: str, script: str) -> Any:
        """Append a shell script phase to target."""
        phase = PBXShellScriptBuildPhase.create(script)
        phase.name = name
        self.pbx.objects[phase.get_id()] = phase
        target.buildPhases.append(phase.get_id())
        return phase

    def add_packager_script_from(self, react_project: "Project") -> Any:
        """Copy React.xcodeproj's packager phase onto the app target.

        Raises:
            ConversionError: if react_project has no packager phase.
        """
        source = react_project.packager_phase
        if source is None:
            raise ConversionError(f"Packager build phase not found in {react_project.path}.")

        target = self.app_target
        if target is None:
            raise ConversionError(f"No application target named {self.app_name} found in {self.path}.")

        script = self.config.rewrite_script(source.shellScript)
        return self.add_build_phase(target, self.config.packager_phase_name, script)

    def remove_libraries_group(self) -> bool:
        """Remove the Libraries group and all references into its sub-projects.

        Returns False if there was no group to remove.
        """
        group = self.libraries_group
        if group is None:
            return False

        child_ids = {str(key) for key in group.children}
        proxy_ids = self._remove_project_references(child_ids)
        self._remove_build_files(child_ids | proxy_ids)
        self._delete_tree(group.get_id())
        self.main_group.children.remove(group.get_id())
        return True

    def _remove_project_references(self, project_ids: set[str]) -> set[str]:
        """Drop projectReferences entries, product groups and proxies for project_ids.

        Returns the ids of removed PBXReferenceProxy objects.
        """
        proxy_ids: set[str] = set()
        references = getattr(self.root_object, "projectReferences", None)
        if references is not None:
            for reference in list(references):
                if str(_field(reference, "ProjectRef")) not in project_ids:
                    continue
                product_group = self._object(_field(reference, "ProductGroup"))
                if product_group is not None:
                    proxy_ids.update(str(key) for key in product_group.children)
                    self._delete(product_group.get_id())
                references.remove(reference)

        container_ids = {
            str(item.get_id())
            for item in self._section("PBXContainerItemProxy")
            if str(getattr(item, "containerPortal", "")) in project_ids
        }
        for proxy in self._section("PBXReferenceProxy"):
            if str(getattr(proxy, "remoteRef", "")) in container_ids:
                proxy_ids.add(str(proxy.get_id()))

        for dependency in self._section("PBXTargetDependency"):
            if str(getattr(dependency, "targetProxy", "")) not in container_ids:
                continue
            for target in self.targets:
                deps = getattr(target, "dependencies", None)
                if deps is not None and dependency.get_id() in deps:
                    deps.remove(dependency.get_id())
            self._delete(dependency.get_id())

        for key in container_ids | proxy_ids:
            self._delete(key)
        return proxy_ids

    def _remove_build_files(self, file_ids: set[str]) -> None:
        """Remove every build file pointing at one of file_ids."""
        doomed = {
            str(build_file.get_id())
            for build_file in self._section("PBXBuildFile")
            if str(getattr(build_file, "fileRef", "")) in file_ids
        }
        if not doomed:
            return
        for phase in self._section(*BUILD_PHASE_SECTIONS):
            files = getattr(phase, "files", None)
            if files is None:
                continue
            for key in list(files):
                if str(key) in doomed:
                    files.remove(key)
        for key in doomed:
            self._delete(key)

    def _delete_tree(self, key: Any) -> None:
        obj = self._object(key)
        if obj is None:
            return
        for child_key in list(getattr(obj, "children", None) or []):
            self._delete_tree(child_key)
        self._delete(key)
