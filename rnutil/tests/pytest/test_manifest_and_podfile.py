"""
Tests for package.json loading and Podfile rendering.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from rnutil.convert.manifest import PackageJson
from rnutil.convert.podfile import (
    format_dependency_comment,
    format_test_target_block,
    render_podfile,
    write_podfile,
)
from rnutil.core.errors import ConversionError


# =============================================================================
# package.json
# =============================================================================


@pytest.mark.evergreen
class TestPackageJson:
    """The app name comes from package.json."""

    def test_app_name(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"name": "MyApp", "version": "1.0.0"}')

        assert PackageJson.load(path).app_name == "MyApp"

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConversionError, match="Please run from the project root"):
            PackageJson.load(tmp_path / "package.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{name: MyApp")

        with pytest.raises(ConversionError, match="Failed to parse package.json"):
            PackageJson.load(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('["MyApp"]')

        with pytest.raises(ConversionError, match="not an object"):
            PackageJson.load(path)

    def test_no_name(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"version": "1.0.0"}')
        package_json = PackageJson.load(path)

        with pytest.raises(ConversionError, match="No app name"):
            package_json.app_name


# =============================================================================
# Podfile
# =============================================================================


@pytest.mark.evergreen
class TestPodfile:
    """The Podfile names the app target and lists linked dependencies."""

    def test_app_target(self) -> None:
        podfile = render_podfile("MyApp")

        assert "target 'MyApp' do" in podfile
        assert "pod 'React', path: '../node_modules/react-native'" in podfile
        assert podfile.rstrip().endswith("end")

    def test_dependencies_listed(self) -> None:
        podfile = render_podfile("MyApp", ["react-native-maps", "MyCustomDep"])

        assert "  #  react-native-maps\n  #  MyCustomDep" in podfile

    def test_no_dependencies(self) -> None:
        assert format_dependency_comment([]) == "  #  (none)"

    def test_test_target_nested(self) -> None:
        podfile = render_podfile("MyApp", test_target_name="MyAppTests")

        assert "  target 'MyAppTests' do\n    inherit! :search_paths\n  end\n" in podfile
        assert podfile.index("target 'MyApp' do") < podfile.index("target 'MyAppTests' do")

    def test_no_test_target(self) -> None:
        assert format_test_target_block(None) == ""
        assert "inherit!" not in render_podfile("MyApp")

    def test_custom_template(self, tmp_path: Path) -> None:
        template = tmp_path / "Podfile.tmpl"
        template.write_text("target '{app_name}'\n{dependency_comment}\n{test_target_block}")

        assert render_podfile("A", ["b"], template_path=template) == "target 'A'\n  #  b\n"

    def test_write(self, tmp_path: Path) -> None:
        path = tmp_path / "ios" / "Podfile"

        write_podfile(path, "platform :ios\n")

        assert path.read_text() == "platform :ios\n"
