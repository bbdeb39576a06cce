"""
Podfile generation from the bundled template.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from rnutil.convert.config import PODFILE_TEMPLATE_PATH

TEST_TARGET_TEMPLATE = """\
  target '{name}' do
    inherit! :search_paths
  end
"""


def format_dependency_comment(dependencies: Sequence[str]) -> str:
    if not dependencies:
        return "  #  (none)"
    return "\n".join(f"  #  {dep}" for dep in dependencies)


def format_test_target_block(test_target_name: Optional[str]) -> str:
    if not test_target_name:
        return ""
    return "\n" + TEST_TARGET_TEMPLATE.format(name=test_target_name)


def render_podfile(
    app_name: str,
    dependencies: Sequence[str] = (),
    test_target_name: Optional[str] = None,
    template_path: Path = PODFILE_TEMPLATE_PATH,
) -> str:
    """Fill in the Podfile template."""
    template = template_path.read_text(encoding="utf-8")
    return template.format(
        app_name=app_name,
        dependency_comment=format_dependency_comment(dependencies),
        test_target_block=format_test_target_block(test_target_name),
    )


def write_podfile(path: Path, contents: str) -> None:
    """Write the Podfile, replacing any existing file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
