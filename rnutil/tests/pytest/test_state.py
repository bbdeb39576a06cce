"""
Tests for the persisted conversion state.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from rnutil.convert.state import ConversionState, RunState, StepResult
from rnutil.core.errors import ConversionError


@pytest.mark.evergreen
class TestConversionState:
    """The state file round-trips and orders its steps."""

    def test_missing_file(self, tmp_path: Path) -> None:
        assert ConversionState.load(tmp_path / "state.json") is None

    def test_save_and_load(self, tmp_path: Path) -> None:
        path = tmp_path / "ios" / "state.json"
        ConversionState(
            app_name="MyApp",
            state=RunState.CONFIG_WRITTEN,
            dependencies=["MyCustomDep"],
            library_roots=["MyCustomDep"],
        ).save(path)

        loaded = ConversionState.load(path)

        assert loaded.app_name == "MyApp"
        assert loaded.state is RunState.CONFIG_WRITTEN
        assert loaded.dependencies == ["MyCustomDep"]
        assert loaded.updated_at

    def test_state_stored_by_name(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        ConversionState(app_name="MyApp", state=RunState.LINKED).save(path)

        assert json.loads(path.read_text())["state"] == "LINKED"

    def test_advance(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        state = ConversionState(app_name="MyApp")

        state.advance(RunState.GROUP_REMOVED, path)

        assert ConversionState.load(path).state is RunState.GROUP_REMOVED

    def test_reached(self) -> None:
        state = ConversionState(app_name="MyApp", state=RunState.CONFIG_WRITTEN)

        assert state.reached(RunState.GROUP_REMOVED)
        assert state.reached(RunState.CONFIG_WRITTEN)
        assert not state.reached(RunState.LINKED)

    @pytest.mark.parametrize("contents", ["{not json", '{"app_name": "MyApp"}', '{"app_name": "MyApp", "state": "DONE"}'])
    def test_corrupt(self, tmp_path: Path, contents: str) -> None:
        path = tmp_path / "state.json"
        path.write_text(contents)

        with pytest.raises(ConversionError, match="Corrupt conversion state"):
            ConversionState.load(path)


@pytest.mark.evergreen
def test_step_result_ok() -> None:
    assert StepResult("ok").ok
    assert not StepResult("degraded", "no reference project").ok
    assert not StepResult("skipped").ok
