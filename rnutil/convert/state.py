"""
Persisted conversion progress.

The conversion is not atomic: once the project is saved without its
Libraries group, the dependency list can no longer be recovered from the
project. The run state records how far a conversion got, together with
that list, so an interrupted run can resume instead of starting over.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Optional

from rnutil.core.errors import ConversionError


class RunState(IntEnum):
    """Conversion steps in the order they complete."""

    NOT_STARTED = 0
    GROUP_REMOVED = 1
    CONFIG_WRITTEN = 2
    LINKED = 3
    INSTALLED = 4


@dataclass
class StepResult:
    """Outcome of a step that may degrade instead of failing.

    status is "ok", "skipped" (nothing to do) or "degraded" (could not be
    done, run continues).
    """

    status: str
    message: str = ""
    value: object = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass
class ConversionState:
    """Progress of one conversion, stored next to the Xcode project."""

    app_name: str
    state: RunState = RunState.NOT_STARTED
    dependencies: list[str] = field(default_factory=list)
    library_roots: list[str] = field(default_factory=list)
    updated_at: str = ""

    @classmethod
    def load(cls, path: Path) -> Optional["ConversionState"]:
        """Read the state file, or return None if there is none.

        Raises:
            ConversionError: if the file exists but is unreadable.
        """
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls(
                app_name=data["app_name"],
                state=RunState[data["state"]],
                dependencies=list(data.get("dependencies", [])),
                library_roots=list(data.get("library_roots", [])),
                updated_at=data.get("updated_at", ""),
            )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ConversionError(f"Corrupt conversion state in {path}: {e}. Remove it to start over.")

    def save(self, path: Path) -> None:
        self.updated_at = datetime.now().isoformat()
        data = asdict(self)
        data["state"] = self.state.name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def advance(self, state: RunState, path: Path) -> None:
        """Record that state has been reached."""
        self.state = state
        self.save(path)

    def reached(self, state: RunState) -> bool:
        return self.state >= state
