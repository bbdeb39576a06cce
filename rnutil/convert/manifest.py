"""
package.json loading.
"""

from __future__ import annotations

import json
from functools import cached_property
from pathlib import Path
from typing import Any, Union

from rnutil.core.errors import ConversionError

PACKAGE_JSON = "package.json"


class PackageJson:
    """Contents of the app's package.json. Only the name is used."""

    def __init__(self, data: dict[str, Any], path: Path):
        self.data = data
        self.path = path

    @classmethod
    def load(cls, path: Union[str, Path] = PACKAGE_JSON) -> "PackageJson":
        """Read and parse package.json.

        Raises:
            ConversionError: if the file is missing or is not valid JSON.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConversionError(
                "Failed to load package.json. File not found. Please run from the project root."
            )
        except json.JSONDecodeError as e:
            raise ConversionError(f"Failed to parse package.json: {e}")

        if not isinstance(data, dict):
            raise ConversionError("Failed to parse package.json: top level is not an object")
        return cls(data, path)

    @cached_property
    def app_name(self) -> str:
        name = self.data.get("name")
        if not isinstance(name, str) or not name:
            raise ConversionError(f"No app name found in {self.path}")
        return name
